"""Pack command implementation for jamkit.

Builds a buildpack ``.tgz`` from a ``buildpack.toml`` and the files its
``include-files`` list names. See :class:`jamkit.core.packer.Packer` for
the pipeline itself.

Typical usage::

    # Online package; dependencies are fetched at build time
    $ jam pack --buildpack ./buildpack.toml --version 1.2.3 --output build/bp.tgz

    # Offline package for one stack; dependencies are bundled
    $ jam pack --buildpack ./buildpack.toml --version 1.2.3 \\
          --output build/bp.tgz --offline --stack io.buildpacks.stacks.jammy
"""

from __future__ import annotations

from typing import Optional

import click

from jamkit.core import DependencyCacher, Packer, Transport
from jamkit.context import JamContext, pass_context
from jamkit.exceptions import MissingFlagError
from jamkit.utils import HTTPClient, get_logger, print_success, validate_path

logger = get_logger("commands.pack")


@click.command()
@click.option("--buildpack", help="Path to buildpack.toml.")
@click.option("--output", help="Path to location of output tarball.")
@click.option("--version", help="Version of the buildpack.")
@click.option(
    "--offline",
    is_flag=True,
    help="Enable offline caching of dependencies.",
)
@click.option("--stack", default="", help="Restricts dependencies to given stack.")
@pass_context
def pack(
    ctx: JamContext,
    buildpack: Optional[str],
    output: Optional[str],
    version: Optional[str],
    offline: bool,
    stack: str,
) -> None:
    """Package a buildpack into a gzip-compressed tarball.

    \b
    Steps:
      1. copy the buildpack directory to a scratch location
      2. stamp --version into buildpack.toml
      3. drop dependencies not on --stack (if given)
      4. run metadata.pre-package
      5. with --offline, download and verify every dependency
      6. write include-files into --output
    """
    if not buildpack:
        raise MissingFlagError("buildpack")
    if not output:
        raise MissingFlagError("output")
    if not version:
        raise MissingFlagError("version")

    buildpack_path = validate_path(buildpack)
    output_path = validate_path(output)
    logger.debug("Packing %s into %s (offline=%s)", buildpack_path, output_path, offline)

    config = ctx.config
    with HTTPClient(timeout=config.timeout, verify_ssl=config.verify_ssl) as http:
        packer = Packer(cacher=DependencyCacher(Transport(http)))
        packer.execute(
            str(buildpack_path),
            str(output_path),
            version,
            offline=offline,
            stack=stack,
        )

    print_success(f"Created {output_path}")
