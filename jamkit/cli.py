"""
Command-line interface for jamkit.

This module provides the ``jam`` entry point: global options,
configuration loading, the command registry behind :func:`build_cli`
and the translation of jamkit errors into exit codes.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import click

from jamkit.commands.pack import pack
from jamkit.commands.update_dependencies import update_dependencies
from jamkit.config import load_config
from jamkit.__version__ import __version__
from jamkit.context import JamContext
from jamkit.exceptions import JamError
from jamkit.utils.logger import get_logger, level_for_verbosity, setup_logging
from jamkit.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")

# Subcommands registered on every group built by build_cli()
COMMANDS: Tuple[click.Command, ...] = (pack, update_dependencies)


class JamCommandError(click.ClickException):
    """A :class:`JamError` surfaced to the user as ``[ERROR] <message>``."""

    exit_code = 1

    def show(self, file: Optional[Any] = None) -> None:
        print_error(self.message)


class JamGroup(click.Group):
    """Command group that reports :class:`JamError` failures uniformly."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except JamError as exc:
            logger.debug(
                "%s details: %s",
                type(exc).__name__,
                exc.details or "<none>",
                exc_info=True,
            )
            raise JamCommandError(str(exc)) from exc


def _configure(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    quiet: bool,
    color: bool,
) -> None:
    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    setup_logging(level=level_for_verbosity(verbose, quiet), verbose=verbose > 1)

    loaded_config = load_config(config)

    jam_ctx = JamContext()
    jam_ctx.config_path = config or loaded_config.source_path
    jam_ctx.config = loaded_config
    jam_ctx.color = color
    jam_ctx.verbose = -1 if quiet else verbose
    ctx.obj = jam_ctx

    logger.debug("jam v%s", __version__)
    logger.debug("Config path: %s", jam_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def build_cli(commands: Sequence[click.Command] = COMMANDS) -> click.Group:
    """Build the ``jam`` command group with ``commands`` registered.

    Nothing is registered at import time; every call returns a new group.
    """

    @click.group(
        cls=JamGroup,
        name="jam",
        context_settings={"help_option_names": ["-h", "--help"]},
    )
    @click.option(
        "--config",
        "-c",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to configuration file.",
        envvar="JAM_CONFIG",
    )
    @click.option(
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for debug output, -vv adds timestamps).",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Only report warnings and errors.",
    )
    @click.option(
        "--color/--no-color",
        default=True,
        help="Enable or disable colored output.",
        envvar="JAM_COLOR",
    )
    @click.version_option(
        version=__version__,
        prog_name="jam",
        message="%(prog)s %(version)s",
    )
    @click.pass_context
    def jam(
        ctx: click.Context,
        config: Optional[Path],
        verbose: int,
        quiet: bool,
        color: bool,
    ) -> None:
        """jam: buildpack dependency resolution and packaging.

        \b
        Available commands:
          jam pack                     Package a buildpack into a .tgz
          jam update-dependencies      Refresh dependencies from the catalog

        \b
        Examples:
          jam pack --buildpack buildpack.toml --version 1.0.0 --output bp.tgz
          jam pack --buildpack buildpack.toml --version 1.0.0 --output bp.tgz --offline
          jam update-dependencies --buildpack-file buildpack.toml

        Use ``jam COMMAND --help`` for command-specific options.
        """
        _configure(ctx, config, verbose, quiet, color)

    for command in commands:
        jam.add_command(command)
    return jam


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the jam CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error (including missing required flags)
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = build_cli().main(args=argv, prog_name="jam", standalone_mode=False)

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("Operation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1

    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())
