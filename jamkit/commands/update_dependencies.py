"""Update-dependencies command implementation for jamkit.

Rewrites ``[[metadata.dependencies]]`` of a ``buildpack.toml`` from the
dependency catalog according to its ``[[metadata.dependency-constraints]]``.

Typical usage::

    $ jam update-dependencies --buildpack-file ./buildpack.toml
    $ jam update-dependencies --buildpack-file ./buildpack.toml --api https://deps.example.org
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import click

from jamkit.core import CatalogClient, DependencyUpdater
from jamkit.context import JamContext, pass_context
from jamkit.exceptions import MissingFlagError
from jamkit.models import DependencyEntry
from jamkit.utils import (
    HTTPClient,
    get_logger,
    print_success,
    print_table,
    validate_path,
)

logger = get_logger("commands.update_dependencies")


@click.command("update-dependencies")
@click.option("--buildpack-file", help="Path to the buildpack.toml file (required).")
@click.option(
    "--api",
    default=None,
    help="API to query for dependencies (default: config value or https://api.deps.paketo.io).",
)
@pass_context
def update_dependencies(
    ctx: JamContext,
    buildpack_file: Optional[str],
    api: Optional[str],
) -> None:
    """Update all dependencies in a buildpack.toml according to its constraints."""
    if not buildpack_file:
        raise MissingFlagError("buildpack-file")

    path = validate_path(buildpack_file)
    config = ctx.config
    api = api or config.api

    with HTTPClient(timeout=config.timeout, verify_ssl=config.verify_ssl) as http:
        updater = DependencyUpdater(CatalogClient(http, api))
        dependencies = updater.execute(path)

    _display_dependencies(dependencies, caption=str(path))
    print_success(f"Updated {path} ({len(dependencies)} dependencies)")


def _display_dependencies(dependencies: List[DependencyEntry], *, caption: str) -> None:
    """Render the resulting dependency list as a table."""
    rows: List[Dict[str, Any]] = [
        {
            "ID": entry.id,
            "Version": entry.version,
            "Stacks": ", ".join(entry.stacks),
            "Deprecated": (
                entry.deprecation_date.date().isoformat() if entry.deprecation_date else ""
            ),
        }
        for entry in dependencies
    ]

    print_table(
        rows,
        headers=["ID", "Version", "Stacks", "Deprecated"],
        title="Dependencies",
        caption=caption,
        column_styles={"ID": {"style": "bold", "no_wrap": True}},
        row_styler=lambda row: "dim" if row["Deprecated"] else None,
    )
