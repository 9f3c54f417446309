"""
Shared context object for jamkit CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from jamkit.config import JamConfig


class JamContext:
    """Global context object for jamkit CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Path to the jamkit configuration file, if any.
        config: Loaded configuration (defaults when no file was found).
        verbose: Verbosity level (-1=WARNING, 0=INFO, 1+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: JamConfig = JamConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`JamContext` into commands.
pass_context = click.make_pass_decorator(JamContext, ensure=True)
