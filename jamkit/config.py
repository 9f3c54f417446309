"""Configuration file loader for jamkit.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``jam.toml``: settings under ``[jam]`` table
- ``pyproject.toml``: settings under ``[tool.jam]`` table

Discovery order:

1. Explicit path from ``--config`` or ``JAM_CONFIG``
2. ``jam.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.jam]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``jam.toml``)::

    [jam]
    api = "https://deps.example.org"
    timeout = 60
    verify_ssl = true
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from jamkit.exceptions import ConfigError
from jamkit.utils.logger import get_logger
from jamkit.constants import (
    DEFAULT_CATALOG_API,
    DEFAULT_TIMEOUT,
    DEFAULT_VERIFY_SSL,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "jam.toml"
CONFIG_SECTION = "jam"


@dataclass
class JamConfig:
    """Parsed and validated jamkit configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        api: Base URL of the dependency catalog service.
        timeout: HTTP timeout in seconds.
        verify_ssl: Whether TLS certificates are verified.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    api: str = DEFAULT_CATALOG_API
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = DEFAULT_VERIFY_SSL

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "api": self.api,
            "timeout": self.timeout,
            "verify_ssl": self.verify_ssl,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    jam_toml = cwd / CONFIG_FILE_NAME
    if jam_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, jam_toml)
        return jam_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_jam_section(pyproject_toml):
        logger.debug("Found [tool.jam] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_jam_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.jam] section.

    An unreadable pyproject.toml is treated as having no section.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return CONFIG_SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> JamConfig:
    """Load and validate jamkit configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`JamConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return JamConfig()

    logger.debug("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(CONFIG_SECTION, {})
    else:
        section = raw.get(CONFIG_SECTION, {})

    if not section:
        logger.debug("Config file found but no jam section, using defaults")
        return JamConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> JamConfig:
    """Parse and validate the ``[jam]`` or ``[tool.jam]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = JamConfig()

    known_top = {"api", "timeout", "verify_ssl"}

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "api" in section:
        val = section["api"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            raise ConfigError(
                f"api must be an http(s) URL, got {val!r}",
                config_path=config_path,
                option="api",
            )
        config.api = val.rstrip("/")

    if "timeout" in section:
        val = section["timeout"]
        # bool is an int subclass
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive integer, got {val!r}",
                config_path=config_path,
                option="timeout",
            )
        config.timeout = val

    if "verify_ssl" in section:
        val = section["verify_ssl"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"verify_ssl must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="verify_ssl",
            )
        config.verify_ssl = val

    return config
