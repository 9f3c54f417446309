"""
Centralized constants for jamkit.

This module defines immutable configuration values used across jamkit,
including network settings, manifest layout, checksum algorithms, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "jamkit/{version}"

# ---------------------------------------------------------------------------
# Dependency catalog
# ---------------------------------------------------------------------------

#: Default base URL of the dependency catalog service.
DEFAULT_CATALOG_API: Final[str] = "https://api.deps.paketo.io"

#: Catalog query path; formatted with ``api`` and ``name``.
CATALOG_DEPENDENCY_URL: Final[str] = "{api}/v1/dependency?name={name}"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Whether TLS certificates are verified by default.
DEFAULT_VERIFY_SSL: Final[bool] = True

#: Chunk size used when streaming dependency payloads.
STREAM_CHUNK_SIZE: Final[int] = 64 * 1024

# ---------------------------------------------------------------------------
# Buildpack manifest layout
# ---------------------------------------------------------------------------

#: File name of the buildpack manifest inside the buildpack directory.
MANIFEST_FILE_NAME: Final[str] = "buildpack.toml"

#: Directory, relative to the buildpack root, holding cached dependencies.
DEPENDENCIES_DIR: Final[str] = "dependencies"

#: URI scheme prefix for locally stored files.
FILE_URI_PREFIX: Final[str] = "file://"

#: Stack id meaning "compatible with any stack".
WILDCARD_STACK: Final[str] = "*"

#: Version expression meaning "use the configured default version".
DEFAULT_VERSION_KEYWORD: Final[str] = "default"

#: Pessimistic version operator.
PESSIMISTIC_OPERATOR: Final[str] = "~>"

# ---------------------------------------------------------------------------
# Checksums
# ---------------------------------------------------------------------------

#: Algorithm assumed for checksums given without an ``algorithm:`` prefix.
DEFAULT_CHECKSUM_ALGORITHM: Final[str] = "sha256"

#: Algorithms the validated reader can verify.
SUPPORTED_CHECKSUM_ALGORITHMS: Final[Sequence[str]] = ("sha256", "sha512")

# ---------------------------------------------------------------------------
# Archive layout
# ---------------------------------------------------------------------------

#: Mode used for the re-encoded manifest member.
MANIFEST_FILE_MODE: Final[int] = 0o644

#: Mode used for directory entries synthesised in the tarball.
DIRECTORY_MODE: Final[int] = 0o777

# ---------------------------------------------------------------------------
# Pre-packaging
# ---------------------------------------------------------------------------

#: Shell used to run the ``pre-package`` script.
PRE_PACKAGE_SHELL: Final[str] = "bash"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
