"""
Custom exception hierarchy for jamkit.

This module defines structured exception types used across jamkit.
All exceptions inherit from :class:`JamError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Every component raises one of these with a short static prefix naming the
step that failed (``failed to download dependency: ...``) and chains the
underlying cause. Nothing here is retried; the CLI is the only place that
turns an error into an exit code.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class JamError(Exception):
    """Base exception for all jamkit errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )

    def add_context(self, prefix: str) -> "JamError":
        """Prefix the message with the step that failed.

        The exception keeps its type and attributes, so callers further up
        can still tell a checksum mismatch from a network failure.

        Example::

            except JamError as exc:
                exc.add_context("failed to cache dependencies")
                raise
        """
        self.message = f"{prefix}: {self.message}"
        self.args = (self.message,)
        return self


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ConfigError(JamError):
    """Raised when the jamkit configuration file is missing or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Offending option name, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class ManifestParseError(JamError):
    """Raised when a ``buildpack.toml`` cannot be read or decoded.

    Args:
        message: Error description.
        file_path: Path to the manifest being parsed.
    """

    __slots__ = ("file_path",)

    def __init__(self, message: str, *, file_path: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.file_path = file_path


class ConstraintSyntaxError(JamError):
    """Raised when a version constraint expression cannot be parsed."""

    __slots__ = ("constraint",)

    def __init__(self, message: str, *, constraint: Optional[str] = None) -> None:
        super().__init__(message)
        self.constraint = constraint


class VersionSyntaxError(ConstraintSyntaxError):
    """Raised when a catalog version is not a semantic version."""

    __slots__ = ("version",)

    def __init__(self, message: str, *, version: Optional[str] = None) -> None:
        super().__init__(message)
        self.version = version


class UnsatisfiableConstraintError(JamError):
    """Raised when no catalog entry satisfies a constraint on a stack.

    The message lists every version known for the dependency id so the
    operator can see what was available.
    """

    __slots__ = ("dependency_id", "constraint", "stack", "supported_versions")

    def __init__(
        self,
        dependency_id: str,
        constraint: str,
        stack: str,
        supported_versions: Sequence[str],
    ) -> None:
        message = (
            f'failed to satisfy "{dependency_id}" dependency version constraint '
            f'"{constraint}": no compatible versions on "{stack}" stack. '
            f"Supported versions are: [{', '.join(supported_versions)}]"
        )
        super().__init__(message)

        self.dependency_id = dependency_id
        self.constraint = constraint
        self.stack = stack
        self.supported_versions = list(supported_versions)


class AmbiguousWildcardStackError(JamError):
    """Raised when two entries of one version both claim the ``*`` stack."""

    __slots__ = ("version",)

    def __init__(self, version: str) -> None:
        super().__init__(
            f'multiple dependencies support wildcard stack for version: "{version}"'
        )
        self.version = version


class TransportError(JamError):
    """Raised when a file or HTTP source cannot be opened.

    Args:
        message: Error description.
        url: URI or URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class CatalogQueryError(TransportError):
    """Raised for failures talking to the dependency catalog service.

    Args:
        message: Error description.
        dependency_id: Dependency the query was made for.
        **kwargs: Additional arguments forwarded to ``TransportError``.
    """

    __slots__ = ("dependency_id",)

    def __init__(
        self,
        message: str,
        *,
        dependency_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.dependency_id = dependency_id


class MalformedChecksumError(JamError):
    """Raised when a checksum names an unsupported algorithm."""

    __slots__ = ("checksum",)

    def __init__(self, message: str, *, checksum: Optional[str] = None) -> None:
        super().__init__(message)
        self.checksum = checksum


class ChecksumMismatchError(JamError):
    """Raised when a fully drained stream does not hash to the expected value."""

    __slots__ = ("expected", "actual")

    def __init__(
        self,
        *,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> None:
        super().__init__("validation error: checksum does not match")
        self.expected = expected
        self.actual = actual


class FilesystemError(JamError):
    """Raised when creating or writing cache, bundle or tarball files fails.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed.
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class PrePackageError(JamError):
    """Raised when the ``pre-package`` script exits unsuccessfully."""

    __slots__ = ("script", "returncode", "stderr")

    def __init__(
        self,
        message: str,
        *,
        script: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "exit_code", returncode)
        if stderr:
            details["stderr"] = _truncate(stderr.strip())

        super().__init__(message, details)

        self.script = script
        self.returncode = returncode
        self.stderr = stderr


class MissingFlagError(JamError):
    """Raised when a required command-line flag was not supplied."""

    __slots__ = ("flag",)

    def __init__(self, flag: str) -> None:
        super().__init__(f"missing required flag --{flag}")
        self.flag = flag
