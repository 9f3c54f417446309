"""
HTTP client utilities for jamkit.

This module provides a synchronous HTTP client used for catalog queries
and dependency downloads. Requests are made once: a failure is reported
to the caller immediately instead of being retried.
"""

from __future__ import annotations

import io
import httpx
from typing import Any, Iterator, Optional

from jamkit.utils.logger import get_logger
from jamkit.__version__ import __version__
from jamkit.exceptions import TransportError
from jamkit.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_VERIFY_SSL,
    STREAM_CHUNK_SIZE,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class ResponseStream(io.RawIOBase):
    """Read-only file object over a streamed :class:`httpx.Response`.

    The response is closed together with the stream.
    """

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self.response = response
        self._chunks: Iterator[bytes] = response.iter_bytes(STREAM_CHUNK_SIZE)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.HTTPError as exc:
                raise TransportError(
                    f"failed to read response: {exc}", url=str(self.response.url)
                ) from exc

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self.response.close()
        super().close()


class HTTPClient:
    """Synchronous HTTP client with shared connection settings.

    Args:
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.

    Example:
        >>> with HTTPClient() as client:
        ...     response = client.get("https://api.deps.paketo.io/v1/dependency?name=node")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = DEFAULT_VERIFY_SSL,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.transport = transport

        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "HTTPClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request and return the response whatever its status.

        Raises:
            TransportError: The request could not be sent or no response
                arrived.
        """
        client = self._ensure_client()
        clean_url = url.strip()
        logger.debug("GET %s", clean_url)

        try:
            return client.get(clean_url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{exc}", url=clean_url) from exc

    def stream(self, url: str, **kwargs: Any) -> ResponseStream:
        """Open a streaming GET request.

        The body is not read until the returned stream is; the caller owns
        the stream and must close it.

        Raises:
            TransportError: The request failed or the server answered with
                a status of 400 or above.
        """
        client = self._ensure_client()
        clean_url = url.strip()
        logger.debug("GET (stream) %s", clean_url)

        try:
            request = client.build_request("GET", clean_url, **kwargs)
            response = client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise TransportError(f"{exc}", url=clean_url) from exc

        if response.status_code >= 400:
            try:
                body = response.read().decode("utf-8", errors="replace")
            except httpx.HTTPError:
                body = None
            finally:
                response.close()
            raise TransportError(
                f"HTTP {response.status_code} error for {clean_url}",
                url=clean_url,
                status_code=response.status_code,
                response_body=body,
            )

        return ResponseStream(response)
