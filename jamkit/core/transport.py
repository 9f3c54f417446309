"""Opening dependency payloads by URI.

``file://`` URIs are read from disk relative to a root directory; anything
else is fetched over HTTP(S) through the shared :class:`HTTPClient`.
"""

from __future__ import annotations

import os
from typing import BinaryIO, Optional

from jamkit.exceptions import TransportError
from jamkit.utils.http import HTTPClient
from jamkit.utils.logger import get_logger
from jamkit.constants import FILE_URI_PREFIX

logger = get_logger("transport")

__all__ = ["Transport"]


class Transport:
    """Turns a dependency URI into an open binary stream.

    Args:
        http_client: Client used for non-``file://`` URIs. Created lazily
            with default settings when omitted.
    """

    def __init__(self, http_client: Optional[HTTPClient] = None) -> None:
        self._http_client = http_client

    @property
    def http_client(self) -> HTTPClient:
        if self._http_client is None:
            self._http_client = HTTPClient()
        return self._http_client

    def drop(self, root: str, uri: str) -> BinaryIO:
        """Open ``uri`` for reading.

        Args:
            root: Directory ``file://`` paths are resolved against. With an
                empty root the path is used as written, so
                ``file:///abs/path`` opens ``/abs/path``.
            uri: ``file://`` URI or HTTP(S) URL.

        Returns:
            A readable binary stream; the caller must close it.

        Raises:
            TransportError: The file could not be opened, the request
                failed, or the server returned an error status.
        """
        if uri.startswith(FILE_URI_PREFIX):
            path = uri[len(FILE_URI_PREFIX):]
            if root:
                path = os.path.join(root, path.lstrip("/"))
            try:
                return open(path, "rb")
            except OSError as exc:
                raise TransportError(f"failed to open file: {exc}", url=uri) from exc

        logger.debug("Downloading %s", uri)
        try:
            return self.http_client.stream(uri)  # type: ignore[return-value]
        except TransportError as exc:
            raise TransportError(
                f"failed to make request: {exc.message}",
                url=uri,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc
