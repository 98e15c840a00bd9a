"""HTTP client for the remote file store."""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

LOGGER = logging.getLogger(__name__)


class RemoteError(Exception):
    """Raised when the remote file store rejects or fails a request."""


class AuthenticationError(RemoteError):
    """Raised when the remote file store does not accept the API key."""


class RemoteStore:
    """Thin wrapper over the ``/files`` endpoints of a remote file store.

    Every request carries the API key in ``header_name``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        header_name: str = "X-Api-Key",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers[header_name] = api_key

    def list_files(self) -> list[str]:
        """Return every relative path stored remotely."""
        response = self._request("GET", "/files")
        payload = response.json()
        if not isinstance(payload, list):
            raise RemoteError("Remote file listing must be a JSON array.")
        return [str(item) for item in payload]

    def download(self, path: str) -> bytes | None:
        """Return the content of ``path``, or None when it does not exist remotely."""
        response = self._request("GET", self._file_url(path), allow=(404,))
        if response.status_code == 404:
            return None
        return response.content

    def upload(self, path: str, data: bytes) -> None:
        """Create or overwrite ``path`` remotely."""
        self._request("PUT", self._file_url(path), data=data)

    def delete(self, path: str) -> bool:
        """Delete ``path`` remotely; return False when it was already absent."""
        response = self._request("DELETE", self._file_url(path), allow=(404,))
        return response.status_code != 404

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "RemoteStore":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _file_url(self, path: str) -> str:
        return "/files/" + quote(path.lstrip("/"), safe="/")

    def _request(
        self,
        method: str,
        url_path: str,
        *,
        allow: tuple[int, ...] = (),
        data: bytes | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{url_path}"
        LOGGER.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteError(f"{method} {url} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(f"{method} {url} was rejected: invalid or missing API key")
        if response.status_code in allow:
            return response
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise RemoteError(f"{method} {url} failed: {exc}") from exc
        return response


__all__ = ["AuthenticationError", "RemoteError", "RemoteStore"]
