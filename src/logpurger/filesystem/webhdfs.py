"""WebHDFS REST backend.

Only the two operations the purger needs are implemented: ``LISTSTATUS`` and
recursive ``DELETE``. HTTP transport is injectable so tests never touch the
network.
"""

from __future__ import annotations

import errno
import json
import logging
from typing import Any, Callable, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from .base import FileStatus, FileSystemError, join_path

logger = logging.getLogger(__name__)

_Response = tuple[int, str]
RequestFunc = Callable[[str, str, Optional[float]], _Response]

DEFAULT_PORT = 9870


def _send_request(method: str, url: str, timeout: float | None) -> _Response:
    request = Request(url, method=method)
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[no-untyped-call]
            status = response.getcode()
            body = response.read().decode("utf-8", "replace")
    except HTTPError as exc:
        body = exc.read().decode("utf-8", "replace") if exc.fp is not None else ""
        return exc.code, body
    return status, body


def _decode(body: str, *, url: str) -> Mapping[str, Any]:
    try:
        payload = json.loads(body) if body else {}
    except json.JSONDecodeError as exc:
        raise FileSystemError(f"Malformed WebHDFS response from {url}") from exc
    if not isinstance(payload, Mapping):
        raise FileSystemError(f"Unexpected WebHDFS response from {url}")
    return payload


class WebHdfsFileSystem:
    """Filesystem backend speaking the WebHDFS REST protocol."""

    def __init__(
        self,
        base_url: str,
        *,
        user: str | None = None,
        timeout: float | None = 30.0,
        request: RequestFunc | None = None,
    ) -> None:
        if not base_url.strip():
            raise FileSystemError("WebHDFS base URL must not be empty")
        self._base_url = base_url.rstrip("/")
        self._user = user
        self._timeout = timeout
        self._request = request or _send_request
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _url(self, path: str, op: str, **params: str) -> str:
        query = {"op": op, **params}
        if self._user:
            query["user.name"] = self._user
        remote = "/" + path.lstrip("/")
        return f"{self._base_url}/webhdfs/v1{quote(remote)}?{urlencode(query)}"

    def _call(self, method: str, path: str, op: str, **params: str) -> Mapping[str, Any]:
        if self._closed:
            raise FileSystemError("Filesystem is closed")
        url = self._url(path, op, **params)
        logger.debug("WebHDFS %s %s", method, url)
        try:
            status, body = self._request(method, url, self._timeout)
        except URLError as exc:
            raise FileSystemError(f"Failed to contact WebHDFS at {self._base_url}: {exc.reason}") from exc
        payload = _decode(body, url=url)
        if status == 200:
            return payload
        remote = payload.get("RemoteException")
        exception = ""
        message = body.strip()
        if isinstance(remote, Mapping):
            exception = str(remote.get("exception") or "")
            message = str(remote.get("message") or message)
        if status == 404 or exception == "FileNotFoundException":
            raise FileNotFoundError(errno.ENOENT, message or "File does not exist", path)
        raise FileSystemError(f"WebHDFS {op} failed for {path}: status={status} {exception} {message}".strip())

    def list_status(self, path: str) -> List[FileStatus]:
        payload = self._call("GET", path, "LISTSTATUS")
        container = payload.get("FileStatuses")
        entries = container.get("FileStatus") if isinstance(container, Mapping) else None
        if not isinstance(entries, list):
            raise FileSystemError(f"WebHDFS LISTSTATUS returned no entries for {path}")
        statuses: List[FileStatus] = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            try:
                modification_time = int(entry.get("modificationTime") or 0)
                length = int(entry.get("length") or 0)
            except (TypeError, ValueError) as exc:
                raise FileSystemError(f"WebHDFS LISTSTATUS returned a malformed entry for {path}: {exc}") from exc
            statuses.append(
                FileStatus(
                    path=join_path(path, str(entry.get("pathSuffix") or "")),
                    is_directory=entry.get("type") == "DIRECTORY",
                    modification_time=modification_time,
                    owner=str(entry.get("owner") or ""),
                    length=length,
                )
            )
        return statuses

    def delete(self, path: str, recursive: bool = True) -> bool:
        payload = self._call(
            "DELETE", path, "DELETE", recursive="true" if recursive else "false"
        )
        return bool(payload.get("boolean"))

    def close(self) -> None:
        self._closed = True


__all__ = ["DEFAULT_PORT", "WebHdfsFileSystem"]
