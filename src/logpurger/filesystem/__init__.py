"""Filesystem backends consumed by the purge pipeline.

``open_filesystem`` picks a backend from a URI scheme:

* bare paths and ``file://`` use :class:`LocalFileSystem`
* ``webhdfs://`` and ``swebhdfs://`` use :class:`WebHdfsFileSystem`
* ``memory://`` returns an empty :class:`MemoryFileSystem`

Scheme-less paths are resolved against ``default_fs`` (``fs.defaultFS``).
"""

from __future__ import annotations

from typing import Tuple
from urllib.parse import urlsplit

from ..core.types import InvalidConfiguration
from .base import FileStatus, FileSystem, FileSystemError, join_path
from .local import LocalFileSystem
from .memory import MemoryFileSystem
from .webhdfs import DEFAULT_PORT, WebHdfsFileSystem

_HTTP_SCHEMES = {"webhdfs": "http", "swebhdfs": "https"}


def open_filesystem(
    uri: str,
    *,
    default_fs: str = "file:///",
    user: str | None = None,
    timeout: float | None = 30.0,
) -> Tuple[FileSystem, str]:
    """Return ``(filesystem, path)`` for ``uri``."""

    text = uri.strip()
    if not text:
        raise InvalidConfiguration("Root log directory must not be empty.")
    parts = urlsplit(text)
    path = parts.path or "/"
    if not parts.scheme:
        base = urlsplit(default_fs.strip() or "file:///")
        if base.scheme in ("", "file"):
            return LocalFileSystem(), path
        parts = base._replace(path=path)

    scheme = parts.scheme.lower()
    if scheme == "file":
        return LocalFileSystem(), parts.path or "/"
    if scheme == "memory":
        return MemoryFileSystem(), parts.path or "/"
    if scheme in _HTTP_SCHEMES:
        if not parts.hostname:
            raise InvalidConfiguration(f"Filesystem URI is missing a host: {uri}")
        port = parts.port or DEFAULT_PORT
        base_url = f"{_HTTP_SCHEMES[scheme]}://{parts.hostname}:{port}"
        return WebHdfsFileSystem(base_url, user=user, timeout=timeout), parts.path or "/"
    raise InvalidConfiguration(
        f"Unsupported filesystem scheme {parts.scheme!r}; use file://, webhdfs:// or swebhdfs://."
    )


__all__ = [
    "FileStatus",
    "FileSystem",
    "FileSystemError",
    "LocalFileSystem",
    "MemoryFileSystem",
    "WebHdfsFileSystem",
    "join_path",
    "open_filesystem",
]
