from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import List, Protocol


class FileSystemError(OSError):
    """Raised when a backend cannot complete a filesystem operation."""


@dataclass(frozen=True)
class FileStatus:
    """One listing entry as reported by a filesystem backend."""

    path: str
    is_directory: bool
    modification_time: int  # milliseconds since the epoch
    owner: str
    length: int = 0


class FileSystem(Protocol):
    """Operations the purge pipeline needs from a hierarchical filesystem.

    Missing paths raise ``FileNotFoundError``; any other failure raises an
    ``OSError`` subclass.
    """

    def list_status(self, path: str) -> List[FileStatus]:
        """Return the entries directly under ``path``."""

    def delete(self, path: str, recursive: bool = True) -> bool:
        """Delete ``path``; return ``False`` when nothing was removed."""

    def close(self) -> None:
        """Release any resources held by the backend."""


def join_path(parent: str, child: str) -> str:
    if not child:
        return parent
    return posixpath.join(parent, child.strip("/"))


__all__ = ["FileStatus", "FileSystem", "FileSystemError", "join_path"]
