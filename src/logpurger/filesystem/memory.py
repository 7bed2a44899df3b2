"""In-memory filesystem backend used for tests and rehearsals.

Listings preserve insertion order, mirroring a backend that does not sort.
"""

from __future__ import annotations

import errno
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .base import FileStatus, FileSystemError


@dataclass
class _Node:
    is_directory: bool
    modification_time: int
    owner: str
    length: int = 0
    children: Dict[str, "_Node"] = field(default_factory=dict)


def _normalise(path: str) -> str:
    return posixpath.normpath("/" + path.strip().lstrip("/"))


def _split(path: str) -> List[str]:
    return [part for part in _normalise(path).split("/") if part]


class MemoryFileSystem:
    """A small hierarchical filesystem held in dictionaries."""

    def __init__(self, *, default_owner: str = "root") -> None:
        self._default_owner = default_owner
        self._root = _Node(is_directory=True, modification_time=0, owner=default_owner)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise FileSystemError("Filesystem is closed")

    def _lookup(self, path: str) -> Optional[_Node]:
        node = self._root
        for part in _split(path):
            if not node.is_directory or part not in node.children:
                return None
            node = node.children[part]
        return node

    def _parent_for(self, path: str) -> _Node:
        node = self._root
        for part in _split(path)[:-1]:
            child = node.children.get(part)
            if child is None:
                child = _Node(is_directory=True, modification_time=0, owner=self._default_owner)
                node.children[part] = child
            elif not child.is_directory:
                raise FileSystemError(f"Not a directory: {part}")
            node = child
        return node

    def add_directory(
        self,
        path: str,
        *,
        modification_time: int = 0,
        owner: Optional[str] = None,
    ) -> str:
        parts = _split(path)
        if not parts:
            raise FileSystemError("Cannot replace the root directory")
        parent = self._parent_for(path)
        existing = parent.children.get(parts[-1])
        if existing is not None and existing.is_directory:
            existing.modification_time = modification_time
            existing.owner = owner or existing.owner
        else:
            parent.children[parts[-1]] = _Node(
                is_directory=True,
                modification_time=modification_time,
                owner=owner or self._default_owner,
            )
        return _normalise(path)

    def add_file(
        self,
        path: str,
        length: int,
        *,
        modification_time: int = 0,
        owner: Optional[str] = None,
    ) -> str:
        parts = _split(path)
        if not parts:
            raise FileSystemError("Cannot replace the root directory")
        parent = self._parent_for(path)
        parent.children[parts[-1]] = _Node(
            is_directory=False,
            modification_time=modification_time,
            owner=owner or self._default_owner,
            length=length,
        )
        return _normalise(path)

    def exists(self, path: str) -> bool:
        return self._lookup(path) is not None

    def _status(self, path: str, node: _Node) -> FileStatus:
        return FileStatus(
            path=path,
            is_directory=node.is_directory,
            modification_time=node.modification_time,
            owner=node.owner,
            length=node.length,
        )

    def list_status(self, path: str) -> List[FileStatus]:
        self._ensure_open()
        normalised = _normalise(path)
        node = self._lookup(normalised)
        if node is None:
            raise FileNotFoundError(errno.ENOENT, "File does not exist", normalised)
        if not node.is_directory:
            return [self._status(normalised, node)]
        return [
            self._status(posixpath.join(normalised, name), child)
            for name, child in node.children.items()
        ]

    def delete(self, path: str, recursive: bool = True) -> bool:
        self._ensure_open()
        parts = _split(path)
        if not parts:
            raise FileSystemError("Refusing to delete the root directory")
        parent = self._lookup("/".join(parts[:-1]))
        node = parent.children.get(parts[-1]) if parent is not None and parent.is_directory else None
        if parent is None or node is None:
            return False
        if node.is_directory and node.children and not recursive:
            raise FileSystemError(f"Directory is not empty: {_normalise(path)}")
        del parent.children[parts[-1]]
        return True

    def close(self) -> None:
        self._closed = True


__all__ = ["MemoryFileSystem"]
