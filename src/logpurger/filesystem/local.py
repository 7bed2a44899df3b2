"""Local filesystem backend.

Listings are sorted by name so runs over the same tree are reproducible.
The path being listed is resolved through symbolic links, so a linked root or
suffix directory lists its target's children. Entries inside a listing are
reported as links (never followed) and count towards directory sizes with
their own length.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from typing import Dict, List

from .base import FileStatus

logger = logging.getLogger(__name__)


def _owner_name(uid: int, cache: Dict[int, str]) -> str:
    if uid in cache:
        return cache[uid]
    name = str(uid)
    if os.name == "posix":
        import pwd

        try:
            name = pwd.getpwuid(uid).pw_name
        except KeyError:
            pass
    cache[uid] = name
    return name


class LocalFileSystem:
    """Filesystem backend over the local ``os`` APIs."""

    def __init__(self) -> None:
        self._owners: Dict[int, str] = {}
        self._closed = False

    def _status(self, path: str, st: os.stat_result) -> FileStatus:
        is_directory = stat.S_ISDIR(st.st_mode)
        return FileStatus(
            path=path,
            is_directory=is_directory,
            modification_time=st.st_mtime_ns // 1_000_000,
            owner=_owner_name(st.st_uid, self._owners),
            length=0 if is_directory else st.st_size,
        )

    def list_status(self, path: str) -> List[FileStatus]:
        if not os.path.isdir(path):
            return [self._status(path, os.lstat(path))]
        statuses: List[FileStatus] = []
        with os.scandir(path) as entries:
            for entry in entries:
                statuses.append(self._status(entry.path, entry.stat(follow_symlinks=False)))
        statuses.sort(key=lambda status: status.path)
        return statuses

    def delete(self, path: str, recursive: bool = True) -> bool:
        if not os.path.lexists(path):
            return False
        if os.path.isdir(path) and not os.path.islink(path):
            if recursive:
                shutil.rmtree(path)
            else:
                os.rmdir(path)
        else:
            os.unlink(path)
        logger.debug("Removed %s", path)
        return True

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


__all__ = ["LocalFileSystem"]
