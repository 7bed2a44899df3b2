"""Lazy traversal of the aggregated-log tree.

The tree has a fixed shape::

    <root>/<owner>/<suffix>/<application>

Each stage is a generator so callers (and tests) can feed synthetic listings
into any step. Owners and applications are yielded in the order the backend
lists them.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Callable, Iterable, Iterator, Optional

from ..filesystem.base import FileStatus, FileSystem, join_path
from .cutoff import to_local_datetime
from .types import ApplicationDirectoryEntry, ScanFailure

logger = logging.getLogger(__name__)

OwnerCallback = Callable[[str], None]


def _list(fs: FileSystem, path: str) -> list[FileStatus]:
    try:
        return fs.list_status(path)
    except FileNotFoundError:
        raise
    except OSError as exc:
        raise ScanFailure(path, str(exc)) from exc


def iter_owner_directories(fs: FileSystem, root: str) -> Iterator[FileStatus]:
    """Yield the directories directly under ``root``; plain files are skipped."""

    try:
        statuses = _list(fs, root)
    except FileNotFoundError as exc:
        raise ScanFailure(root, "Root log directory does not exist") from exc
    for status in statuses:
        if status.is_directory:
            yield status
        else:
            logger.debug("Skipping non-directory %s under %s", status.path, root)


def iter_application_directories(
    fs: FileSystem,
    owners: Iterable[FileStatus],
    suffix: str,
    *,
    zone: Optional[tzinfo] = None,
    on_owner: Optional[OwnerCallback] = None,
    on_missing_suffix: Optional[OwnerCallback] = None,
) -> Iterator[ApplicationDirectoryEntry]:
    """Yield every entry under ``<owner>/<suffix>`` for each owner.

    A missing suffix path means the owner never aggregated logs; it is
    skipped. Other listing errors raise :class:`ScanFailure`.
    """

    for owner_dir in owners:
        suffix_path = join_path(owner_dir.path, suffix)
        if on_owner is not None:
            on_owner(suffix_path)
        try:
            statuses = _list(fs, suffix_path)
        except FileNotFoundError:
            logger.debug("No aggregated logs at %s", suffix_path)
            if on_missing_suffix is not None:
                on_missing_suffix(suffix_path)
            continue
        for status in statuses:
            yield ApplicationDirectoryEntry(
                path=status.path,
                owner=status.owner,
                modification_time=status.modification_time,
                modified_at=to_local_datetime(status.modification_time, zone=zone),
                owner_directory=owner_dir.path,
            )


def scan(
    fs: FileSystem,
    root: str,
    suffix: str,
    *,
    zone: Optional[tzinfo] = None,
    on_owner: Optional[OwnerCallback] = None,
    on_missing_suffix: Optional[OwnerCallback] = None,
) -> Iterator[ApplicationDirectoryEntry]:
    """Compose owner and application listings into one entry stream."""

    return iter_application_directories(
        fs,
        iter_owner_directories(fs, root),
        suffix,
        zone=zone,
        on_owner=on_owner,
        on_missing_suffix=on_missing_suffix,
    )


__all__ = ["iter_application_directories", "iter_owner_directories", "scan"]
