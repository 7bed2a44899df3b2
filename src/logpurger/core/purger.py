"""Measure, report and delete expired application directories.

Failure policy
--------------
By default an I/O error while measuring or deleting one directory is recorded
as a :class:`PurgeFailure` and the remaining directories are still processed;
the resulting report is unsuccessful. ``fail_fast=True`` restores the
all-or-nothing behaviour where the first error aborts the run with
:class:`SizeComputationFailure` or :class:`DeletionFailure`.

Deletions are not transactional: directories removed before an abort stay
removed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Type

from ..filesystem.base import FileSystem
from .types import (
    ApplicationDirectoryEntry,
    DeletionFailure,
    PurgeFailure,
    PurgeOutcome,
    PurgeReport,
    PurgerError,
    RetentionPolicy,
    SizeComputationFailure,
)

if TYPE_CHECKING:  # pragma: no cover - import only for type hints
    from ..reporting.base import ReportSink

logger = logging.getLogger(__name__)


def compute_size(fs: FileSystem, path: str) -> int:
    """Return the total length of all files transitively under ``path``."""

    total = 0
    pending: List[str] = [path]
    while pending:
        current = pending.pop()
        for status in fs.list_status(current):
            if status.is_directory:
                pending.append(status.path)
            else:
                total += status.length
    return total


def is_expired(entry: ApplicationDirectoryEntry, policy: RetentionPolicy) -> bool:
    """Strictly older than the cutoff; an exact tie is kept."""

    return entry.modified_at < policy.cutoff


def _record_failure(
    report: PurgeReport,
    entry: ApplicationDirectoryEntry,
    stage: str,
    reason: str,
    error_type: Type[PurgerError],
    *,
    fail_fast: bool,
    sink: Optional["ReportSink"],
    cause: Optional[BaseException] = None,
) -> None:
    if fail_fast:
        error = error_type(entry.path, reason)
        if cause is not None:
            raise error from cause
        raise error
    failure = PurgeFailure(path=entry.path, owner=entry.owner, stage=stage, reason=reason)
    logger.warning("Failed to %s %s: %s", stage, entry.path, reason)
    report.failures.append(failure)
    if sink is not None:
        sink.failure(failure)


def purge(
    entries: Iterable[ApplicationDirectoryEntry],
    policy: RetentionPolicy,
    fs: FileSystem,
    *,
    sink: Optional["ReportSink"] = None,
    fail_fast: bool = False,
) -> PurgeReport:
    """Process ``entries`` against ``policy`` and return the run report.

    Every expired directory is measured before anything is deleted and is
    reported to ``sink`` whether or not deletion is enabled.
    """

    report = PurgeReport(cutoff=policy.cutoff, delete_enabled=policy.delete_enabled)
    seen: Set[str] = set()

    for entry in entries:
        if entry.path in seen:
            logger.debug("Ignoring repeated entry %s", entry.path)
            continue
        seen.add(entry.path)
        if not is_expired(entry, policy):
            continue

        try:
            size = compute_size(fs, entry.path)
        except OSError as exc:
            _record_failure(
                report, entry, "size", str(exc), SizeComputationFailure,
                fail_fast=fail_fast, sink=sink, cause=exc,
            )
            continue

        outcome = PurgeOutcome(
            path=entry.path,
            owner=entry.owner,
            modified_at=entry.modified_at,
            size_bytes=size,
        )
        if sink is not None:
            sink.candidate(outcome)

        if policy.delete_enabled:
            if sink is not None:
                sink.deleting(entry.path)
            logger.info("Deleting %s (%d bytes)", entry.path, size)
            try:
                removed = fs.delete(entry.path, recursive=True)
            except OSError as exc:
                _record_failure(
                    report, entry, "delete", str(exc), DeletionFailure,
                    fail_fast=fail_fast, sink=sink, cause=exc,
                )
                continue
            if not removed:
                _record_failure(
                    report, entry, "delete", "filesystem reported nothing was deleted",
                    DeletionFailure, fail_fast=fail_fast, sink=sink,
                )
                continue
            outcome = replace(outcome, deleted=True)

        report.outcomes.append(outcome)
        report.total_bytes += size

    if sink is not None:
        sink.summary(report)
    return report


__all__ = ["compute_size", "is_expired", "purge"]
