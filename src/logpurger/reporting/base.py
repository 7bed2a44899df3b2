from __future__ import annotations

from typing import Protocol

from ..core.types import PurgeFailure, PurgeOutcome, PurgeReport


class ReportSink(Protocol):
    """Receives purge events in the order they happen."""

    def owner_checked(self, path: str) -> None:
        """Called before an owner's suffix path is listed."""

    def candidate(self, outcome: PurgeOutcome) -> None:
        """Called once per expired directory, after it was measured."""

    def deleting(self, path: str) -> None:
        """Called right before a directory is deleted."""

    def failure(self, failure: PurgeFailure) -> None:
        """Called when one directory could not be measured or deleted."""

    def summary(self, report: PurgeReport) -> None:
        """Called once after every entry was processed."""


__all__ = ["ReportSink"]
