"""Plain-text report lines, one per event.

The layout matches the long-standing purger output so existing log scrapers
keep working::

    Checking for userDir : /tmp/logs/alice/logs
    /tmp/logs/alice/logs/application_1_0001, alice, 2024-01-01T10:00:00+00:00, size=150
    Deleting /tmp/logs/alice/logs/application_1_0001
    Savings : 150
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional, TextIO

from ..core.types import PurgeFailure, PurgeOutcome, PurgeReport


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def format_candidate(outcome: PurgeOutcome) -> str:
    return (
        f"{outcome.path}, {outcome.owner}, "
        f"{format_timestamp(outcome.modified_at)}, size={outcome.size_bytes}"
    )


class TextReportSink:
    """Write report lines to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(f"{line}\n")

    def owner_checked(self, path: str) -> None:
        self._write(f"Checking for userDir : {path}")

    def candidate(self, outcome: PurgeOutcome) -> None:
        self._write(format_candidate(outcome))

    def deleting(self, path: str) -> None:
        self._write(f"Deleting {path}")

    def failure(self, failure: PurgeFailure) -> None:
        self._write(f"Failed to {failure.stage} {failure.path}: {failure.reason}")

    def summary(self, report: PurgeReport) -> None:
        if report.failures:
            self._write(f"Failures : {len(report.failures)}")
        self._write(f"Savings : {report.total_bytes}")


__all__ = ["TextReportSink", "format_candidate", "format_timestamp"]
