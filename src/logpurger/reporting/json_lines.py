"""Newline-delimited JSON purge events.

Every record has the shape ``{"type": <event>, "payload": {...}}`` so the
stream can be tailed and filtered without loading a whole run into memory.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Mapping, Optional, TextIO

from ..core.types import PurgeFailure, PurgeOutcome, PurgeReport
from .text import format_timestamp

__all__ = ["JsonLinesReportSink", "outcome_payload", "report_payload"]


def outcome_payload(outcome: PurgeOutcome) -> dict[str, Any]:
    return {
        "path": outcome.path,
        "owner": outcome.owner,
        "modified_at": format_timestamp(outcome.modified_at),
        "size_bytes": outcome.size_bytes,
    }


def report_payload(report: PurgeReport) -> dict[str, Any]:
    return {
        "cutoff": format_timestamp(report.cutoff),
        "delete_enabled": report.delete_enabled,
        "candidates": len(report.outcomes),
        "deleted": len(report.deleted_paths),
        "failures": len(report.failures),
        "total_bytes": report.total_bytes,
        "succeeded": report.succeeded,
    }


class JsonLinesReportSink:
    """Write one JSON object per purge event."""

    def __init__(self, stream: Optional[TextIO] = None, *, sort_keys: bool = True) -> None:
        self._stream = stream
        self._sort_keys = sort_keys

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, kind: str, payload: Mapping[str, Any]) -> None:
        record = {"type": kind, "payload": dict(payload)}
        self.stream.write(json.dumps(record, ensure_ascii=False, sort_keys=self._sort_keys))
        self.stream.write("\n")

    def owner_checked(self, path: str) -> None:
        self._emit("owner_checked", {"path": path})

    def candidate(self, outcome: PurgeOutcome) -> None:
        self._emit("candidate", outcome_payload(outcome))

    def deleting(self, path: str) -> None:
        self._emit("deleting", {"path": path})

    def failure(self, failure: PurgeFailure) -> None:
        self._emit(
            "failure",
            {
                "path": failure.path,
                "owner": failure.owner,
                "stage": failure.stage,
                "reason": failure.reason,
            },
        )

    def summary(self, report: PurgeReport) -> None:
        self._emit("summary", report_payload(report))
