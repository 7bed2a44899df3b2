from __future__ import annotations

import io
import json
from datetime import datetime, timezone

from logpurger.core.types import PurgeFailure, PurgeOutcome, PurgeReport
from logpurger.reporting import JsonLinesReportSink

CUTOFF = datetime(2025, 1, 17, 12, 0, tzinfo=timezone.utc)


def _records(stream: io.StringIO) -> list:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_json_sink_emits_one_record_per_event() -> None:
    stream = io.StringIO()
    sink = JsonLinesReportSink(stream)
    outcome = PurgeOutcome(
        path="/tmp/logs/alice/logs/app1",
        owner="alice",
        modified_at=datetime(2024, 10, 9, tzinfo=timezone.utc),
        size_bytes=150,
        deleted=True,
    )
    failure = PurgeFailure(path="/tmp/logs/alice/logs/app2", owner="alice", stage="size", reason="boom")
    report = PurgeReport(
        cutoff=CUTOFF, delete_enabled=True, outcomes=[outcome], failures=[failure], total_bytes=150
    )

    sink.owner_checked("/tmp/logs/alice/logs")
    sink.candidate(outcome)
    sink.deleting(outcome.path)
    sink.failure(failure)
    sink.summary(report)

    records = _records(stream)
    assert [record["type"] for record in records] == [
        "owner_checked",
        "candidate",
        "deleting",
        "failure",
        "summary",
    ]
    assert records[1]["payload"] == {
        "path": "/tmp/logs/alice/logs/app1",
        "owner": "alice",
        "modified_at": "2024-10-09T00:00:00+00:00",
        "size_bytes": 150,
    }
    assert records[3]["payload"]["stage"] == "size"
    assert records[4]["payload"] == {
        "cutoff": "2025-01-17T12:00:00+00:00",
        "delete_enabled": True,
        "candidates": 1,
        "deleted": 1,
        "failures": 1,
        "total_bytes": 150,
        "succeeded": False,
    }


def test_json_sink_sorts_keys() -> None:
    stream = io.StringIO()
    JsonLinesReportSink(stream).deleting("/x")

    assert stream.getvalue() == '{"payload": {"path": "/x"}, "type": "deleting"}\n'
