from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest

from logpurger.core.cutoff import compute_cutoff
from logpurger.core.purger import compute_size, is_expired, purge
from logpurger.core.scanner import scan
from logpurger.core.types import (
    ApplicationDirectoryEntry,
    DeletionFailure,
    PurgeFailure,
    PurgeOutcome,
    PurgeReport,
    RetentionPolicy,
    SizeComputationFailure,
)
from logpurger.filesystem import FileStatus, FileSystemError, MemoryFileSystem

NOW = datetime(2025, 11, 13, 12, 0, tzinfo=timezone.utc)


def _ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _days_ago(days: int) -> int:
    return _ms(NOW - timedelta(days=days))


class RecordingSink:
    def __init__(self) -> None:
        self.events: List[Tuple[str, object]] = []

    def owner_checked(self, path: str) -> None:
        self.events.append(("owner_checked", path))

    def candidate(self, outcome: PurgeOutcome) -> None:
        self.events.append(("candidate", outcome))

    def deleting(self, path: str) -> None:
        self.events.append(("deleting", path))

    def failure(self, failure: PurgeFailure) -> None:
        self.events.append(("failure", failure))

    def summary(self, report: PurgeReport) -> None:
        self.events.append(("summary", report.total_bytes))

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.events]


def build_alice_tree() -> MemoryFileSystem:
    fs = MemoryFileSystem()
    fs.add_directory("/tmp/logs/alice/logs/app1", modification_time=_days_ago(400), owner="alice")
    fs.add_file("/tmp/logs/alice/logs/app1/container_01", 100, owner="alice")
    fs.add_directory("/tmp/logs/alice/logs/app1/nested", owner="alice")
    fs.add_file("/tmp/logs/alice/logs/app1/nested/container_02", 50, owner="alice")
    fs.add_directory("/tmp/logs/alice/logs/app2", modification_time=_days_ago(10), owner="alice")
    fs.add_file("/tmp/logs/alice/logs/app2/container_01", 999, owner="alice")
    fs.add_directory("/tmp/logs/bob")
    return fs


def _policy(delete: bool, days: int = 300) -> RetentionPolicy:
    return RetentionPolicy(cutoff=compute_cutoff(NOW, days, zone=timezone.utc), delete_enabled=delete)


def _entries(fs: MemoryFileSystem):
    return scan(fs, "/tmp/logs", "logs", zone=timezone.utc)


def test_compute_size_sums_nested_files() -> None:
    fs = build_alice_tree()

    assert compute_size(fs, "/tmp/logs/alice/logs/app1") == 150


def test_compute_size_ignores_sibling_order() -> None:
    forward = MemoryFileSystem()
    backward = MemoryFileSystem()
    files = [("a/x", 7), ("a/b/y", 11), ("c", 13), ("a/b/c/d/z", 17)]
    for name, length in files:
        forward.add_file(f"/root/{name}", length)
    for name, length in reversed(files):
        backward.add_file(f"/root/{name}", length)

    assert compute_size(forward, "/root") == compute_size(backward, "/root") == 48


def test_compute_size_handles_deep_trees() -> None:
    fs = MemoryFileSystem()
    path = "/deep"
    for level in range(2000):
        path = f"{path}/d{level}"
    fs.add_file(f"{path}/leaf", 3)

    assert compute_size(fs, "/deep") == 3


def test_compute_size_of_plain_file_is_its_length() -> None:
    fs = MemoryFileSystem()
    fs.add_file("/tmp/logs/alice/logs/stray", 42)

    assert compute_size(fs, "/tmp/logs/alice/logs/stray") == 42


def test_is_expired_is_strict() -> None:
    policy = _policy(delete=False)
    at_cutoff = ApplicationDirectoryEntry(
        path="/x", owner="o", modification_time=_ms(policy.cutoff),
        modified_at=policy.cutoff, owner_directory="/",
    )
    older = ApplicationDirectoryEntry(
        path="/y", owner="o", modification_time=0,
        modified_at=policy.cutoff - timedelta(milliseconds=1), owner_directory="/",
    )

    assert not is_expired(at_cutoff, policy)
    assert is_expired(older, policy)


def test_purge_reports_and_deletes_expired_directory() -> None:
    fs = build_alice_tree()
    sink = RecordingSink()

    report = purge(_entries(fs), _policy(delete=True), fs, sink=sink)

    assert [outcome.path for outcome in report.outcomes] == ["/tmp/logs/alice/logs/app1"]
    outcome = report.outcomes[0]
    assert outcome.owner == "alice"
    assert outcome.size_bytes == 150
    assert outcome.deleted is True
    assert report.total_bytes == 150
    assert report.succeeded
    assert not fs.exists("/tmp/logs/alice/logs/app1")
    assert fs.exists("/tmp/logs/alice/logs/app2")
    assert sink.kinds() == ["candidate", "deleting", "summary"]


def test_dry_run_matches_execute_run_and_keeps_files() -> None:
    dry_fs = build_alice_tree()
    live_fs = build_alice_tree()

    dry = purge(_entries(dry_fs), _policy(delete=False), dry_fs)
    live = purge(_entries(live_fs), _policy(delete=True), live_fs)

    assert dry.total_bytes == live.total_bytes == 150
    assert [(o.path, o.owner, o.size_bytes) for o in dry.outcomes] == [
        (o.path, o.owner, o.size_bytes) for o in live.outcomes
    ]
    assert dry.deleted_paths == []
    assert dry_fs.exists("/tmp/logs/alice/logs/app1")


def test_second_execute_run_finds_nothing_already_deleted() -> None:
    fs = build_alice_tree()
    purge(_entries(fs), _policy(delete=True), fs)

    second = purge(_entries(fs), _policy(delete=True), fs)

    assert second.outcomes == []
    assert second.total_bytes == 0


def test_boundary_entry_is_never_deleted() -> None:
    fs = MemoryFileSystem()
    policy = _policy(delete=True)
    fs.add_directory("/tmp/logs/alice/logs/edge", modification_time=_ms(policy.cutoff), owner="alice")
    fs.add_file("/tmp/logs/alice/logs/edge/f", 5)

    report = purge(_entries(fs), policy, fs)

    assert report.outcomes == []
    assert fs.exists("/tmp/logs/alice/logs/edge")


def test_repeated_entries_are_processed_once() -> None:
    fs = build_alice_tree()
    entries = list(_entries(fs))

    report = purge(entries + entries, _policy(delete=False), fs)

    assert report.total_bytes == 150
    assert len(report.outcomes) == 1


class FailingFileSystem(MemoryFileSystem):
    def __init__(self) -> None:
        super().__init__()
        self.fail_list: set[str] = set()
        self.fail_delete: set[str] = set()
        self.refuse_delete: set[str] = set()

    def list_status(self, path: str) -> List[FileStatus]:
        if path in self.fail_list:
            raise FileSystemError(f"cannot list {path}")
        return super().list_status(path)

    def delete(self, path: str, recursive: bool = True) -> bool:
        if path in self.fail_delete:
            raise PermissionError(13, "Permission denied", path)
        if path in self.refuse_delete:
            return False
        return super().delete(path, recursive)


def build_failing_tree() -> FailingFileSystem:
    fs = FailingFileSystem()
    for name, size in (("app_a", 10), ("app_b", 20), ("app_c", 30)):
        fs.add_directory(f"/tmp/logs/alice/logs/{name}", modification_time=_days_ago(500), owner="alice")
        fs.add_file(f"/tmp/logs/alice/logs/{name}/log", size)
    return fs


def test_size_failure_is_isolated_by_default() -> None:
    fs = build_failing_tree()
    fs.fail_list.add("/tmp/logs/alice/logs/app_a")
    sink = RecordingSink()

    report = purge(_entries(fs), _policy(delete=True), fs, sink=sink)

    assert not report.succeeded
    assert [(f.path, f.stage) for f in report.failures] == [("/tmp/logs/alice/logs/app_a", "size")]
    assert report.total_bytes == 50
    assert fs.exists("/tmp/logs/alice/logs/app_a")
    assert not fs.exists("/tmp/logs/alice/logs/app_c")
    assert sink.kinds()[0] == "failure"
    assert sink.kinds()[-1] == "summary"


def test_delete_failure_is_isolated_by_default() -> None:
    fs = build_failing_tree()
    fs.fail_delete.add("/tmp/logs/alice/logs/app_b")
    fs.refuse_delete.add("/tmp/logs/alice/logs/app_c")
    sink = RecordingSink()

    report = purge(_entries(fs), _policy(delete=True), fs, sink=sink)

    assert [f.path for f in report.failures] == [
        "/tmp/logs/alice/logs/app_b",
        "/tmp/logs/alice/logs/app_c",
    ]
    assert all(f.stage == "delete" for f in report.failures)
    assert report.deleted_paths == ["/tmp/logs/alice/logs/app_a"]
    assert report.total_bytes == 10
    # the deletion notice precedes the failed delete call
    assert ("deleting", "/tmp/logs/alice/logs/app_b") in sink.events


def test_fail_fast_aborts_on_size_failure() -> None:
    fs = build_failing_tree()
    fs.fail_list.add("/tmp/logs/alice/logs/app_b")
    sink = RecordingSink()

    with pytest.raises(SizeComputationFailure) as exc:
        purge(_entries(fs), _policy(delete=True), fs, sink=sink, fail_fast=True)

    assert exc.value.path == "/tmp/logs/alice/logs/app_b"
    # deletions before the failure are not rolled back
    assert not fs.exists("/tmp/logs/alice/logs/app_a")
    assert fs.exists("/tmp/logs/alice/logs/app_c")
    assert "summary" not in sink.kinds()


def test_fail_fast_aborts_on_delete_failure() -> None:
    fs = build_failing_tree()
    fs.fail_delete.add("/tmp/logs/alice/logs/app_a")
    sink = RecordingSink()

    with pytest.raises(DeletionFailure):
        purge(_entries(fs), _policy(delete=True), fs, sink=sink, fail_fast=True)

    assert sink.kinds() == ["candidate", "deleting"]
    assert fs.exists("/tmp/logs/alice/logs/app_b")
