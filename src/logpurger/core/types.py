"""Shared data structures and error kinds for the purge pipeline.

Example
-------
>>> from datetime import datetime, timezone
>>> policy = RetentionPolicy(
...     cutoff=datetime(2024, 1, 1, tzinfo=timezone.utc), delete_enabled=False
... )
>>> report = PurgeReport(cutoff=policy.cutoff, delete_enabled=False)
>>> report.succeeded
True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


class InvalidConfiguration(ValueError):
    """Raised when the retention configuration is missing or invalid."""


class PurgerError(Exception):
    """Base class for fatal failures raised while scanning or purging."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {self.reason}")

    def __repr__(self) -> str:  # pragma: no cover - trivial wrapper
        return f"{type(self).__name__}(path={self.path!r}, reason={self.reason!r})"


class ScanFailure(PurgerError):
    """Listing the log tree failed for a reason other than a missing suffix."""


class SizeComputationFailure(PurgerError):
    """Measuring an application directory failed."""


class DeletionFailure(PurgerError):
    """Deleting an application directory failed."""


@dataclass(frozen=True)
class RetentionPolicy:
    """Cutoff and delete switch shared by the whole run."""

    cutoff: datetime
    delete_enabled: bool = False


@dataclass(frozen=True)
class ApplicationDirectoryEntry:
    """An application directory found under an owner's suffix path."""

    path: str
    owner: str
    modification_time: int
    modified_at: datetime
    owner_directory: str


@dataclass(frozen=True)
class PurgeOutcome:
    path: str
    owner: str
    modified_at: datetime
    size_bytes: int
    deleted: bool = False


@dataclass(frozen=True)
class PurgeFailure:
    path: str
    owner: str
    stage: str  # "size" | "delete"
    reason: str


@dataclass
class PurgeReport:
    """Aggregate result of a purge run."""

    cutoff: datetime
    delete_enabled: bool
    outcomes: List[PurgeOutcome] = field(default_factory=list)
    failures: List[PurgeFailure] = field(default_factory=list)
    total_bytes: int = 0

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def deleted_paths(self) -> List[str]:
        return [outcome.path for outcome in self.outcomes if outcome.deleted]

    def outcome_for(self, path: str) -> Optional[PurgeOutcome]:
        for outcome in self.outcomes:
            if outcome.path == path:
                return outcome
        return None


__all__ = [
    "ApplicationDirectoryEntry",
    "DeletionFailure",
    "InvalidConfiguration",
    "PurgeFailure",
    "PurgeOutcome",
    "PurgeReport",
    "PurgerError",
    "RetentionPolicy",
    "ScanFailure",
    "SizeComputationFailure",
]
