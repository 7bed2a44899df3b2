"""Core retention pipeline: cutoff, scan, purge."""

from .cutoff import compute_cutoff, to_local_datetime, validate_retention_days
from .purger import compute_size, is_expired, purge
from .scanner import iter_application_directories, iter_owner_directories, scan
from .types import (
    ApplicationDirectoryEntry,
    DeletionFailure,
    InvalidConfiguration,
    PurgeFailure,
    PurgeOutcome,
    PurgeReport,
    PurgerError,
    RetentionPolicy,
    ScanFailure,
    SizeComputationFailure,
)

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
    "compute_cutoff",
    "compute_size",
    "is_expired",
    "iter_application_directories",
    "iter_owner_directories",
    "purge",
    "scan",
    "to_local_datetime",
    "validate_retention_days",
]
