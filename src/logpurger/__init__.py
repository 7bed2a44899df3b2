"""logpurger package.

Finds YARN aggregated-log directories older than a retention window, reports
how much space they hold and optionally deletes them. The pipeline lives in
:mod:`logpurger.core`; filesystem backends, report sinks and configuration
loading are thin layers around it.
"""

from __future__ import annotations

from .config import Configuration, PurgerConfig, load_configuration
from .core import (
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
    compute_cutoff,
    compute_size,
    purge,
    scan,
)
from .filesystem import (
    FileStatus,
    FileSystem,
    LocalFileSystem,
    MemoryFileSystem,
    WebHdfsFileSystem,
    open_filesystem,
)
from .reporting import JsonLinesReportSink, ReportSink, TextReportSink
from .runner import build_policy, run

__all__ = [
    "ApplicationDirectoryEntry",
    "Configuration",
    "DeletionFailure",
    "FileStatus",
    "FileSystem",
    "InvalidConfiguration",
    "JsonLinesReportSink",
    "LocalFileSystem",
    "MemoryFileSystem",
    "PurgeFailure",
    "PurgeOutcome",
    "PurgeReport",
    "PurgerConfig",
    "PurgerError",
    "ReportSink",
    "RetentionPolicy",
    "ScanFailure",
    "SizeComputationFailure",
    "TextReportSink",
    "WebHdfsFileSystem",
    "build_policy",
    "compute_cutoff",
    "compute_size",
    "load_configuration",
    "open_filesystem",
    "purge",
    "run",
    "scan",
]
