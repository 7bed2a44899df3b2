"""Run orchestration: one cutoff, one scoped filesystem, one pass.

>>> from logpurger.filesystem import MemoryFileSystem
>>> fs = MemoryFileSystem()
>>> _ = fs.add_directory("/tmp/logs")
>>> settings = PurgerConfig(retention_days=30)
>>> run(settings, open_fs=lambda uri, **_: (fs, uri)).total_bytes
0
>>> fs.closed
True
"""

from __future__ import annotations

import logging
from contextlib import closing
from datetime import datetime, tzinfo
from typing import Callable, Optional, Tuple

from .config import PurgerConfig
from .core.cutoff import compute_cutoff
from .core.purger import purge
from .core.scanner import scan
from .core.types import PurgeReport, RetentionPolicy
from .filesystem import FileSystem, open_filesystem
from .reporting.base import ReportSink

logger = logging.getLogger(__name__)

FileSystemOpener = Callable[..., Tuple[FileSystem, str]]


def build_policy(
    config: PurgerConfig,
    *,
    zone: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> RetentionPolicy:
    """Compute the run's cutoff exactly once.

    ``zone`` defaults to ``config.zone``; ``None`` means system-local time.
    """

    if zone is None:
        zone = config.zone
    if now is not None:
        reference = now
    elif zone is not None:
        reference = datetime.now(tz=zone)
    else:
        reference = datetime.now().astimezone()
    cutoff = compute_cutoff(reference, config.retention_days, zone=zone)
    return RetentionPolicy(cutoff=cutoff, delete_enabled=config.delete_enabled)


def run(
    config: PurgerConfig,
    *,
    sink: Optional[ReportSink] = None,
    now: Optional[datetime] = None,
    open_fs: FileSystemOpener = open_filesystem,
) -> PurgeReport:
    """Scan the log tree and purge expired application directories.

    The filesystem is closed on every exit path. ``ScanFailure`` always
    propagates; size and delete failures propagate only when
    ``config.fail_fast`` is set.
    """

    zone = config.zone
    policy = build_policy(config, zone=zone, now=now)
    logger.info(
        "Purging logs under %s older than %s (delete=%s)",
        config.root_log_dir,
        policy.cutoff.isoformat(),
        policy.delete_enabled,
    )
    fs, root = open_fs(config.root_log_dir, default_fs=config.default_fs, user=config.user)
    with closing(fs):
        entries = scan(
            fs,
            root,
            config.suffix,
            zone=zone,
            on_owner=sink.owner_checked if sink is not None else None,
        )
        return purge(entries, policy, fs, sink=sink, fail_fast=config.fail_fast)


__all__ = ["build_policy", "run"]
