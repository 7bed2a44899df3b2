"""Command-line entry point for aggregated-log purges.

Typical runs::

    logpurger -D deleteOlderThan=300                   # list only
    logpurger -D deleteOlderThan=300 -D deleteFiles=true

The convenience flags (``--older-than``, ``--delete``, ``--root`` ...) map to
the same configuration keys and win over ``-D`` values.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Sequence

from .config import (
    DELETE_FILES,
    DELETE_OLDER_THAN,
    FAIL_FAST,
    REMOTE_APP_LOG_DIR,
    REMOTE_APP_LOG_DIR_SUFFIX,
    TIMEZONE,
    PurgerConfig,
    load_configuration,
)
from .core.types import InvalidConfiguration, PurgerError
from .reporting import JsonLinesReportSink, TextReportSink
from .reporting.base import ReportSink
from .runner import run

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logpurger",
        description="List and optionally delete aggregated application logs older than a retention window.",
    )
    parser.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a configuration property (repeatable), e.g. -D deleteOlderThan=300.",
    )
    parser.add_argument(
        "--conf-dir",
        type=Path,
        help="Directory holding core-site.xml/yarn-site.xml (default: $YARN_CONF_DIR or $HADOOP_CONF_DIR).",
    )
    parser.add_argument(
        "--older-than",
        type=int,
        metavar="DAYS",
        help="Retention window in days; must be greater than 1.",
    )
    parser.add_argument(
        "--delete",
        action="store_true",
        help="Delete expired directories; otherwise only report them.",
    )
    parser.add_argument("--root", help="Root log directory or URI (default: /tmp/logs).")
    parser.add_argument("--suffix", help="Per-owner log directory suffix (default: logs).")
    parser.add_argument("--timezone", help="IANA zone used for age comparisons (default: system local).")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort on the first size or delete failure instead of continuing.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON lines instead of text report lines.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Diagnostic log level written to stderr (default: WARNING).",
    )
    return parser


def _flag_overrides(args: argparse.Namespace) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if args.older_than is not None:
        overrides[DELETE_OLDER_THAN] = str(args.older_than)
    if args.delete:
        overrides[DELETE_FILES] = "true"
    if args.root:
        overrides[REMOTE_APP_LOG_DIR] = args.root
    if args.suffix:
        overrides[REMOTE_APP_LOG_DIR_SUFFIX] = args.suffix
    if args.timezone:
        overrides[TIMEZONE] = args.timezone
    if args.fail_fast:
        overrides[FAIL_FAST] = "true"
    return overrides


def _build_sink(args: argparse.Namespace) -> ReportSink:
    if args.json:
        return JsonLinesReportSink(sys.stdout)
    return TextReportSink(sys.stdout)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(sys.argv[1:]) if argv is None else list(argv))
    logging.basicConfig(level=args.log_level, format=_LOG_FORMAT, stream=sys.stderr)

    try:
        conf = load_configuration(conf_dir=args.conf_dir, overrides=args.defines)
        conf.update(_flag_overrides(args))
        settings = PurgerConfig.from_configuration(conf)
        report = run(settings, sink=_build_sink(args))
    except InvalidConfiguration as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except PurgerError as exc:
        sys.stderr.write(f"error: {type(exc).__name__}: {exc}\n")
        return 1

    if not report.succeeded:
        sys.stderr.write(
            f"error: {len(report.failures)} director{'y' if len(report.failures) == 1 else 'ies'} could not be purged\n"
        )
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())


def console_main() -> None:
    """Entry point for ``logpurger`` console script."""

    sys.exit(main())
