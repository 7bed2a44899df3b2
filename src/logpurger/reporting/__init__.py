"""Report sinks for purge runs."""

from __future__ import annotations

from .base import ReportSink
from .json_lines import JsonLinesReportSink, outcome_payload, report_payload
from .text import TextReportSink, format_candidate, format_timestamp

__all__ = [
    "JsonLinesReportSink",
    "ReportSink",
    "TextReportSink",
    "format_candidate",
    "format_timestamp",
    "outcome_payload",
    "report_payload",
]
