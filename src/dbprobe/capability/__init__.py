"""Capability verification for database drivers."""

from dbprobe.capability.checker import filter_related, verify_runtime
from dbprobe.capability.reporter import generate_json_report, render_text_report
from dbprobe.types import VerificationReport

__all__ = [
    "VerificationReport",
    "filter_related",
    "generate_json_report",
    "render_text_report",
    "verify_runtime",
]
