"""Exhaustiveness checking and diagnostics."""

from checker.diagnostics import (
    Diagnostic,
    ErrorCode,
    Severity,
    error_to_diagnostic,
    render_json,
    render_text,
    to_diagnostics,
)
from checker.exhaustiveness import CheckError, check, check_input

__all__ = [
    "CheckError",
    "Diagnostic",
    "ErrorCode",
    "Severity",
    "check",
    "check_input",
    "error_to_diagnostic",
    "render_json",
    "render_text",
    "to_diagnostics",
]
