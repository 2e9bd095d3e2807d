"""Suppression of diagnostics by file path."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from checker.diagnostics import Diagnostic


def is_ignored(path: str, patterns: Iterable[str]) -> bool:
    """Check if a diagnostic file path matches any ignore glob."""
    return any(fnmatch(path, pattern) for pattern in patterns)


def filter_ignored(
    diagnostics: Iterable[Diagnostic], patterns: Iterable[str]
) -> list[Diagnostic]:
    patterns = list(patterns)
    if not patterns:
        return list(diagnostics)
    return [d for d in diagnostics if not is_ignored(d.file, patterns)]
