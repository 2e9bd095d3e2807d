"""Structural input failures shared by every ingestion path."""

from __future__ import annotations


class InputError(Exception):
    """Raised when an input document cannot be turned into an Analysis Input."""


class DecodeError(InputError):
    """Raised when a tree document does not match the expected node grammar.

    ``path`` locates the offending value inside the document, e.g.
    ``body[2].value.args[0]``.
    """

    def __init__(self, reason: str, path: str = "") -> None:
        self.reason = reason
        self.path = path
        super().__init__(f"{path}: {reason}" if path else reason)
