"""Python language plugin: raw tree documents to Analysis Input."""

from __future__ import annotations

import logging
from typing import Any

from contract.errors import InputError
from contract.models import AnalysisInput, FunctionSignature, Language
from contract.wire import decode_signature
from plugins.python.extract import extract_module
from plugins.python.tree_parser import parse_module

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "<unknown>"


def _external_signatures(document: dict[str, Any]) -> list[FunctionSignature]:
    raw = document.get("external_signatures")
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring external_signatures: expected a list")
        return []

    signatures: list[FunctionSignature] = []
    for index, item in enumerate(raw):
        try:
            signatures.append(decode_signature(item))
        except InputError as exc:
            logger.warning("Skipping external_signatures[%d]: %s", index, exc)
    return signatures


class PythonPlugin:
    language = Language.PYTHON

    def can_handle(self, document: dict[str, Any]) -> bool:
        if "ast" not in document:
            return False
        language = document.get("language")
        return language is None or (
            isinstance(language, str) and language.lower() == "python"
        )

    def source_file(self, document: dict[str, Any]) -> str:
        value = document.get("source_file")
        return value if isinstance(value, str) else UNKNOWN_SOURCE

    def parse_raw_tree(self, document: dict[str, Any]) -> AnalysisInput:
        """Decode the document's ``ast`` and run extraction over it.

        Raises:
            DecodeError: If the tree is structurally malformed.
        """
        module = parse_module(document.get("ast"), path="ast")
        return extract_module(
            module,
            self.source_file(document),
            external_signatures=_external_signatures(document),
        )


__all__ = ["PythonPlugin"]
