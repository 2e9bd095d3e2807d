"""Name-based signature resolution.

Functions are matched by their unqualified name within one analyzed document.
When several signatures share a name the last one registered wins. Both the
extractors and the checker go through :func:`lookup_signature`, so a qualified
resolution strategy only has to replace this module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from contract.models import FunctionSignature

SignatureTable = dict[str, "FunctionSignature"]


def build_signature_table(signatures: Iterable[FunctionSignature]) -> SignatureTable:
    """Index signatures by unqualified name (last registration wins)."""
    table: SignatureTable = {}
    for signature in signatures:
        table[signature.name] = signature
    return table


def lookup_signature(table: SignatureTable, name: str) -> FunctionSignature | None:
    return table.get(name)


__all__ = ["SignatureTable", "build_signature_table", "lookup_signature"]
