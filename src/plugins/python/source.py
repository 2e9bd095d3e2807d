"""Render Python source as a raw tree document using the standard ``ast`` module."""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Any

from contract.errors import InputError
from plugins.python.tree_parser import TYPE_FIELD

logger = logging.getLogger(__name__)

# orjson only serializes 64-bit integers.
_INT_MIN = -(2**63)
_INT_MAX = 2**64 - 1

# Fields the tree parser never reads.
_SKIPPED_FIELDS = frozenset({"ctx", "type_comment", "type_ignores"})


def _dump_constant(value: Any) -> Any:
    if value is None or isinstance(value, str | bool | float):
        return value
    if isinstance(value, int):
        if _INT_MIN <= value <= _INT_MAX:
            return value
        return {TYPE_FIELD: "int", "value": str(value)}
    if isinstance(value, bytes):
        return {TYPE_FIELD: "bytes", "value": value.decode("latin-1")}
    if value is Ellipsis:
        return {TYPE_FIELD: "Ellipsis"}
    return {TYPE_FIELD: type(value).__name__, "value": repr(value)}


def dump_node(node: Any) -> Any:
    """Convert an ``ast`` node (or list of nodes) to its tagged JSON form."""
    if isinstance(node, list):
        return [dump_node(item) for item in node]
    if not isinstance(node, ast.AST):
        return node

    data: dict[str, Any] = {TYPE_FIELD: type(node).__name__}
    for name in node._attributes:
        value = getattr(node, name, None)
        if value is not None:
            data[name] = value
    for name, value in ast.iter_fields(node):
        if name in _SKIPPED_FIELDS:
            continue
        if isinstance(node, ast.Constant | ast.MatchSingleton) and name == "value":
            data[name] = _dump_constant(value)
        else:
            data[name] = dump_node(value)
    return data


def dump_source(source: str | bytes, source_file: str = "<unknown>") -> dict[str, Any]:
    """Parse ``source`` and wrap its tree in a raw tree document.

    Raises:
        InputError: If the source is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=source_file)
    except SyntaxError as exc:
        msg = f"{source_file}:{exc.lineno}: syntax error: {exc.msg}"
        raise InputError(msg) from exc
    except ValueError as exc:
        msg = f"{source_file}: {exc}"
        raise InputError(msg) from exc

    logger.debug("Dumped %s (%d top-level statements)", source_file, len(tree.body))
    return {
        "language": "python",
        "source_file": source_file,
        "ast": dump_node(tree),
    }


def dump_file(path: Path) -> dict[str, Any]:
    try:
        source = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise InputError(msg) from exc
    return dump_source(source, str(path))


__all__ = ["dump_file", "dump_node", "dump_source"]
