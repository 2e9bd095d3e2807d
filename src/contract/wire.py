"""Decoding and encoding of the canonical (pre-extracted) wire format."""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import ValidationError

from contract.errors import InputError
from contract.models import AnalysisInput, FunctionSignature


def load_document(raw: bytes | str) -> dict[str, Any]:
    """Parse raw JSON text into a top-level document object."""
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        msg = f"JSON parse error: {exc}"
        raise InputError(msg) from exc
    if not isinstance(data, dict):
        msg = "Expected a JSON object at the top level"
        raise InputError(msg)
    return data


def decode_analysis_input(document: dict[str, Any]) -> AnalysisInput:
    """Decode a pre-extracted document into an AnalysisInput.

    ``language`` defaults to unknown and ``unhandled_calls`` to an empty list;
    ``signatures`` and ``matches`` are required.
    """
    try:
        return AnalysisInput.model_validate(document)
    except ValidationError as exc:
        msg = f"Invalid analysis input: {exc}"
        raise InputError(msg) from exc


def decode_signature(data: Any) -> FunctionSignature:
    try:
        return FunctionSignature.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid signature: {exc}"
        raise InputError(msg) from exc


def encode_analysis_input(analysis: AnalysisInput) -> bytes:
    payload = analysis.model_dump(mode="json")
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)


__all__ = [
    "decode_analysis_input",
    "decode_signature",
    "encode_analysis_input",
    "load_document",
]
