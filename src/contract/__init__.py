"""Canonical Analysis Input contract shared by plugins, decoder and checker.

Treat these exports as the stable boundary between language plugins and the
exhaustiveness checker.
"""

from contract.errors import DecodeError, InputError
from contract.models import (
    AnalysisInput,
    FailureType,
    FunctionSignature,
    HandlingKind,
    HandlingSite,
    Language,
    Location,
    SignatureKind,
    UnhandledCallSite,
)


def __getattr__(name: str) -> object:
    if name in {"decode_analysis_input", "encode_analysis_input", "load_document"}:
        from contract.wire import (
            decode_analysis_input,
            encode_analysis_input,
            load_document,
        )

        return {
            "decode_analysis_input": decode_analysis_input,
            "encode_analysis_input": encode_analysis_input,
            "load_document": load_document,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AnalysisInput",
    "DecodeError",
    "FailureType",
    "FunctionSignature",
    "HandlingKind",
    "HandlingSite",
    "InputError",
    "Language",
    "Location",
    "SignatureKind",
    "UnhandledCallSite",
    "decode_analysis_input",
    "encode_analysis_input",
    "load_document",
]
