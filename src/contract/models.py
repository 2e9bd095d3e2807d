"""Canonical Analysis Input models.

These models are source-language agnostic: every language plugin produces them,
and the legacy pre-extracted JSON format is decoded straight into them.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    """Source languages known to the diagnostics layer."""

    PYTHON = "python"
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    GO = "go"
    JAVA = "java"
    PHP = "php"
    UNKNOWN = "unknown"


_DECORATOR_NAMES: dict[Language, str] = {
    Language.PYTHON: "@raises",
    Language.TYPESCRIPT: "raises()",
    Language.JAVASCRIPT: "raises()",
    Language.GO: "raises()",
    Language.JAVA: "@Raises",
    Language.PHP: "#[Raises]",
    Language.UNKNOWN: "@raises",
}

_MATCH_NAMES: dict[Language, str] = {
    Language.PYTHON: "match",
    Language.TYPESCRIPT: "match()",
    Language.JAVASCRIPT: "match()",
    Language.GO: "Match()",
    Language.JAVA: "Match.on()",
    Language.PHP: "match_result()",
    Language.UNKNOWN: "match",
}


def decorator_name(language: Language) -> str:
    """Spelling of the "declares failure types" marker in ``language``."""
    return _DECORATOR_NAMES[language]


def match_name(language: Language) -> str:
    """Spelling of the match combinator in ``language``."""
    return _MATCH_NAMES[language]


def parse_language(value: Any) -> Language:
    """Map a language tag to a Language, case-insensitively.

    ``None`` and unrecognized strings map to ``Language.UNKNOWN``.
    """
    if value is None:
        return Language.UNKNOWN
    if isinstance(value, Language):
        return value
    if not isinstance(value, str):
        msg = "language must be a string"
        raise ValueError(msg)
    try:
        return Language(value.lower())
    except ValueError:
        return Language.UNKNOWN


class Location(BaseModel):
    """Source span: 1-indexed lines, 0-indexed columns."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    col: int
    end_line: int
    end_col: int


class NamedFailure(BaseModel):
    """A failure type referenced by a bare name, e.g. ``NotFound``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["name"] = "name"
    name: str

    @property
    def label(self) -> str:
        return self.name


class QualifiedFailure(BaseModel):
    """A failure type referenced through a module path, e.g. ``errors.NotFound``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["qualified"] = "qualified"
    module: str
    name: str

    @property
    def label(self) -> str:
        return f"{self.module}.{self.name}"


class UnionFailure(BaseModel):
    """A union of failure types."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["union"] = "union"
    types: list[FailureType] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return " | ".join(member.label for member in self.types)


class OkMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ok"] = "ok"

    @property
    def label(self) -> str:
        return "Ok"


class SomeMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["some"] = "some"

    @property
    def label(self) -> str:
        return "Some"


class NothingMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["nothing"] = "nothing"

    @property
    def label(self) -> str:
        return "Nothing"


FailureType = Annotated[
    NamedFailure
    | QualifiedFailure
    | UnionFailure
    | OkMarker
    | SomeMarker
    | NothingMarker,
    Field(discriminator="kind"),
]

UnionFailure.model_rebuild()

OK = OkMarker()
SOME = SomeMarker()
NOTHING = NothingMarker()


class SignatureKind(str, Enum):
    """Whether a function returns a result (raises) or an optional value."""

    RAISES = "raises"
    OPTION = "option"


class HandlingKind(str, Enum):
    """Syntactic form of a handling site."""

    STATEMENT = "statement"
    FUNCTION_CALL = "function_call"


class FunctionSignature(BaseModel):
    """Declared contract of one annotated function."""

    model_config = ConfigDict(frozen=True)

    name: str
    qualified_name: str | None = None
    declared_exceptions: list[FailureType] = Field(default_factory=list)
    loc: Location
    is_async: bool
    signature_type: SignatureKind = SignatureKind.RAISES


class HandlingSite(BaseModel):
    """A place in source that dispatches on a call's outcomes."""

    model_config = ConfigDict(frozen=True)

    func_name: str
    handlers: list[FailureType] = Field(default_factory=list)
    has_ok_handler: bool
    has_some_handler: bool = False
    has_nothing_handler: bool = False
    loc: Location
    call_loc: Location | None = None
    kind: HandlingKind


class UnhandledCallSite(BaseModel):
    """A call to an annotated function whose result never reaches a handling site."""

    model_config = ConfigDict(frozen=True)

    func_name: str
    loc: Location
    signature_type: SignatureKind


class AnalysisInput(BaseModel):
    """The sole artifact the exhaustiveness checker consumes."""

    model_config = ConfigDict(frozen=True)

    language: Language = Language.UNKNOWN
    signatures: list[FunctionSignature]
    matches: list[HandlingSite]
    unhandled_calls: list[UnhandledCallSite] = Field(default_factory=list)

    @field_validator("language", mode="before")
    @classmethod
    def normalize_language(cls, v: Any) -> Language:
        return parse_language(v)


__all__ = [
    "NOTHING",
    "OK",
    "SOME",
    "AnalysisInput",
    "FailureType",
    "FunctionSignature",
    "HandlingKind",
    "HandlingSite",
    "Language",
    "Location",
    "NamedFailure",
    "NothingMarker",
    "OkMarker",
    "QualifiedFailure",
    "SignatureKind",
    "SomeMarker",
    "UnhandledCallSite",
    "UnionFailure",
    "decorator_name",
    "match_name",
    "parse_language",
]
