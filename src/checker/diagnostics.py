"""Map checker errors to diagnostics and render them as text or JSON."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, ConfigDict, Field

from checker.exhaustiveness import (
    ExtraHandlers,
    MissingHandlers,
    MissingNothingHandler,
    MissingOkHandler,
    MissingSomeHandler,
    UnhandledOption,
    UnhandledResult,
    UnknownFunction,
)
from contract.models import Language, decorator_name, match_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from checker.exhaustiveness import CheckError
    from contract.models import Location

NO_ERRORS_MESSAGE = "No exhaustiveness errors found."


class ErrorCode(str, Enum):
    MISSING_HANDLERS = "EXH001"
    EXTRA_HANDLERS = "EXH002"
    MISSING_OK_HANDLER = "EXH003"
    UNKNOWN_FUNCTION = "EXH004"
    MISSING_SOME_HANDLER = "EXH005"
    MISSING_NOTHING_HANDLER = "EXH006"
    UNHANDLED_RESULT = "EXH007"
    UNHANDLED_OPTION = "EXH008"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: str
    exception: str | None = None


class Diagnostic(BaseModel):
    """One reportable finding, positioned at a source span."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: str
    line: int
    column: int
    end_line: int = Field(alias="endLine")
    end_column: int = Field(alias="endColumn")
    severity: Severity
    code: ErrorCode
    message: str
    suggestions: list[Suggestion] = Field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _diagnostic(
    loc: Location,
    code: ErrorCode,
    severity: Severity,
    message: str,
    suggestions: list[Suggestion] | None = None,
) -> Diagnostic:
    return Diagnostic(
        file=loc.file,
        line=loc.line,
        column=loc.col,
        end_line=loc.end_line,
        end_column=loc.end_col,
        severity=severity,
        code=code,
        message=message,
        suggestions=suggestions or [],
    )


def error_to_diagnostic(
    error: CheckError, language: Language = Language.UNKNOWN
) -> Diagnostic:
    """Convert one checker error; wording follows ``language``'s spelling."""
    combinator = match_name(language)

    if isinstance(error, MissingHandlers):
        names = [failure.label for failure in error.missing]
        return _diagnostic(
            error.loc,
            ErrorCode.MISSING_HANDLERS,
            Severity.ERROR,
            f"Non-exhaustive {combinator} on `{error.func_name}`: "
            f"missing {', '.join(names)}",
            [Suggestion(action="add_handler", exception=name) for name in names],
        )
    if isinstance(error, ExtraHandlers):
        names = [failure.label for failure in error.extra]
        return _diagnostic(
            error.loc,
            ErrorCode.EXTRA_HANDLERS,
            Severity.WARNING,
            f"{_capitalize(combinator)} on `{error.func_name}` has handlers for "
            f"undeclared exceptions: {', '.join(names)}",
            [Suggestion(action="remove_handler", exception=name) for name in names],
        )
    if isinstance(error, MissingOkHandler | MissingSomeHandler | MissingNothingHandler):
        case, code = {
            MissingOkHandler: ("Ok", ErrorCode.MISSING_OK_HANDLER),
            MissingSomeHandler: ("Some", ErrorCode.MISSING_SOME_HANDLER),
            MissingNothingHandler: ("Nothing", ErrorCode.MISSING_NOTHING_HANDLER),
        }[type(error)]
        return _diagnostic(
            error.loc,
            code,
            Severity.ERROR,
            f"{_capitalize(combinator)} on `{error.func_name}` is missing handler "
            f"for {case} case",
            [Suggestion(action="add_handler", exception=case)],
        )
    if isinstance(error, UnknownFunction):
        return _diagnostic(
            error.loc,
            ErrorCode.UNKNOWN_FUNCTION,
            Severity.WARNING,
            f"{combinator} called on `{error.func_name}` which has no "
            f"{decorator_name(language)} signature",
        )
    if isinstance(error, UnhandledResult):
        return _diagnostic(
            error.loc,
            ErrorCode.UNHANDLED_RESULT,
            Severity.ERROR,
            f"Result from `{error.func_name}` must be handled with {combinator} "
            "or match-case",
            [Suggestion(action="add_match")],
        )
    if isinstance(error, UnhandledOption):
        return _diagnostic(
            error.loc,
            ErrorCode.UNHANDLED_OPTION,
            Severity.ERROR,
            f"Option from `{error.func_name}` must be handled with {combinator} "
            "or match-case",
            [Suggestion(action="add_match")],
        )
    msg = f"Unsupported checker error: {error!r}"
    raise TypeError(msg)


def to_diagnostics(
    errors: Iterable[CheckError], language: Language = Language.UNKNOWN
) -> list[Diagnostic]:
    return [error_to_diagnostic(error, language) for error in errors]


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(diagnostic.is_error for diagnostic in diagnostics)


def format_text(diagnostic: Diagnostic) -> str:
    return (
        f"{diagnostic.file}:{diagnostic.line}:{diagnostic.column}: "
        f"{diagnostic.severity.value} [{diagnostic.code.value}]: {diagnostic.message}"
    )


def render_text(diagnostics: list[Diagnostic]) -> str:
    if not diagnostics:
        return NO_ERRORS_MESSAGE
    return "\n".join(format_text(diagnostic) for diagnostic in diagnostics)


def render_json(diagnostics: list[Diagnostic]) -> str:
    payload = {"diagnostics": [diagnostic.to_dict() for diagnostic in diagnostics]}
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8")


__all__ = [
    "NO_ERRORS_MESSAGE",
    "Diagnostic",
    "ErrorCode",
    "Severity",
    "Suggestion",
    "error_to_diagnostic",
    "format_text",
    "has_errors",
    "render_json",
    "render_text",
    "to_diagnostics",
]
