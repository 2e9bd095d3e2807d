from __future__ import annotations

import orjson
import pytest

from checker.diagnostics import (
    NO_ERRORS_MESSAGE,
    ErrorCode,
    Severity,
    error_to_diagnostic,
    has_errors,
    render_json,
    render_text,
)
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
from contract.models import Language, Location, NamedFailure, QualifiedFailure

LOC = Location(file="app.py", line=12, col=4, end_line=14, end_col=9)


def test_missing_handlers_message_and_suggestions() -> None:
    error = MissingHandlers(
        "get_user",
        missing=[NamedFailure(name="NotFound"), QualifiedFailure(module="errors", name="InvalidId")],
        loc=LOC,
    )

    diagnostic = error_to_diagnostic(error, Language.PYTHON)

    assert diagnostic.code is ErrorCode.MISSING_HANDLERS
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.message == (
        "Non-exhaustive match on `get_user`: missing NotFound, errors.InvalidId"
    )
    assert [(s.action, s.exception) for s in diagnostic.suggestions] == [
        ("add_handler", "NotFound"),
        ("add_handler", "errors.InvalidId"),
    ]
    assert (diagnostic.line, diagnostic.column) == (12, 4)
    assert (diagnostic.end_line, diagnostic.end_column) == (14, 9)


def test_extra_handlers_is_a_warning_with_capitalized_combinator() -> None:
    error = ExtraHandlers("get_user", extra=[NamedFailure(name="Unexpected")], loc=LOC)

    diagnostic = error_to_diagnostic(error, Language.TYPESCRIPT)

    assert diagnostic.code is ErrorCode.EXTRA_HANDLERS
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.message == (
        "Match() on `get_user` has handlers for undeclared exceptions: Unexpected"
    )
    assert diagnostic.suggestions[0].action == "remove_handler"


@pytest.mark.parametrize(
    ("error", "code", "case"),
    [
        (MissingOkHandler("f", loc=LOC), ErrorCode.MISSING_OK_HANDLER, "Ok"),
        (MissingSomeHandler("f", loc=LOC), ErrorCode.MISSING_SOME_HANDLER, "Some"),
        (MissingNothingHandler("f", loc=LOC), ErrorCode.MISSING_NOTHING_HANDLER, "Nothing"),
    ],
)
def test_missing_case_handlers(error: object, code: ErrorCode, case: str) -> None:
    diagnostic = error_to_diagnostic(error, Language.PYTHON)

    assert diagnostic.code is code
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.message == f"Match on `f` is missing handler for {case} case"
    assert [(s.action, s.exception) for s in diagnostic.suggestions] == [
        ("add_handler", case)
    ]


def test_unknown_function_uses_language_spelling() -> None:
    diagnostic = error_to_diagnostic(UnknownFunction("foo", loc=LOC), Language.JAVA)

    assert diagnostic.code is ErrorCode.UNKNOWN_FUNCTION
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.message == "Match.on() called on `foo` which has no @Raises signature"
    assert diagnostic.suggestions == []


def test_unhandled_result_and_option() -> None:
    result = error_to_diagnostic(UnhandledResult("get_user", loc=LOC))
    option = error_to_diagnostic(UnhandledOption("find", loc=LOC))

    assert result.code is ErrorCode.UNHANDLED_RESULT
    assert result.message == (
        "Result from `get_user` must be handled with match or match-case"
    )
    assert option.code is ErrorCode.UNHANDLED_OPTION
    assert option.message == "Option from `find` must be handled with match or match-case"
    assert [(s.action, s.exception) for s in option.suggestions] == [("add_match", None)]


def test_render_text() -> None:
    diagnostics = [
        error_to_diagnostic(UnhandledResult("get_user", loc=LOC)),
        error_to_diagnostic(UnknownFunction("foo", loc=LOC)),
    ]

    assert render_text(diagnostics).splitlines() == [
        "app.py:12:4: error [EXH007]: Result from `get_user` must be handled "
        "with match or match-case",
        "app.py:12:4: warning [EXH004]: match called on `foo` which has no "
        "@raises signature",
    ]
    assert render_text([]) == NO_ERRORS_MESSAGE


def test_render_json_uses_camel_case_span_keys() -> None:
    diagnostic = error_to_diagnostic(UnhandledResult("get_user", loc=LOC))

    payload = orjson.loads(render_json([diagnostic]))

    assert payload == {
        "diagnostics": [
            {
                "file": "app.py",
                "line": 12,
                "column": 4,
                "endLine": 14,
                "endColumn": 9,
                "severity": "error",
                "code": "EXH007",
                "message": "Result from `get_user` must be handled with match or match-case",
                "suggestions": [{"action": "add_match"}],
            }
        ]
    }
    assert orjson.loads(render_json([])) == {"diagnostics": []}


def test_has_errors_ignores_warnings() -> None:
    warning = error_to_diagnostic(UnknownFunction("foo", loc=LOC))
    error = error_to_diagnostic(MissingOkHandler("foo", loc=LOC))

    assert not has_errors([warning])
    assert has_errors([warning, error])
