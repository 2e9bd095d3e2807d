from __future__ import annotations

import pytest

from checker.exhaustiveness import (
    ExtraHandlers,
    MissingHandlers,
    MissingNothingHandler,
    MissingOkHandler,
    MissingSomeHandler,
    UnhandledOption,
    UnhandledResult,
    UnknownFunction,
    check,
    check_input,
    difference,
    same_failure_type,
)
from contract.models import (
    NOTHING,
    OK,
    SOME,
    AnalysisInput,
    FailureType,
    FunctionSignature,
    HandlingKind,
    HandlingSite,
    Location,
    NamedFailure,
    QualifiedFailure,
    SignatureKind,
    UnhandledCallSite,
    UnionFailure,
)

NOT_FOUND = NamedFailure(name="NotFound")
INVALID_ID = NamedFailure(name="InvalidId")
UNEXPECTED = NamedFailure(name="Unexpected")


def _loc(line: int = 1) -> Location:
    return Location(file="app.py", line=line, col=4, end_line=line, end_col=20)


def _raises(name: str, *declared: FailureType) -> FunctionSignature:
    return FunctionSignature(
        name=name,
        declared_exceptions=list(declared),
        loc=_loc(),
        is_async=False,
    )


def _option(name: str) -> FunctionSignature:
    return FunctionSignature(
        name=name,
        loc=_loc(),
        is_async=False,
        signature_type=SignatureKind.OPTION,
    )


def _site(
    name: str,
    *handlers: FailureType,
    ok: bool = True,
    some: bool = False,
    nothing: bool = False,
    line: int = 10,
) -> HandlingSite:
    return HandlingSite(
        func_name=name,
        handlers=list(handlers),
        has_ok_handler=ok,
        has_some_handler=some,
        has_nothing_handler=nothing,
        loc=_loc(line),
        kind=HandlingKind.STATEMENT,
    )


def _unhandled(name: str, kind: SignatureKind, line: int = 20) -> UnhandledCallSite:
    return UnhandledCallSite(func_name=name, loc=_loc(line), signature_type=kind)


def test_full_coverage_yields_no_errors() -> None:
    signature = _raises("get_user", NOT_FOUND, INVALID_ID)

    assert check([signature], [_site("get_user", NOT_FOUND, INVALID_ID)]) == []


@pytest.mark.parametrize("removed", [NOT_FOUND, INVALID_ID])
def test_removing_one_handler_reports_exactly_that_handler(removed: FailureType) -> None:
    signature = _raises("get_user", NOT_FOUND, INVALID_ID)
    remaining = [f for f in (NOT_FOUND, INVALID_ID) if f != removed]

    errors = check([signature], [_site("get_user", *remaining)])

    assert len(errors) == 1
    assert isinstance(errors[0], MissingHandlers)
    assert errors[0].missing == [removed]


def test_missing_ok_reports_missing_ok_handler_only() -> None:
    signature = _raises("get_user", NOT_FOUND)

    errors = check([signature], [_site("get_user", NOT_FOUND, ok=False)])

    assert errors == [MissingOkHandler("get_user", loc=_loc(10))]


def test_scenario_missing_invalid_id() -> None:
    signature = _raises("get_user", NOT_FOUND, INVALID_ID)

    errors = check([signature], [_site("get_user", NOT_FOUND)])

    assert errors == [
        MissingHandlers("get_user", missing=[INVALID_ID], loc=_loc(10)),
    ]


def test_scenario_extra_unexpected_handler() -> None:
    signature = _raises("get_user", NOT_FOUND, INVALID_ID)

    errors = check(
        [signature], [_site("get_user", NOT_FOUND, INVALID_ID, UNEXPECTED)]
    )

    assert errors == [ExtraHandlers("get_user", extra=[UNEXPECTED], loc=_loc(10))]


def test_extra_handler_is_reported_alongside_other_findings() -> None:
    signature = _raises("get_user", NOT_FOUND, INVALID_ID)

    errors = check([signature], [_site("get_user", UNEXPECTED, ok=False)])

    assert [type(error) for error in errors] == [
        MissingOkHandler,
        MissingHandlers,
        ExtraHandlers,
    ]
    assert errors[1].missing == [NOT_FOUND, INVALID_ID]
    assert errors[2].extra == [UNEXPECTED]


def test_option_with_both_flags_and_no_handlers_is_clean() -> None:
    errors = check([_option("find")], [_site("find", ok=False, some=True, nothing=True)])

    assert errors == []


def test_scenario_option_missing_nothing() -> None:
    errors = check([_option("find")], [_site("find", ok=False, some=True)])

    assert errors == [MissingNothingHandler("find", loc=_loc(10))]


def test_option_missing_some() -> None:
    errors = check([_option("find")], [_site("find", ok=False, nothing=True)])

    assert errors == [MissingSomeHandler("find", loc=_loc(10))]


def test_option_with_handlers_always_reports_extra() -> None:
    site = _site("find", NOT_FOUND, SOME, ok=False, some=True, nothing=True)

    errors = check([_option("find")], [site])

    assert errors == [ExtraHandlers("find", extra=[NOT_FOUND, SOME], loc=_loc(10))]


def test_option_site_findings_are_ordered() -> None:
    site = _site("find", NOTHING, ok=False)

    errors = check([_option("find")], [site])

    assert errors == [
        MissingSomeHandler("find", loc=_loc(10)),
        MissingNothingHandler("find", loc=_loc(10)),
        ExtraHandlers("find", extra=[NOTHING], loc=_loc(10)),
    ]


def test_option_ignores_ok_flag() -> None:
    errors = check([_option("find")], [_site("find", ok=True, some=True, nothing=True)])

    assert errors == []


def test_scenario_unknown_function_reports_only_unknown() -> None:
    errors = check(
        [_raises("get_user", NOT_FOUND)],
        [_site("foo", NOT_FOUND, UNEXPECTED, ok=False)],
    )

    assert errors == [UnknownFunction("foo", loc=_loc(10))]


@pytest.mark.parametrize(
    ("kind", "expected_type"),
    [
        (SignatureKind.RAISES, UnhandledResult),
        (SignatureKind.OPTION, UnhandledOption),
    ],
)
def test_unhandled_call_maps_by_recorded_kind(
    kind: SignatureKind, expected_type: type
) -> None:
    # The recorded kind wins even when the signature table disagrees.
    errors = check([_option("get_user")], [], [_unhandled("get_user", kind)])

    assert len(errors) == 1
    assert isinstance(errors[0], expected_type)
    assert errors[0].func_name == "get_user"


def test_qualified_declared_satisfied_by_bare_name() -> None:
    signature = _raises("get_user", QualifiedFailure(module="errors", name="NotFound"))

    assert check([signature], [_site("get_user", NOT_FOUND)]) == []


def test_bare_declared_satisfied_by_qualified_name() -> None:
    signature = _raises("get_user", NOT_FOUND)
    handled = QualifiedFailure(module="app.errors", name="NotFound")

    assert check([signature], [_site("get_user", handled)]) == []


def test_differently_qualified_types_are_interchangeable() -> None:
    signature = _raises("get_user", QualifiedFailure(module="errors", name="NotFound"))
    handled = QualifiedFailure(module="other", name="NotFound")

    assert check([signature], [_site("get_user", handled)]) == []


def test_site_errors_precede_unhandled_errors() -> None:
    errors = check(
        [_raises("get_user", NOT_FOUND)],
        [_site("get_user", ok=False)],
        [_unhandled("get_user", SignatureKind.RAISES, line=2)],
    )

    assert [type(error) for error in errors] == [
        MissingOkHandler,
        MissingHandlers,
        UnhandledResult,
    ]


def test_identical_sites_are_not_deduplicated() -> None:
    signature = _raises("get_user", NOT_FOUND)

    errors = check([signature], [_site("get_user"), _site("get_user")])

    assert len(errors) == 2
    assert all(isinstance(error, MissingHandlers) for error in errors)


def test_duplicate_handlers_use_set_semantics() -> None:
    signature = _raises("get_user", NOT_FOUND)

    assert check([signature], [_site("get_user", NOT_FOUND, NOT_FOUND)]) == []

    errors = check([signature], [_site("get_user", NOT_FOUND, UNEXPECTED, UNEXPECTED)])
    assert errors == [ExtraHandlers("get_user", extra=[UNEXPECTED], loc=_loc(10))]


def test_last_signature_with_same_name_wins() -> None:
    first = _raises("get_user", NOT_FOUND)
    second = _option("get_user")

    errors = check([first, second], [_site("get_user", ok=False, some=True, nothing=True)])

    assert errors == []


def test_call_loc_is_carried_on_site_errors() -> None:
    call_loc = _loc(9)
    site = HandlingSite(
        func_name="get_user",
        has_ok_handler=False,
        loc=_loc(10),
        call_loc=call_loc,
        kind=HandlingKind.FUNCTION_CALL,
    )

    errors = check([_raises("get_user")], [site])

    assert errors == [MissingOkHandler("get_user", loc=_loc(10), call_loc=call_loc)]


def test_check_input_does_not_mutate_analysis() -> None:
    analysis = AnalysisInput(
        signatures=[_raises("get_user", NOT_FOUND)],
        matches=[_site("get_user")],
        unhandled_calls=[_unhandled("get_user", SignatureKind.RAISES)],
    )
    before = analysis.model_dump()

    first = check_input(analysis)
    second = check_input(analysis)

    assert first == second
    assert analysis.model_dump() == before


def test_same_failure_type_rules() -> None:
    union = UnionFailure(types=[NOT_FOUND, INVALID_ID])

    assert same_failure_type(OK, OK)
    assert same_failure_type(union, UnionFailure(types=[NOT_FOUND, INVALID_ID]))
    assert not same_failure_type(union, UnionFailure(types=[INVALID_ID, NOT_FOUND]))
    assert not same_failure_type(NOT_FOUND, INVALID_ID)
    assert not same_failure_type(SOME, NOTHING)
    assert not same_failure_type(NamedFailure(name="Ok"), OK)


def test_difference_accepts_custom_comparator() -> None:
    qualified = QualifiedFailure(module="errors", name="NotFound")

    assert difference([qualified], [NOT_FOUND]) == []
    assert difference([qualified], [NOT_FOUND], same=lambda a, b: a == b) == [qualified]
