"""Exhaustiveness checking over a canonical Analysis Input.

``check`` is a pure function: it never mutates its inputs and cannot fail on
well-formed models. Handling-site errors come first, in handling-site order,
followed by one error per unhandled call, in input order. Within a site the order
is MissingOkHandler, MissingHandlers, ExtraHandlers for results and
MissingSomeHandler, MissingNothingHandler, ExtraHandlers for options.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.models import (
    NOTHING,
    OK,
    SOME,
    NamedFailure,
    OkMarker,
    QualifiedFailure,
    SignatureKind,
    SomeMarker,
)
from contract.signatures import build_signature_table, lookup_signature

if TYPE_CHECKING:
    from contract.models import (
        AnalysisInput,
        FailureType,
        FunctionSignature,
        HandlingSite,
        Location,
        UnhandledCallSite,
    )

FailureComparator = Callable[["FailureType", "FailureType"], bool]


@dataclass(frozen=True)
class MissingHandlers:
    func_name: str
    missing: list[FailureType]
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class ExtraHandlers:
    func_name: str
    extra: list[FailureType]
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class MissingOkHandler:
    func_name: str
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class MissingSomeHandler:
    func_name: str
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class MissingNothingHandler:
    func_name: str
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class UnknownFunction:
    func_name: str
    loc: Location
    call_loc: Location | None = None


@dataclass(frozen=True)
class UnhandledResult:
    func_name: str
    loc: Location


@dataclass(frozen=True)
class UnhandledOption:
    func_name: str
    loc: Location


CheckError = (
    MissingHandlers
    | ExtraHandlers
    | MissingOkHandler
    | MissingSomeHandler
    | MissingNothingHandler
    | UnknownFunction
    | UnhandledResult
    | UnhandledOption
)


def _terminal_name(failure: FailureType) -> str | None:
    if isinstance(failure, NamedFailure | QualifiedFailure):
        return failure.name
    return None


def same_failure_type(left: FailureType, right: FailureType) -> bool:
    """Lenient identity for failure types.

    Names and qualified names compare by terminal name only, so
    ``errors.NotFound`` and ``NotFound`` are the same type. Every other pair
    needs structural equality.
    """
    left_name = _terminal_name(left)
    right_name = _terminal_name(right)
    if left_name is not None and right_name is not None:
        return left_name == right_name
    return left == right


def _contains(items: Iterable[FailureType], item: FailureType, same: FailureComparator) -> bool:
    return any(same(item, candidate) for candidate in items)


def difference(
    left: Iterable[FailureType],
    right: Iterable[FailureType],
    same: FailureComparator = same_failure_type,
) -> list[FailureType]:
    """Members of ``left`` with no counterpart in ``right``.

    Set semantics under ``same``: duplicates in ``left`` are reported once, at
    their first position.
    """
    right_items = list(right)
    result: list[FailureType] = []
    for item in left:
        if _contains(right_items, item, same) or _contains(result, item, same):
            continue
        result.append(item)
    return result


@dataclass
class _SiteCheck:
    site: HandlingSite
    errors: list[CheckError] = field(default_factory=list)

    def check_raises(self, signature: FunctionSignature) -> None:
        site = self.site
        required = [*signature.declared_exceptions, OK]
        provided = [*site.handlers, OK] if site.has_ok_handler else list(site.handlers)

        if not site.has_ok_handler:
            self.errors.append(
                MissingOkHandler(site.func_name, loc=site.loc, call_loc=site.call_loc)
            )

        missing = [
            failure
            for failure in difference(required, provided)
            if not isinstance(failure, OkMarker)
        ]
        if missing:
            self.errors.append(
                MissingHandlers(
                    site.func_name, missing=missing, loc=site.loc, call_loc=site.call_loc
                )
            )

        extra = difference(provided, required)
        if extra:
            self.errors.append(
                ExtraHandlers(
                    site.func_name, extra=extra, loc=site.loc, call_loc=site.call_loc
                )
            )

    def check_option(self) -> None:
        site = self.site
        provided = [
            marker
            for marker, present in (
                (SOME, site.has_some_handler),
                (NOTHING, site.has_nothing_handler),
            )
            if present
        ]
        for marker in difference([SOME, NOTHING], provided):
            if isinstance(marker, SomeMarker):
                error: CheckError = MissingSomeHandler(
                    site.func_name, loc=site.loc, call_loc=site.call_loc
                )
            else:
                error = MissingNothingHandler(
                    site.func_name, loc=site.loc, call_loc=site.call_loc
                )
            self.errors.append(error)
        # Options carry no failure types, so every handler entry is extra.
        if site.handlers:
            self.errors.append(
                ExtraHandlers(
                    site.func_name,
                    extra=list(site.handlers),
                    loc=site.loc,
                    call_loc=site.call_loc,
                )
            )


def check(
    signatures: Iterable[FunctionSignature],
    matches: Iterable[HandlingSite],
    unhandled_calls: Iterable[UnhandledCallSite] = (),
) -> list[CheckError]:
    table = build_signature_table(signatures)
    errors: list[CheckError] = []

    for site in matches:
        signature = lookup_signature(table, site.func_name)
        if signature is None:
            errors.append(
                UnknownFunction(site.func_name, loc=site.loc, call_loc=site.call_loc)
            )
            continue

        site_check = _SiteCheck(site)
        if signature.signature_type is SignatureKind.OPTION:
            site_check.check_option()
        else:
            site_check.check_raises(signature)
        errors.extend(site_check.errors)

    for call in unhandled_calls:
        if call.signature_type is SignatureKind.OPTION:
            errors.append(UnhandledOption(call.func_name, loc=call.loc))
        else:
            errors.append(UnhandledResult(call.func_name, loc=call.loc))

    return errors


def check_input(analysis: AnalysisInput) -> list[CheckError]:
    return check(analysis.signatures, analysis.matches, analysis.unhandled_calls)


__all__ = [
    "CheckError",
    "ExtraHandlers",
    "MissingHandlers",
    "MissingNothingHandler",
    "MissingOkHandler",
    "MissingSomeHandler",
    "UnhandledOption",
    "UnhandledResult",
    "UnknownFunction",
    "check",
    "check_input",
    "difference",
    "same_failure_type",
]
