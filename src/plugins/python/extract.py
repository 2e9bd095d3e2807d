"""Extract signatures, handling sites and unhandled calls from a Python module.

The extractor walks the decoded module once, in preorder, and threads an
``ExtractionContext`` through every visit. The context holds the only state that
outlives a single node:

- the names of functions known to carry a signature so far;
- an ordered list of call records, one per call to such a function;
- the latest binding of each variable to the call record that produced it;
- the innermost enclosing class, used to qualify method names.

Bindings and call records are global to the document rather than per scope: a
result may be bound in one block and matched in another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.models import (
    AnalysisInput,
    FunctionSignature,
    HandlingKind,
    HandlingSite,
    Language,
    Location,
    NamedFailure,
    QualifiedFailure,
    SignatureKind,
    UnhandledCallSite,
)
from contract.signatures import build_signature_table, lookup_signature
from plugins.python.syntax import (
    AnnAssign,
    Assert,
    Assign,
    AugAssign,
    Attribute,
    Await,
    BinOp,
    BoolOp,
    Call,
    ClassDef,
    Compare,
    Delete,
    Dict,
    DictComp,
    ExprStmt,
    For,
    FormattedValue,
    FunctionDef,
    GeneratorExp,
    If,
    IfExp,
    JoinedStr,
    Lambda,
    List,
    ListComp,
    Match,
    MatchAs,
    MatchClass,
    MatchOr,
    Name,
    NamedExpr,
    Raise,
    Return,
    Set,
    SetComp,
    Slice,
    Starred,
    Subscript,
    Try,
    Tuple,
    UnaryOp,
    While,
    With,
    Yield,
    YieldFrom,
    dotted_name,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from contract.models import FailureType
    from plugins.python.syntax import (
        Comprehension,
        Expr,
        MatchCase,
        Module,
        Pattern,
        Span,
        Stmt,
    )

logger = logging.getLogger(__name__)

RAISES_MARKERS = frozenset({"raises", "async_raises"})
OPTION_MARKERS = frozenset({"returns_option"})
MATCH_COMBINATORS = frozenset({"match", "async_match"})

OK_NAME = "Ok"
ERR_NAME = "Err"
SOME_NAME = "Some"
NOTHING_NAME = "Nothing"
_OUTCOME_NAMES = frozenset({OK_NAME, ERR_NAME, SOME_NAME, NOTHING_NAME})


@dataclass
class CallRecord:
    """One call to a signature-bearing function, in evaluation order."""

    func_name: str
    span: Span
    handled: bool = False


@dataclass(frozen=True)
class Binding:
    func_name: str
    call_index: int


@dataclass
class ExtractionContext:
    """Mutable traversal state for one module."""

    source_file: str
    known_names: set[str] = field(default_factory=set)
    signatures: list[FunctionSignature] = field(default_factory=list)
    sites: list[HandlingSite] = field(default_factory=list)
    calls: list[CallRecord] = field(default_factory=list)
    bindings: dict[str, Binding] = field(default_factory=dict)
    current_class: str | None = None

    def location(self, span: Span) -> Location:
        return Location(
            file=self.source_file,
            line=span.lineno,
            col=span.col_offset,
            end_line=span.end_lineno,
            end_col=span.end_col_offset,
        )

    def record_call(self, func_name: str, span: Span) -> None:
        self.calls.append(CallRecord(func_name=func_name, span=span))

    def bind(self, var_name: str, func_name: str) -> None:
        """Bind ``var_name`` to the most recently recorded call."""
        self.bindings[var_name] = Binding(
            func_name=func_name, call_index=len(self.calls) - 1
        )

    def unbind(self, var_name: str) -> None:
        self.bindings.pop(var_name, None)

    def mark_bound(self, var_name: str) -> CallRecord | None:
        binding = self.bindings.get(var_name)
        if binding is None:
            return None
        record = self.calls[binding.call_index]
        record.handled = True
        return record

    def mark_latest(self, func_name: str) -> CallRecord | None:
        for record in reversed(self.calls):
            if record.func_name == func_name:
                record.handled = True
                return record
        return None


# ---------------------------------------------------------------------------
# Failure types and markers
# ---------------------------------------------------------------------------


def failure_type_from_expr(expr: Expr) -> FailureType | None:
    """Convert ``NotFound`` / ``errors.NotFound`` references to failure types."""
    if isinstance(expr, Name):
        return NamedFailure(name=expr.id)
    if isinstance(expr, Attribute):
        module = dotted_name(expr.value)
        if module is None:
            return NamedFailure(name=expr.attr)
        return QualifiedFailure(module=module, name=expr.attr)
    return None


def _marker_name(decorator: Expr) -> str | None:
    target = decorator.func if isinstance(decorator, Call) else decorator
    if isinstance(target, Name):
        return target.id
    if isinstance(target, Attribute):
        return target.attr
    return None


def _signature_for(ctx: ExtractionContext, stmt: FunctionDef) -> FunctionSignature | None:
    markers = [(_marker_name(decorator), decorator) for decorator in stmt.decorator_list]
    raises = next((dec for name, dec in markers if name in RAISES_MARKERS), None)
    optional = any(name in OPTION_MARKERS for name, _ in markers)

    if raises is None and not optional:
        return None

    declared: list[FailureType] = []
    kind = SignatureKind.OPTION
    if raises is not None:
        kind = SignatureKind.RAISES
        if isinstance(raises, Call):
            for arg in raises.args:
                failure = failure_type_from_expr(arg)
                if failure is not None:
                    declared.append(failure)

    qualified_name = (
        f"{ctx.current_class}.{stmt.name}" if ctx.current_class is not None else None
    )
    return FunctionSignature(
        name=stmt.name,
        qualified_name=qualified_name,
        declared_exceptions=declared,
        loc=ctx.location(stmt.span),
        is_async=stmt.is_async,
        signature_type=kind,
    )


# ---------------------------------------------------------------------------
# Handled outcomes
# ---------------------------------------------------------------------------


@dataclass
class _Outcomes:
    handlers: list[FailureType] = field(default_factory=list)
    has_ok: bool = False
    has_some: bool = False
    has_nothing: bool = False

    def flag(self, name: str) -> bool:
        if name == OK_NAME:
            self.has_ok = True
        elif name == SOME_NAME:
            self.has_some = True
        elif name == NOTHING_NAME:
            self.has_nothing = True
        else:
            return False
        return True


def _alternatives(pattern: Pattern) -> list[Pattern]:
    """Strip ``as`` captures and split ``|`` alternatives."""
    if isinstance(pattern, MatchAs) and pattern.pattern is not None:
        return _alternatives(pattern.pattern)
    if isinstance(pattern, MatchOr):
        return [alt for inner in pattern.patterns for alt in _alternatives(inner)]
    return [pattern]


def _class_pattern_name(pattern: Pattern) -> str | None:
    if isinstance(pattern, MatchClass) and isinstance(pattern.cls, Name):
        return pattern.cls.id
    return None


def _outcomes_from_cases(cases: list[MatchCase]) -> _Outcomes:
    outcomes = _Outcomes()
    for case in cases:
        for pattern in _alternatives(case.pattern):
            name = _class_pattern_name(pattern)
            if name is None or outcomes.flag(name):
                continue
            if name != ERR_NAME or not isinstance(pattern, MatchClass):
                continue
            for inner in pattern.patterns:
                for alternative in _alternatives(inner):
                    if isinstance(alternative, MatchClass):
                        failure = failure_type_from_expr(alternative.cls)
                        if failure is not None:
                            outcomes.handlers.append(failure)
    return outcomes


def _outcomes_from_options(args: list[Expr]) -> _Outcomes:
    outcomes = _Outcomes()
    for arg in args:
        if not isinstance(arg, Dict):
            continue
        for key in arg.keys:
            if key is None:
                continue
            if isinstance(key, Name) and outcomes.flag(key.id):
                continue
            failure = failure_type_from_expr(key)
            if failure is not None:
                outcomes.handlers.append(failure)
    return outcomes


def _has_outcome_pattern(cases: list[MatchCase]) -> bool:
    return any(
        _class_pattern_name(pattern) in _OUTCOME_NAMES
        for case in cases
        for pattern in _alternatives(case.pattern)
    )


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def _visit_exprs(ctx: ExtractionContext, exprs: Iterable[Expr | None]) -> None:
    for expr in exprs:
        if expr is not None:
            _visit_expr(ctx, expr)


def _visit_generators(ctx: ExtractionContext, generators: list[Comprehension]) -> None:
    for generator in generators:
        _visit_expr(ctx, generator.iter)
        _visit_expr(ctx, generator.target)
        _visit_exprs(ctx, generator.ifs)


def _known_callee(ctx: ExtractionContext, expr: Expr) -> str | None:
    if not isinstance(expr, Call):
        return None
    name = dotted_name(expr.func)
    if name is not None and name in ctx.known_names:
        return name
    return None


def _visit_expr(ctx: ExtractionContext, expr: Expr) -> None:
    if isinstance(expr, Call):
        _visit_expr(ctx, expr.func)
        _visit_exprs(ctx, expr.args)
        _visit_exprs(ctx, (keyword.value for keyword in expr.keywords))
        callee = _known_callee(ctx, expr)
        if callee is not None:
            ctx.record_call(callee, expr.span)
    elif isinstance(expr, Attribute | Starred | Await | YieldFrom | FormattedValue):
        _visit_expr(ctx, expr.value)
    elif isinstance(expr, Subscript):
        _visit_expr(ctx, expr.value)
        _visit_expr(ctx, expr.slice)
    elif isinstance(expr, BinOp):
        _visit_expr(ctx, expr.left)
        _visit_expr(ctx, expr.right)
    elif isinstance(expr, Tuple | List | Set):
        _visit_exprs(ctx, expr.elts)
    elif isinstance(expr, BoolOp | JoinedStr):
        _visit_exprs(ctx, expr.values)
    elif isinstance(expr, Dict):
        _visit_exprs(ctx, expr.keys)
        _visit_exprs(ctx, expr.values)
    elif isinstance(expr, ListComp | SetComp | GeneratorExp):
        _visit_generators(ctx, expr.generators)
        _visit_expr(ctx, expr.elt)
    elif isinstance(expr, DictComp):
        _visit_generators(ctx, expr.generators)
        _visit_expr(ctx, expr.key)
        _visit_expr(ctx, expr.value)
    elif isinstance(expr, IfExp):
        _visit_expr(ctx, expr.test)
        _visit_expr(ctx, expr.body)
        _visit_expr(ctx, expr.orelse)
    elif isinstance(expr, Lambda):
        _visit_exprs(ctx, expr.args.defaults)
        _visit_exprs(ctx, expr.args.kw_defaults)
        _visit_expr(ctx, expr.body)
    elif isinstance(expr, UnaryOp):
        _visit_expr(ctx, expr.operand)
    elif isinstance(expr, Compare):
        _visit_expr(ctx, expr.left)
        _visit_exprs(ctx, expr.comparators)
    elif isinstance(expr, Yield):
        _visit_exprs(ctx, (expr.value,))
    elif isinstance(expr, NamedExpr):
        _visit_expr(ctx, expr.value)
        if isinstance(expr.target, Name):
            _bind_targets(ctx, [expr.target], expr.value)
    elif isinstance(expr, Slice):
        _visit_exprs(ctx, (expr.lower, expr.upper, expr.step))
    # Name, Constant and UnknownExpr carry no calls.


def _bind_targets(ctx: ExtractionContext, targets: list[Expr], value: Expr) -> None:
    """Bind simple variable targets to the call that produced ``value``.

    Rebinding a variable to anything else forgets the earlier producer.
    """
    callee = _known_callee(ctx, value)
    for target in targets:
        if not isinstance(target, Name):
            continue
        if callee is None:
            ctx.unbind(target.id)
        else:
            ctx.bind(target.id, callee)


def _functional_match(ctx: ExtractionContext, expr: Expr | None) -> None:
    """Record ``match(target, ...)({...})`` and ``async_match`` handling sites."""
    if isinstance(expr, Await):
        expr = expr.value
    if not isinstance(expr, Call) or not isinstance(expr.func, Call):
        return
    inner = expr.func
    if not isinstance(inner.func, Name) or inner.func.id not in MATCH_COMBINATORS:
        return
    if not inner.args:
        return

    target = inner.args[0]
    call_loc: Location | None = ctx.location(inner.span)
    if isinstance(target, Call):
        func_name = dotted_name(target.func)
        if func_name is not None:
            record = ctx.mark_latest(func_name)
            if record is not None:
                call_loc = ctx.location(record.span)
    else:
        func_name = dotted_name(target)
    if func_name is None:
        return

    outcomes = _outcomes_from_options(expr.args)
    ctx.sites.append(
        HandlingSite(
            func_name=func_name,
            handlers=outcomes.handlers,
            has_ok_handler=outcomes.has_ok,
            has_some_handler=outcomes.has_some,
            has_nothing_handler=outcomes.has_nothing,
            loc=ctx.location(expr.span),
            call_loc=call_loc,
            kind=HandlingKind.FUNCTION_CALL,
        )
    )


def _match_statement(ctx: ExtractionContext, stmt: Match) -> None:
    subject = stmt.subject
    func_name: str | None = None
    record: CallRecord | None = None

    if isinstance(subject, Name):
        binding = ctx.bindings.get(subject.id)
        if binding is not None:
            func_name = binding.func_name
            record = ctx.mark_bound(subject.id)
    elif isinstance(subject, Call):
        callee = dotted_name(subject.func)
        if callee is not None and (
            callee in ctx.known_names or _has_outcome_pattern(stmt.cases)
        ):
            func_name = callee
            record = ctx.mark_latest(callee)

    if func_name is None:
        return

    outcomes = _outcomes_from_cases(stmt.cases)
    ctx.sites.append(
        HandlingSite(
            func_name=func_name,
            handlers=outcomes.handlers,
            has_ok_handler=outcomes.has_ok,
            has_some_handler=outcomes.has_some,
            has_nothing_handler=outcomes.has_nothing,
            loc=ctx.location(stmt.span),
            call_loc=None if record is None else ctx.location(record.span),
            kind=HandlingKind.STATEMENT,
        )
    )


def _visit_body(ctx: ExtractionContext, body: list[Stmt]) -> None:
    for stmt in body:
        _visit_stmt(ctx, stmt)


def _visit_stmt(ctx: ExtractionContext, stmt: Stmt) -> None:  # noqa: C901
    if isinstance(stmt, FunctionDef):
        signature = _signature_for(ctx, stmt)
        if signature is not None:
            ctx.signatures.append(signature)
            ctx.known_names.add(signature.name)
        _visit_body(ctx, stmt.body)
    elif isinstance(stmt, ClassDef):
        _visit_exprs(ctx, stmt.decorator_list)
        _visit_exprs(ctx, stmt.bases)
        enclosing = ctx.current_class
        ctx.current_class = stmt.name
        try:
            _visit_body(ctx, stmt.body)
        finally:
            ctx.current_class = enclosing
    elif isinstance(stmt, Assign):
        _visit_expr(ctx, stmt.value)
        _bind_targets(ctx, stmt.targets, stmt.value)
        _functional_match(ctx, stmt.value)
    elif isinstance(stmt, AnnAssign):
        _visit_expr(ctx, stmt.annotation)
        if stmt.value is not None:
            _visit_expr(ctx, stmt.value)
            _bind_targets(ctx, [stmt.target], stmt.value)
            _functional_match(ctx, stmt.value)
    elif isinstance(stmt, Match):
        _visit_expr(ctx, stmt.subject)
        _match_statement(ctx, stmt)
        for case in stmt.cases:
            _visit_exprs(ctx, (case.guard,))
            _visit_body(ctx, case.body)
    elif isinstance(stmt, Return):
        _visit_exprs(ctx, (stmt.value,))
        _functional_match(ctx, stmt.value)
    elif isinstance(stmt, ExprStmt):
        _visit_expr(ctx, stmt.value)
        _functional_match(ctx, stmt.value)
    elif isinstance(stmt, If | While):
        _visit_expr(ctx, stmt.test)
        _visit_body(ctx, stmt.body)
        _visit_body(ctx, stmt.orelse)
    elif isinstance(stmt, For):
        _visit_expr(ctx, stmt.iter)
        _visit_expr(ctx, stmt.target)
        _visit_body(ctx, stmt.body)
        _visit_body(ctx, stmt.orelse)
    elif isinstance(stmt, With):
        for item in stmt.items:
            _visit_expr(ctx, item.context_expr)
            _visit_exprs(ctx, (item.optional_vars,))
        _visit_body(ctx, stmt.body)
    elif isinstance(stmt, Try):
        _visit_body(ctx, stmt.body)
        for handler in stmt.handlers:
            _visit_exprs(ctx, (handler.type,))
            _visit_body(ctx, handler.body)
        _visit_body(ctx, stmt.orelse)
        _visit_body(ctx, stmt.finalbody)
    elif isinstance(stmt, Raise):
        _visit_exprs(ctx, (stmt.exc, stmt.cause))
    elif isinstance(stmt, AugAssign):
        _visit_expr(ctx, stmt.target)
        _visit_expr(ctx, stmt.value)
    elif isinstance(stmt, Assert):
        _visit_exprs(ctx, (stmt.test, stmt.msg))
    elif isinstance(stmt, Delete):
        _visit_exprs(ctx, stmt.targets)
    # Imports, scope declarations, jumps and UnknownStmt carry no calls.


def _unhandled_calls(ctx: ExtractionContext) -> list[UnhandledCallSite]:
    table = build_signature_table(ctx.signatures)
    unhandled: list[UnhandledCallSite] = []
    for record in ctx.calls:
        if record.handled:
            continue
        signature = lookup_signature(table, record.func_name)
        unhandled.append(
            UnhandledCallSite(
                func_name=record.func_name,
                loc=ctx.location(record.span),
                signature_type=(
                    SignatureKind.RAISES
                    if signature is None
                    else signature.signature_type
                ),
            )
        )
    return unhandled


def extract_module(
    module: Module,
    source_file: str,
    external_signatures: Iterable[FunctionSignature] = (),
) -> AnalysisInput:
    """Run the extraction traversal over ``module``.

    Args:
        module: Decoded module tree.
        source_file: File identifier stamped on every location.
        external_signatures: Signatures declared outside this document. They are
            known from the start of the traversal and listed first in the output.

    Returns:
        AnalysisInput with signatures in definition order, handling sites in
        preorder, and every call record that no handling site claimed.
    """
    ctx = ExtractionContext(source_file=source_file)
    for signature in external_signatures:
        ctx.signatures.append(signature)
        ctx.known_names.add(signature.name)

    _visit_body(ctx, module.body)
    unhandled = _unhandled_calls(ctx)

    logger.debug(
        "Extracted %d signatures, %d handling sites, %d unhandled calls from %s",
        len(ctx.signatures),
        len(ctx.sites),
        len(unhandled),
        source_file,
    )
    return AnalysisInput(
        language=Language.PYTHON,
        signatures=ctx.signatures,
        matches=ctx.sites,
        unhandled_calls=unhandled,
    )


__all__ = [
    "Binding",
    "CallRecord",
    "ExtractionContext",
    "extract_module",
    "failure_type_from_expr",
]
