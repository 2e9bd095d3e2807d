"""Decode a tagged Python AST document into the typed syntax model.

The document is the JSON rendering of Python's ``ast`` tree: every node is an
object whose ``_type`` field names the node class, with the node's fields and
optional ``lineno``/``col_offset``/``end_lineno``/``end_col_offset`` positions.

Decoding never gives up on a single malformed subtree:

- unrecognized ``_type`` tags, and node slots holding ``null`` or a scalar, become
  ``UnknownExpr``/``UnknownStmt``/``UnknownPattern`` placeholders;
- missing positions default to the enclosing node's start;
- missing or non-list list fields are empty, and non-object entries of helper
  lists (keywords, handlers, cases, ...) are dropped.

Only a non-object document, a module without a ``body`` list, and the
always-required ``arg`` and ``alias`` names raise ``DecodeError`` with the path of
the offending value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from contract.errors import DecodeError
from plugins.python.syntax import (
    ROOT_SPAN,
    Alias,
    AnnAssign,
    Arg,
    Arguments,
    Assert,
    Assign,
    Attribute,
    AugAssign,
    Await,
    BinOp,
    BoolOp,
    Break,
    Call,
    ClassDef,
    Compare,
    Comprehension,
    Constant,
    Continue,
    Delete,
    Dict,
    DictComp,
    ExceptHandler,
    ExprStmt,
    For,
    FormattedValue,
    FunctionDef,
    GeneratorExp,
    Global,
    If,
    IfExp,
    Import,
    ImportFrom,
    JoinedStr,
    Keyword,
    Lambda,
    List,
    ListComp,
    Match,
    MatchAs,
    MatchCase,
    MatchClass,
    MatchMapping,
    MatchOr,
    MatchSequence,
    MatchSingleton,
    MatchStar,
    MatchValue,
    Module,
    Name,
    NamedExpr,
    Nonlocal,
    OtherConstant,
    Pass,
    Raise,
    Return,
    Set,
    SetComp,
    Slice,
    Span,
    Starred,
    Subscript,
    Try,
    Tuple,
    UnaryOp,
    UnknownExpr,
    UnknownPattern,
    UnknownStmt,
    While,
    With,
    WithItem,
    Yield,
    YieldFrom,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from plugins.python.syntax import ConstantValue, Expr, Pattern, Stmt

logger = logging.getLogger(__name__)

TYPE_FIELD = "_type"

_OTHER_CONSTANT = OtherConstant()


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------


def _join(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else key


def _as_object(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        msg = f"expected object, got {type(value).__name__}"
        raise DecodeError(msg, path)
    return value


def _log_placeholder(value: Any, path: str) -> None:
    logger.debug(
        "Placeholder for %s: expected object, got %s", path, type(value).__name__
    )


def _node_type(data: dict[str, Any]) -> str | None:
    tag = data.get(TYPE_FIELD)
    return tag if isinstance(tag, str) else None


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


def _span(data: dict[str, Any], parent: Span) -> Span:
    lineno = _int_or_none(data.get("lineno"))
    col_offset = _int_or_none(data.get("col_offset"))
    if lineno is None:
        lineno = parent.lineno
    if col_offset is None:
        col_offset = parent.col_offset
    end_lineno = _int_or_none(data.get("end_lineno"))
    end_col_offset = _int_or_none(data.get("end_col_offset"))
    return Span(
        lineno=lineno,
        col_offset=col_offset,
        end_lineno=lineno if end_lineno is None else end_lineno,
        end_col_offset=col_offset if end_col_offset is None else end_col_offset,
    )


def _str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _required_str(data: dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        msg = f"missing required field '{key}'"
        raise DecodeError(msg, path)
    return value


def _list(data: dict[str, Any], key: str, path: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.debug(
            "Ignoring %s: expected list, got %s",
            _join(path, key),
            type(value).__name__,
        )
        return []
    return value


def _objects(
    data: dict[str, Any], key: str, path: str
) -> list[tuple[str, dict[str, Any]]]:
    """Object entries of a helper list with their paths; other entries are dropped."""
    base = _join(path, key)
    return [
        (_join(base, index), item)
        for index, item in enumerate(_list(data, key, path))
        if isinstance(item, dict)
    ]


def _expr(data: dict[str, Any], key: str, span: Span, path: str) -> Expr:
    value = data.get(key)
    if value is None:
        return UnknownExpr(span=span)
    return parse_expr(value, span, _join(path, key))


def _opt_expr(data: dict[str, Any], key: str, span: Span, path: str) -> Expr | None:
    value = data.get(key)
    if value is None:
        return None
    return parse_expr(value, span, _join(path, key))


def _exprs(data: dict[str, Any], key: str, span: Span, path: str) -> list[Expr]:
    base = _join(path, key)
    return [
        parse_expr(item, span, _join(base, index))
        for index, item in enumerate(_list(data, key, path))
    ]


def _opt_exprs(
    data: dict[str, Any], key: str, span: Span, path: str
) -> list[Expr | None]:
    base = _join(path, key)
    return [
        None if item is None else parse_expr(item, span, _join(base, index))
        for index, item in enumerate(_list(data, key, path))
    ]


def _stmts(data: dict[str, Any], key: str, span: Span, path: str) -> list[Stmt]:
    base = _join(path, key)
    return [
        parse_stmt(item, span, _join(base, index))
        for index, item in enumerate(_list(data, key, path))
    ]


def _patterns(data: dict[str, Any], key: str, span: Span, path: str) -> list[Pattern]:
    base = _join(path, key)
    return [
        parse_pattern(item, span, _join(base, index))
        for index, item in enumerate(_list(data, key, path))
    ]


def _constant_value(value: Any) -> ConstantValue:
    if value is None or isinstance(value, str | bool | int | float):
        return value
    if isinstance(value, dict):
        tag = _node_type(value)
        payload = value.get("value")
        if tag == "bytes" and isinstance(payload, str):
            return payload.encode("latin-1")
        if tag == "Ellipsis":
            return ...
    return _OTHER_CONSTANT


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


def _keyword(data: dict[str, Any], parent: Span, path: str) -> Keyword:
    return Keyword(arg=_str(data, "arg"), value=_expr(data, "value", parent, path))


def _comprehension(data: dict[str, Any], parent: Span, path: str) -> Comprehension:
    return Comprehension(
        target=_expr(data, "target", parent, path),
        iter=_expr(data, "iter", parent, path),
        ifs=_exprs(data, "ifs", parent, path),
        is_async=bool(data.get("is_async")),
    )


def _generators(data: dict[str, Any], span: Span, path: str) -> list[Comprehension]:
    return [
        _comprehension(item, span, item_path)
        for item_path, item in _objects(data, "generators", path)
    ]


def _parse_name(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Name(id=_str(data, "id") or "", span=span)


def _parse_attribute(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Attribute(
        value=_expr(data, "value", span, path),
        attr=_str(data, "attr") or "",
        span=span,
    )


def _parse_call(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Call(
        func=_expr(data, "func", span, path),
        args=_exprs(data, "args", span, path),
        keywords=[
            _keyword(item, span, item_path)
            for item_path, item in _objects(data, "keywords", path)
        ],
        span=span,
    )


def _parse_constant(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Constant(value=_constant_value(data.get("value")), span=span)


def _parse_subscript(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Subscript(
        value=_expr(data, "value", span, path),
        slice=_expr(data, "slice", span, path),
        span=span,
    )


def _parse_binop(data: dict[str, Any], span: Span, path: str) -> Expr:
    return BinOp(
        left=_expr(data, "left", span, path),
        right=_expr(data, "right", span, path),
        span=span,
    )


def _parse_tuple(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Tuple(elts=_exprs(data, "elts", span, path), span=span)


def _parse_list(data: dict[str, Any], span: Span, path: str) -> Expr:
    return List(elts=_exprs(data, "elts", span, path), span=span)


def _parse_set(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Set(elts=_exprs(data, "elts", span, path), span=span)


def _parse_dict(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Dict(
        keys=_opt_exprs(data, "keys", span, path),
        values=_exprs(data, "values", span, path),
        span=span,
    )


def _parse_listcomp(data: dict[str, Any], span: Span, path: str) -> Expr:
    return ListComp(
        elt=_expr(data, "elt", span, path),
        generators=_generators(data, span, path),
        span=span,
    )


def _parse_setcomp(data: dict[str, Any], span: Span, path: str) -> Expr:
    return SetComp(
        elt=_expr(data, "elt", span, path),
        generators=_generators(data, span, path),
        span=span,
    )


def _parse_generatorexp(data: dict[str, Any], span: Span, path: str) -> Expr:
    return GeneratorExp(
        elt=_expr(data, "elt", span, path),
        generators=_generators(data, span, path),
        span=span,
    )


def _parse_dictcomp(data: dict[str, Any], span: Span, path: str) -> Expr:
    return DictComp(
        key=_expr(data, "key", span, path),
        value=_expr(data, "value", span, path),
        generators=_generators(data, span, path),
        span=span,
    )


def _parse_ifexp(data: dict[str, Any], span: Span, path: str) -> Expr:
    return IfExp(
        test=_expr(data, "test", span, path),
        body=_expr(data, "body", span, path),
        orelse=_expr(data, "orelse", span, path),
        span=span,
    )


def _parse_lambda(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Lambda(
        args=_arguments(data.get("args"), span, _join(path, "args")),
        body=_expr(data, "body", span, path),
        span=span,
    )


def _parse_unaryop(data: dict[str, Any], span: Span, path: str) -> Expr:
    return UnaryOp(operand=_expr(data, "operand", span, path), span=span)


def _parse_compare(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Compare(
        left=_expr(data, "left", span, path),
        comparators=_exprs(data, "comparators", span, path),
        span=span,
    )


def _parse_boolop(data: dict[str, Any], span: Span, path: str) -> Expr:
    return BoolOp(values=_exprs(data, "values", span, path), span=span)


def _parse_starred(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Starred(value=_expr(data, "value", span, path), span=span)


def _parse_await(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Await(value=_expr(data, "value", span, path), span=span)


def _parse_yield(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Yield(value=_opt_expr(data, "value", span, path), span=span)


def _parse_yieldfrom(data: dict[str, Any], span: Span, path: str) -> Expr:
    return YieldFrom(value=_expr(data, "value", span, path), span=span)


def _parse_joinedstr(data: dict[str, Any], span: Span, path: str) -> Expr:
    return JoinedStr(values=_exprs(data, "values", span, path), span=span)


def _parse_formattedvalue(data: dict[str, Any], span: Span, path: str) -> Expr:
    return FormattedValue(value=_expr(data, "value", span, path), span=span)


def _parse_namedexpr(data: dict[str, Any], span: Span, path: str) -> Expr:
    return NamedExpr(
        target=_expr(data, "target", span, path),
        value=_expr(data, "value", span, path),
        span=span,
    )


def _parse_slice(data: dict[str, Any], span: Span, path: str) -> Expr:
    return Slice(
        lower=_opt_expr(data, "lower", span, path),
        upper=_opt_expr(data, "upper", span, path),
        step=_opt_expr(data, "step", span, path),
        span=span,
    )


_EXPR_BUILDERS: dict[str, Callable[[dict[str, Any], Span, str], Expr]] = {
    "Name": _parse_name,
    "Attribute": _parse_attribute,
    "Call": _parse_call,
    "Constant": _parse_constant,
    "Subscript": _parse_subscript,
    "BinOp": _parse_binop,
    "Tuple": _parse_tuple,
    "List": _parse_list,
    "Set": _parse_set,
    "Dict": _parse_dict,
    "ListComp": _parse_listcomp,
    "SetComp": _parse_setcomp,
    "GeneratorExp": _parse_generatorexp,
    "DictComp": _parse_dictcomp,
    "IfExp": _parse_ifexp,
    "Lambda": _parse_lambda,
    "UnaryOp": _parse_unaryop,
    "Compare": _parse_compare,
    "BoolOp": _parse_boolop,
    "Starred": _parse_starred,
    "Await": _parse_await,
    "Yield": _parse_yield,
    "YieldFrom": _parse_yieldfrom,
    "JoinedStr": _parse_joinedstr,
    "FormattedValue": _parse_formattedvalue,
    "NamedExpr": _parse_namedexpr,
    "Slice": _parse_slice,
}


def parse_expr(value: Any, parent: Span, path: str) -> Expr:
    """Decode one expression; unknown tags and non-objects become ``UnknownExpr``."""
    if not isinstance(value, dict):
        _log_placeholder(value, path)
        return UnknownExpr(span=parent)
    data = value
    span = _span(data, parent)
    node_type = _node_type(data)
    builder = _EXPR_BUILDERS.get(node_type) if node_type else None
    if builder is None:
        return UnknownExpr(span=span, node_type=node_type)
    return builder(data, span, path)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


def _parse_match_value(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchValue(value=_expr(data, "value", span, path), span=span)


def _parse_match_singleton(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchSingleton(value=_constant_value(data.get("value")), span=span)


def _parse_match_sequence(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchSequence(patterns=_patterns(data, "patterns", span, path), span=span)


def _parse_match_mapping(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchMapping(
        keys=_exprs(data, "keys", span, path),
        patterns=_patterns(data, "patterns", span, path),
        rest=_str(data, "rest"),
        span=span,
    )


def _parse_match_class(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchClass(
        cls=_expr(data, "cls", span, path),
        patterns=_patterns(data, "patterns", span, path),
        kwd_attrs=[
            item for item in _list(data, "kwd_attrs", path) if isinstance(item, str)
        ],
        kwd_patterns=_patterns(data, "kwd_patterns", span, path),
        span=span,
    )


def _parse_match_star(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchStar(name=_str(data, "name"), span=span)


def _parse_match_as(data: dict[str, Any], span: Span, path: str) -> Pattern:
    inner = data.get("pattern")
    return MatchAs(
        pattern=(
            None if inner is None else parse_pattern(inner, span, _join(path, "pattern"))
        ),
        name=_str(data, "name"),
        span=span,
    )


def _parse_match_or(data: dict[str, Any], span: Span, path: str) -> Pattern:
    return MatchOr(patterns=_patterns(data, "patterns", span, path), span=span)


_PATTERN_BUILDERS: dict[str, Callable[[dict[str, Any], Span, str], Pattern]] = {
    "MatchValue": _parse_match_value,
    "MatchSingleton": _parse_match_singleton,
    "MatchSequence": _parse_match_sequence,
    "MatchMapping": _parse_match_mapping,
    "MatchClass": _parse_match_class,
    "MatchStar": _parse_match_star,
    "MatchAs": _parse_match_as,
    "MatchOr": _parse_match_or,
}


def parse_pattern(value: Any, parent: Span, path: str) -> Pattern:
    """Decode one pattern; unknown tags and non-objects become ``UnknownPattern``."""
    if not isinstance(value, dict):
        _log_placeholder(value, path)
        return UnknownPattern(span=parent)
    data = value
    span = _span(data, parent)
    node_type = _node_type(data)
    builder = _PATTERN_BUILDERS.get(node_type) if node_type else None
    if builder is None:
        return UnknownPattern(span=span, node_type=node_type)
    return builder(data, span, path)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def _arg(data: dict[str, Any], parent: Span, path: str) -> Arg:
    span = _span(data, parent)
    return Arg(
        arg=_required_str(data, "arg", path),
        annotation=_opt_expr(data, "annotation", span, path),
        span=span,
    )


def _opt_arg(data: dict[str, Any], key: str, parent: Span, path: str) -> Arg | None:
    value = data.get(key)
    if not isinstance(value, dict):
        return None
    return _arg(value, parent, _join(path, key))


def _args(data: dict[str, Any], key: str, parent: Span, path: str) -> list[Arg]:
    return [
        _arg(item, parent, item_path) for item_path, item in _objects(data, key, path)
    ]


def _arguments(value: Any, parent: Span, path: str) -> Arguments:
    if not isinstance(value, dict):
        return Arguments()
    data = value
    return Arguments(
        posonlyargs=_args(data, "posonlyargs", parent, path),
        args=_args(data, "args", parent, path),
        vararg=_opt_arg(data, "vararg", parent, path),
        kwonlyargs=_args(data, "kwonlyargs", parent, path),
        kw_defaults=_opt_exprs(data, "kw_defaults", parent, path),
        kwarg=_opt_arg(data, "kwarg", parent, path),
        defaults=_exprs(data, "defaults", parent, path),
    )


def _withitems(data: dict[str, Any], span: Span, path: str) -> list[WithItem]:
    items: list[WithItem] = []
    for item_path, item in _objects(data, "items", path):
        items.append(
            WithItem(
                context_expr=_expr(item, "context_expr", span, item_path),
                optional_vars=_opt_expr(item, "optional_vars", span, item_path),
            )
        )
    return items


def _excepthandlers(data: dict[str, Any], span: Span, path: str) -> list[ExceptHandler]:
    handlers: list[ExceptHandler] = []
    for handler_path, handler in _objects(data, "handlers", path):
        handler_span = _span(handler, span)
        handlers.append(
            ExceptHandler(
                type=_opt_expr(handler, "type", handler_span, handler_path),
                name=_str(handler, "name"),
                body=_stmts(handler, "body", handler_span, handler_path),
                span=handler_span,
            )
        )
    return handlers


def _aliases(data: dict[str, Any], path: str) -> list[Alias]:
    aliases: list[Alias] = []
    for alias_path, alias in _objects(data, "names", path):
        aliases.append(
            Alias(
                name=_required_str(alias, "name", alias_path),
                asname=_str(alias, "asname"),
            )
        )
    return aliases


def _match_cases(data: dict[str, Any], span: Span, path: str) -> list[MatchCase]:
    cases: list[MatchCase] = []
    for case_path, case in _objects(data, "cases", path):
        pattern_value = case.get("pattern")
        cases.append(
            MatchCase(
                pattern=(
                    UnknownPattern(span=span)
                    if pattern_value is None
                    else parse_pattern(pattern_value, span, _join(case_path, "pattern"))
                ),
                guard=_opt_expr(case, "guard", span, case_path),
                body=_stmts(case, "body", span, case_path),
            )
        )
    return cases


def _parse_function_def(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return FunctionDef(
        name=_str(data, "name") or "",
        args=_arguments(data.get("args"), span, _join(path, "args")),
        body=_stmts(data, "body", span, path),
        decorator_list=_exprs(data, "decorator_list", span, path),
        returns=_opt_expr(data, "returns", span, path),
        is_async=_node_type(data) == "AsyncFunctionDef",
        span=span,
    )


def _parse_class_def(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return ClassDef(
        name=_str(data, "name") or "",
        bases=_exprs(data, "bases", span, path),
        keywords=[
            _keyword(item, span, item_path)
            for item_path, item in _objects(data, "keywords", path)
        ],
        body=_stmts(data, "body", span, path),
        decorator_list=_exprs(data, "decorator_list", span, path),
        span=span,
    )


def _parse_return(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Return(value=_opt_expr(data, "value", span, path), span=span)


def _parse_assign(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Assign(
        targets=_exprs(data, "targets", span, path),
        value=_expr(data, "value", span, path),
        span=span,
    )


def _parse_ann_assign(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return AnnAssign(
        target=_expr(data, "target", span, path),
        annotation=_expr(data, "annotation", span, path),
        value=_opt_expr(data, "value", span, path),
        span=span,
    )


def _parse_aug_assign(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return AugAssign(
        target=_expr(data, "target", span, path),
        value=_expr(data, "value", span, path),
        span=span,
    )


def _parse_for(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return For(
        target=_expr(data, "target", span, path),
        iter=_expr(data, "iter", span, path),
        body=_stmts(data, "body", span, path),
        orelse=_stmts(data, "orelse", span, path),
        is_async=_node_type(data) == "AsyncFor",
        span=span,
    )


def _parse_while(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return While(
        test=_expr(data, "test", span, path),
        body=_stmts(data, "body", span, path),
        orelse=_stmts(data, "orelse", span, path),
        span=span,
    )


def _parse_if(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return If(
        test=_expr(data, "test", span, path),
        body=_stmts(data, "body", span, path),
        orelse=_stmts(data, "orelse", span, path),
        span=span,
    )


def _parse_with(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return With(
        items=_withitems(data, span, path),
        body=_stmts(data, "body", span, path),
        is_async=_node_type(data) == "AsyncWith",
        span=span,
    )


def _parse_match(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Match(
        subject=_expr(data, "subject", span, path),
        cases=_match_cases(data, span, path),
        span=span,
    )


def _parse_raise(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Raise(
        exc=_opt_expr(data, "exc", span, path),
        cause=_opt_expr(data, "cause", span, path),
        span=span,
    )


def _parse_try(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Try(
        body=_stmts(data, "body", span, path),
        handlers=_excepthandlers(data, span, path),
        orelse=_stmts(data, "orelse", span, path),
        finalbody=_stmts(data, "finalbody", span, path),
        is_star=_node_type(data) == "TryStar",
        span=span,
    )


def _parse_assert(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Assert(
        test=_expr(data, "test", span, path),
        msg=_opt_expr(data, "msg", span, path),
        span=span,
    )


def _parse_import(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Import(names=_aliases(data, path), span=span)


def _parse_import_from(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return ImportFrom(
        module=_str(data, "module"),
        names=_aliases(data, path),
        level=_int_or_none(data.get("level")) or 0,
        span=span,
    )


def _parse_global(data: dict[str, Any], span: Span, path: str) -> Stmt:
    names = [item for item in _list(data, "names", path) if isinstance(item, str)]
    return Global(names=names, span=span)


def _parse_nonlocal(data: dict[str, Any], span: Span, path: str) -> Stmt:
    names = [item for item in _list(data, "names", path) if isinstance(item, str)]
    return Nonlocal(names=names, span=span)


def _parse_expr_stmt(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return ExprStmt(value=_expr(data, "value", span, path), span=span)


def _parse_pass(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Pass(span=span)


def _parse_break(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Break(span=span)


def _parse_continue(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Continue(span=span)


def _parse_delete(data: dict[str, Any], span: Span, path: str) -> Stmt:
    return Delete(targets=_exprs(data, "targets", span, path), span=span)


_STMT_BUILDERS: dict[str, Callable[[dict[str, Any], Span, str], Stmt]] = {
    "FunctionDef": _parse_function_def,
    "AsyncFunctionDef": _parse_function_def,
    "ClassDef": _parse_class_def,
    "Return": _parse_return,
    "Assign": _parse_assign,
    "AnnAssign": _parse_ann_assign,
    "AugAssign": _parse_aug_assign,
    "For": _parse_for,
    "AsyncFor": _parse_for,
    "While": _parse_while,
    "If": _parse_if,
    "With": _parse_with,
    "AsyncWith": _parse_with,
    "Match": _parse_match,
    "Raise": _parse_raise,
    "Try": _parse_try,
    "TryStar": _parse_try,
    "Assert": _parse_assert,
    "Import": _parse_import,
    "ImportFrom": _parse_import_from,
    "Global": _parse_global,
    "Nonlocal": _parse_nonlocal,
    "Expr": _parse_expr_stmt,
    "Pass": _parse_pass,
    "Break": _parse_break,
    "Continue": _parse_continue,
    "Delete": _parse_delete,
}


def parse_stmt(value: Any, parent: Span, path: str) -> Stmt:
    """Decode one statement; unknown tags and non-objects become ``UnknownStmt``."""
    if not isinstance(value, dict):
        _log_placeholder(value, path)
        return UnknownStmt(span=parent)
    data = value
    span = _span(data, parent)
    node_type = _node_type(data)
    builder = _STMT_BUILDERS.get(node_type) if node_type else None
    if builder is None:
        return UnknownStmt(span=span, node_type=node_type)
    return builder(data, span, path)


def parse_module(document: Any, path: str = "") -> Module:
    """Decode a whole module: an object whose ``body`` lists top-level statements.

    Raises:
        DecodeError: If the module is not an object, has no ``body`` list, or an
            argument or import alias lacks its name.
    """
    data = _as_object(document, path)
    if not isinstance(data.get("body"), list):
        msg = "missing required field 'body'"
        raise DecodeError(msg, _join(path, "body"))
    module = Module(body=_stmts(data, "body", ROOT_SPAN, path))
    logger.debug("Decoded module with %d top-level statements", len(module.body))
    return module


__all__ = ["TYPE_FIELD", "parse_expr", "parse_module", "parse_pattern", "parse_stmt"]
