"""Typed syntax model for Python source trees.

Each node category (expression, statement, pattern) is a closed union of frozen
dataclasses with one ``Unknown*`` member that stands in for constructs the tree
parser does not recognize. Every node carries the ``Span`` it was parsed from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import EllipsisType


@dataclass(frozen=True)
class Span:
    lineno: int
    col_offset: int
    end_lineno: int
    end_col_offset: int


ROOT_SPAN = Span(lineno=1, col_offset=0, end_lineno=1, end_col_offset=0)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OtherConstant:
    """A constant whose value the tree document does not represent (complex, ...)."""


ConstantValue = str | int | float | bool | bytes | None | EllipsisType | OtherConstant


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Name:
    id: str
    span: Span


@dataclass(frozen=True)
class Attribute:
    value: Expr
    attr: str
    span: Span


@dataclass(frozen=True)
class Keyword:
    arg: str | None
    value: Expr


@dataclass(frozen=True)
class Call:
    func: Expr
    args: list[Expr]
    keywords: list[Keyword]
    span: Span


@dataclass(frozen=True)
class Constant:
    value: ConstantValue
    span: Span


@dataclass(frozen=True)
class Subscript:
    value: Expr
    slice: Expr
    span: Span


@dataclass(frozen=True)
class BinOp:
    left: Expr
    right: Expr
    span: Span


@dataclass(frozen=True)
class Tuple:
    elts: list[Expr]
    span: Span


@dataclass(frozen=True)
class List:
    elts: list[Expr]
    span: Span


@dataclass(frozen=True)
class Set:
    elts: list[Expr]
    span: Span


@dataclass(frozen=True)
class Dict:
    # ``None`` keys are ``**mapping`` unpackings.
    keys: list[Expr | None]
    values: list[Expr]
    span: Span


@dataclass(frozen=True)
class Comprehension:
    target: Expr
    iter: Expr
    ifs: list[Expr]
    is_async: bool


@dataclass(frozen=True)
class ListComp:
    elt: Expr
    generators: list[Comprehension]
    span: Span


@dataclass(frozen=True)
class SetComp:
    elt: Expr
    generators: list[Comprehension]
    span: Span


@dataclass(frozen=True)
class GeneratorExp:
    elt: Expr
    generators: list[Comprehension]
    span: Span


@dataclass(frozen=True)
class DictComp:
    key: Expr
    value: Expr
    generators: list[Comprehension]
    span: Span


@dataclass(frozen=True)
class IfExp:
    test: Expr
    body: Expr
    orelse: Expr
    span: Span


@dataclass(frozen=True)
class Lambda:
    args: Arguments
    body: Expr
    span: Span


@dataclass(frozen=True)
class UnaryOp:
    operand: Expr
    span: Span


@dataclass(frozen=True)
class Compare:
    left: Expr
    comparators: list[Expr]
    span: Span


@dataclass(frozen=True)
class BoolOp:
    values: list[Expr]
    span: Span


@dataclass(frozen=True)
class Starred:
    value: Expr
    span: Span


@dataclass(frozen=True)
class Await:
    value: Expr
    span: Span


@dataclass(frozen=True)
class Yield:
    value: Expr | None
    span: Span


@dataclass(frozen=True)
class YieldFrom:
    value: Expr
    span: Span


@dataclass(frozen=True)
class JoinedStr:
    values: list[Expr]
    span: Span


@dataclass(frozen=True)
class FormattedValue:
    value: Expr
    span: Span


@dataclass(frozen=True)
class NamedExpr:
    target: Expr
    value: Expr
    span: Span


@dataclass(frozen=True)
class Slice:
    lower: Expr | None
    upper: Expr | None
    step: Expr | None
    span: Span


@dataclass(frozen=True)
class UnknownExpr:
    span: Span
    node_type: str | None = None


Expr = (
    Name
    | Attribute
    | Call
    | Constant
    | Subscript
    | BinOp
    | Tuple
    | List
    | Set
    | Dict
    | ListComp
    | SetComp
    | GeneratorExp
    | DictComp
    | IfExp
    | Lambda
    | UnaryOp
    | Compare
    | BoolOp
    | Starred
    | Await
    | Yield
    | YieldFrom
    | JoinedStr
    | FormattedValue
    | NamedExpr
    | Slice
    | UnknownExpr
)


# ---------------------------------------------------------------------------
# Match patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MatchValue:
    value: Expr
    span: Span


@dataclass(frozen=True)
class MatchSingleton:
    value: ConstantValue
    span: Span


@dataclass(frozen=True)
class MatchSequence:
    patterns: list[Pattern]
    span: Span


@dataclass(frozen=True)
class MatchMapping:
    keys: list[Expr]
    patterns: list[Pattern]
    rest: str | None
    span: Span


@dataclass(frozen=True)
class MatchClass:
    cls: Expr
    patterns: list[Pattern]
    kwd_attrs: list[str]
    kwd_patterns: list[Pattern]
    span: Span


@dataclass(frozen=True)
class MatchStar:
    name: str | None
    span: Span


@dataclass(frozen=True)
class MatchAs:
    pattern: Pattern | None
    name: str | None
    span: Span


@dataclass(frozen=True)
class MatchOr:
    patterns: list[Pattern]
    span: Span


@dataclass(frozen=True)
class UnknownPattern:
    span: Span
    node_type: str | None = None


Pattern = (
    MatchValue
    | MatchSingleton
    | MatchSequence
    | MatchMapping
    | MatchClass
    | MatchStar
    | MatchAs
    | MatchOr
    | UnknownPattern
)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Arg:
    arg: str
    annotation: Expr | None
    span: Span


@dataclass(frozen=True)
class Arguments:
    posonlyargs: list[Arg] = field(default_factory=list)
    args: list[Arg] = field(default_factory=list)
    vararg: Arg | None = None
    kwonlyargs: list[Arg] = field(default_factory=list)
    kw_defaults: list[Expr | None] = field(default_factory=list)
    kwarg: Arg | None = None
    defaults: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class WithItem:
    context_expr: Expr
    optional_vars: Expr | None


@dataclass(frozen=True)
class ExceptHandler:
    type: Expr | None
    name: str | None
    body: list[Stmt]
    span: Span


@dataclass(frozen=True)
class Alias:
    name: str
    asname: str | None


@dataclass(frozen=True)
class MatchCase:
    pattern: Pattern
    guard: Expr | None
    body: list[Stmt]


@dataclass(frozen=True)
class FunctionDef:
    name: str
    args: Arguments
    body: list[Stmt]
    decorator_list: list[Expr]
    returns: Expr | None
    is_async: bool
    span: Span


@dataclass(frozen=True)
class ClassDef:
    name: str
    bases: list[Expr]
    keywords: list[Keyword]
    body: list[Stmt]
    decorator_list: list[Expr]
    span: Span


@dataclass(frozen=True)
class Return:
    value: Expr | None
    span: Span


@dataclass(frozen=True)
class Assign:
    targets: list[Expr]
    value: Expr
    span: Span


@dataclass(frozen=True)
class AnnAssign:
    target: Expr
    annotation: Expr
    value: Expr | None
    span: Span


@dataclass(frozen=True)
class AugAssign:
    target: Expr
    value: Expr
    span: Span


@dataclass(frozen=True)
class For:
    target: Expr
    iter: Expr
    body: list[Stmt]
    orelse: list[Stmt]
    is_async: bool
    span: Span


@dataclass(frozen=True)
class While:
    test: Expr
    body: list[Stmt]
    orelse: list[Stmt]
    span: Span


@dataclass(frozen=True)
class If:
    test: Expr
    body: list[Stmt]
    orelse: list[Stmt]
    span: Span


@dataclass(frozen=True)
class With:
    items: list[WithItem]
    body: list[Stmt]
    is_async: bool
    span: Span


@dataclass(frozen=True)
class Match:
    subject: Expr
    cases: list[MatchCase]
    span: Span


@dataclass(frozen=True)
class Raise:
    exc: Expr | None
    cause: Expr | None
    span: Span


@dataclass(frozen=True)
class Try:
    body: list[Stmt]
    handlers: list[ExceptHandler]
    orelse: list[Stmt]
    finalbody: list[Stmt]
    is_star: bool
    span: Span


@dataclass(frozen=True)
class Assert:
    test: Expr
    msg: Expr | None
    span: Span


@dataclass(frozen=True)
class Import:
    names: list[Alias]
    span: Span


@dataclass(frozen=True)
class ImportFrom:
    module: str | None
    names: list[Alias]
    level: int
    span: Span


@dataclass(frozen=True)
class Global:
    names: list[str]
    span: Span


@dataclass(frozen=True)
class Nonlocal:
    names: list[str]
    span: Span


@dataclass(frozen=True)
class ExprStmt:
    value: Expr
    span: Span


@dataclass(frozen=True)
class Pass:
    span: Span


@dataclass(frozen=True)
class Break:
    span: Span


@dataclass(frozen=True)
class Continue:
    span: Span


@dataclass(frozen=True)
class Delete:
    targets: list[Expr]
    span: Span


@dataclass(frozen=True)
class UnknownStmt:
    span: Span
    node_type: str | None = None


Stmt = (
    FunctionDef
    | ClassDef
    | Return
    | Assign
    | AnnAssign
    | AugAssign
    | For
    | While
    | If
    | With
    | Match
    | Raise
    | Try
    | Assert
    | Import
    | ImportFrom
    | Global
    | Nonlocal
    | ExprStmt
    | Pass
    | Break
    | Continue
    | Delete
    | UnknownStmt
)


@dataclass(frozen=True)
class Module:
    body: list[Stmt]


def dotted_name(expr: Expr) -> str | None:
    """Render ``a.b.c`` style expressions as a dotted string.

    An attribute whose receiver is not itself a dotted name yields just the
    attribute (``get().x`` -> ``x``); anything else yields ``None``.
    """
    if isinstance(expr, Name):
        return expr.id
    if isinstance(expr, Attribute):
        base = dotted_name(expr.value)
        if base is None:
            return expr.attr
        return f"{base}.{expr.attr}"
    return None
