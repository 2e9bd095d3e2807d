from __future__ import annotations

import textwrap

from contract.models import (
    AnalysisInput,
    FunctionSignature,
    HandlingKind,
    Language,
    Location,
    NamedFailure,
    QualifiedFailure,
    SignatureKind,
)
from plugins.python.extract import extract_module
from plugins.python.source import dump_source
from plugins.python.tree_parser import parse_module

NOT_FOUND = NamedFailure(name="NotFound")
INVALID_ID = NamedFailure(name="InvalidId")

GET_USER = """\
@raises(NotFound, InvalidId)
def get_user(user_id):
    return lookup(user_id)

"""


def _extract(source: str, **kwargs: object) -> AnalysisInput:
    document = dump_source(textwrap.dedent(source), "app.py")
    return extract_module(parse_module(document["ast"], path="ast"), "app.py", **kwargs)


def test_raises_signature_is_extracted() -> None:
    analysis = _extract(
        """\
        @raises(NotFound, errors.InvalidId, make_error())
        async def get_user(user_id):
            ...
        """
    )

    assert analysis.language is Language.PYTHON
    (signature,) = analysis.signatures
    assert signature.name == "get_user"
    assert signature.qualified_name is None
    assert signature.declared_exceptions == [
        NOT_FOUND,
        QualifiedFailure(module="errors", name="InvalidId"),
    ]
    assert signature.signature_type is SignatureKind.RAISES
    assert signature.is_async is True
    assert signature.loc.file == "app.py"
    assert signature.loc.line == 2


def test_bare_and_option_markers() -> None:
    analysis = _extract(
        """\
        @raises
        def load(): ...

        @returns_option
        def find(key): ...

        @returns_option()
        def lookup(key): ...

        @cache
        def plain(): ...
        """
    )

    assert [s.name for s in analysis.signatures] == ["load", "find", "lookup"]
    assert analysis.signatures[0].declared_exceptions == []
    assert analysis.signatures[0].signature_type is SignatureKind.RAISES
    assert analysis.signatures[1].signature_type is SignatureKind.OPTION
    assert analysis.signatures[2].signature_type is SignatureKind.OPTION


def test_attribute_receiver_that_is_not_dotted_keeps_attr_name() -> None:
    analysis = _extract(
        """\
        @raises(registry()[0].Missing)
        def load(): ...
        """
    )

    assert analysis.signatures[0].declared_exceptions == [NamedFailure(name="Missing")]


def test_methods_are_qualified_by_innermost_class() -> None:
    analysis = _extract(
        """\
        class Outer:
            class Repo:
                @raises(NotFound)
                def get(self, key): ...

            @returns_option
            def find(self): ...

        @raises
        def top(): ...
        """
    )

    qualified = {s.name: s.qualified_name for s in analysis.signatures}
    assert qualified == {"get": "Repo.get", "find": "Outer.find", "top": None}


def test_bound_variable_match_is_correlated() -> None:
    analysis = _extract(
        GET_USER
        + """\
user = get_user(1)
match user:
    case Ok(value):
        print(value)
    case Err(NotFound()):
        pass
"""
    )

    (site,) = analysis.matches
    assert site.func_name == "get_user"
    assert site.kind is HandlingKind.STATEMENT
    assert site.has_ok_handler is True
    assert site.handlers == [NOT_FOUND]
    assert site.loc.line == 6
    assert site.call_loc is not None
    assert (site.call_loc.line, site.call_loc.col) == (5, 7)
    assert analysis.unhandled_calls == []


def test_direct_call_subject_is_correlated() -> None:
    analysis = _extract(
        GET_USER
        + """\
match get_user(2):
    case Ok(user) as outcome:
        pass
    case Err(NotFound() | InvalidId()):
        pass
"""
    )

    (site,) = analysis.matches
    assert site.func_name == "get_user"
    assert site.handlers == [NOT_FOUND, INVALID_ID]
    assert site.has_ok_handler is True
    assert analysis.unhandled_calls == []


def test_err_with_as_binding_and_qualified_class() -> None:
    analysis = _extract(
        GET_USER
        + """\
match get_user(2):
    case Err(errors.NotFound() as missing):
        pass
"""
    )

    (site,) = analysis.matches
    assert site.has_ok_handler is False
    assert site.handlers == [QualifiedFailure(module="errors", name="NotFound")]


def test_unmatched_call_is_reported_as_unhandled() -> None:
    analysis = _extract(
        GET_USER
        + """\
first = get_user(1)
second = get_user(2)
match first:
    case Ok(_):
        pass
"""
    )

    assert len(analysis.matches) == 1
    (unhandled,) = analysis.unhandled_calls
    assert unhandled.func_name == "get_user"
    assert unhandled.loc.line == 6
    assert unhandled.signature_type is SignatureKind.RAISES


def test_rebinding_forgets_previous_producer() -> None:
    analysis = _extract(
        GET_USER
        + """\
user = get_user(1)
user = 5
match user:
    case Ok(_):
        pass
"""
    )

    assert analysis.matches == []
    assert [call.loc.line for call in analysis.unhandled_calls] == [5]


def test_annotated_assignment_and_walrus_bind() -> None:
    analysis = _extract(
        GET_USER
        + """\
user: Result = get_user(1)
match user:
    case Ok(_):
        pass
if (other := get_user(2)) is not None:
    match other:
        case Ok(_):
            pass
"""
    )

    assert [site.func_name for site in analysis.matches] == ["get_user", "get_user"]
    assert analysis.unhandled_calls == []


def test_calls_before_definition_are_not_recorded() -> None:
    analysis = _extract(
        """\
        early = get_user(1)

        @raises(NotFound)
        def get_user(user_id): ...

        late = get_user(2)
        """
    )

    assert [call.loc.line for call in analysis.unhandled_calls] == [6]


def test_calls_in_nested_scopes_and_comprehensions_are_recorded() -> None:
    analysis = _extract(
        """\
        @returns_option
        def find(key): ...

        def handler(keys):
            for key in keys:
                with lock:
                    values = [find(k) for k in keys if find(k)]
            return {k: find(k) for k in keys}
        """
    )

    assert [call.func_name for call in analysis.unhandled_calls] == ["find"] * 3
    assert all(
        call.signature_type is SignatureKind.OPTION for call in analysis.unhandled_calls
    )


def test_option_match_sets_flags() -> None:
    analysis = _extract(
        """\
        @returns_option
        def find(key): ...

        match find("a"):
            case Some(value):
                pass
            case Nothing():
                pass
        """
    )

    (site,) = analysis.matches
    assert site.has_some_handler is True
    assert site.has_nothing_handler is True
    assert site.has_ok_handler is False
    assert site.handlers == []


def test_functional_form_is_a_handling_site() -> None:
    analysis = _extract(
        GET_USER
        + """\
match(get_user, 1)({
    Ok: lambda user: user,
    NotFound: lambda e: None,
    errors.InvalidId: lambda e: None,
})
"""
    )

    (site,) = analysis.matches
    assert site.kind is HandlingKind.FUNCTION_CALL
    assert site.func_name == "get_user"
    assert site.has_ok_handler is True
    assert site.handlers == [NOT_FOUND, QualifiedFailure(module="errors", name="InvalidId")]
    assert site.loc.line == 5
    assert site.call_loc is not None
    assert site.call_loc.line == 5
    assert analysis.unhandled_calls == []


def test_awaited_async_match_on_call_marks_that_call() -> None:
    analysis = _extract(
        """\
        @async_raises(Timeout)
        async def fetch(url): ...

        async def main():
            page = await async_match(fetch("a"))({Ok: show, Timeout: retry})
            return page
        """
    )

    (site,) = analysis.matches
    assert site.func_name == "fetch"
    assert site.handlers == [NamedFailure(name="Timeout")]
    assert site.call_loc is not None
    assert site.call_loc.line == 5
    assert analysis.unhandled_calls == []


def test_unrelated_match_statements_are_ignored() -> None:
    analysis = _extract(
        """\
        match command.split():
            case [name, arg]:
                pass

        match parse(text):
            case Ok(value):
                pass
        """
    )

    assert [site.func_name for site in analysis.matches] == ["parse"]


def test_unbound_variable_subject_records_no_site() -> None:
    analysis = _extract(
        """\
        match value:
            case Ok(_):
                pass
        """
    )

    assert analysis.matches == []


def test_sites_are_recorded_in_preorder() -> None:
    analysis = _extract(
        GET_USER
        + """\
@returns_option
def find(key): ...

match get_user(1):
    case Ok(user):
        match find(user):
            case Some(_):
                pass
            case Nothing():
                pass
    case Err(NotFound()):
        pass
"""
    )

    assert [site.func_name for site in analysis.matches] == ["get_user", "find"]


def test_external_signatures_seed_known_names() -> None:
    external = FunctionSignature(
        name="remote_call",
        loc=Location(file="lib.py", line=3, col=0, end_line=3, end_col=20),
        is_async=False,
        signature_type=SignatureKind.OPTION,
    )

    analysis = _extract(
        """\
        @raises
        def local(): ...

        remote_call()
        local()
        """,
        external_signatures=[external],
    )

    assert [s.name for s in analysis.signatures] == ["remote_call", "local"]
    assert [(c.func_name, c.signature_type) for c in analysis.unhandled_calls] == [
        ("remote_call", SignatureKind.OPTION),
        ("local", SignatureKind.RAISES),
    ]
