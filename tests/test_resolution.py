from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    EucalyptusResolutionError,
    Scope,
    run_statements,
)
from eucalyptus.parser_rd import parse_source
from eucalyptus.resolver import resolve_statement
from eucalyptus.types import T_ANY


def _resolve_all(source: str, scope: Scope) -> None:
    for stmt in parse_source(source):
        resolve_statement(stmt, scope)


RESOLUTION_ERROR_CASES = [
    pytest.param("x", "x", 1, 1, id="bare-identifier"),
    pytest.param("let a = 1\nb", "b", 2, 1, id="second-line"),
    pytest.param("let f x = x + y", "y", 1, 15, id="free-name-in-body"),
    pytest.param("let f = fun x -> f", "f", 1, 18, id="lambda-binding-cannot-self-reference"),
    pytest.param("a = 1", "a", 1, 1, id="assignment-to-undeclared"),
    pytest.param("let a = 1\na = b", "b", 2, 5, id="assignment-from-undeclared"),
    pytest.param("{1, q}", "q", 1, 5, id="array-element"),
    pytest.param("let a = {1}\na[i]", "i", 2, 3, id="index-expression"),
    pytest.param("g 1", "g", 1, 1, id="callee"),
    pytest.param("let g x = x\ng h", "h", 2, 3, id="call-argument"),
    pytest.param(
        dedent(
            """\
            let f x =
                let y = x
                y + z
            """
        ),
        "z",
        3,
        9,
        id="free-name-in-block",
    ),
    pytest.param("let f x = x\nx", "x", 2, 1, id="parameter-not-visible-outside"),
]


@pytest.mark.parametrize("source, name, line, column", RESOLUTION_ERROR_CASES)
def test_resolution_errors(source: str, name: str, line: int, column: int) -> None:
    with pytest.raises(EucalyptusResolutionError) as exc_info:
        _resolve_all(source, Scope())

    err = exc_info.value
    assert err.name == name
    assert f"undeclared use of '{name}'" in str(err)
    assert (err.line, err.column) == (line, column)


RESOLVES_CASES = [
    pytest.param("let a = 1\na", id="declared-before-use"),
    pytest.param("let f x = f x", id="named-function-self-reference"),
    pytest.param("let outer = 5\nlet f = fun x -> x + outer", id="closure-over-global"),
    pytest.param("let f x =\n    fun y -> x + y", id="nested-lambda-sees-param"),
    pytest.param("let a = 1\na = a + 1", id="assignment-to-declared"),
    pytest.param("let a = 1\nlet a = a + 1", id="redeclare-uses-previous"),
]


@pytest.mark.parametrize("source", RESOLVES_CASES)
def test_resolves(source: str) -> None:
    _resolve_all(source, Scope())


def test_binding_declares_name() -> None:
    scope = Scope()
    _resolve_all("let a = 1\nlet b = 2", scope)

    assert scope.lookup("a") == (0, 0)
    assert scope.lookup("b") == (1, 0)
    assert scope.symbols.size() == scope.types.size() == scope.values.size() == 2


def test_lambda_parameters_do_not_leak() -> None:
    scope = Scope()
    _resolve_all("fun x -> x", scope)

    assert scope.lookup("x") is None
    assert scope.symbols.size() == 0


def test_named_function_predeclared_as_any() -> None:
    scope = Scope()
    _resolve_all("let f x = x", scope)

    assert scope.get_type(*scope.resolve("f")) == T_ANY


def test_resolution_runs_before_evaluation() -> None:
    scope = Scope()
    with pytest.raises(EucalyptusResolutionError):
        run_statements("let a = {1}\nlet b = a[9] + missing", scope)

    # the first statement ran, the failing one declared nothing
    assert scope.lookup("a") == (0, 0)
    assert scope.lookup("b") is None
