from __future__ import annotations

from textwrap import dedent

import pytest
from lark import Token, Tree

from tests.support.harness import (
    EucalyptusArityError,
    EucalyptusError,
    EucalyptusIndexError,
    EucalyptusResolutionError,
    EucalyptusRuntimeError,
    EucalyptusTypeError,
    LexError,
    ParseError,
    Scope,
    run_program,
    run_statements,
)
from eucalyptus.evaluator import eval_statement
from eucalyptus.resolver import resolve_statement
from eucalyptus.typecheck import infer_statement

POSITION_CASES = [
    pytest.param('let s = "abc', LexError, 1, 9, id="lex"),
    pytest.param("let a = 1\nlet x = ->", ParseError, 2, 9, id="parse"),
    pytest.param("let a = 1\nlet b = q", EucalyptusResolutionError, 2, 9, id="resolution"),
    pytest.param("let a = 1\nlet b = {1, 2, 3} - a", EucalyptusTypeError, 2, 19, id="type"),
    pytest.param("let a = {1}\n\nlet b = a[4]", EucalyptusIndexError, 3, 10, id="index"),
    pytest.param(
        dedent(
            """\
            let f x =
                let y = x
                y[0]
            f 1
            """
        ),
        EucalyptusRuntimeError,
        3,
        6,
        id="runtime-inside-body",
    ),
    pytest.param("let f a = a\n\n\nf 1, 2", EucalyptusArityError, 4, 3, id="arity"),
]


@pytest.mark.parametrize("source, exc_type, line, column", POSITION_CASES)
def test_error_positions(source: str, exc_type: type, line: int, column: int) -> None:
    with pytest.raises(exc_type) as exc_info:
        run_program(source)

    err = exc_info.value
    assert isinstance(err, EucalyptusError)
    assert (err.line, err.column) == (line, column)
    assert str(err).endswith(f"(line {line}, col {column})")


HALTING_CASES = [
    pytest.param("let a = 1\nlet b = c\nlet d = 4", EucalyptusResolutionError, id="resolution"),
    pytest.param("let a = 1\nlet b = {1} - 1\nlet d = 4", EucalyptusTypeError, id="type"),
    pytest.param("let a = 1\nlet b = {1}[7]\nlet d = 4", EucalyptusIndexError, id="runtime"),
]


@pytest.mark.parametrize("source, exc_type", HALTING_CASES)
def test_first_error_halts_remaining_statements(source: str, exc_type: type) -> None:
    scope = Scope()
    with pytest.raises(exc_type):
        run_statements(source, scope)

    assert scope.lookup("a") == (0, 0)
    assert scope.lookup("d") is None


def test_earlier_statements_have_run() -> None:
    scope = Scope()
    with pytest.raises(EucalyptusResolutionError):
        run_statements("let a = 41\na = a + 1\nmissing", scope)

    value = scope.get_value(*scope.resolve("a"))
    assert value.value == 42


def test_parse_error_runs_nothing() -> None:
    scope = Scope()
    with pytest.raises(ParseError):
        run_statements("let a = 1\nlet b = )", scope)

    assert scope.lookup("a") is None


@pytest.mark.parametrize(
    "exc_type",
    [
        pytest.param(LexError, id="lex"),
        pytest.param(ParseError, id="parse"),
        pytest.param(EucalyptusResolutionError, id="resolution"),
        pytest.param(EucalyptusTypeError, id="type"),
        pytest.param(EucalyptusRuntimeError, id="runtime"),
        pytest.param(EucalyptusIndexError, id="index"),
        pytest.param(EucalyptusArityError, id="arity"),
    ],
)
def test_language_errors_share_a_base(exc_type: type) -> None:
    assert issubclass(exc_type, EucalyptusError)


def test_index_and_arity_are_runtime_errors() -> None:
    assert issubclass(EucalyptusIndexError, EucalyptusRuntimeError)
    assert issubclass(EucalyptusArityError, EucalyptusRuntimeError)


def test_error_str_without_location() -> None:
    assert str(EucalyptusError("boom")) == "boom"
    assert str(EucalyptusError("boom", line=3)) == "boom (line 3)"
    assert str(EucalyptusError("boom", line=3, column=7)) == "boom (line 3, col 7)"


def test_innermost_position_wins() -> None:
    with pytest.raises(EucalyptusResolutionError) as exc_info:
        run_program("let a = {1,\n    2,\n    zz}")

    assert (exc_info.value.line, exc_info.value.column) == (3, 5)


def _bad_binding() -> Tree:
    return Tree("binding", [Token("NUMBER", "1"), Token("NUMBER", "2")])


@pytest.mark.parametrize(
    "run_pass",
    [
        pytest.param(resolve_statement, id="resolve"),
        pytest.param(infer_statement, id="infer"),
        pytest.param(eval_statement, id="eval"),
    ],
)
def test_invalid_binding_target(run_pass) -> None:
    with pytest.raises(EucalyptusRuntimeError, match="invalid binding target"):
        run_pass(_bad_binding(), Scope())


@pytest.mark.parametrize(
    "run_pass, verb",
    [
        pytest.param(resolve_statement, "resolve", id="resolve"),
        pytest.param(infer_statement, "infer", id="infer"),
        pytest.param(eval_statement, "evaluate", id="eval"),
    ],
)
def test_unknown_node_is_a_runtime_error(run_pass, verb: str) -> None:
    with pytest.raises(EucalyptusRuntimeError, match=f"cannot {verb} node 'mystery'"):
        run_pass(Tree("mystery", []), Scope())
