from __future__ import annotations

import pytest

from tests.support.harness import (
    EucalyptusResolutionError,
    Scope,
    ScopeCorruptionError,
    run_runtime_case,
)
from eucalyptus.scope import SymbolTable, TypeTable, ValueTable
from eucalyptus.types import EucNil, EucNumber, EucStr, T_ANY, T_NUMBER, T_STR


def _sizes(scope: Scope) -> tuple[int, int, int]:
    return scope.symbols.size(), scope.types.size(), scope.values.size()


def test_symbol_table_add_name_is_idempotent() -> None:
    table = SymbolTable()
    assert table.add_name("a") == 0
    assert table.add_name("b") == 1
    assert table.add_name("a") == 0
    assert table.size() == 2


def test_symbol_table_get_name_walks_parents() -> None:
    root = SymbolTable()
    root.add_name("outer")
    mid = SymbolTable(root)
    mid.add_name("x")
    leaf = SymbolTable(mid)

    assert leaf.get_name("x") == (0, 1)
    assert leaf.get_name("outer") == (0, 2)
    assert leaf.get_name("missing") is None


def test_slot_tables_grow_with_defaults() -> None:
    types = TypeTable()
    values = ValueTable()
    types.grow()
    values.grow()

    assert types.get_type(0, 0) == T_ANY
    assert isinstance(values.get_value(0, 0), EucNil)


def test_slot_tables_address_by_depth() -> None:
    root = ValueTable()
    root.grow()
    child = ValueTable(root)
    child.grow()

    child.set_value(0, 1, EucNumber(7))
    assert root.get_value(0, 0) == EucNumber(7)
    assert isinstance(child.get_value(0, 0), EucNil)


@pytest.mark.parametrize(
    "slot, depth",
    [
        pytest.param(1, 0, id="slot-past-end"),
        pytest.param(-1, 0, id="negative-slot"),
        pytest.param(0, 2, id="depth-past-root"),
    ],
)
def test_out_of_range_access_is_corruption(slot: int, depth: int) -> None:
    root = TypeTable()
    root.grow()
    child = TypeTable(root)
    child.grow()

    with pytest.raises(ScopeCorruptionError):
        child.get_type(slot, depth)
    with pytest.raises(ScopeCorruptionError):
        child.set_type(slot, depth, T_NUMBER)


def test_corruption_is_not_a_language_error() -> None:
    from eucalyptus.types import EucalyptusError

    assert not issubclass(ScopeCorruptionError, EucalyptusError)


def test_declare_grows_all_tables_together() -> None:
    scope = Scope()
    assert _sizes(scope) == (0, 0, 0)

    scope.declare("a", type=T_NUMBER, value=EucNumber(1))
    scope.declare("b")
    assert _sizes(scope) == (2, 2, 2)

    assert scope.get_type(1, 0) == T_ANY
    assert isinstance(scope.get_value(1, 0), EucNil)


def test_redeclare_reuses_slot_and_overwrites() -> None:
    scope = Scope()
    first = scope.declare("a", type=T_NUMBER, value=EucNumber(1))
    second = scope.declare("a", type=T_STR, value=EucStr("x"))

    assert first == second == 0
    assert _sizes(scope) == (1, 1, 1)
    assert scope.get_type(0, 0) == T_STR
    assert scope.get_value(0, 0) == EucStr("x")


def test_declare_without_payload_keeps_existing() -> None:
    scope = Scope()
    scope.declare("a", type=T_NUMBER, value=EucNumber(3))
    scope.declare("a")

    assert scope.get_type(0, 0) == T_NUMBER
    assert scope.get_value(0, 0) == EucNumber(3)


def test_declare_detects_tables_out_of_step() -> None:
    scope = Scope()
    scope.types.grow()
    scope.types.grow()

    with pytest.raises(ScopeCorruptionError, match="out of step"):
        scope.declare("a")


def test_child_scope_creates_matched_triple() -> None:
    root = Scope()
    child = root.child()

    assert child.parent is root
    assert child.symbols.parent is root.symbols
    assert child.types.parent is root.types
    assert child.values.parent is root.values
    assert child._chain() == [child, root]


def test_shadowing_hides_but_keeps_outer() -> None:
    root = Scope()
    root.declare("x", value=EucNumber(1))
    child = root.child()
    child.declare("x", value=EucNumber(2))

    assert child.resolve("x") == (0, 0)
    assert child.get_value(*child.resolve("x")) == EucNumber(2)
    assert root.get_value(*root.resolve("x")) == EucNumber(1)


def test_same_ref_addresses_type_and_value() -> None:
    root = Scope()
    root.declare("pad")
    root.declare("n", type=T_NUMBER, value=EucNumber(5))
    inner = root.child().child()

    ref = inner.resolve("n")
    assert ref == (1, 2)
    assert inner.get_type(*ref) == T_NUMBER
    assert inner.get_value(*ref) == EucNumber(5)


def test_resolve_missing_name() -> None:
    scope = Scope().child()
    assert scope.lookup("ghost") is None

    with pytest.raises(EucalyptusResolutionError) as exc_info:
        scope.resolve("ghost")

    assert exc_info.value.name == "ghost"
    assert "undeclared use of 'ghost'" in str(exc_info.value)


def test_dump_lists_every_level() -> None:
    root = Scope()
    root.declare("a", type=T_NUMBER, value=EucNumber(1))
    child = root.child()
    child.declare("s", type=T_STR, value=EucStr("hi"))

    text = child.dump()
    assert "(0 : 1) a : Number = 1" in text
    assert '(0 : 0) s : Str = "hi"' in text
    assert text.index("a : Number") < text.index("s : Str")


SCENARIOS = [
    pytest.param("let a = 1\nlet a = 2\na", ("number", 2), None, id="redeclare-last-wins"),
    pytest.param(
        "let x = 1\nlet f = fun x -> x * 10\nf 5",
        ("number", 50),
        None,
        id="param-shadows-global",
    ),
    pytest.param(
        "let x = 1\nlet f = fun y -> x + y\nf 5\nx",
        ("number", 1),
        None,
        id="call-leaves-global-intact",
    ),
    pytest.param(
        "let f y =\n    let inner = y + 1\n    inner\nf 1\ninner",
        None,
        EucalyptusResolutionError,
        id="body-binding-not-visible-outside",
    ),
    pytest.param("let a = a", None, EucalyptusResolutionError, id="binding-not-visible-to-itself"),
    pytest.param(
        "let n = 1\nlet bump k =\n    n = n + k\n    n\nbump 4\nn",
        ("number", 5),
        None,
        id="assignment-writes-outer-depth",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_scoping(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
