"""Lexically nested symbol, type and value tables.

Each scope level is a matched triple of tables. A name resolves to a
``(slot, depth)`` pair: ``slot`` indexes the backing array of the table
``depth`` parent hops up the chain. The pair addresses the same logical
binding in all three tables, so tables are only ever created together
(``Scope`` / ``Scope.child``) and only ever grown together
(``Scope.declare``).
"""
from __future__ import annotations

from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from .types import (
    EucNil,
    EucType,
    EucValue,
    EucalyptusResolutionError,
    ScopeCorruptionError,
    T_ANY,
)

T = TypeVar("T")

SlotRef = Tuple[int, int]

# (names, types, values) per level, innermost first
ScopeSnapshot = List[Tuple[List[str], List[EucType], List[EucValue]]]


class SymbolTable:
    def __init__(self, parent: Optional[SymbolTable] = None):
        self.parent = parent
        self.names: List[str] = []

    def add_name(self, name: str) -> int:
        """Slot of `name` in this scope, appending it if new."""
        try:
            return self.names.index(name)
        except ValueError:
            self.names.append(name)
            return len(self.names) - 1

    def get_name(self, name: str, depth: int = 0) -> Optional[SlotRef]:
        try:
            return self.names.index(name), depth
        except ValueError:
            pass

        if self.parent is not None:
            return self.parent.get_name(name, depth + 1)

        return None

    def size(self) -> int:
        return len(self.names)


class _SlotTable(Generic[T]):
    """Shared shape of the type and value tables."""

    kind = "slot"

    def __init__(self, default: Callable[[], T], parent: Optional[_SlotTable[T]] = None):
        self.parent = parent
        self.slots: List[T] = []
        self._default = default

    def _table_at(self, slot: int, depth: int) -> _SlotTable[T]:
        table = self

        for _ in range(depth):
            if table.parent is None:
                raise ScopeCorruptionError(f"invalid {self.kind} depth {depth}")
            table = table.parent

        if slot < 0 or slot >= len(table.slots):
            raise ScopeCorruptionError(f"invalid {self.kind} slot {slot} at depth {depth}")

        return table

    def get(self, slot: int, depth: int) -> T:
        return self._table_at(slot, depth).slots[slot]

    def set(self, slot: int, depth: int, payload: T) -> None:
        self._table_at(slot, depth).slots[slot] = payload

    def grow(self) -> None:
        self.slots.append(self._default())

    def size(self) -> int:
        return len(self.slots)


class TypeTable(_SlotTable[EucType]):
    kind = "type"

    def __init__(self, parent: Optional[TypeTable] = None):
        super().__init__(lambda: T_ANY, parent)

    def get_type(self, slot: int, depth: int) -> EucType:
        return self.get(slot, depth)

    def set_type(self, slot: int, depth: int, t: EucType) -> None:
        self.set(slot, depth, t)


class ValueTable(_SlotTable[EucValue]):
    kind = "value"

    def __init__(self, parent: Optional[ValueTable] = None):
        super().__init__(EucNil, parent)

    def get_value(self, slot: int, depth: int) -> EucValue:
        return self.get(slot, depth)

    def set_value(self, slot: int, depth: int, v: EucValue) -> None:
        self.set(slot, depth, v)


class Scope:
    """One lexical scope level: the symbol, type and value tables together."""

    __slots__ = ("parent", "symbols", "types", "values")

    def __init__(self, parent: Optional[Scope] = None):
        self.parent = parent

        if parent is None:
            self.symbols = SymbolTable()
            self.types = TypeTable()
            self.values = ValueTable()
        else:
            self.symbols = SymbolTable(parent.symbols)
            self.types = TypeTable(parent.types)
            self.values = ValueTable(parent.values)

    def child(self) -> Scope:
        return Scope(self)

    def _chain(self) -> List[Scope]:
        """This scope followed by its ancestors, innermost first."""
        chain: List[Scope] = []
        scope: Optional[Scope] = self

        while scope is not None:
            chain.append(scope)
            scope = scope.parent

        return chain

    # ---------- bindings ----------

    def declare(self, name: str, type: Optional[EucType] = None, value: Optional[EucValue] = None) -> int:
        """Declare `name` in this scope and return its slot.

        Redeclaring reuses the existing slot. Whichever of `type` and
        `value` is given overwrites that slot's payload.
        """
        slot = self.symbols.add_name(name)

        while self.types.size() < self.symbols.size():
            self.types.grow()
        while self.values.size() < self.symbols.size():
            self.values.grow()

        if not (self.symbols.size() == self.types.size() == self.values.size()):
            raise ScopeCorruptionError(
                f"scope tables out of step: {self.symbols.size()} names, "
                f"{self.types.size()} types, {self.values.size()} values"
            )

        if type is not None:
            self.types.set_type(slot, 0, type)
        if value is not None:
            self.values.set_value(slot, 0, value)

        return slot

    def lookup(self, name: str) -> Optional[SlotRef]:
        return self.symbols.get_name(name)

    def resolve(self, name: str) -> SlotRef:
        ref = self.lookup(name)
        if ref is None:
            raise EucalyptusResolutionError(name)
        return ref

    def get_type(self, slot: int, depth: int) -> EucType:
        return self.types.get_type(slot, depth)

    def set_type(self, slot: int, depth: int, t: EucType) -> None:
        self.types.set_type(slot, depth, t)

    def get_value(self, slot: int, depth: int) -> EucValue:
        return self.values.get_value(slot, depth)

    def set_value(self, slot: int, depth: int, v: EucValue) -> None:
        self.values.set_value(slot, depth, v)

    # ---------- rollback ----------

    def snapshot(self) -> ScopeSnapshot:
        """Copy every table of the chain so a failed statement can be undone."""
        return [
            (list(level.symbols.names), list(level.types.slots), list(level.values.slots))
            for level in self._chain()
        ]

    def restore(self, saved: ScopeSnapshot) -> None:
        """Refill every table of the chain, in place, from `saved`."""
        for level, (names, types, values) in zip(self._chain(), saved):
            level.symbols.names[:] = names
            level.types.slots[:] = types
            level.values.slots[:] = values

    # ---------- debugging ----------

    def dump(self) -> str:
        """Render the chain outermost first, one `(slot : depth)` line per binding."""
        chain = self._chain()
        sections = []

        for depth in range(len(chain) - 1, -1, -1):
            level = chain[depth]
            lines = []
            for slot, name in enumerate(level.symbols.names):
                lines.append(f"({slot} : {depth}) {name} : {level.types.slots[slot]!r} = {level.values.slots[slot]!r}")
            sections.append("\n".join(lines))

        return "\n------------------------------\n".join(sections)
