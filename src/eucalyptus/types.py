from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple
from typing_extensions import TypeAlias

from .tree import Node

if TYPE_CHECKING:
    from .scope import Scope

# ---------- Value Model ----------

@dataclass
class EucNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class EucNumber:
    value: float
    def __repr__(self) -> str:
        v = float(self.value)
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class EucBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class EucStr:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class EucChar:
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass
class EucArray:
    items: List['EucValue']
    def __repr__(self) -> str:
        return "{" + ", ".join(repr(x) for x in self.items) + "}"

@dataclass
class EucFunction:
    params: List[str]
    body: List[Node]                                    # statements; the last one is the result
    scope: 'Scope' = field(compare=False, repr=False)   # defining scope (closure)
    def __repr__(self) -> str:
        return "<fun " + " ".join(self.params) + ">" if self.params else "<fun>"

EucValue: TypeAlias = (
    EucNil
    | EucNumber
    | EucBool
    | EucStr
    | EucChar
    | EucArray
    | EucFunction
)

# ---------- Static Types (inferred, intentionally weak) ----------

class TypeKind(Enum):
    NUMBER = "Number"
    STR = "Str"
    CHAR = "Char"
    BOOL = "Bool"
    ARRAY = "Array"
    ANY = "Any"
    UNDEFINED = "Undefined"

@dataclass(frozen=True)
class EucType:
    kind: TypeKind
    elements: Tuple['EucType', ...] = ()

    @property
    def is_any(self) -> bool:
        return self.kind is TypeKind.ANY

    @property
    def is_undefined(self) -> bool:
        return self.kind is TypeKind.UNDEFINED

    def __repr__(self) -> str:
        if self.kind is TypeKind.ARRAY:
            return "Array[" + ", ".join(repr(t) for t in self.elements) + "]"
        return self.kind.value

T_NUMBER = EucType(TypeKind.NUMBER)
T_STR = EucType(TypeKind.STR)
T_CHAR = EucType(TypeKind.CHAR)
T_BOOL = EucType(TypeKind.BOOL)
T_ANY = EucType(TypeKind.ANY)
T_UNDEFINED = EucType(TypeKind.UNDEFINED)

def array_of(elements: Tuple[EucType, ...] | List[EucType]) -> EucType:
    return EucType(TypeKind.ARRAY, tuple(elements))

# ---------- Exceptions ----------

class EucalyptusError(Exception):
    """Base of every recoverable language error. Position is optional."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def has_location(self) -> bool:
        return self.line is not None

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        if self.column is None:
            return f"{self.message} (line {self.line})"

        return f"{self.message} (line {self.line}, col {self.column})"

class EucalyptusResolutionError(EucalyptusError):
    """Identifier used without a reachable declaration."""

    def __init__(self, name: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(f"undeclared use of '{name}'", line, column)
        self.name = name

class EucalyptusTypeError(EucalyptusError):
    pass

class EucalyptusRuntimeError(EucalyptusError):
    pass

class EucalyptusIndexError(EucalyptusRuntimeError):
    def __init__(self, index: int, length: int):
        super().__init__(f"index {index} out of range for array of length {length}")
        self.index = index
        self.length = length

class EucalyptusArityError(EucalyptusRuntimeError):
    pass

class ScopeCorruptionError(Exception):
    """A slot/depth pair that does not address any table.

    Raised only when the symbol/type/value tables fall out of lock-step;
    it is an interpreter bug, never a user-facing error.
    """
