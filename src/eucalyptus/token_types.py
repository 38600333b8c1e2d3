"""
Token Types for the Eucalyptus Parser

Shared between lexer, parser and the AST passes to avoid circular dependencies.
"""

from typing import Any, Optional
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - one per lexical category"""

    # Literals
    INT_LITERAL = auto()
    FLOAT_LITERAL = auto()
    BOOL_LITERAL = auto()
    STRING_LITERAL = auto()
    CHAR_LITERAL = auto()

    IDENTIFIER = auto()

    # Punctuation: -> = ( ) [ ] { } ,
    SYMBOL = auto()

    # Binary operators
    OPERATOR = auto()

    # let, fun
    KEYWORD = auto()

    # Layout
    INDENT = auto()
    EOL = auto()
    EOF = auto()


LITERAL_TYPES = (
    TT.INT_LITERAL,
    TT.FLOAT_LITERAL,
    TT.BOOL_LITERAL,
    TT.STRING_LITERAL,
    TT.CHAR_LITERAL,
)


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    position: int = 0
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Operand(Enum):
    """
    Binary operators with their precedence rank.

    Lower rank binds tighter: ``^`` folds before ``*``, which folds
    before ``+``, and so on down to the ordering comparisons.
    """

    POW = ('^', 0)
    MUL = ('*', 1)
    DIV = ('/', 1)
    MOD = ('%', 1)
    ADD = ('+', 2)
    SUB = ('-', 2)
    EQUAL = ('==', 3)
    NEQUAL = ('!=', 3)
    LT = ('<', 4)
    GT = ('>', 4)
    LTEQUAL = ('<=', 4)
    GTEQUAL = ('>=', 4)

    def __init__(self, symbol: str, rank: int):
        self.symbol = symbol
        self.rank = rank

    @classmethod
    def from_symbol(cls, symbol: str) -> Optional['Operand']:
        for op in cls:
            if op.symbol == symbol:
                return op
        return None


ARITHMETIC_OPS = frozenset({Operand.POW, Operand.MUL, Operand.DIV, Operand.MOD, Operand.SUB})
EQUALITY_OPS = frozenset({Operand.EQUAL, Operand.NEQUAL})
ORDERING_OPS = frozenset({Operand.LT, Operand.GT, Operand.LTEQUAL, Operand.GTEQUAL})
