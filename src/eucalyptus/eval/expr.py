from __future__ import annotations

import math

from ..token_types import Operand
from ..types import (
    EucArray,
    EucBool,
    EucChar,
    EucNil,
    EucNumber,
    EucStr,
    EucValue,
)
from ..utils import euc_equals

def apply_binary_operator(op: Operand, lhs: EucValue, rhs: EucValue) -> EucValue:
    """Runtime operator table. Operand pairs without a rule yield nil."""
    match op:
        case Operand.EQUAL:
            return EucBool(euc_equals(lhs, rhs))
        case Operand.NEQUAL:
            return EucBool(not euc_equals(lhs, rhs))
        case Operand.ADD:
            if isinstance(lhs, EucArray):
                return EucArray(lhs.items + [rhs])
            return _arithmetic(op, lhs, rhs)
        case Operand.POW | Operand.MUL | Operand.DIV | Operand.MOD | Operand.SUB:
            return _arithmetic(op, lhs, rhs)
        case Operand.LT | Operand.GT | Operand.LTEQUAL | Operand.GTEQUAL:
            return _ordering(op, lhs, rhs)

    return EucNil()

def _arithmetic(op: Operand, lhs: EucValue, rhs: EucValue) -> EucValue:
    if not (isinstance(lhs, EucNumber) and isinstance(rhs, EucNumber)):
        return EucNil()

    a, b = lhs.value, rhs.value

    match op:
        case Operand.ADD:
            return EucNumber(a + b)
        case Operand.SUB:
            return EucNumber(a - b)
        case Operand.MUL:
            return EucNumber(a * b)
        case Operand.DIV:
            return EucNumber(_divide(a, b))
        case Operand.MOD:
            return EucNumber(_modulo(a, b))
        case Operand.POW:
            return EucNumber(_power(a, b))

    return EucNil()

def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b

    if a == 0 or math.isnan(a):
        return math.nan

    return math.copysign(math.inf, a) * math.copysign(1.0, b)

def _modulo(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        # infinite dividend or zero divisor
        return math.nan

def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf if a > 0 or float(b).is_integer() and b % 2 == 0 else -math.inf
    except ValueError:
        # negative base with fractional exponent, or 0 to a negative power
        return math.inf if a == 0 else math.nan

def _ordering(op: Operand, lhs: EucValue, rhs: EucValue) -> EucValue:
    match (lhs, rhs):
        case (EucNumber(value=a), EucNumber(value=b)) | (EucStr(value=a), EucStr(value=b)) | (EucChar(value=a), EucChar(value=b)):
            pass
        case (EucArray(items=xs), EucArray(items=ys)):
            a, b = len(xs), len(ys)
        case _:
            return EucNil()

    match op:
        case Operand.LT:
            return EucBool(a < b)
        case Operand.GT:
            return EucBool(a > b)
        case Operand.LTEQUAL:
            return EucBool(a <= b)
        case Operand.GTEQUAL:
            return EucBool(a >= b)

    return EucNil()
