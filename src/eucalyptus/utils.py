from __future__ import annotations

import os as _os
from typing import Optional

from .types import (
    EucValue,
    EucNil,
    EucNumber,
    EucBool,
    EucStr,
    EucChar,
    EucArray,
    EucFunction,
)

DEFAULT_INDENT_WIDTH = 4

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str) -> bool:
    """True when the env var is set to a truthy value (1/true/yes/on)."""
    raw = _os.environ.get(name)
    return raw is not None and raw.strip().lower() in _TRUTHY


def debug_py_trace_enabled() -> bool:
    return env_flag("EUCALYPTUS_DEBUG_PY_TRACE")


def show_types_enabled() -> bool:
    return env_flag("EUCALYPTUS_SHOW_TYPES")


def indent_width() -> int:
    """Spaces per indentation unit, from EUCALYPTUS_INDENT_WIDTH (default 4)."""
    raw = _os.environ.get("EUCALYPTUS_INDENT_WIDTH")
    if raw is None:
        return DEFAULT_INDENT_WIDTH

    try:
        width = int(raw.strip())
    except ValueError:
        return DEFAULT_INDENT_WIDTH

    return width if width > 0 else DEFAULT_INDENT_WIDTH


def euc_equals(lhs: EucValue, rhs: EucValue) -> bool:
    match (lhs, rhs):
        case (EucNil(), EucNil()):
            return True
        case (EucNumber(value=a), EucNumber(value=b)):
            return a == b
        case (EucBool(value=a), EucBool(value=b)):
            return a == b
        case (EucStr(value=a), EucStr(value=b)):
            return a == b
        case (EucChar(value=a), EucChar(value=b)):
            return a == b
        case (EucArray(items=items_a), EucArray(items=items_b)):
            return len(items_a) == len(items_b) and all(
                euc_equals(a, b) for a, b in zip(items_a, items_b)
            )
        case (EucFunction(), EucFunction()):
            return lhs.params == rhs.params and lhs.body == rhs.body
        case _:
            return False


def stringify(value: Optional[EucValue]) -> str:
    if isinstance(value, EucStr):
        return value.value

    if isinstance(value, EucChar):
        return value.value

    if isinstance(value, EucNumber):
        return repr(value)

    if isinstance(value, EucBool):
        return "true" if value.value else "false"

    if isinstance(value, EucArray):
        return "{" + ", ".join(repr(item) for item in value.items) + "}"

    if isinstance(value, EucNil) or value is None:
        return "nil"

    return repr(value)
