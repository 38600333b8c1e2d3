from __future__ import annotations

from typing import Callable, List

from ..scope import Scope
from ..tree import Node
from ..types import EucValue, EucalyptusRuntimeError

EvalFunc = Callable[[Node, Scope], EucValue]

def eval_block(stmts: List[Node], scope: Scope, eval_func: EvalFunc) -> EucValue:
    """Run statements in order; the block's value is the last one's."""
    if not stmts:
        raise EucalyptusRuntimeError("cannot evaluate an empty block")

    result: EucValue
    for stmt in stmts:
        result = eval_func(stmt, scope)

    return result
