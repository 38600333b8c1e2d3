from __future__ import annotations

from typing import Any, Callable, List

from ..scope import Scope
from ..tree import Node
from ..types import (
    EucFunction,
    EucValue,
    EucalyptusArityError,
    EucalyptusRuntimeError,
    T_ANY,
)
from .blocks import eval_block
from .common import body_statements, extract_param_names

EvalFunc = Callable[[Node, Scope], EucValue]

def make_function(params_node: Any, body: Any, scope: Scope) -> EucFunction:
    """Function value closing over the scope it is defined in."""
    return EucFunction(
        params=extract_param_names(params_node),
        body=body_statements(body),
        scope=scope,
    )

def call_value(callee: EucValue, args: List[EucValue], eval_func: EvalFunc) -> EucValue:
    if not isinstance(callee, EucFunction):
        raise EucalyptusRuntimeError(f"cannot call non-function value {callee!r}")

    return call_function(callee, args, eval_func)

def call_function(fn: EucFunction, args: List[EucValue], eval_func: EvalFunc) -> EucValue:
    """
    Call semantics:
    - the call scope is a fresh child of the function's defining scope,
      not of the caller's
    - arguments are bound to parameters positionally, typed Any
    - the body runs in order and its last statement is the result
    """
    if len(args) != len(fn.params):
        raise EucalyptusArityError(f"function expects {len(fn.params)} argument(s); got {len(args)}")

    call_scope = fn.scope.child()

    for name, arg in zip(fn.params, args):
        call_scope.declare(name, type=T_ANY, value=arg)

    return eval_block(fn.body, call_scope, eval_func)
