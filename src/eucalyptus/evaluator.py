from __future__ import annotations

from typing import List

from lark import Tree

from .eval.blocks import eval_block
from .eval.common import (
    expect_ident_token,
    maybe_attach_location,
    operation_parts,
    token_bool,
    token_char,
    token_kind,
    token_number,
    token_string,
)
from .eval.expr import apply_binary_operator
from .eval.fn import call_value, make_function
from .scope import Scope
from .tree import Node, is_token
from .types import (
    EucArray,
    EucNil,
    EucNumber,
    EucValue,
    EucalyptusError,
    EucalyptusIndexError,
    EucalyptusRuntimeError,
)

def eval_statement(stmt: Node, scope: Scope) -> EucValue:
    return eval_node(stmt, scope)

def eval_node(n: Node, scope: Scope) -> EucValue:
    try:
        return _eval_node_inner(n, scope)
    except EucalyptusError as e:
        maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Node, scope: Scope) -> EucValue:
    if is_token(n):
        return _eval_token(n, scope)

    match n.data:
        case 'expr_stmt':
            return eval_node(n.children[0], scope)
        case 'block':
            return eval_block(n.children, scope, eval_node)
        case 'binding':
            name_node, right = n.children
            name = expect_ident_token(name_node, "let target")
            scope.declare(name, value=eval_node(right, scope))
            return EucNil()
        case 'function':
            name_node, params_node, body = n.children
            name = expect_ident_token(name_node, "function name")
            # the closure captures `scope` itself, so the body sees its own name
            scope.declare(name, value=make_function(params_node, body, scope))
            return EucNil()
        case 'assignment':
            name_node, right = n.children
            name = expect_ident_token(name_node, "assignment target")
            value = eval_node(right, scope)
            slot, depth = scope.resolve(name)
            scope.set_value(slot, depth, value)
            return EucNil()
        case 'lambda':
            params_node, body = n.children
            return make_function(params_node, body, scope)
        case 'array':
            return EucArray([eval_node(item, scope) for item in n.children])
        case 'operation':
            left, op, right = operation_parts(n)
            return apply_binary_operator(op, eval_node(left, scope), eval_node(right, scope))
        case 'call':
            callee_node, arglist = n.children
            callee = eval_node(callee_node, scope)
            args: List[EucValue] = [eval_node(arg, scope) for arg in arglist.children]
            return call_value(callee, args, eval_node)
        case 'index':
            return _eval_index(n, scope)
        case 'eof':
            return EucNil()
        case _:
            raise EucalyptusRuntimeError(f"cannot evaluate node '{n.data}'")

def _eval_token(t, scope: Scope) -> EucValue:
    match token_kind(t):
        case 'IDENT':
            slot, depth = scope.resolve(str(t.value))
            return scope.get_value(slot, depth)
        case 'NUMBER':
            return token_number(t)
        case 'BOOL':
            return token_bool(t)
        case 'STRING':
            return token_string(t)
        case 'CHAR':
            return token_char(t)

    raise EucalyptusRuntimeError(f"cannot evaluate token '{token_kind(t)}'")

def _eval_index(n: Tree, scope: Scope) -> EucValue:
    base_node, index_node = n.children
    base = eval_node(base_node, scope)
    index = eval_node(index_node, scope)

    if not isinstance(base, EucArray):
        raise EucalyptusRuntimeError(f"cannot index non-array value {base!r}")

    if not isinstance(index, EucNumber):
        raise EucalyptusRuntimeError(f"array index must be a number, not {index!r}")

    try:
        i = int(index.value)
    except (OverflowError, ValueError):
        raise EucalyptusRuntimeError(f"invalid array index {index!r}") from None

    if i < 0 or i >= len(base.items):
        raise EucalyptusIndexError(i, len(base.items))

    return base.items[i]

__all__ = ["eval_statement", "eval_node"]
