"""Type inference pass.

Inference is deliberately weak: `Any` is accepted on either side of an
operator and propagates, `Undefined` (the type of a declaration) is
never a valid operand. Binding statements record the inferred type of
their right-hand side in the scope's type table.
"""
from __future__ import annotations

from typing import List

from lark import Tree

from .eval.common import (
    body_statements,
    expect_ident_token,
    extract_param_names,
    maybe_attach_location,
    operation_parts,
    token_kind,
)
from .scope import Scope
from .token_types import ARITHMETIC_OPS, EQUALITY_OPS, ORDERING_OPS, Operand
from .tree import Node, is_token
from .types import (
    EucType,
    EucalyptusError,
    EucalyptusRuntimeError,
    EucalyptusTypeError,
    TypeKind,
    T_ANY,
    T_BOOL,
    T_CHAR,
    T_NUMBER,
    T_STR,
    T_UNDEFINED,
    array_of,
)

_LEAF_TYPES = {
    'NUMBER': T_NUMBER,
    'BOOL': T_BOOL,
    'STRING': T_STR,
    'CHAR': T_CHAR,
}

_ORDERED_KINDS = (TypeKind.NUMBER, TypeKind.STR, TypeKind.CHAR, TypeKind.ARRAY)

def infer_statement(stmt: Node, scope: Scope) -> EucType:
    return infer_node(stmt, scope)

def infer_node(n: Node, scope: Scope) -> EucType:
    try:
        return _infer_node_inner(n, scope)
    except EucalyptusError as e:
        maybe_attach_location(e, n)
        raise

def _infer_node_inner(n: Node, scope: Scope) -> EucType:
    if is_token(n):
        kind = token_kind(n)
        if kind == 'IDENT':
            slot, depth = scope.resolve(str(n.value))
            return scope.get_type(slot, depth)
        if kind in _LEAF_TYPES:
            return _LEAF_TYPES[kind]
        raise EucalyptusRuntimeError(f"cannot infer token '{kind}'")

    match n.data:
        case 'expr_stmt':
            return infer_node(n.children[0], scope)
        case 'block':
            return _infer_statements(n.children, scope)
        case 'binding':
            name_node, right = n.children
            name = expect_ident_token(name_node, "let target")
            scope.declare(name, type=infer_node(right, scope))
            return T_UNDEFINED
        case 'function':
            name_node, params_node, body = n.children
            scope.declare(expect_ident_token(name_node, "function name"), type=T_ANY)
            _infer_body(params_node, body, scope)
            return T_UNDEFINED
        case 'assignment':
            return _infer_assignment(n, scope)
        case 'lambda':
            params_node, body = n.children
            _infer_body(params_node, body, scope)
            return T_ANY
        case 'array':
            return array_of([infer_node(item, scope) for item in n.children])
        case 'operation':
            left, op, right = operation_parts(n)
            return infer_binary(op, infer_node(left, scope), infer_node(right, scope))
        case 'call':
            callee, arglist = n.children
            infer_node(callee, scope)
            for arg in arglist.children:
                infer_node(arg, scope)
            return T_ANY
        case 'index':
            return _infer_index(n, scope)
        case 'eof':
            return T_UNDEFINED
        case _:
            raise EucalyptusRuntimeError(f"cannot infer node '{n.data}'")

def _infer_statements(stmts: List[Node], scope: Scope) -> EucType:
    result = T_UNDEFINED
    for stmt in stmts:
        result = infer_node(stmt, scope)
    return result

def _infer_body(params_node: Tree, body: Node, scope: Scope) -> EucType:
    body_scope = scope.child()

    for param in extract_param_names(params_node):
        body_scope.declare(param, type=T_ANY)

    return _infer_statements(body_statements(body), body_scope)

def _infer_assignment(n: Tree, scope: Scope) -> EucType:
    name_node, right = n.children
    name = expect_ident_token(name_node, "assignment target")

    new_type = infer_node(right, scope)
    slot, depth = scope.resolve(name)

    if scope.get_type(slot, depth) != new_type:
        scope.set_type(slot, depth, T_ANY)

    return T_UNDEFINED

def _infer_index(n: Tree, scope: Scope) -> EucType:
    base_node, index_node = n.children
    base = infer_node(base_node, scope)
    index = infer_node(index_node, scope)

    if index.kind not in (TypeKind.NUMBER, TypeKind.ANY):
        raise EucalyptusTypeError(f"array index must be Number, not {index!r}")

    if base.kind is not TypeKind.ARRAY or not base.elements:
        return T_ANY

    first = base.elements[0]
    if all(t == first for t in base.elements[1:]):
        return first

    return T_ANY

def infer_binary(op: Operand, lhs: EucType, rhs: EucType) -> EucType:
    if op in EQUALITY_OPS:
        return T_BOOL

    if lhs.is_undefined or rhs.is_undefined:
        raise _mismatch(op, lhs, rhs)

    if op is Operand.ADD and lhs.kind is TypeKind.ARRAY:
        return array_of(lhs.elements + (rhs,))

    if lhs.is_any or rhs.is_any:
        return T_ANY

    if op is Operand.ADD or op in ARITHMETIC_OPS:
        if lhs.kind is TypeKind.NUMBER and rhs.kind is TypeKind.NUMBER:
            return T_NUMBER
        raise _mismatch(op, lhs, rhs)

    if op in ORDERING_OPS:
        if lhs.kind is rhs.kind and lhs.kind in _ORDERED_KINDS:
            return T_BOOL
        raise _mismatch(op, lhs, rhs)

    raise _mismatch(op, lhs, rhs)

def _mismatch(op: Operand, lhs: EucType, rhs: EucType) -> EucalyptusTypeError:
    return EucalyptusTypeError(f"cannot apply '{op.symbol}' to {lhs!r} and {rhs!r}")

__all__ = ["infer_statement", "infer_node", "infer_binary"]
