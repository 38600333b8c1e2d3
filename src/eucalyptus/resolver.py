"""Name resolution pass.

Checks that every identifier use reaches a declaration, declaring names
as `let` statements introduce them. Lambda and function bodies are
resolved in a fresh child scope whose parameters are placeholders typed
Any, so the three scope tables grow together here exactly as they will
when the body is later called.
"""
from __future__ import annotations

from lark import Tree

from .eval.common import (
    body_statements,
    expect_ident_token,
    extract_param_names,
    maybe_attach_location,
    token_kind,
)
from .scope import Scope
from .tree import Node, is_token
from .types import EucalyptusError, EucalyptusRuntimeError, T_ANY

def resolve_statement(stmt: Node, scope: Scope) -> None:
    resolve_node(stmt, scope)

def resolve_node(n: Node, scope: Scope) -> None:
    try:
        _resolve_node_inner(n, scope)
    except EucalyptusError as e:
        maybe_attach_location(e, n)
        raise

def _resolve_node_inner(n: Node, scope: Scope) -> None:
    if is_token(n):
        if token_kind(n) == 'IDENT':
            scope.resolve(str(n.value))
        return

    match n.data:
        case 'expr_stmt' | 'array' | 'operation' | 'call' | 'arglist' | 'index':
            for child in n.children:
                resolve_node(child, scope)
        case 'block':
            for stmt in n.children:
                resolve_node(stmt, scope)
        case 'binding':
            name_node, right = n.children
            name = expect_ident_token(name_node, "let target")
            # right-hand side first: the name is not visible to itself
            resolve_node(right, scope)
            scope.declare(name)
        case 'function':
            name_node, params_node, body = n.children
            # named functions may call themselves
            scope.declare(expect_ident_token(name_node, "function name"), type=T_ANY)
            _resolve_body(params_node, body, scope)
        case 'assignment':
            name_node, right = n.children
            name = expect_ident_token(name_node, "assignment target")
            resolve_node(right, scope)
            scope.resolve(name)
        case 'lambda':
            params_node, body = n.children
            _resolve_body(params_node, body, scope)
        case 'paramlist' | 'eof':
            pass
        case _:
            raise EucalyptusRuntimeError(f"cannot resolve node '{n.data}'")

def _resolve_body(params_node: Tree, body: Node, scope: Scope) -> None:
    body_scope = scope.child()

    for param in extract_param_names(params_node):
        body_scope.declare(param, type=T_ANY)

    for stmt in body_statements(body):
        resolve_node(stmt, body_scope)

__all__ = ["resolve_statement", "resolve_node"]
