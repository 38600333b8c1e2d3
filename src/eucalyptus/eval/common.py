from __future__ import annotations

from typing import Any, List, Optional

from lark import Token, Tree

from ..tree import is_token, node_position, tree_children, tree_label
from ..types import (
    EucBool,
    EucChar,
    EucNumber,
    EucStr,
    EucalyptusError,
    EucalyptusRuntimeError,
)
from ..token_types import Operand

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def is_token_type(node: Any, kind: str) -> bool:
    return is_token(node) and token_kind(node) == kind

def ident_token_value(node: Any) -> Optional[str]:
    if is_token_type(node, 'IDENT'):
        return str(node.value)

    return None

def expect_ident_token(node: Any, context: str) -> str:
    name = ident_token_value(node)
    if name is not None:
        return name

    raise EucalyptusRuntimeError(f"invalid binding target: {context} must be an identifier")

def extract_param_names(params_node: Any) -> List[str]:
    return [expect_ident_token(p, "parameter") for p in tree_children(params_node)]

def operation_parts(node: Tree) -> tuple[Any, Operand, Any]:
    left, op_tok, right = node.children
    return left, Operand[str(op_tok.type)], right

def body_statements(body: Any) -> List[Any]:
    """Statements of a lambda/function body; a bare expression becomes one statement."""
    if tree_label(body) == 'block':
        return tree_children(body)

    return [Tree('expr_stmt', [body])]

def token_number(token: Token) -> EucNumber:
    return EucNumber(float(token.value))

def token_bool(token: Token) -> EucBool:
    return EucBool(token.value == 'true')

def token_string(token: Token) -> EucStr:
    return EucStr(str(token.value))

def token_char(token: Token) -> EucChar:
    return EucChar(str(token.value))

def maybe_attach_location(exc: EucalyptusError, node: Any) -> None:
    """Give `exc` the position of `node` unless a deeper node already did."""
    if exc.has_location():
        return

    line, column = node_position(node)
    if line is None:
        return

    exc.line = line
    exc.column = column
