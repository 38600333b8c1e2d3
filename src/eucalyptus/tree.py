"""Shared helpers for working with the lark Tree/Token nodes that make up the AST."""
from __future__ import annotations
from typing import List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

from lark import Token, Tree

from .token_types import Tok

Node: TypeAlias = Tree | Token

Position = Tuple[Optional[int], Optional[int]]


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def make_token(type_: str, value: str, tok: Tok) -> Token:
    """Build a lark Token carrying the source position of a lexer token."""
    return Token(type_, value, start_pos=tok.position, line=tok.line, column=tok.column)

def make_tree(data: str, children: List[Node], tok: Tok) -> Tree:
    """Build a lark Tree whose meta points at the lexer token that opened it."""
    tree = Tree(data, children)
    meta = tree.meta
    meta.line = tok.line
    meta.column = tok.column
    meta.start_pos = tok.position
    meta.empty = False
    return tree

def node_position(node: object) -> Position:
    if is_token(node):
        return getattr(node, "line", None), getattr(node, "column", None)

    if not is_tree(node):
        return None, None

    meta = node.meta
    if not getattr(meta, "empty", True):
        return getattr(meta, "line", None), getattr(meta, "column", None)

    for child in node.children:
        line, column = node_position(child)
        if line is not None:
            return line, column

    return None, None
