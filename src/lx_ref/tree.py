"""Shared helpers for working with the lark Tree/Token nodes the parser builds."""
from __future__ import annotations
from typing import Any, List, Optional, TypeGuard
from typing_extensions import TypeAlias

from lark import Token, Tree

Node: TypeAlias = Tree | Token


def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Any) -> List[Node]:
    if not is_tree(node):
        return []

    children = getattr(node, "children", None)
    if children is None:
        return []

    return list(children)

def first_token(node: Any) -> Optional[Token]:
    """Leftmost token of a subtree, used for error locations."""
    if is_token(node):
        return node

    for child in tree_children(node):
        tok = first_token(child)
        if tok is not None:
            return tok

    return None

# ---------- Unparsing ----------

def _operand(node: Node) -> str:
    if tree_label(node) in {'primary', 'application'}:
        return render(node)
    return f"({render(node)})"

def _argument(node: Node) -> str:
    if tree_label(node) == 'primary':
        return render(node)
    return f"({render(node)})"

def render(node: Any) -> str:
    """Render a node back to lx source; used when displaying closures."""
    if is_token(node):
        return str(node)

    kids = tree_children(node)

    match tree_label(node):
        case 'program':
            return render(kids[0]) if kids else ""
        case 'primary':
            return str(kids[0])
        case 'binary':
            left, op, right = kids
            return f"{_operand(left)} {op} {_operand(right)}"
        case 'function':
            param, body = kids
            return f"λ{param}. {render(body)}"
        case 'application':
            fn, arg = kids
            return f"{_operand(fn)} {_argument(arg)}"
        case 'binding':
            name, value, body = kids
            return f"let {name} = {render(value)} in {render(body)}"
        case 'recbinding':
            name, value, body = kids
            return f"let rec {name} = {render(value)} in {render(body)}"
        case 'selection':
            cond, then, other = kids
            return f"if {render(cond)} then {render(then)} else {render(other)}"
        case label:
            raise ValueError(f"Cannot render node {label!r}")
