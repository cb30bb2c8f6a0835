from __future__ import annotations

from typing import Any, Callable, Optional

from lark import Token

from ..tracker import ObjectTracker
from ..tree import Node, is_token
from ..types import Environment, LxNumber, LxRuntimeError, LxString, LxValue

EvalFunc = Callable[[Node, Environment, ObjectTracker], LxValue]

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def is_token_type(node: Any, kind: str) -> bool:
    return is_token(node) and token_kind(node) == kind

def expect_ident_token(node: Any, context: str) -> str:
    if is_token_type(node, 'IDENT'):
        return str(node.value)

    raise LxRuntimeError(f"{context} must be an identifier")

def token_number(t: Token, _env: Environment, _tracker: ObjectTracker) -> LxNumber:
    return LxNumber(float(t.value))

def token_string(t: Token, _env: Environment, tracker: ObjectTracker) -> LxString:
    # Lexeme keeps its quotes; there are no escapes to process
    return tracker.track(LxString(str(t.value)[1:-1]))
