from __future__ import annotations

from typing import Callable

from lark import Token, Tree

from .tracker import ObjectTracker
from .tree import Node, first_token, is_token, tree_children
from .types import (
    Environment,
    LxBoolean,
    LxError,
    LxNull,
    LxRuntimeError,
    LxValue,
)

from .eval.common import EvalFunc, token_number, token_string
from .eval.control import eval_selection
from .eval.expr import eval_binary
from .eval.fn import eval_application, eval_function
from .eval.let import eval_binding, eval_recbinding

def _maybe_attach_location(exc: LxError, node: Node) -> None:
    # Innermost failing node wins; outer frames see a located error and skip
    if exc.line is not None:
        return

    tok = first_token(node)
    if tok is None or getattr(tok, "line", None) is None:
        return

    exc.line = tok.line
    exc.column = tok.column

# ---------------- Public API ----------------

def evaluate(ast: Node, env: Environment, tracker: ObjectTracker) -> LxValue:
    """
    Evaluate a parsed program or expression in `env`.

    Every heap object created along the way is registered with `tracker`;
    the caller owns it and decides when to release.
    """
    return eval_node(ast, env, tracker)

# ---------------- Core evaluator ----------------

def eval_node(n: Node, env: Environment, tracker: ObjectTracker) -> LxValue:
    # Each node costs this frame plus its handler; no intermediate wrappers
    try:
        if is_token(n):
            return _eval_token(n, env, tracker)

        d = n.data
        handler = _NODE_DISPATCH.get(d)
        if handler is not None:
            return handler(n, env, tracker, eval_node)

        match d:
            case 'program':
                kids = tree_children(n)
                if not kids:
                    return LxNull()
                return eval_node(kids[0], env, tracker)
            case 'primary':
                return eval_node(n.children[0], env, tracker)
            case _:
                raise LxRuntimeError(f"Unknown node type: {d}")
    except LxRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_token(t: Token, env: Environment, tracker: ObjectTracker) -> LxValue:
    handler = _TOKEN_DISPATCH.get(t.type)
    if handler:
        return handler(t, env, tracker)

    if t.type == 'IDENT':
        return env.lookup(str(t.value))

    raise LxRuntimeError(f"Unhandled token {t.type}:{t.value}")


_NODE_DISPATCH: dict[str, Callable[[Tree, Environment, ObjectTracker, EvalFunc], LxValue]] = {
    'binary': eval_binary,
    'function': eval_function,
    'application': eval_application,
    'binding': eval_binding,
    'recbinding': eval_recbinding,
    'selection': eval_selection,
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Environment, ObjectTracker], LxValue]] = {
    'NUMBER': token_number,
    'STRING': token_string,
    'TRUE': lambda _, __, ___: LxBoolean(True),
    'FALSE': lambda _, __, ___: LxBoolean(False),
    'NULL': lambda _, __, ___: LxNull(),
}
