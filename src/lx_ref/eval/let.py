from __future__ import annotations

import logging

from lark import Tree

from ..tracker import ObjectTracker
from ..types import Environment, LxClosure, LxValue, RecursiveBinding
from .common import EvalFunc, expect_ident_token

logger = logging.getLogger(__name__)

def _enter_scope(env: Environment, tracker: ObjectTracker, name: str) -> Environment:
    # Tracked before the value is computed so a failed binding is still swept
    scope = tracker.track(Environment(parent=env))
    scope.declare_placeholder(name)
    logger.debug("let %s: scope depth %d", name, scope.depth())
    return scope

def eval_binding(n: Tree, env: Environment, tracker: ObjectTracker, eval_func: EvalFunc) -> LxValue:
    """`let x = v in b`: v is evaluated outside, so it never sees x."""
    name_node, value_node, body = n.children
    name = expect_ident_token(name_node, "Binding name")

    scope = _enter_scope(env, tracker, name)
    value = eval_func(value_node, env, tracker)
    scope.finalize(name, value)

    return eval_func(body, scope, tracker)

def eval_recbinding(n: Tree, env: Environment, tracker: ObjectTracker, eval_func: EvalFunc) -> LxValue:
    """`let rec f = v in b`: v sees f, which must end up being a closure."""
    name_node, value_node, body = n.children
    name = expect_ident_token(name_node, "Binding name")

    scope = _enter_scope(env, tracker, name)
    value = eval_func(value_node, scope, tracker)

    if not isinstance(value, LxClosure):
        raise RecursiveBinding(name, value)

    scope.finalize(name, value)

    return eval_func(body, scope, tracker)
