from __future__ import annotations

from lark import Tree

from ..tracker import ObjectTracker
from ..types import Environment, LxBoolean, LxValue, NotABoolean
from .common import EvalFunc

def eval_selection(n: Tree, env: Environment, tracker: ObjectTracker, eval_func: EvalFunc) -> LxValue:
    cond_node, then_node, else_node = n.children
    cond = eval_func(cond_node, env, tracker)

    # No truthiness: only a Boolean picks a branch
    if not isinstance(cond, LxBoolean):
        raise NotABoolean(cond)

    branch = then_node if cond.value else else_node
    return eval_func(branch, env, tracker)
