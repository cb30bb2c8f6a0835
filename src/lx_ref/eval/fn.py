from __future__ import annotations

import copy
import logging

from lark import Tree

from ..runtime import call_value
from ..tracker import ObjectTracker
from ..types import Environment, LxClosure, LxValue
from .common import EvalFunc, expect_ident_token

logger = logging.getLogger(__name__)

def eval_function(n: Tree, env: Environment, tracker: ObjectTracker, _eval_func: EvalFunc) -> LxClosure:
    param_node, body = n.children
    param = expect_ident_token(param_node, "Function parameter")

    # The closure owns its own copy of the body, independent of the parse tree
    clone = tracker.track(copy.deepcopy(body))
    closure = tracker.track(LxClosure(param=param, body=clone, env=env))
    logger.debug("closure λ%s captured scope at depth %d", param, env.depth())

    return closure

def eval_application(n: Tree, env: Environment, tracker: ObjectTracker, eval_func: EvalFunc) -> LxValue:
    fn_node, arg_node = n.children
    callee = eval_func(fn_node, env, tracker)
    argument = eval_func(arg_node, env, tracker)

    return call_value(callee, argument, env, tracker)
