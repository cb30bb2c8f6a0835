from __future__ import annotations

from typing import Dict, Tuple

from lark import Tree

from ..tracker import ObjectTracker
from ..types import (
    DivisionByZero,
    Environment,
    LxBoolean,
    LxNumber,
    LxTypeError,
    LxValue,
    kind_name,
)
from ..utils import values_equal
from .common import EvalFunc

# op token -> (verb, preposition) for type error messages
_ARITH_VERBS: Dict[str, Tuple[str, str]] = {
    'PLUS': ('add', 'to'),
    'MINUS': ('subtract', 'from'),
    'STAR': ('multiply', 'with'),
    'SLASH': ('divide', 'by'),
}

def arithmetic(op: str, left: LxValue, right: LxValue) -> LxNumber:
    verb, prep = _ARITH_VERBS[op]

    if not isinstance(left, LxNumber) or not isinstance(right, LxNumber):
        offending = right if isinstance(left, LxNumber) else left
        raise LxTypeError(
            f"can not {verb} {kind_name(left)} {prep} {kind_name(right)}",
            operation=verb,
            operand_kind=kind_name(offending),
        )

    lhs, rhs = left.value, right.value

    match op:
        case 'PLUS':
            return LxNumber(lhs + rhs)
        case 'MINUS':
            return LxNumber(lhs - rhs)
        case 'STAR':
            return LxNumber(lhs * rhs)
        case 'SLASH':
            if rhs == 0:
                raise DivisionByZero()
            return LxNumber(lhs / rhs)

    raise LxTypeError(f"unknown arithmetic operator {op}")

def eval_binary(n: Tree, env: Environment, tracker: ObjectTracker, eval_func: EvalFunc) -> LxValue:
    left_node, op, right_node = n.children
    left = eval_func(left_node, env, tracker)
    right = eval_func(right_node, env, tracker)

    match op.type:
        case 'EQUAL':
            return LxBoolean(values_equal(left, right))
        case 'NOT_EQUAL':
            return LxBoolean(not values_equal(left, right))
        case _:
            return arithmetic(op.type, left, right)
