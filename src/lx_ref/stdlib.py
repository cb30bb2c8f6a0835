"""Built-in native functions, registered via lx_ref.runtime."""

from __future__ import annotations

from typing import Tuple

from .eval.expr import arithmetic
from .runtime import register_native
from .types import Environment, LxExit, LxNull, LxNumber, LxTypeError, LxValue, kind_name

@register_native("exit")
def native_exit(argument: LxValue, _env: Environment, _captured: Tuple[LxValue, ...]) -> LxValue:
    if not isinstance(argument, LxNumber):
        raise LxTypeError(
            f"exit expects a Number, got {kind_name(argument)}",
            operation="exit",
            operand_kind=kind_name(argument),
        )

    code = float(argument.value)
    if not code.is_integer() or not 0 <= code <= 255:
        raise LxTypeError(f"exit code must be an integer in 0..255, got {argument!r}", operation="exit")

    raise LxExit(int(code))

@register_native("env")
def native_env(_argument: LxValue, env: Environment, _captured: Tuple[LxValue, ...]) -> LxNull:
    print("\n".join(env.dump()))
    return LxNull()

@register_native("add", arity=2)
def native_add(argument: LxValue, _env: Environment, captured: Tuple[LxValue, ...]) -> LxValue:
    return arithmetic('PLUS', captured[0], argument)

@register_native("sub", arity=2)
def native_sub(argument: LxValue, _env: Environment, captured: Tuple[LxValue, ...]) -> LxValue:
    return arithmetic('MINUS', captured[0], argument)

@register_native("mul", arity=2)
def native_mul(argument: LxValue, _env: Environment, captured: Tuple[LxValue, ...]) -> LxValue:
    return arithmetic('STAR', captured[0], argument)

@register_native("div", arity=2)
def native_div(argument: LxValue, _env: Environment, captured: Tuple[LxValue, ...]) -> LxValue:
    return arithmetic('SLASH', captured[0], argument)
