from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from .types import (
    Environment,
    LxClosure,
    LxNative,
    LxNull,
    LxValue,
    LxRuntimeError,
    NativeFn,
    NotCallable,
)

if TYPE_CHECKING:
    from .tracker import ObjectTracker

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class NativeSpec:
    name: str
    fn: NativeFn
    arity: int = 1

class Natives:
    registry: Dict[str, NativeSpec] = {}

_NATIVES_INITIALIZED = False

def init_natives() -> None:
    """Load the native module (idempotent) so register_native hooks run."""
    global _NATIVES_INITIALIZED

    if _NATIVES_INITIALIZED:
        return

    importlib.import_module("lx_ref.stdlib")
    _NATIVES_INITIALIZED = True

def register_native(name: str, *, arity: int = 1):
    if arity < 1:
        raise ValueError(f"native '{name}' needs an arity of at least 1")

    def dec(fn: NativeFn):
        Natives.registry[name] = NativeSpec(name=name, fn=fn, arity=arity)
        return fn

    return dec

def install_natives(env: Environment, tracker: ObjectTracker, names: Optional[Iterable[str]] = None) -> None:
    """Bind registered natives into `env`; all of them unless `names` is given."""
    init_natives()
    selected = Natives.registry.keys() if names is None else names

    for name in selected:
        spec = Natives.registry.get(name)
        if spec is None:
            raise LxRuntimeError(f"unknown native '{name}'")
        native = tracker.track(LxNative(name=spec.name, fn=spec.fn, arity=spec.arity))
        env.declare_bind(name, native)

# ---------- Application ----------

def call_closure(fn: LxClosure, argument: LxValue, tracker: ObjectTracker) -> LxValue:
    if fn.released:
        raise LxRuntimeError(f"closure λ{fn.param} was released")

    from .evaluator import eval_node

    callee_env = tracker.track(Environment(parent=fn.env))
    callee_env.declare_bind(fn.param, argument)
    return eval_node(fn.body, callee_env, tracker)

def call_native(fn: LxNative, argument: LxValue, caller_env: Environment, tracker: ObjectTracker) -> LxValue:
    if fn.released:
        raise LxRuntimeError(f"native {fn.name} was released")

    if len(fn.captured) + 1 < fn.arity:
        # Partial application: remember the argument, wait for the rest
        logger.debug("partial application of %s (%d of %d)", fn.name, len(fn.captured) + 1, fn.arity)
        return tracker.track(LxNative(
            name=fn.name,
            fn=fn.fn,
            arity=fn.arity,
            captured=fn.captured + (argument,),
        ))

    result = fn.fn(argument, caller_env, fn.captured)
    return LxNull() if result is None else result

def call_value(callee: LxValue, argument: LxValue, caller_env: Environment, tracker: ObjectTracker) -> LxValue:
    match callee:
        case LxClosure():
            return call_closure(callee, argument, tracker)
        case LxNative():
            return call_native(callee, argument, caller_env, tracker)
        case _:
            raise NotCallable(callee)
