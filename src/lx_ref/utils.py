from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from .types import (
    LxBoolean,
    LxClosure,
    LxNative,
    LxNull,
    LxNumber,
    LxString,
    LxValue,
)

DEBUG_PY_TRACE_ENV = "LX_DEBUG_PY_TRACE"
LOG_LEVEL_ENV = "LX_LOG_LEVEL"
RECURSION_LIMIT_ENV = "LX_RECURSION_LIMIT"

# About eight host frames per interpreted call: roughly 1200 nested lx calls
DEFAULT_RECURSION_LIMIT = 10000

_TRUTHY_FLAGS = {"1", "true", "yes", "on"}


def values_equal(lhs: LxValue, rhs: LxValue) -> bool:
    """Structural for plain data, identity for functions; never raises."""
    match (lhs, rhs):
        case (LxNull(), LxNull()):
            return True
        case (LxBoolean(value=a), LxBoolean(value=b)):
            return a == b
        case (LxNumber(value=a), LxNumber(value=b)):
            return a == b
        case (LxString(value=a), LxString(value=b)):
            return a == b
        case (LxClosure(), LxClosure()):
            return lhs is rhs
        case (LxNative(fn=a), LxNative(fn=b)):
            return a is b
        case _:
            return False


def debug_py_trace_enabled() -> bool:
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").strip().lower() in _TRUTHY_FLAGS


def log_level_from_env(default: int = logging.WARNING) -> int:
    """Resolve LX_LOG_LEVEL (a level name or number) to a logging level."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default

    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def recursion_limit_from_env(default: int = DEFAULT_RECURSION_LIMIT) -> int:
    raw = os.environ.get(RECURSION_LIMIT_ENV, "").strip()
    return int(raw) if raw.isdigit() else default


def ensure_recursion_limit(limit: Optional[int] = None) -> int:
    """Raise the host recursion limit to `limit` (never lower it); returns the limit in force."""
    wanted = recursion_limit_from_env() if limit is None else limit
    current = sys.getrecursionlimit()

    if wanted > current:
        sys.setrecursionlimit(wanted)
        return wanted

    return current
