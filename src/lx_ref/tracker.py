"""Ownership registry for heap objects created while evaluating a session."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, TypeVar

from lark import Tree

from .types import Environment, LxClosure, LxNative, LxRuntimeError, LxString

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRACKABLE = (Environment, Tree, LxString, LxClosure, LxNative)


class ObjectTracker:
    """
    Append-only registry of objects produced during evaluation.

    Nothing is freed incrementally: `release()` tears everything down at once,
    payloads (closures, strings, natives, cloned trees) before the
    environments they may still point at.
    """

    def __init__(self) -> None:
        self._objects: List[object] = []
        self._seen: set[int] = set()
        self.released = False

    def track(self, obj: T) -> T:
        if self.released:
            raise LxRuntimeError("object tracker already released")

        if not isinstance(obj, _TRACKABLE):
            logger.warning("ignored: tracking a non-object %r", obj)
            return obj

        key = id(obj)
        if key not in self._seen:
            self._seen.add(key)
            self._objects.append(obj)

        return obj

    def release(self) -> int:
        """Dispose every tracked object exactly once; returns how many."""
        if self.released:
            return 0

        envs: List[Environment] = []
        count = 0

        for obj in self._objects:
            if isinstance(obj, Environment):
                envs.append(obj)
                continue

            if isinstance(obj, Tree):
                obj.children = []
            else:
                obj.dispose()  # type: ignore[attr-defined]
            count += 1

        for env in envs:
            env.dispose()
            count += 1

        logger.debug("released %d objects (%d environments)", count, len(envs))
        self._objects.clear()
        self._seen.clear()
        self.released = True
        return count

    def counts(self) -> Dict[str, int]:
        return dict(Counter(type(obj).__name__ for obj in self._objects))

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, obj: object) -> bool:
        return id(obj) in self._seen
