from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Iterable, Optional, Union

from lark import Tree

from .evaluator import evaluate
from .parser_rd import parse_source
from .runtime import install_natives
from .tracker import ObjectTracker
from .types import Environment, LxError, LxExit, LxNull, LxValue
from .utils import debug_py_trace_enabled, ensure_recursion_limit, log_level_from_env

logger = logging.getLogger(__name__)

RESULT_SLOT = "_"

class Session:
    """
    One root environment plus the tracker that owns everything evaluated in it.

    A script uses a session once; the REPL keeps one alive across lines and
    exposes the last successful result as `_`.
    """

    def __init__(self, repl: bool=False, natives: Optional[Iterable[str]]=None):
        self.repl = repl
        self.recursion_limit = ensure_recursion_limit()
        self.tracker = ObjectTracker()
        self.env = self.tracker.track(Environment())
        install_natives(self.env, self.tracker, natives)
        logger.debug("session root has %d bindings, recursion limit %d", len(self.env.names()), self.recursion_limit)

        if repl:
            self.env.declare_bind(RESULT_SLOT, LxNull())

    def parse(self, source: Union[str, bytes]) -> Tree:
        return parse_source(source)

    def eval(self, source: Union[str, bytes]) -> LxValue:
        ast = self.parse(source)
        return self.eval_tree(ast)

    def eval_tree(self, ast: Tree) -> LxValue:
        result = evaluate(ast, self.env, self.tracker)

        if self.repl:
            self.env.assign(RESULT_SLOT, result)

        return result

    def release(self) -> int:
        return self.tracker.release()

    def __enter__(self) -> 'Session':
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

def run(src: Union[str, bytes]) -> LxValue:
    """Evaluate a whole program in a fresh session, then release it."""
    with Session() as session:
        return session.eval(src)

def run_file(path: Union[str, Path]) -> LxValue:
    return run(Path(path).read_bytes())

def _load_source(arg: Optional[str]) -> bytes:
    """
    Resolve CLI input into source bytes.
    - "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """
    if arg == "-":
        return sys.stdin.buffer.read()

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_bytes()

    return arg.encode("utf-8")

def report_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def configure_logging(debug: bool=False) -> None:
    level = logging.DEBUG if debug else log_level_from_env()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

def run_script(source: bytes) -> int:
    """Script driver: print the result, stop at the first error."""
    with Session() as session:
        try:
            result = session.eval(source)
        except LxExit as signal:
            return signal.code
        except LxError as exc:
            report_error(exc)
            return 1
        except RecursionError as exc:
            report_error(RuntimeError(f"maximum recursion depth exceeded ({exc})"))
            return 1

        print(result)
        return 0

def main() -> None:
    debug = False
    arg = None

    for token in sys.argv[1:]:
        if token == "--debug":
            debug = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    configure_logging(debug)

    if arg is None:
        from .repl import repl
        repl()
        return

    sys.exit(run_script(_load_source(arg)))

if __name__ == "__main__":
    main()
