from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union
from typing_extensions import TypeAlias

from .tree import Node, render

# ---------- Value Model ----------

@dataclass
class LxNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class LxBoolean:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class LxNumber:
    value: float
    def __repr__(self) -> str:
        v = float(self.value)
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class LxString:
    value: str
    released: bool = field(default=False, compare=False, repr=False)

    def __repr__(self) -> str:
        return f'"{self.value}"'

    def dispose(self) -> None:
        self.released = True

@dataclass(eq=False)
class LxClosure:
    param: str
    body: Node                    # detached clone of the function body
    env: 'Environment'            # captured by reference
    released: bool = False

    def __repr__(self) -> str:
        if self.released:
            return f"<released closure λ{self.param}>"

        return f"λ{self.param}. {render(self.body)}"

    def dispose(self) -> None:
        self.released = True

NativeFn = Callable[['LxValue', 'Environment', Tuple['LxValue', ...]], 'LxValue']

@dataclass(eq=False)
class LxNative:
    name: str
    fn: NativeFn
    arity: int = 1
    captured: Tuple['LxValue', ...] = ()
    released: bool = False

    def __repr__(self) -> str:
        return self.name + " ?" * len(self.captured)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LxNative) and self.fn is other.fn

    def __hash__(self) -> int:
        return hash(id(self.fn))

    def dispose(self) -> None:
        self.released = True

LxValue: TypeAlias = (
    LxNull
    | LxBoolean
    | LxNumber
    | LxString
    | LxClosure
    | LxNative
)

_KIND_NAMES: Dict[type, str] = {
    LxNull: "Null",
    LxBoolean: "Boolean",
    LxNumber: "Number",
    LxString: "String",
    LxClosure: "Closure",
    LxNative: "Native",
}

def kind_name(value: LxValue) -> str:
    return _KIND_NAMES.get(type(value), type(value).__name__)

class _Unbound:
    """Marker held by a declared name whose value is not finalized yet."""

    _instance: Optional['_Unbound'] = None

    def __new__(cls) -> '_Unbound':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "unbound"

UNBOUND = _Unbound()

Slot = Union[LxValue, _Unbound]

# ---------- Environment ----------

class Environment:
    def __init__(self, parent: Optional['Environment']=None):
        self.parent = parent
        self.vars: Dict[str, Slot] = {}
        self.disposed = False

    def _chain(self) -> Iterator['Environment']:
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.parent

    def contains(self, name: str) -> bool:
        return name in self.vars

    def names(self) -> List[str]:
        return list(self.vars)

    def depth(self) -> int:
        return sum(1 for _ in self._chain()) - 1

    def declare_bind(self, name: str, value: LxValue) -> None:
        if name in self.vars:
            raise AlreadyDeclared(name)

        self.vars[name] = value

    def declare_placeholder(self, name: str) -> None:
        if name in self.vars:
            raise AlreadyDeclared(name)

        self.vars[name] = UNBOUND

    def finalize(self, name: str, value: LxValue) -> None:
        if name not in self.vars:
            raise NotDefined(name)

        if self.vars[name] is not UNBOUND:
            raise AlreadyDeclared(name)

        self.vars[name] = value

    def assign(self, name: str, value: LxValue) -> None:
        for env in self._chain():
            if name in env.vars:
                env.vars[name] = value
                return

        raise NotDefined(name)

    def lookup(self, name: str) -> LxValue:
        for env in self._chain():
            if name in env.vars:
                slot = env.vars[name]
                if isinstance(slot, _Unbound):
                    raise NotDefined(name)
                return slot

        raise NotDefined(name)

    def dump(self) -> List[str]:
        """Render the scope chain innermost first, one binding per line."""
        lines: List[str] = []

        for depth, env in enumerate(self._chain()):
            for name, slot in env.vars.items():
                lines.append(f"[{depth}] {name} = {slot!r}")

        return lines or ["empty"]

    def dispose(self) -> None:
        self.vars.clear()
        self.parent = None
        self.disposed = True

    def __repr__(self) -> str:
        return f"<Environment depth={self.depth()} names={self.names()}>"

# ---------- Exceptions ----------

class LxError(Exception):
    line: Optional[int]
    column: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.line = None
        self.column = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        if self.column is None:
            return f"{self.message} (line {self.line})"

        return f"{self.message} (line {self.line}, col {self.column})"

class LxRuntimeError(LxError):
    pass

class NotDefined(LxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"'{name}' is not defined")
        self.name = name

class AlreadyDeclared(LxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"'{name}' is already declared")
        self.name = name

class LxTypeError(LxRuntimeError):
    def __init__(self, message: str, operation: Optional[str]=None, operand_kind: Optional[str]=None):
        super().__init__(message)
        self.operation = operation
        self.operand_kind = operand_kind

class DivisionByZero(LxRuntimeError):
    def __init__(self) -> None:
        super().__init__("division by 0")

class NotCallable(LxRuntimeError):
    def __init__(self, value: LxValue):
        super().__init__(f"{kind_name(value)} {value!r} is not callable")
        self.value = value

class NotABoolean(LxRuntimeError):
    def __init__(self, value: LxValue):
        super().__init__(f"{value!r} is not a boolean")
        self.value = value

class RecursiveBinding(LxRuntimeError):
    def __init__(self, name: str, value: LxValue):
        super().__init__(f"recursive binding '{name}' must be a function, got {kind_name(value)}")
        self.name = name
        self.value = value

class LxExit(Exception):
    """Control-flow signal raised by the `exit` native."""
    def __init__(self, code: int):
        super().__init__(code)
        self.code = code
