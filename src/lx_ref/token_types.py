"""
Token Types for the lx Lexer

Shared between lexer and parser to avoid circular dependencies.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    UNTERMINATED_STRING = auto()
    IDENT = auto()

    # Keywords
    LET = auto()
    IN = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()

    # Keyword literals
    NULL = auto()
    TRUE = auto()
    FALSE = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Comparison
    EQUAL = auto()  # ==
    NOT_EQUAL = auto()  # !=

    # Binding
    ASSIGN = auto()  # =

    # Lambda
    LAMBDA = auto()  # \ or λ
    DOT = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()

    # Special
    COMMENT = auto()
    EOF = auto()


@dataclass(frozen=True)
class Tok:
    """Token with its byte-exact span into the source text"""

    type: TT
    source: str
    start: int
    end: int
    line: int = 0
    column: int = 0

    @property
    def lexeme(self) -> str:
        return self.source[self.start:self.end]

    # Parser-facing alias, matches lark.Token.value
    @property
    def value(self) -> str:
        return self.lexeme

    def __repr__(self):
        return f"Tok({self.type.name}, {self.lexeme!r}, {self.line}:{self.column})"
