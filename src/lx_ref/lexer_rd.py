"""
Lexer for lx - Recursive Descent Parser

Tokenizes lx source code into a stream of tokens.

Features:
- Lazy, pull-based tokenization (`next()`), EOF repeats forever
- Position tracking (offset span, line, column)
- Comments are emitted as tokens; the parser decides to skip them
- Unterminated strings become a token instead of an error
"""

import re
from typing import Iterator, List, Union

from .token_types import TT, Tok
from .types import LxError

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(LxError):
    """Lexical analysis error"""
    pass

class InvalidEncoding(LexError):
    """Source text is not valid UTF-8"""
    pass

class Lexer:
    """
    lx lexer.

    Recognition order at each token start:
    - line comment (`#` to end of line)
    - string literal (`"..."`, no escapes)
    - operators and punctuation, longest match first
    - a maximal symbol run, classified as keyword, number or identifier
    """

    # Keyword mapping
    KEYWORDS = {
        'let': TT.LET,
        'in': TT.IN,
        'if': TT.IF,
        'then': TT.THEN,
        'else': TT.ELSE,
        'null': TT.NULL,
        'true': TT.TRUE,
        'false': TT.FALSE,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQUAL),
        ('!=', TT.NOT_EQUAL),

        # Single-character operators
        ('\\', TT.LAMBDA),
        ('λ', TT.LAMBDA),
        ('.', TT.DOT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
    ]

    WHITESPACE = frozenset('\t\n\r \x0c\x85\xa0')

    # Characters that end a symbol run; `!` only does so in front of `=`
    DELIMITERS = frozenset('"#\\λ.=()+-*/')

    _DECIMAL_PREFIX = re.compile(r'[0-9]+')
    _EXPONENT_PREFIX = re.compile(r'[0-9]+(\.[0-9]+)?[eE]')

    def __init__(self, source: Union[str, bytes]):
        self.source = _decode(source)
        self.pos = 0
        self.line = 1
        self.column = 1
        self.done = False

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def next(self) -> Tok:
        """Scan and return the next token"""
        self.skip_whitespace()

        if self.pos >= len(self.source):
            self.done = True
            return self.emit(TT.EOF, self.pos)

        start = self.pos
        ch = self.peek()

        # Comments
        if ch == '#':
            self.skip_comment()
            return self.emit(TT.COMMENT, start)

        # String literals
        if ch == '"':
            return self.scan_string()

        # Operators and punctuation
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return self.emit(op_type, start)

        return self.scan_symbol()

    def tokenize(self) -> List[Tok]:
        """Tokenize the rest of the source, return token list ending with EOF"""
        return list(self)

    def __iter__(self) -> Iterator[Tok]:
        while not self.done:
            yield self.next()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> Tok:
        """Scan string literal: "..." (the lexeme keeps both quotes)"""
        start = self.pos
        self.advance()  # opening quote

        while self.pos < len(self.source) and self.peek() != '"':
            self.advance()

        if self.pos >= len(self.source):
            return self.emit(TT.UNTERMINATED_STRING, start)

        self.advance()  # closing quote
        return self.emit(TT.STRING, start)

    def scan_symbol(self) -> Tok:
        """Scan a symbol run and classify it as keyword, number or identifier"""
        start = self.pos

        while self.pos < len(self.source):
            ch = self.peek()
            if ch in self.WHITESPACE:
                break
            if ch == '!' and self.peek(1) == '=':
                break
            if ch in self.DELIMITERS and not self._continues_number(start, ch):
                break
            self.advance()

        lexeme = self.source[start:self.pos]

        # Check if keyword
        token_type = self.KEYWORDS.get(lexeme)
        if token_type is None:
            token_type = TT.NUMBER if _is_number(lexeme) else TT.IDENT

        return self.emit(token_type, start)

    def _continues_number(self, start: int, ch: str) -> bool:
        """Decimal point or exponent sign inside a numeric literal"""
        run = self.source[start:self.pos]

        if ch == '.':
            return bool(self._DECIMAL_PREFIX.fullmatch(run)) and self.peek(1).isdigit()

        if ch in '+-':
            return bool(self._EXPONENT_PREFIX.fullmatch(run)) and self.peek(1).isdigit()

        return False

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        for ch in result:
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(result)
        return result

    def skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.peek() in self.WHITESPACE:
            self.advance()

    def skip_comment(self) -> None:
        """Skip comment until end of line"""
        while self.pos < len(self.source) and self.peek() not in ('\n', '\r'):
            self.advance()

    def emit(self, token_type: TT, start: int) -> Tok:
        """Build a token spanning source[start:pos]"""
        # Position of the token start, recomputed from the consumed span
        span = self.source[start:self.pos]
        newlines = span.count('\n')
        if newlines:
            line = self.line - newlines
            column = 1 + start - (self.source.rfind('\n', 0, start) + 1)
        else:
            line = self.line
            column = self.column - len(span)

        return Tok(
            type=token_type,
            source=self.source,
            start=start,
            end=self.pos,
            line=line,
            column=column,
        )

def _decode(source: Union[str, bytes]) -> str:
    if isinstance(source, (bytes, bytearray)):
        try:
            return bytes(source).decode('utf-8')
        except UnicodeDecodeError as exc:
            raise InvalidEncoding(f"invalid UTF-8 at byte {exc.start}") from exc

    try:
        source.encode('utf-8')
    except UnicodeEncodeError as exc:
        raise InvalidEncoding(f"invalid UTF-8 at offset {exc.start}") from exc

    return source

def _is_number(lexeme: str) -> bool:
    if not lexeme.isascii():
        return False

    try:
        float(lexeme)
    except ValueError:
        return False

    return True

# ============================================================================
# Convenience
# ============================================================================

def tokenize(source: Union[str, bytes]) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
