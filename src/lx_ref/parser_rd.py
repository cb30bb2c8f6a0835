"""
Recursive Descent Parser for lx

Structure:
- Lexer: lazy token stream from source (comments skipped here)
- Parser: one-token lookahead, one method per precedence level
- AST: lark Tree/Token nodes, labels listed below

Node labels:
    program     []  or  [expr]
    primary     [Token]
    binary      [left, Token(op), right]
    function    [Token(IDENT), body]
    application [fn, arg]
    binding     [Token(IDENT), value, body]
    recbinding  [Token(IDENT), value, body]
    selection   [cond, then, else]
"""

from typing import List, Optional, Union
from lark import Tree, Token

from .lexer_rd import Lexer
from .token_types import TT, Tok
from .types import LxError

# ============================================================================
# Parser
# ============================================================================

class ParseError(LxError):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        super().__init__(message)
        self.token = token
        if token is not None:
            self.line = token.line
            self.column = token.column

    def __str__(self) -> str:
        if self.token is None:
            return self.message
        return f"{self.message} at line {self.line}, col {self.column}"

# Tokens that can begin a primary, and therefore continue an application
PRIMARY_START = frozenset({
    TT.NULL,
    TT.TRUE,
    TT.FALSE,
    TT.NUMBER,
    TT.STRING,
    TT.UNTERMINATED_STRING,
    TT.IDENT,
    TT.LPAR,
    TT.LAMBDA,
})

LITERALS = frozenset({TT.NULL, TT.TRUE, TT.FALSE, TT.NUMBER, TT.STRING, TT.IDENT})

def describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "end of input"
    return f"{tok.type.name} {tok.lexeme!r}"

def leaf(tok: Tok) -> Token:
    """Convert a lexer token into the lark Token the AST owns"""
    return Token(
        tok.type.name,
        tok.lexeme,
        start_pos=tok.start,
        line=tok.line,
        column=tok.column,
        end_pos=tok.end,
    )

class Parser:
    """
    Recursive descent parser for lx.

    Expression precedence (lowest to highest):
    1. binding (let / let rec), selection (if)
    2. equality (==, !=)
    3. additive (+, -)
    4. multiplicative (*, /)
    5. application (juxtaposition, left-assoc)
    6. primary (literals, identifiers, functions, parens)
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.consumed: List[Tok] = []
        self.current = self._fetch()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _fetch(self) -> Tok:
        tok = self.lexer.next()
        while tok.type == TT.COMMENT:
            tok = self.lexer.next()
        return tok

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if prev.type != TT.EOF:
            self.consumed.append(prev)
            self.current = self._fetch()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        if self.check(TT.EOF):
            return Tree('program', [])

        expr = self.parse_expression()

        if not self.check(TT.EOF):
            raise ParseError(f"Unexpected {describe(self.current)} after expression", self.current)

        return Tree('program', [expr])

    def parse_expression(self) -> Tree:
        if self.check(TT.LET):
            return self.parse_binding()

        if self.check(TT.IF):
            return self.parse_selection()

        return self.parse_equality()

    def parse_binding(self) -> Tree:
        """Parse `let [rec] name = value in body`"""
        self.expect(TT.LET)
        name = self.expect(TT.IDENT, f"Expected a name after 'let', got {describe(self.current)}")
        label = 'binding'

        # `rec` is contextual: only a marker when another name follows
        if name.lexeme == 'rec' and self.check(TT.IDENT):
            name = self.advance()
            label = 'recbinding'

        self.expect(TT.ASSIGN, f"Expected '=' in binding, got {describe(self.current)}")
        value = self.parse_expression()
        self.expect(TT.IN, f"Expected 'in' after binding value, got {describe(self.current)}")
        body = self.parse_expression()

        return Tree(label, [leaf(name), value, body])

    def parse_selection(self) -> Tree:
        """Parse `if cond then expr else expr`"""
        self.expect(TT.IF)
        cond = self.parse_expression()
        self.expect(TT.THEN, f"Expected 'then' after condition, got {describe(self.current)}")
        then = self.parse_expression()
        self.expect(TT.ELSE, f"Expected 'else' after then-branch, got {describe(self.current)}")
        other = self.parse_expression()

        return Tree('selection', [cond, then, other])

    # ========================================================================
    # Binary Operators
    # ========================================================================

    def parse_equality(self) -> Tree:
        """Parse equality: expr == expr"""
        return self._parse_left_assoc(self.parse_additive, TT.EQUAL, TT.NOT_EQUAL)

    def parse_additive(self) -> Tree:
        """Parse addition/subtraction: expr + expr"""
        return self._parse_left_assoc(self.parse_multiplicative, TT.PLUS, TT.MINUS)

    def parse_multiplicative(self) -> Tree:
        """Parse multiplication/division: expr * expr"""
        return self._parse_left_assoc(self.parse_application, TT.STAR, TT.SLASH)

    def _parse_left_assoc(self, operand, *ops: TT) -> Tree:
        left = operand()

        while self.check(*ops):
            op = self.advance()
            right = operand()
            left = Tree('binary', [left, leaf(op), right])

        return left

    def parse_application(self) -> Tree:
        """Parse juxtaposition: f a b == ((f a) b)"""
        fn = self.parse_primary()

        while self.check(*PRIMARY_START):
            arg = self.parse_primary()
            fn = Tree('application', [fn, arg])

        return fn

    # ========================================================================
    # Primary
    # ========================================================================

    def parse_primary(self) -> Tree:
        tok = self.current

        if tok.type in LITERALS:
            self.advance()
            return Tree('primary', [leaf(tok)])

        if tok.type == TT.LAMBDA:
            return self.parse_function()

        if tok.type == TT.LPAR:
            self.advance()
            expr = self.parse_expression()
            self.expect(TT.RPAR, f"Expected ')', got {describe(self.current)}")
            return expr

        if tok.type == TT.UNTERMINATED_STRING:
            raise ParseError("Unterminated string", tok)

        raise ParseError(f"Unexpected {describe(tok)}", tok)

    def parse_function(self) -> Tree:
        """Parse `\\x. body`; the body extends as far as possible"""
        self.expect(TT.LAMBDA)
        param = self.expect(TT.IDENT, f"Expected parameter name after lambda, got {describe(self.current)}")
        self.expect(TT.DOT, f"Expected '.' after parameter, got {describe(self.current)}")
        body = self.parse_expression()

        return Tree('function', [leaf(param), body])

# ============================================================================
# Convenience
# ============================================================================

def parse_source(source: Union[str, bytes]) -> Tree:
    """
    Parse lx source code to AST.

    Raises InvalidEncoding for undecodable input and ParseError for the
    first syntax error.
    """
    return Parser(Lexer(source)).parse()
