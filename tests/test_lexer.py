from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from tests.support.harness import TT, InvalidEncoding, LexError, Lexer, tokenize


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, str], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("number-int", "123", expected=((TT.NUMBER, "123"),)),
    Case("number-float", "3.14", expected=((TT.NUMBER, "3.14"),)),
    Case("number-exponent", "1e-3", expected=((TT.NUMBER, "1e-3"),)),
    Case("number-exponent-plus", "2E+10", expected=((TT.NUMBER, "2E+10"),)),
    Case("number-exponent-negative", "2e-1", expected=((TT.NUMBER, "2e-1"),)),
    Case(
        "ident-e-minus",
        "e-1",
        expected=((TT.IDENT, "e"), (TT.MINUS, "-"), (TT.NUMBER, "1")),
    ),
    Case(
        "number-minus-number",
        "2-1",
        expected=((TT.NUMBER, "2"), (TT.MINUS, "-"), (TT.NUMBER, "1")),
    ),
    Case("ident-single", "x", expected=((TT.IDENT, "x"),)),
    Case("ident-snake", "foo_bar", expected=((TT.IDENT, "foo_bar"),)),
    Case("ident-digit-prefix", "1x", expected=((TT.IDENT, "1x"),)),
    Case("ident-bang", "!", expected=((TT.IDENT, "!"),)),
    Case("ident-unicode", "größe", expected=((TT.IDENT, "größe"),)),
    Case("string", '"hello world"', expected=((TT.STRING, '"hello world"'),)),
    Case("string-empty", '""', expected=((TT.STRING, '""'),)),
    Case("string-hash-inside", '"a # b"', expected=((TT.STRING, '"a # b"'),)),
    Case("string-unterminated", '"abc', expected=((TT.UNTERMINATED_STRING, '"abc'),)),
    Case("comment", "# note", expected=((TT.COMMENT, "# note"),)),
    Case("bool-true", "true", expected=((TT.TRUE, "true"),)),
    Case("bool-false", "false", expected=((TT.FALSE, "false"),)),
    Case("null-literal", "null", expected=((TT.NULL, "null"),)),
    Case("lambda-backslash", "\\", expected=((TT.LAMBDA, "\\"),)),
    Case("lambda-unicode", "λ", expected=((TT.LAMBDA, "λ"),)),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "+", expected_types=(TT.PLUS,)),
    Case("minus", "-", expected_types=(TT.MINUS,)),
    Case("star", "*", expected_types=(TT.STAR,)),
    Case("slash", "/", expected_types=(TT.SLASH,)),
    Case("equal", "==", expected_types=(TT.EQUAL,)),
    Case("not-equal", "!=", expected_types=(TT.NOT_EQUAL,)),
    Case("assign", "=", expected_types=(TT.ASSIGN,)),
    Case("dot", ".", expected_types=(TT.DOT,)),
    Case("parens", "()", expected_types=(TT.LPAR, TT.RPAR)),
    Case("triple-equal", "===", expected_types=(TT.EQUAL, TT.ASSIGN)),
]

SEQUENCE_CASES: List[Case] = [
    Case(
        "lambda-with-dot",
        "\\x.x",
        expected_types=(TT.LAMBDA, TT.IDENT, TT.DOT, TT.IDENT),
    ),
    Case(
        "lambda-number-body",
        "λx.1",
        expected_types=(TT.LAMBDA, TT.IDENT, TT.DOT, TT.NUMBER),
    ),
    Case(
        "let-in",
        "let id = λx.x in id 5",
        expected_types=(
            TT.LET, TT.IDENT, TT.ASSIGN, TT.LAMBDA, TT.IDENT, TT.DOT,
            TT.IDENT, TT.IN, TT.IDENT, TT.NUMBER,
        ),
    ),
    Case(
        "keyword-prefixes-are-idents",
        "letlet inin letin",
        expected_types=(TT.IDENT, TT.IDENT, TT.IDENT),
    ),
    Case(
        "minus-splits-symbols",
        "let-in",
        expected_types=(TT.LET, TT.MINUS, TT.IN),
    ),
    Case(
        "selection",
        "if a then b else c",
        expected_types=(TT.IF, TT.IDENT, TT.THEN, TT.IDENT, TT.ELSE, TT.IDENT),
    ),
    Case(
        "arithmetic-no-spaces",
        "1+2*3/4-5",
        expected_types=(
            TT.NUMBER, TT.PLUS, TT.NUMBER, TT.STAR, TT.NUMBER,
            TT.SLASH, TT.NUMBER, TT.MINUS, TT.NUMBER,
        ),
    ),
    Case(
        "not-equal-between-symbols",
        "a!=b",
        expected_types=(TT.IDENT, TT.NOT_EQUAL, TT.IDENT),
    ),
    Case(
        "assign-between-symbols",
        "a=b",
        expected_types=(TT.IDENT, TT.ASSIGN, TT.IDENT),
    ),
    Case(
        "string-ends-symbol",
        'f"x"',
        expected_types=(TT.IDENT, TT.STRING),
    ),
    Case(
        "comment-then-code",
        "# header\n1",
        expected_types=(TT.COMMENT, TT.NUMBER),
    ),
    Case(
        "trailing-comment",
        "x # trailing",
        expected_types=(TT.IDENT, TT.COMMENT),
    ),
    Case(
        "exotic-whitespace",
        "\x0c1\x85\xa02\r\n\t3",
        expected_types=(TT.NUMBER, TT.NUMBER, TT.NUMBER),
    ),
    Case(
        "decimal-point-needs-digit",
        "1.x",
        expected_types=(TT.NUMBER, TT.DOT, TT.IDENT),
    ),
]


def _strip_eof(tokens):
    assert tokens[-1].type == TT.EOF
    return tokens[:-1]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda c: c.name)
def test_basic_tokens(case: Case) -> None:
    tokens = _strip_eof(tokenize(case.source))
    assert tuple((tok.type, tok.lexeme) for tok in tokens) == case.expected


@pytest.mark.parametrize("case", OPERATOR_CASES + SEQUENCE_CASES, ids=lambda c: c.name)
def test_token_types(case: Case) -> None:
    tokens = _strip_eof(tokenize(case.source))
    assert tuple(tok.type for tok in tokens) == case.expected_types


@pytest.mark.parametrize(
    "source",
    [
        pytest.param(b"\x80", id="lone-continuation-byte"),
        pytest.param(b"\xc2", id="truncated-two-byte-sequence"),
        pytest.param(b"let x = \xff in x", id="invalid-byte-mid-source"),
        pytest.param("\ud800", id="lone-surrogate"),
    ],
)
def test_invalid_encoding(source) -> None:
    with pytest.raises(InvalidEncoding):
        Lexer(source)


def test_invalid_encoding_is_a_lex_error() -> None:
    with pytest.raises(LexError):
        tokenize(b"\xc3\x28")


def test_bytes_input_decodes_utf8() -> None:
    tokens = tokenize("λx.x".encode("utf-8"))
    assert tokens[0].type == TT.LAMBDA
    assert tokens[0].lexeme == "λ"


def test_empty_source_is_eof() -> None:
    tokens = tokenize("")
    assert [tok.type for tok in tokens] == [TT.EOF]


def test_eof_is_idempotent() -> None:
    lexer = Lexer("x")
    assert lexer.next().type == TT.IDENT
    for _ in range(3):
        tok = lexer.next()
        assert tok.type == TT.EOF
        assert tok.lexeme == ""


def test_iteration_stops_after_eof() -> None:
    assert [tok.type for tok in Lexer("a b")] == [TT.IDENT, TT.IDENT, TT.EOF]


def test_positions_track_lines_and_columns() -> None:
    tokens = tokenize('let x =\n  "a\nb" in\n x')
    positions = [(tok.lexeme, tok.line, tok.column) for tok in _strip_eof(tokens)]
    assert positions == [
        ("let", 1, 1),
        ("x", 1, 5),
        ("=", 1, 7),
        ('"a\nb"', 2, 3),
        ("in", 3, 4),
        ("x", 4, 2),
    ]


def test_comment_excludes_newline() -> None:
    comment = tokenize("# c\nx")[0]
    assert comment.type == TT.COMMENT
    assert comment.lexeme == "# c"


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("let rec fact = \\n. if n == 0 then 1 else n * fact (n - 1) in fact 5", id="factorial"),
        pytest.param('# greet\nlet s = "hi there" in s != null', id="comment-and-string"),
        pytest.param("(λx.x)   123\t\n", id="unicode-lambda"),
    ],
)
def test_spans_tile_source(source: str) -> None:
    """Token spans are exact and only whitespace lies between them."""
    tokens = _strip_eof(tokenize(source))
    cursor = 0
    for tok in tokens:
        assert source[tok.start:tok.end] == tok.lexeme
        assert source[cursor:tok.start].strip() == ""
        cursor = tok.end
    assert source[cursor:].strip() == ""
