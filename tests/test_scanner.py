"""
Bake Scanner Test Suite
=======================

Tests for the token stream adapter: token categories, newlines as
statement terminators, comments, byte offsets and opaque-word mode.
"""

import pytest

from bake.lang.errors import BakeSyntaxError, UnterminatedLiteralError
from bake.lang.scanner import STATEMENT_DELIMITERS, Scanner, Token, TokenKind
from bake.lang.source import SourceMap, load_source


def make_scanner(text: str) -> Scanner:
    data = text.encode("utf-8")
    return Scanner(SourceMap("test.bake", data))


def scan_all(text: str) -> list[Token]:
    scanner = make_scanner(text)
    tokens = []
    while True:
        token = scanner.scan()
        tokens.append(token)
        if token.kind is TokenKind.EOF:
            return tokens


def kinds(text: str) -> list[TokenKind]:
    return [t.kind for t in scan_all(text)]


def literals(text: str) -> list[str]:
    return [t.literal for t in scan_all(text)]


# =============================================================================
# Basic Tokens
# =============================================================================

class TestBasicTokens:
    """Token categories produced in normal mode."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        assert kinds("") == [TokenKind.EOF]

    def test_var_declaration(self):
        """Keywords come back as identifiers; '=' is punctuation."""
        assert kinds("var x = 5") == [
            TokenKind.IDENT,
            TokenKind.IDENT,
            TokenKind.PUNCT,
            TokenKind.INT,
            TokenKind.EOF,
        ]
        assert literals("var x = 5") == ["var", "x", "=", "5", ""]

    def test_identifiers_with_underscores_and_digits(self):
        """Identifiers may contain digits and underscores."""
        assert literals("_a1 b_2") == ["_a1", "b_2", ""]

    def test_eof_is_sticky(self):
        """Scanning past the end keeps returning EOF."""
        scanner = make_scanner("x")
        scanner.scan()
        assert scanner.scan().kind is TokenKind.EOF
        assert scanner.scan().kind is TokenKind.EOF

    def test_token_count_excludes_eof(self):
        """token_count counts every token except EOF."""
        scanner = make_scanner("f(a, b)")
        while scanner.scan().kind is not TokenKind.EOF:
            pass
        assert scanner.token_count == 6


class TestNumbers:
    """Go-style numeric literals."""

    @pytest.mark.parametrize("text,kind", [
        ("42", TokenKind.INT),
        ("1_000", TokenKind.INT),
        ("0x7F", TokenKind.INT),
        ("0o17", TokenKind.INT),
        ("0b1010", TokenKind.INT),
        ("3.14", TokenKind.FLOAT),
        (".5", TokenKind.FLOAT),
        ("1e9", TokenKind.FLOAT),
        ("2.5e-3", TokenKind.FLOAT),
        ("3i", TokenKind.IMAG),
        ("1.5i", TokenKind.IMAG),
    ])
    def test_number_kinds(self, text, kind):
        tokens = scan_all(text)
        assert tokens[0].kind is kind
        assert tokens[0].literal == text

    def test_missing_hex_digits(self):
        """A radix prefix without digits is an error."""
        with pytest.raises(BakeSyntaxError, match="missing digits"):
            scan_all("0x")

    def test_exponent_without_digits(self):
        with pytest.raises(BakeSyntaxError, match="exponent"):
            scan_all("1e+")


class TestQuotedLiterals:
    """Strings, characters and raw strings."""

    def test_string_keeps_quotes_and_escapes(self):
        tokens = scan_all(r'"a\"b\n"')
        assert tokens[0].kind is TokenKind.STRING
        assert tokens[0].literal == r'"a\"b\n"'

    def test_char_literal(self):
        tokens = scan_all("'c'")
        assert tokens[0].kind is TokenKind.CHAR
        assert tokens[0].literal == "'c'"

    def test_raw_string_spans_lines(self):
        tokens = scan_all("`a\nb`")
        assert tokens[0].kind is TokenKind.RAW_STRING
        assert tokens[0].literal == "`a\nb`"

    def test_unterminated_string(self):
        with pytest.raises(UnterminatedLiteralError) as exc_info:
            scan_all('x = "abc')
        assert exc_info.value.location.column == 5

    def test_string_cannot_span_lines(self):
        with pytest.raises(UnterminatedLiteralError):
            scan_all('"abc\ndef"')


# =============================================================================
# Line Structure
# =============================================================================

class TestStatementTerminators:
    """Newlines surface as ';' tokens."""

    def test_newline_is_semicolon(self):
        tokens = scan_all("a\nb")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENT,
            TokenKind.SEMICOLON,
            TokenKind.IDENT,
            TokenKind.EOF,
        ]
        assert tokens[1].literal == ";"

    def test_explicit_semicolon(self):
        assert kinds("a; b") == [
            TokenKind.IDENT,
            TokenKind.SEMICOLON,
            TokenKind.IDENT,
            TokenKind.EOF,
        ]

    def test_carriage_return_is_semicolon(self):
        assert kinds("a\rb")[1] is TokenKind.SEMICOLON

    def test_line_comment_keeps_newline(self):
        """A // comment is skipped but the newline after it is not."""
        assert literals("a // note\nb") == ["a", ";", "b", ""]

    def test_block_comment_skipped(self):
        assert literals("/* note */ a") == ["a", ""]

    def test_unterminated_block_comment(self):
        with pytest.raises(UnterminatedLiteralError, match="comment"):
            scan_all("a /* never closed")


class TestOffsets:
    """Byte offsets and positions."""

    def test_offsets_and_positions(self):
        tokens = scan_all("var x")
        assert tokens[0].offset == 0
        assert tokens[0].pos == 1
        assert tokens[1].offset == 4
        assert tokens[1].end == 5

    def test_offsets_are_bytes(self):
        """Offsets count UTF-8 bytes, not characters."""
        tokens = scan_all('"é" x')
        assert tokens[0].end == 4
        assert tokens[1].offset == 5


# =============================================================================
# Opaque-Word Mode
# =============================================================================

class TestStopAt:
    """stop_at() returns the rest of a statement as one word."""

    def test_word_up_to_semicolon(self):
        scanner = make_scanner("x = a + f(b); y")
        assert scanner.scan().literal == "x"

        scanner.stop_at(*STATEMENT_DELIMITERS)
        assert scanner.stopping
        word = scanner.scan()
        assert word.kind is TokenKind.WORD
        assert word.literal == "= a + f(b)"
        assert scanner.scan().kind is TokenKind.SEMICOLON

        scanner.stop_at()
        assert not scanner.stopping
        token = scanner.scan()
        assert token.kind is TokenKind.IDENT
        assert token.literal == "y"

    def test_delimiter_inside_string_does_not_end_word(self):
        scanner = make_scanner('x "a;b" + c\nz')
        scanner.scan()
        scanner.stop_at(*STATEMENT_DELIMITERS)
        assert scanner.scan().literal == '"a;b" + c'

    def test_comment_ends_word_and_trailing_blanks_dropped(self):
        scanner = make_scanner("x a + 1   // why\nz")
        scanner.scan()
        scanner.stop_at(*STATEMENT_DELIMITERS)
        word = scanner.scan()
        assert word.literal == "a + 1"
        assert word.end == word.offset + len("a + 1")
        assert scanner.scan().kind is TokenKind.SEMICOLON

    def test_block_comment_ends_word(self):
        scanner = make_scanner("x a + b /* sum */\nz")
        scanner.scan()
        scanner.stop_at(*STATEMENT_DELIMITERS)
        assert scanner.scan().literal == "a + b"
        assert scanner.scan().kind is TokenKind.SEMICOLON

    def test_text_after_block_comment_is_next_word(self):
        scanner = make_scanner("x a /* mid */ + b;")
        scanner.scan()
        scanner.stop_at(*STATEMENT_DELIMITERS)
        assert scanner.scan().literal == "a"
        word = scanner.scan()
        assert word.literal == "+ b"
        assert word.offset == len("x a /* mid */ ")
        assert scanner.scan().kind is TokenKind.SEMICOLON

    def test_unterminated_block_comment_in_word(self):
        scanner = make_scanner("x a /* open")
        scanner.scan()
        scanner.stop_at(*STATEMENT_DELIMITERS)
        scanner.scan()
        with pytest.raises(UnterminatedLiteralError):
            scanner.scan()


class TestLoadSource:
    """Source normalization before scanning."""

    def test_trims_surrounding_whitespace(self):
        assert load_source("\n\n  fn  \n") == b"fn"

    def test_accepts_bytes(self):
        assert load_source(b" x ") == b"x"

    def test_rejects_invalid_utf8(self):
        with pytest.raises(BakeSyntaxError, match="UTF-8"):
            load_source(b"var x = \xff")
