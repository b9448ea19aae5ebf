"""
Bake Scanner (Token Stream Adapter)
===================================

This module converts Bake source text into tokens, one at a time, on
demand from the parser.

It behaves like a conventional tokenizer for a C-family language with
two twists that the line-oriented grammar needs:

1. Line breaks are statements terminators. A ``\\n`` or ``\\r`` is not
   skipped as whitespace but surfaces as a ``SEMICOLON`` token with the
   literal ``";"``, exactly as an explicit ``;`` does.

2. Opaque-word mode. ``stop_at("\\n", "\\r", ";")`` makes the scanner
   return everything up to the next delimiter as a single ``WORD``
   token. The parser uses it to grab the raw text of a value
   (``var x = a + f(b)``) and hand it to the expression parser
   verbatim. ``stop_at()`` with no arguments switches back.

Token Categories
----------------
- IDENT: identifiers and keywords (keywords are plain identifiers here,
  the parser dispatches on the literal)
- INT / FLOAT / IMAG: Go-style numeric literals (0x, 0o, 0b, _, exponents, i)
- CHAR: 'c'
- STRING: "text" (escapes kept verbatim)
- RAW_STRING: `text`
- PUNCT: any other single character
- SEMICOLON: ``;``, ``\\n`` or ``\\r``
- WORD: opaque run of text in stop-at mode
- EOF

Offsets are byte offsets into the UTF-8 buffer, so they agree with the
positions recorded in the AST.

Example Usage
-------------
>>> scanner = Scanner(SourceMap("t.bake", b"var x = 5"))
>>> scanner.scan()
Token(IDENT, 'var', @0)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from bake.lang.errors import BakeSyntaxError, UnterminatedLiteralError
from bake.lang.source import SourceMap


# =============================================================================
# Token Types
# =============================================================================

class TokenKind(Enum):
    """Lexical categories produced by the scanner."""
    EOF = auto()
    IDENT = auto()
    INT = auto()
    FLOAT = auto()
    IMAG = auto()
    CHAR = auto()
    STRING = auto()
    RAW_STRING = auto()
    PUNCT = auto()
    SEMICOLON = auto()
    WORD = auto()


STATEMENT_DELIMITERS = ("\n", "\r", ";")

_QUOTES = {'"': "string literal", "'": "character literal", "`": "raw string literal"}


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        kind: The TokenKind classification
        literal: Exact source text of the token ("" for EOF, ";" for newlines)
        offset: 0-based byte offset of the first character
        end: 0-based byte offset just past the last character
    """
    kind: TokenKind
    literal: str
    offset: int
    end: int

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.literal!r}, @{self.offset})"

    @property
    def pos(self) -> int:
        """1-based position used in AST nodes."""
        return self.offset + 1


# =============================================================================
# Scanner
# =============================================================================

class Scanner:
    """
    Pull-based tokenizer over one source buffer.

    Usage:
        scanner = Scanner(source_map)
        token = scanner.scan()
        while token.kind is not TokenKind.EOF:
            ...
            token = scanner.scan()

    Attributes:
        source_map: Buffer plus line table, used for error locations
        token_count: Number of tokens returned so far
    """

    def __init__(self, source_map: SourceMap):
        self.source_map = source_map
        self.text = source_map.data.decode("utf-8")
        self.token_count = 0

        self._pos = 0       # index into self.text
        self._offset = 0    # byte offset of self._pos
        self._stop_at: Optional[frozenset[str]] = None

    def stop_at(self, *delimiters: str) -> None:
        """Enable opaque-word mode up to any of ``delimiters``; no args disables it."""
        self._stop_at = frozenset(delimiters) if delimiters else None

    @property
    def stopping(self) -> bool:
        return self._stop_at is not None

    def scan(self) -> Token:
        """Scan and return the next token. Returns EOF forever at the end."""
        self._skip_whitespace_and_comments()
        start = self._offset

        if self._at_end():
            return Token(TokenKind.EOF, "", start, start)

        self.token_count += 1
        char = self._peek()

        if char in STATEMENT_DELIMITERS:
            self._advance()
            return Token(TokenKind.SEMICOLON, ";", start, self._offset)

        if self._stop_at is not None:
            return self._scan_word(start)

        if char.isalpha() or char == "_":
            return self._scan_identifier(start)

        if char.isdigit() or (char == "." and self._peek(1).isdigit()):
            return self._scan_number(start)

        if char in _QUOTES:
            kind = {
                '"': TokenKind.STRING,
                "'": TokenKind.CHAR,
                "`": TokenKind.RAW_STRING,
            }[char]
            self._scan_quoted(start)
            return self._make_token(kind, start)

        self._advance()
        return self._make_token(TokenKind.PUNCT, start)

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.text)

    def _peek(self, ahead: int = 0) -> str:
        pos = self._pos + ahead
        if pos >= len(self.text):
            return ""
        return self.text[pos]

    def _advance(self) -> str:
        char = self.text[self._pos]
        self._pos += 1
        self._offset += 1 if char < "\x80" else len(char.encode("utf-8"))
        return char

    def _make_token(self, kind: TokenKind, start: int) -> Token:
        literal = self.source_map.data[start:self._offset].decode("utf-8")
        return Token(kind, literal, start, self._offset)

    def _error(self, message: str, offset: int, hint: Optional[str] = None) -> BakeSyntaxError:
        location = self.source_map.offset_location(offset)
        return BakeSyntaxError(
            message,
            location,
            hint=hint,
            source_line=self.source_map.line_text(location.line),
        )

    # =========================================================================
    # Whitespace and Comments
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        while not self._at_end():
            char = self._peek()

            if char in " \t\f\v":
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() not in "\r\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
                continue

            break

    def _skip_block_comment(self) -> None:
        start = self._offset
        self._advance()
        self._advance()
        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        location = self.source_map.offset_location(start)
        raise UnterminatedLiteralError(
            "comment",
            location,
            self.source_map.line_text(location.line),
        )

    # =========================================================================
    # Token Scanners
    # =========================================================================

    def _scan_identifier(self, start: int) -> Token:
        while self._peek() and (self._peek().isalnum() or self._peek() == "_"):
            self._advance()
        return self._make_token(TokenKind.IDENT, start)

    def _scan_number(self, start: int) -> Token:
        """
        Scan a Go-style number.

            42   1_000   0x7F   0o17   0b1010   3.14   .5   1e9   2.5e-3   3i
        """
        kind = TokenKind.INT

        if self._peek() == "0" and self._peek(1) in ("x", "X", "o", "O", "b", "B"):
            self._advance()
            self._advance()
            digits = self._scan_digits("0123456789abcdefABCDEF")
            if not digits:
                raise self._error("malformed number: missing digits after prefix", start)
        else:
            self._scan_digits("0123456789")
            if self._peek() == ".":
                kind = TokenKind.FLOAT
                self._advance()
                self._scan_digits("0123456789")
            if self._peek() in ("e", "E"):
                kind = TokenKind.FLOAT
                self._advance()
                if self._peek() in ("+", "-"):
                    self._advance()
                if not self._scan_digits("0123456789"):
                    raise self._error("malformed number: exponent has no digits", start)

        if self._peek() == "i":
            self._advance()
            kind = TokenKind.IMAG

        return self._make_token(kind, start)

    def _scan_digits(self, allowed: str) -> str:
        chars = []
        while self._peek() and (self._peek() in allowed or self._peek() == "_"):
            chars.append(self._advance())
        return "".join(chars)

    def _scan_quoted(self, start: int) -> None:
        """Consume a quoted literal, including both quotes."""
        quote = self._advance()
        raw = quote == "`"

        while not self._at_end():
            char = self._peek()
            if char == quote:
                self._advance()
                return
            if not raw and char in "\r\n":
                break
            if not raw and char == "\\":
                self._advance()
                if self._at_end():
                    break
            self._advance()

        location = self.source_map.offset_location(start)
        raise UnterminatedLiteralError(
            _QUOTES[quote],
            location,
            self.source_map.line_text(location.line),
        )

    def _scan_word(self, start: int) -> Token:
        """
        Scan an opaque run of text up to the next stop-at delimiter.

        Quoted literals are consumed whole, so a delimiter inside a string
        does not end the word. A ``//`` or ``/*`` comment ends it; a block
        comment is then skipped by the next scan, and any text after it on
        the same line comes back as a further word. Trailing blanks are not
        part of the word.
        """
        while not self._at_end():
            char = self._peek()
            if char in self._stop_at:
                break
            if char == "/" and self._peek(1) in ("/", "*"):
                break
            if char in _QUOTES:
                self._scan_quoted(self._offset)
                continue
            self._advance()

        token = self._make_token(TokenKind.WORD, start)
        literal = token.literal.rstrip(" \t\f\v")
        return Token(TokenKind.WORD, literal, start, start + len(literal.encode("utf-8")))
