"""
Bake Front End Error Hierarchy
==============================

Exception Hierarchy
-------------------
LangError (base for all front end errors)
├── BakeSyntaxError - tokenizer and parser errors (always fatal)
│   ├── UnexpectedTokenError - expected literal did not match
│   │   └── MissingTokenError - input ended where a literal was required
│   ├── UnterminatedLiteralError - string or comment never closed
│   └── MalformedLiteralError - delegated span is not a valid expression
└── PrinterError - Go rendering errors
    └── UnsupportedNodeError - node kind has no Go rendering

There is no error recovery: the parser raises on the first problem and
the whole compilation is aborted. Semantic problems are not exceptions,
they are reported as Diagnostic values by the checker.
"""

from dataclasses import dataclass
from typing import Optional

from bake.errors import BakeError, SourceLocation


class LangError(BakeError):
    """
    Base exception for all front end errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            greet.bake:2:3: error: unexpected token 'begin'
                begin
                ^
            hint: expected ')'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors (Scanner and Parser)
# =============================================================================

class BakeSyntaxError(LangError):
    """
    Syntax error in Bake source code.

    Raised when the scanner or parser meets input that does not fit the
    grammar. Always fatal to the current parse.
    """
    pass


class UnexpectedTokenError(BakeSyntaxError):
    """
    A required literal did not match the current token.

    Attributes:
        expected: The literal (or token description) the parser wanted
        found: The literal actually seen
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token {found!r}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(UnexpectedTokenError):
    """
    Input ended where a required literal was expected.

    Example:
        switch x
        case 1:
          f(1)
        <end of input, 'end' missing>
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = "<EOF>"
        self.expected = expected
        BakeSyntaxError.__init__(
            self,
            f"expected {expected} before end of input",
            location=location,
            source_line=source_line,
        )


class UnterminatedLiteralError(BakeSyntaxError):
    """String, character or comment literal that is never closed."""

    def __init__(
        self,
        what: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.what = what
        super().__init__(
            f"unterminated {what}",
            location=location,
            source_line=source_line,
        )


class MalformedLiteralError(BakeSyntaxError):
    """
    A raw span handed to the expression parser did not parse.

    Attributes:
        span: The offending text, verbatim
    """

    def __init__(
        self,
        span: str,
        reason: str,
        location: Optional[SourceLocation] = None,
    ):
        self.span = span
        self.reason = reason
        super().__init__(
            f"malformed expression {span!r}: {reason}",
            location=location,
        )


# =============================================================================
# Printer Errors
# =============================================================================

class PrinterError(LangError):
    """Error while rendering a unit as Go source."""
    pass


class UnsupportedNodeError(PrinterError):
    """The tree contains a node kind that Go cannot express directly."""

    def __init__(
        self,
        node_kind: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.node_kind = node_kind
        super().__init__(
            f"cannot render {node_kind} as Go",
            location=location,
            hint=hint,
        )


# =============================================================================
# Diagnostics (checker output, never raised)
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """
    A semantic problem found by the checker.

    Diagnostics are reported to the user but never abort compilation.

    Attributes:
        severity: "error" or "warning"
        message: Human readable description
        location: Where the problem was found (None for synthesized nodes)
    """
    severity: str
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.severity}: {self.message}"
        return f"{self.severity}: {self.message}"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"
