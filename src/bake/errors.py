"""
Bake Error Hierarchy
====================

This module defines the root of the exception hierarchy for the Bake
toolchain. All exceptions inherit from BakeError, allowing callers to
catch every toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
BakeError (base)
└── LangError (front end, see bake.lang.errors)
    ├── BakeSyntaxError - tokenizer and parser errors
    └── PrinterError - Go rendering errors

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. Error messages follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class BakeError(Exception):
    """
    Base exception for all Bake errors.

        try:
            compiler.compile_file("hello.bake")
        except BakeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Byte column (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
