"""
Bake - A Small Go-Targeting DSL Compiler
========================================

Bake is a line-oriented imperative language with Pascal-flavored
keywords (``fn``, ``begin``/``end``, ``switch``/``case``) and
discriminated unions. This package compiles it to Go source.

Main Components
---------------
- **lang**: the compiler front end and back end
    Scanner, parser, builtin rewriting, union lowering, checker, Go printer

- **cli**: the ``bake`` command

Quick Start
-----------
Compile a program:
    >>> from bake import compile_bake
    >>> go = compile_bake(open("hello.bake").read(), "hello.bake")

Or use the command-line tool:
    $ bake hello.bake -o hello.go
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from bake.errors import BakeError, SourceLocation
from bake.lang import (
    BakeCompiler,
    CompilerOptions,
    CompilerResult,
    compile_bake,
    compile_file,
    parse_source,
)
from bake.lang.errors import (
    LangError,
    BakeSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    UnterminatedLiteralError,
    MalformedLiteralError,
    PrinterError,
    UnsupportedNodeError,
    Diagnostic,
)

__all__ = [
    "__version__",
    # Compiler
    "BakeCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_bake",
    "compile_file",
    "parse_source",
    # Errors
    "BakeError",
    "SourceLocation",
    "LangError",
    "BakeSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "UnterminatedLiteralError",
    "MalformedLiteralError",
    "PrinterError",
    "UnsupportedNodeError",
    "Diagnostic",
]
