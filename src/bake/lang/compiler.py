"""
Bake Compiler Main Module
=========================

This module provides the main compiler interface for Bake. It runs the
complete pipeline:

    Source → Scan/Parse → Rewrite builtins → Lower unions → Check → Go

Usage
-----
Command line:
    $ bake hello.bake -o hello.go

Programmatic:
    >>> from bake import compile_bake
    >>> go = compile_bake('fn main() begin\\n  printf("hi")\\nend')

Compilation Pipeline
--------------------
1. **Parsing**: tokens pulled from the scanner build the raw AST
2. **Builtin rewriting**: ``printf`` becomes ``fmt.Printf``, ``fmt`` is imported
3. **Union lowering**: unions become a marker interface plus a carrier record
4. **Checking**: declaration-level diagnostics, never fatal
5. **Printing**: the final unit is rendered as Go source

Error Handling
--------------
Syntax errors abort at the first problem and propagate as
BakeSyntaxError. Checker findings are returned in the result as
Diagnostic values; callers decide what to do with them.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from bake.lang.ast import CompilationUnit
from bake.lang.builtins import rewrite_builtins
from bake.lang.checker import check_unit
from bake.lang.errors import Diagnostic
from bake.lang.lowering import lower_unions
from bake.lang.parser import Parser
from bake.lang.printer import GoPrinter

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        trace: Sink for the token trace, one line per consumed token.
               None disables tracing.
        rewrite_builtins: Rewrite builtin calls such as printf
        lower_unions: Lower union types. When False the unit may still
                      contain unions, and Go output is skipped if it does.
        check: Run the declaration checker
    """
    trace: Optional[Callable[[str], None]] = None
    rewrite_builtins: bool = True
    lower_unions: bool = True
    check: bool = True


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        raw_unit: The tree exactly as parsed
        unit: The tree after rewriting and lowering
        go_source: Rendered Go source ("" if not rendered)
        token_count: Number of tokens scanned
        diagnostics: Checker findings in source order
    """
    filename: str = ""
    raw_unit: Optional[CompilationUnit] = None
    unit: Optional[CompilationUnit] = None
    go_source: str = ""
    token_count: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


class BakeCompiler:
    """
    Bake to Go compiler.

    Example:
        compiler = BakeCompiler()
        result = compiler.compile_file("shapes.bake")
        print(result.go_source)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(
        self,
        source: Union[bytes, str],
        filename: str = "<input>",
    ) -> CompilerResult:
        """
        Compile Bake source to Go.

        Args:
            source: Bake source code (bytes must be UTF-8)
            filename: Source filename for error messages

        Returns:
            CompilerResult with the trees, Go output and diagnostics

        Raises:
            BakeSyntaxError: If the source does not parse
        """
        result = CompilerResult(filename=filename)

        # Stage 1: Parsing
        parser = Parser(source, filename, trace=self.options.trace)
        unit = parser.parse_unit()
        result.raw_unit = unit
        result.token_count = parser.token_count
        logger.info(f"{filename}: {len(unit.decls)} declarations, {parser.token_count} tokens")

        # Stage 2-3: Rewriting passes
        if self.options.rewrite_builtins:
            unit = rewrite_builtins(unit)
        if self.options.lower_unions:
            unit = lower_unions(unit)
        result.unit = unit

        # Stage 4: Checking
        if self.options.check:
            result.diagnostics = check_unit(unit, parser.source_map)

        # Stage 5: Printing
        if self.options.lower_unions:
            result.go_source = GoPrinter(parser.source_map).print(unit)
        else:
            logger.debug(f"{filename}: unions not lowered, Go output skipped")

        return result

    def compile_file(self, filepath: Union[str, Path]) -> CompilerResult:
        """
        Compile a Bake source file.

        Raises:
            BakeSyntaxError: If the source does not parse
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        return self.compile_source(path.read_bytes(), str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_bake(source: Union[bytes, str], filename: str = "<input>") -> str:
    """
    Compile Bake source to Go source text.

    Example:
        >>> go = compile_bake('fn main() begin\\n  printf("hi")\\nend')
    """
    return BakeCompiler().compile_source(source, filename).go_source


def compile_file(filepath: Union[str, Path]) -> CompilerResult:
    """Compile a Bake source file with default options."""
    return BakeCompiler().compile_file(filepath)


def parse_source(source: Union[bytes, str], filename: str = "<input>") -> CompilationUnit:
    """
    Parse Bake source into the raw (unlowered) AST.

    Useful for testing and analysis.
    """
    return Parser(source, filename).parse_unit()
