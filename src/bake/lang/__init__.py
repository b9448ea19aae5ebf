"""
Bake Language Compiler
======================

Pipeline
--------
    Source → Scanner → Parser → raw AST → rewrite_builtins → lower_unions
           → final AST → GoPrinter (Go source) + check_unit (diagnostics)

Modules
-------
- scanner: tokens on demand, newlines as ';', opaque-word mode
- parser: recursive descent over the scanner, one token of lookahead
- expressions: value spans parsed with tree-sitter's Go grammar
- builtins: printf -> fmt.Printf, import "fmt"
- lowering: union -> marker interface + carrier struct
- checker: declaration-level diagnostics
- printer: Go rendering
- compiler: the pipeline driver

Usage
-----
>>> from bake.lang import BakeCompiler
>>> result = BakeCompiler().compile_source(source, "shapes.bake")
>>> print(result.go_source)
"""

from bake.lang.compiler import (
    BakeCompiler,
    CompilerOptions,
    CompilerResult,
    compile_bake,
    compile_file,
    parse_source,
)
from bake.lang.builtins import rewrite_builtins
from bake.lang.lowering import lower_unions
from bake.lang.checker import check_unit
from bake.lang.printer import GoPrinter, print_go
from bake.lang.parser import Parser

__all__ = [
    "BakeCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_bake",
    "compile_file",
    "parse_source",
    "rewrite_builtins",
    "lower_unions",
    "check_unit",
    "GoPrinter",
    "print_go",
    "Parser",
]
