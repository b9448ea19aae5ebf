"""
Built-in call rewriting.

Bake has a handful of builtins that map to functions of the Go standard
library. ``rewrite_builtins`` replaces each call to one of them with the
qualified Go call and makes sure the package is imported exactly once.

    printf("%d\\n", x)    ->    fmt.Printf("%d\\n", x)   (+ import "fmt")
"""

import logging

from bake.lang.ast import (
    ASTTransformer,
    CallExpr,
    CompilationUnit,
    Decl,
    Ident,
    ImportDecl,
    SelectorExpr,
)
from bake.lang.source import NO_POS

logger = logging.getLogger(__name__)


# name -> (Go package, exported function)
BUILTINS: dict[str, tuple[str, str]] = {
    "printf": ("fmt", "Printf"),
}


class _BuiltinRewriter(ASTTransformer):
    """Replaces builtin calls and records which packages they need."""

    def __init__(self):
        self.packages: list[str] = []

    def visit_CallExpr(self, node: CallExpr) -> CallExpr:
        node = self.generic_visit(node)
        if not isinstance(node.fun, Ident) or node.fun.name not in BUILTINS:
            return node

        package, function = BUILTINS[node.fun.name]
        if package not in self.packages:
            self.packages.append(package)

        fun = SelectorExpr(
            pos=node.fun.pos,
            x=Ident(pos=node.fun.pos, name=package),
            sel=Ident(pos=node.fun.pos, name=function),
        )
        return CallExpr(
            pos=node.pos,
            fun=fun,
            args=node.args,
            lparen=node.lparen,
            rparen=node.rparen,
        )


def rewrite_builtins(unit: CompilationUnit) -> CompilationUnit:
    """
    Rewrite builtin calls anywhere in the unit.

    The input unit is not modified. Calls nested inside switch arms and
    delegated expressions are rewritten too.

    Returns:
        A new unit, or the same unit if it calls no builtins
    """
    rewriter = _BuiltinRewriter()
    unit = rewriter.visit(unit)

    decls = unit.decls
    for package in rewriter.packages:
        decls = add_import(decls, package)
        logger.debug(f"builtins: import {package!r} required")

    if decls is unit.decls:
        return unit
    return CompilationUnit(
        pos=unit.pos,
        package=unit.package,
        decls=decls,
        unparsed_pos=unit.unparsed_pos,
    )


def add_import(decls: list[Decl], path: str) -> list[Decl]:
    """
    Return ``decls`` with an import of ``path``.

    The same list is returned when the path is already imported. Otherwise
    the import goes after the last existing import, or first.
    """
    index = 0
    for i, decl in enumerate(decls):
        if isinstance(decl, ImportDecl):
            if decl.path == path:
                return decls
            index = i + 1

    return decls[:index] + [ImportDecl(pos=NO_POS, path=path)] + decls[index:]
