"""
Declaration Checker
===================

A light semantic pass over a (lowered) compilation unit. It does not
type-check expressions; it reports the declaration-level mistakes that
would stop the Go compiler from accepting the rendered file:

- a type name, in a declaration or a composite literal such as
  ``Circle{r: 1}``, that is neither predeclared in Go nor declared in
  the unit
- two top-level declarations with the same name (methods are keyed by
  their receiver type, so ``Area`` on two types is fine)
- a switch with more than one ``default`` clause
- a call to a function of this unit with the wrong number of arguments
- input left unparsed after the last declaration (warning)

The checker never raises. Problems are returned as Diagnostic values in
source order, and it is up to the caller whether they are fatal.

Example:
    >>> diagnostics = check_unit(unit, source_map)
    >>> for d in diagnostics:
    ...     print(d)
    shapes.bake:3:12: error: undeclared type 'Sqaure'
"""

import logging
from typing import Optional

from bake.lang.ast import (
    ASTVisitor,
    CallExpr,
    CompilationUnit,
    CompositeLit,
    FuncDecl,
    Ident,
    NamedType,
    Node,
    PointerType,
    SwitchStmt,
    TypeDecl,
    VarDecl,
)
from bake.lang.errors import Diagnostic
from bake.lang.source import NO_POS, SourceMap

logger = logging.getLogger(__name__)


PREDECLARED_TYPES = frozenset({
    "any", "bool", "byte", "comparable", "complex64", "complex128",
    "error", "float32", "float64", "int", "int8", "int16", "int32",
    "int64", "rune", "string", "uint", "uint8", "uint16", "uint32",
    "uint64", "uintptr",
})


class _DeclarationChecker(ASTVisitor):
    """Collects diagnostics while walking the unit."""

    def __init__(self, unit: CompilationUnit, source_map: Optional[SourceMap]):
        self.source_map = source_map
        self.diagnostics: list[Diagnostic] = []
        self.types: set[str] = set()
        self.arity: dict[str, int] = {}

        for decl in unit.decls:
            if isinstance(decl, TypeDecl):
                self.types.add(decl.name.name)
            elif isinstance(decl, FuncDecl) and not decl.is_method:
                self.arity[decl.name.name] = len(decl.type_expr.params)

    def _report(self, severity: str, message: str, node: Node) -> None:
        location = None
        if self.source_map is not None and node.pos != NO_POS:
            location = self.source_map.location(node.pos)
        self.diagnostics.append(Diagnostic(severity, message, location))

    def error(self, message: str, node: Node) -> None:
        self._report("error", message, node)

    def warning(self, message: str, node: Node) -> None:
        self._report("warning", message, node)

    # =========================================================================
    # Top Level
    # =========================================================================

    def check_duplicates(self, unit: CompilationUnit) -> None:
        seen: dict[str, Node] = {}
        for decl in unit.decls:
            key = _declared_name(decl)
            if key is None:
                continue
            if key in seen:
                self.error(f"{key} redeclared in this unit", decl)
            else:
                seen[key] = decl

    # =========================================================================
    # Visitors
    # =========================================================================

    def visit_NamedType(self, node: NamedType):
        if node.name not in PREDECLARED_TYPES and node.name not in self.types:
            self.error(f"undeclared type {node.name!r}", node)

    def visit_CompositeLit(self, node: CompositeLit):
        # Qualified types (pkg.T) belong to imports and are not checked.
        if isinstance(node.type, Ident):
            name = node.type.name
            if name not in PREDECLARED_TYPES and name not in self.types:
                self.error(f"undeclared type {name!r}", node.type)
        self.generic_visit(node)

    def visit_SwitchStmt(self, node: SwitchStmt):
        defaults = [clause for clause in node.clauses if clause.is_default]
        for extra in defaults[1:]:
            self.error("multiple defaults in switch", extra)
        self.generic_visit(node)

    def visit_CallExpr(self, node: CallExpr):
        if isinstance(node.fun, Ident) and node.fun.name in self.arity:
            want = self.arity[node.fun.name]
            if len(node.args) != want:
                self.error(
                    f"wrong argument count in call to {node.fun.name}: "
                    f"have {len(node.args)}, want {want}",
                    node,
                )
        self.generic_visit(node)


def _declared_name(decl: Node) -> Optional[str]:
    if isinstance(decl, (VarDecl, TypeDecl)):
        return decl.name.name
    if isinstance(decl, FuncDecl):
        if not decl.is_method:
            return decl.name.name
        receiver = _receiver_type_name(decl)
        return f"{receiver}.{decl.name.name}"
    return None


def _receiver_type_name(decl: FuncDecl) -> str:
    if not decl.recv.fields:
        return "?"
    type_expr = decl.recv.fields[0].type_expr
    while isinstance(type_expr, PointerType):
        type_expr = type_expr.elem
    if isinstance(type_expr, NamedType):
        return type_expr.name
    return "?"


def check_unit(
    unit: CompilationUnit,
    source_map: Optional[SourceMap] = None,
) -> list[Diagnostic]:
    """
    Check a compilation unit.

    Args:
        unit: The unit to check, normally after union lowering
        source_map: Used to attach locations; without it diagnostics
                    carry no location

    Returns:
        Diagnostics sorted by position (unlocated ones first)
    """
    checker = _DeclarationChecker(unit, source_map)
    checker.check_duplicates(unit)
    checker.visit(unit)

    if unit.unparsed_pos != NO_POS:
        checker.warning("input after the last declaration was not parsed", Node(pos=unit.unparsed_pos))

    diagnostics = sorted(
        checker.diagnostics,
        key=lambda d: (d.location.line, d.location.column) if d.location else (0, 0),
    )
    errors = sum(1 for d in diagnostics if d.is_error)
    logger.debug(f"checker: {errors} errors, {len(diagnostics) - errors} warnings")
    return diagnostics
