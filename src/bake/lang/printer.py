"""
Go Source Printer
=================

Renders a lowered CompilationUnit as Go source text, formatted the way
gofmt lays it out: tab indentation, one blank line between top-level
declarations, grouped imports, aligned struct fields.

    package main

    import "fmt"

    type Shape interface{}

    func main() {
    	fmt.Printf("hi\\n")
    }

    type __Shape struct {
    	Type   Shape
    	Field0 Circle
    }

Expressions are printed with the parentheses Go's precedence rules
require, and no others:

    Precedence    Operators
    ----------    ---------
        5         *  /  %  <<  >>  &  &^
        4         +  -  |  ^
        3         ==  !=  <  <=  >  >=
        2         &&
        1         ||

Unary operators (+ - ! ^ * & <-) bind tighter than any binary one; a
unary operand that is itself unary is parenthesized so -(-x) never
prints as --x.

Union types have no Go form. Run lower_unions() first; a UnionType that
reaches the printer raises UnsupportedNodeError.
"""

from typing import Optional

from bake.lang.ast import (
    ASTVisitor,
    BasicLit,
    BinaryExpr,
    Block,
    CallExpr,
    CaseClause,
    CompilationUnit,
    CompositeLit,
    DeclStmt,
    Expr,
    ExprStmt,
    Field,
    FieldList,
    FuncDecl,
    FuncType,
    Ident,
    ImportDecl,
    IndexExpr,
    InterfaceType,
    KeyValueExpr,
    NamedType,
    Node,
    PointerType,
    ReturnStmt,
    SelectorExpr,
    StructType,
    SwitchStmt,
    TypeDecl,
    UnaryExpr,
    UnionType,
    VarDecl,
    walk,
)
from bake.lang.errors import UnsupportedNodeError
from bake.lang.source import SourceMap

INDENT = "\t"

BINARY_PRECEDENCE: dict[str, int] = {
    "*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
    "+": 4, "-": 4, "|": 4, "^": 4,
    "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
    "&&": 2,
    "||": 1,
}
UNARY_PRECEDENCE = 6


class GoPrinter(ASTVisitor):
    """
    Go source renderer.

    Declarations and statements are emitted line by line into ``lines``;
    expressions and types are returned as strings by their visit methods.

    Usage:
        printer = GoPrinter()
        go_source = printer.print(unit)
    """

    def __init__(self, source_map: Optional[SourceMap] = None):
        self.source_map = source_map
        self.lines: list[str] = []
        self.indent_level = 0

    def print(self, unit: CompilationUnit) -> str:
        self.lines = []
        self.indent_level = 0
        self.visit(unit)
        return "\n".join(self.lines) + "\n"

    def _emit(self, text: str = "") -> None:
        if text:
            self.lines.append(f"{INDENT * self.indent_level}{text}")
        else:
            self.lines.append("")

    def generic_visit(self, node: Node):
        raise UnsupportedNodeError(type(node).__name__, self._location(node))

    def _location(self, node: Node):
        if self.source_map is None:
            return None
        return self.source_map.location(node.pos)

    # =========================================================================
    # Compilation Unit and Declarations
    # =========================================================================

    def visit_CompilationUnit(self, node: CompilationUnit):
        self._emit(f"package {node.package}")

        imports = [d for d in node.decls if isinstance(d, ImportDecl)]
        if len(imports) == 1:
            self._emit()
            self._emit(f'import "{imports[0].path}"')
        elif imports:
            self._emit()
            self._emit("import (")
            for decl in imports:
                self._emit(f'{INDENT}"{decl.path}"')
            self._emit(")")

        for decl in node.decls:
            if isinstance(decl, ImportDecl):
                continue
            self._emit()
            self.visit(decl)

    def visit_VarDecl(self, node: VarDecl):
        self._emit(self._var_spec(node))

    def _var_spec(self, node: VarDecl) -> str:
        if node.type_expr is None:
            return f"var {node.name.name} = {self.visit(node.value)}"
        return f"var {node.name.name} {self.visit(node.type_expr)} = {self.visit(node.value)}"

    def visit_TypeDecl(self, node: TypeDecl):
        text = self.visit(node.type_expr)
        first, *rest = text.split("\n")
        self._emit(f"type {node.name.name} {first}")
        for line in rest:
            self.lines.append(f"{INDENT * self.indent_level}{line}")

    def visit_FuncDecl(self, node: FuncDecl):
        recv = ""
        if node.recv is not None:
            recv = f"{self._params(node.recv)} "
        signature = self._signature(node.type_expr)
        self._emit(f"func {recv}{node.name.name}{signature} {{")
        self.visit(node.body)
        self._emit("}")

    # =========================================================================
    # Types (return strings)
    # =========================================================================

    def visit_NamedType(self, node: NamedType) -> str:
        return node.name

    def visit_PointerType(self, node: PointerType) -> str:
        return f"*{self.visit(node.elem)}"

    def visit_StructType(self, node: StructType) -> str:
        if not node.fields.fields:
            return "struct{}"
        rows = [(f.name.name if f.name else "", self.visit(f.type_expr)) for f in node.fields.fields]
        width = max(len(name) for name, _ in rows)
        body = [f"{INDENT}{name.ljust(width)} {type_text}".rstrip() for name, type_text in rows]
        return "struct {\n" + "\n".join(_indent_block(body)) + "\n}"

    def visit_InterfaceType(self, node: InterfaceType) -> str:
        if not node.methods.fields:
            return "interface{}"
        body = [
            f"{INDENT}{method.name.name}{self._signature(method.type_expr)}"
            for method in node.methods.fields
        ]
        return "interface {\n" + "\n".join(body) + "\n}"

    def visit_FuncType(self, node: FuncType) -> str:
        return f"func{self._signature(node)}"

    def visit_UnionType(self, node: UnionType):
        raise UnsupportedNodeError(
            "union type",
            self._location(node),
            hint="run lower_unions() before printing",
        )

    def _signature(self, node: FuncType) -> str:
        params = self._params(node.params)
        results = node.results
        if results is None or not results.fields:
            return params
        if len(results) == 1 and results.fields[0].name is None:
            return f"{params} {self.visit(results.fields[0].type_expr)}"
        return f"{params} {self._params(results)}"

    def _params(self, fields: FieldList) -> str:
        return "(" + ", ".join(self._field(f) for f in fields.fields) + ")"

    def _field(self, node: Field) -> str:
        type_text = self.visit(node.type_expr)
        if node.name is None:
            return type_text
        return f"{node.name.name} {type_text}"

    # =========================================================================
    # Statements (emit lines)
    # =========================================================================

    def visit_Block(self, node: Block):
        self.indent_level += 1
        for stmt in node.stmts:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_DeclStmt(self, node: DeclStmt):
        self._emit(self._var_spec(node.decl))

    def visit_ReturnStmt(self, node: ReturnStmt):
        if node.value is None:
            self._emit("return")
        else:
            self._emit(f"return {self.visit(node.value)}")

    def visit_ExprStmt(self, node: ExprStmt):
        self._emit(self.visit(node.expr))

    def visit_SwitchStmt(self, node: SwitchStmt):
        tag = self.visit(node.tag)
        # T{...} in a switch header would open the switch body.
        if any(isinstance(n, CompositeLit) and n.type is not None for n in walk(node.tag)):
            tag = f"({tag})"
        self._emit(f"switch {tag} {{")
        for clause in node.clauses:
            self.visit(clause)
        self._emit("}")

    def visit_CaseClause(self, node: CaseClause):
        if node.is_default:
            self._emit("default:")
        else:
            self._emit(f"case {self.visit(node.value)}:")
        self.indent_level += 1
        for stmt in node.body:
            self.visit(stmt)
        self.indent_level -= 1

    # =========================================================================
    # Expressions (return strings)
    # =========================================================================

    def visit_Ident(self, node: Ident) -> str:
        return node.name

    def visit_BasicLit(self, node: BasicLit) -> str:
        return node.value

    def visit_CallExpr(self, node: CallExpr) -> str:
        args = ", ".join(self.visit(arg) for arg in node.args)
        return f"{self._operand(node.fun)}({args})"

    def visit_SelectorExpr(self, node: SelectorExpr) -> str:
        return f"{self._operand(node.x)}.{node.sel.name}"

    def visit_IndexExpr(self, node: IndexExpr) -> str:
        return f"{self._operand(node.x)}[{self.visit(node.index)}]"

    def visit_CompositeLit(self, node: CompositeLit) -> str:
        elts = ", ".join(self.visit(elt) for elt in node.elts)
        type_text = self._operand(node.type) if node.type is not None else ""
        return f"{type_text}{{{elts}}}"

    def visit_KeyValueExpr(self, node: KeyValueExpr) -> str:
        return f"{self.visit(node.key)}: {self.visit(node.value)}"

    def visit_UnaryExpr(self, node: UnaryExpr) -> str:
        operand = self.visit(node.x)
        if _precedence(node.x) < UNARY_PRECEDENCE or isinstance(node.x, UnaryExpr):
            operand = f"({operand})"
        return f"{node.op}{operand}"

    def visit_BinaryExpr(self, node: BinaryExpr) -> str:
        prec = BINARY_PRECEDENCE[node.op]
        left = self.visit(node.x)
        if _precedence(node.x) < prec:
            left = f"({left})"
        right = self.visit(node.y)
        if _precedence(node.y) <= prec:
            right = f"({right})"
        return f"{left} {node.op} {right}"

    def _operand(self, node: Expr) -> str:
        """Primary-expression position: anything with an operator needs parens."""
        text = self.visit(node)
        if isinstance(node, (UnaryExpr, BinaryExpr)):
            return f"({text})"
        return text


def _precedence(node: Expr) -> int:
    if isinstance(node, BinaryExpr):
        return BINARY_PRECEDENCE[node.op]
    if isinstance(node, UnaryExpr):
        return UNARY_PRECEDENCE
    return UNARY_PRECEDENCE + 1


def _indent_block(lines: list[str]) -> list[str]:
    # Nested struct/interface text is multi-line; indent its inner lines too.
    result = []
    for line in lines:
        first, *rest = line.split("\n")
        result.append(first)
        result.extend(f"{INDENT}{inner}" for inner in rest)
    return result


def print_go(unit: CompilationUnit, source_map: Optional[SourceMap] = None) -> str:
    """Render a lowered unit as Go source."""
    return GoPrinter(source_map).print(unit)
