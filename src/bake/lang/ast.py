"""
Bake Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the AST node types produced by the Bake parser and
consumed by the rewriting passes, the checker and the Go printer.

Node Hierarchy
--------------
Node (base)
├── CompilationUnit - root, ordered list of declarations
├── Declarations (Decl)
│   ├── ImportDecl - import "path"
│   ├── VarDecl - var x [Type] = value
│   ├── TypeDecl - type Name TypeExpr
│   └── FuncDecl - fn [(recv)] name(params) [results] begin ... end
├── Types (TypeExpr)
│   ├── NamedType - int, Shape
│   ├── PointerType - *T
│   ├── StructType - struct begin ... end
│   ├── InterfaceType - interface begin ... end
│   ├── FuncType - signature of a function or interface method
│   └── UnionType - union = A | B (removed by lowering)
├── Field / FieldList - named or unnamed typed slots
├── Statements (Stmt)
│   ├── DeclStmt - local var declaration
│   ├── ReturnStmt - return value
│   ├── SwitchStmt - switch tag ... end, owns CaseClauses
│   └── ExprStmt - call used as a statement
├── CaseClause - case value: / default:
├── Block - begin ... end
└── Expressions (Expr)
    ├── Ident - name reference
    ├── BasicLit - number, char or string literal (verbatim text)
    ├── CallExpr - f(a, b)
    ├── SelectorExpr - x.sel
    ├── IndexExpr - x[i]
    ├── UnaryExpr - op x
    ├── BinaryExpr - x op y
    ├── CompositeLit - T{a, b} or T{k: v}
    └── KeyValueExpr - k: v inside a composite literal

Design Notes
------------
- Every node carries ``pos``: the 1-based byte offset of its first token.
  Synthesized nodes use NO_POS (0).
- Nodes are never modified after construction. Passes that change the
  tree (builtins, lowering) build new nodes with ASTTransformer.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum, auto
from typing import Iterator, Optional

from bake.lang.source import NO_POS


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class Node:
    """
    Base class for all AST nodes.

    Attributes:
        pos: 1-based byte offset of the node in the source (NO_POS if synthesized)
    """
    pos: int

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.pos}"


@dataclass
class Expr(Node):
    """Base class for expression nodes."""
    pass


@dataclass
class TypeExpr(Node):
    """Base class for type expression nodes."""
    pass


@dataclass
class Stmt(Node):
    """Base class for statement nodes."""
    pass


@dataclass
class Decl(Node):
    """Base class for top-level declaration nodes."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

class LitKind(Enum):
    """Kinds of basic literal."""
    INT = auto()
    FLOAT = auto()
    IMAG = auto()
    CHAR = auto()
    STRING = auto()


@dataclass
class Ident(Expr):
    """
    Identifier, either a use or the name in a declaration.

    Attributes:
        name: The identifier text
    """
    name: str = ""


@dataclass
class BasicLit(Expr):
    """
    Literal constant.

    Attributes:
        kind: The LitKind
        value: The literal exactly as it should appear in Go source,
               quotes included for strings and chars
    """
    kind: LitKind = LitKind.INT
    value: str = ""


@dataclass
class CallExpr(Expr):
    """
    Function call.

    Attributes:
        fun: The callee (Ident, or SelectorExpr after builtin rewriting)
        args: Argument expressions
        lparen: Position of '('
        rparen: Position of ')'
    """
    fun: Expr = None
    args: list[Expr] = field(default_factory=list)
    lparen: int = NO_POS
    rparen: int = NO_POS


@dataclass
class SelectorExpr(Expr):
    """Qualified reference x.sel, e.g. fmt.Printf."""
    x: Expr = None
    sel: Ident = None


@dataclass
class IndexExpr(Expr):
    """Index expression x[index]."""
    x: Expr = None
    index: Expr = None


@dataclass
class UnaryExpr(Expr):
    """
    Unary operation.

    Attributes:
        op: Go spelling of the operator ("-", "+", "!", "^", "*", "&", "<-")
        x: The operand
    """
    op: str = ""
    x: Expr = None


@dataclass
class BinaryExpr(Expr):
    """
    Binary operation.

    Attributes:
        op: Go spelling of the operator ("+", "&&", "==", ...)
        x: Left operand
        y: Right operand
    """
    op: str = ""
    x: Expr = None
    y: Expr = None


@dataclass
class CompositeLit(Expr):
    """
    Composite literal.

    Attributes:
        type: Literal type (Ident or SelectorExpr), None for an elided
              type in a nested literal
        elts: Elements, either plain expressions or KeyValueExpr
        lbrace: Position of '{'
        rbrace: Position of '}'
    """
    type: Optional[Expr] = None
    elts: list[Expr] = field(default_factory=list)
    lbrace: int = NO_POS
    rbrace: int = NO_POS


@dataclass
class KeyValueExpr(Expr):
    """Keyed element key: value of a composite literal."""
    key: Expr = None
    value: Expr = None
    colon: int = NO_POS


# =============================================================================
# Type Nodes
# =============================================================================

@dataclass
class NamedType(TypeExpr):
    """Reference to a type by name."""
    name: str = ""


@dataclass
class PointerType(TypeExpr):
    """Pointer type *elem."""
    elem: TypeExpr = None


@dataclass
class Field(Node):
    """
    A typed slot in a struct, interface, or signature.

    Attributes:
        name: Field or parameter name; None in result type lists
        type_expr: The field's type
    """
    name: Optional[Ident] = None
    type_expr: TypeExpr = None


@dataclass
class FieldList(Node):
    """
    Ordered list of fields. ``pos`` is the opening '(' or 'begin'.

    Attributes:
        fields: The fields, in source order
        closing: Position of the closing ')' or 'end'
    """
    fields: list[Field] = field(default_factory=list)
    closing: int = NO_POS

    def __len__(self) -> int:
        return len(self.fields)


@dataclass
class StructType(TypeExpr):
    """Record type: struct begin name Type ... end."""
    fields: FieldList = None


@dataclass
class FuncType(TypeExpr):
    """
    Function signature.

    Attributes:
        params: Parameter list
        results: Result list, None when the function returns nothing
    """
    params: FieldList = None
    results: Optional[FieldList] = None


@dataclass
class InterfaceType(TypeExpr):
    """
    Interface type. An empty method list is the marker type that stands
    in for a union after lowering.

    Attributes:
        methods: Method specs; each Field has a name and a FuncType
    """
    methods: FieldList = None


@dataclass
class UnionType(TypeExpr):
    """
    Discriminated union: union = A | B | C.

    Go has no such construct; lower_unions() removes every UnionType.

    Attributes:
        members: Member types in declaration order
    """
    members: list[TypeExpr] = field(default_factory=list)


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass
class ImportDecl(Decl):
    """
    Import of a Go package.

    Attributes:
        path: Import path without quotes
    """
    path: str = ""


@dataclass
class VarDecl(Decl):
    """
    Variable declaration, global or local.

    Attributes:
        name: Variable name
        type_expr: Explicit type, None when inferred from the value
        value: Initial value
    """
    name: Ident = None
    type_expr: Optional[TypeExpr] = None
    value: Expr = None


@dataclass
class TypeDecl(Decl):
    """Named type declaration: type Name TypeExpr."""
    name: Ident = None
    type_expr: TypeExpr = None


@dataclass
class Block(Node):
    """
    Statement list between 'begin' and 'end'.

    Attributes:
        stmts: Statements in order
        closing: Position of 'end'
    """
    stmts: list[Stmt] = field(default_factory=list)
    closing: int = NO_POS


@dataclass
class FuncDecl(Decl):
    """
    Function or method declaration.

    Attributes:
        recv: Receiver list for methods, None for plain functions
        name: Function name
        type_expr: Signature
        body: Function body
    """
    recv: Optional[FieldList] = None
    name: Ident = None
    type_expr: FuncType = None
    body: Block = None

    @property
    def is_method(self) -> bool:
        return self.recv is not None


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class DeclStmt(Stmt):
    """Local declaration used as a statement."""
    decl: VarDecl = None


@dataclass
class ReturnStmt(Stmt):
    """return [value]."""
    value: Optional[Expr] = None


@dataclass
class ExprStmt(Stmt):
    """Expression (a call) used as a statement."""
    expr: Expr = None


@dataclass
class CaseClause(Node):
    """
    One arm of a switch.

    Attributes:
        value: Matched expression; None for the default clause
        colon: Position of ':'
        body: Statements of the arm
    """
    value: Optional[Expr] = None
    colon: int = NO_POS
    body: list[Stmt] = field(default_factory=list)

    @property
    def is_default(self) -> bool:
        return self.value is None


@dataclass
class SwitchStmt(Stmt):
    """
    switch tag ... end.

    Attributes:
        tag: The switched-on expression
        clauses: Case and default clauses in order
        closing: Position of 'end'
    """
    tag: Expr = None
    clauses: list[CaseClause] = field(default_factory=list)
    closing: int = NO_POS


# =============================================================================
# Root Node
# =============================================================================

@dataclass
class CompilationUnit(Node):
    """
    Root of the tree for one source file.

    Attributes:
        package: Go package name of the rendered file
        decls: Declarations in order
        unparsed_pos: Position where parsing stopped on an unrecognized
                      leading token, NO_POS if the whole input was consumed
    """
    package: str = "main"
    decls: list[Decl] = field(default_factory=list)
    unparsed_pos: int = NO_POS


# =============================================================================
# Traversal
# =============================================================================

def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of a node in field (source) order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield a node and all its descendants in pre-order."""
    yield node
    for child in iter_child_nodes(node):
        yield from walk(child)


class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit, which visits
    the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_CallExpr(self, node):
                self.count += 1
                self.generic_visit(node)
    """

    def visit(self, node: Node):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node):
        for child in iter_child_nodes(node):
            self.visit(child)


class ASTTransformer(ASTVisitor):
    """
    Visitor that builds a new tree.

    visit_* methods return the replacement node. generic_visit rebuilds a
    node only when one of its children changed, so untouched subtrees
    are shared between the input and output trees.
    """

    def generic_visit(self, node: Node) -> Node:
        changes = {}
        for f in fields(node):
            value = getattr(node, f.name)
            if isinstance(value, Node):
                new_value = self.visit(value)
                if new_value is not value:
                    changes[f.name] = new_value
            elif isinstance(value, list):
                new_list = [
                    self.visit(item) if isinstance(item, Node) else item
                    for item in value
                ]
                if any(new is not old for new, old in zip(new_list, value)):
                    changes[f.name] = new_list
        if changes:
            return replace(node, **changes)
        return node


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Debug dump of the tree structure, one node per line.

    Usage:
        printer = ASTPrinter()
        print(printer.print(unit))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Node) -> str:
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _children(self, node: Node) -> None:
        self.indent_level += 1
        for child in iter_child_nodes(node):
            self.visit(child)
        self.indent_level -= 1

    def visit_CompilationUnit(self, node: CompilationUnit):
        self._emit(f"CompilationUnit package={node.package}")
        self._children(node)

    def visit_ImportDecl(self, node: ImportDecl):
        self._emit(f"ImportDecl {node.path!r} @{node.pos}")

    def visit_VarDecl(self, node: VarDecl):
        self._emit(f"VarDecl {node.name.name} @{node.pos}")
        self.indent_level += 1
        if node.type_expr is not None:
            self.visit(node.type_expr)
        self._emit(f"= {_expr_str(node.value)}")
        self.indent_level -= 1

    def visit_TypeDecl(self, node: TypeDecl):
        self._emit(f"TypeDecl {node.name.name} @{node.pos}")
        self.indent_level += 1
        self.visit(node.type_expr)
        self.indent_level -= 1

    def visit_FuncDecl(self, node: FuncDecl):
        kind = "Method" if node.is_method else "FuncDecl"
        self._emit(f"{kind} {node.name.name} @{node.pos}")
        self.indent_level += 1
        if node.recv is not None:
            self._emit("Recv")
            self._children(node.recv)
        self.visit(node.type_expr)
        self.visit(node.body)
        self.indent_level -= 1

    def visit_NamedType(self, node: NamedType):
        self._emit(f"NamedType {node.name}")

    def visit_Field(self, node: Field):
        name = node.name.name if node.name else "_"
        self._emit(f"Field {name}")
        self._children(node)

    def visit_Ident(self, node: Ident):
        # Names are printed by their owners.
        pass

    def visit_DeclStmt(self, node: DeclStmt):
        self.visit(node.decl)

    def visit_ReturnStmt(self, node: ReturnStmt):
        self._emit(f"Return {_expr_str(node.value)}")

    def visit_ExprStmt(self, node: ExprStmt):
        self._emit(f"Expr {_expr_str(node.expr)}")

    def visit_SwitchStmt(self, node: SwitchStmt):
        self._emit(f"Switch {_expr_str(node.tag)}")
        self.indent_level += 1
        for clause in node.clauses:
            self.visit(clause)
        self.indent_level -= 1

    def visit_CaseClause(self, node: CaseClause):
        if node.is_default:
            self._emit("Default")
        else:
            self._emit(f"Case {_expr_str(node.value)}")
        self.indent_level += 1
        for stmt in node.body:
            self.visit(stmt)
        self.indent_level -= 1

    def generic_visit(self, node: Node):
        if isinstance(node, Expr):
            self._emit(_expr_str(node))
            return
        self._emit(f"{node.__class__.__name__}")
        self.indent_level += 1
        super().generic_visit(node)
        self.indent_level -= 1


def _expr_str(expr: Optional[Expr]) -> str:
    """Compact one-line rendering of an expression for debug output."""
    if expr is None:
        return ""
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, BasicLit):
        return expr.value
    if isinstance(expr, CallExpr):
        args = ", ".join(_expr_str(a) for a in expr.args)
        return f"{_expr_str(expr.fun)}({args})"
    if isinstance(expr, SelectorExpr):
        return f"{_expr_str(expr.x)}.{expr.sel.name}"
    if isinstance(expr, IndexExpr):
        return f"{_expr_str(expr.x)}[{_expr_str(expr.index)}]"
    if isinstance(expr, UnaryExpr):
        return f"({expr.op}{_expr_str(expr.x)})"
    if isinstance(expr, BinaryExpr):
        return f"({_expr_str(expr.x)} {expr.op} {_expr_str(expr.y)})"
    if isinstance(expr, CompositeLit):
        elts = ", ".join(_expr_str(e) for e in expr.elts)
        return f"{_expr_str(expr.type)}{{{elts}}}"
    if isinstance(expr, KeyValueExpr):
        return f"{_expr_str(expr.key)}: {_expr_str(expr.value)}"
    return f"<{type(expr).__name__}>"
