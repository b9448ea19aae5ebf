"""
Delegated Expression Parsing
============================

The Bake parser does not parse operators itself. Value, return, switch
and case spans are handed here as raw text and parsed with the Go
grammar of tree-sitter (``tree-sitter-go``), which is treated as a black
box. The resulting syntax tree is converted into Bake expression nodes.

A span is parsed as the initializer of a throwaway declaration:

    package _
    var _x = <span>

so anything Go accepts as a single initializer expression is accepted
here, and anything else is a syntax error.

Supported Forms
---------------
| Span form                   | Bake node                          |
|-----------------------------|------------------------------------|
| 42, 0x7F, 1.5, 2i           | BasicLit INT / FLOAT / IMAG        |
| 'c'                         | BasicLit CHAR                      |
| "text", `raw`               | BasicLit STRING                    |
| name, true, false, nil      | Ident                              |
| f(a, b)                     | CallExpr                           |
| x.y                         | SelectorExpr                       |
| x[i]                        | IndexExpr                          |
| -x, !x, ^x, *p, &x, <-ch    | UnaryExpr                          |
| a + b, a && b, a != b, ...  | BinaryExpr                         |
| T{a, b}, T{k: v}, pkg.T{}   | CompositeLit (+ KeyValueExpr)      |
| (x)                         | the inner expression               |

Other Go forms (slices, type assertions, function literals, conversions
to composite types) raise MalformedLiteralError, as does a span that is
not a valid expression at all. Comments inside a span are ignored.

Positions: ``pos`` of the span is the 1-based offset of its first byte;
each node's position is that plus its byte offset inside the span.
"""

from typing import Optional

import tree_sitter_go
from tree_sitter import Language, Node as TSNode, Parser as TreeSitterParser

from bake.errors import SourceLocation
from bake.lang.ast import (
    BasicLit,
    BinaryExpr,
    CallExpr,
    CompositeLit,
    Expr,
    Ident,
    IndexExpr,
    KeyValueExpr,
    LitKind,
    SelectorExpr,
    UnaryExpr,
)
from bake.lang.errors import MalformedLiteralError


GO_LANGUAGE = Language(tree_sitter_go.language())

SPAN_PREFIX = b"package _\nvar _x = "

LITERAL_KINDS: dict[str, LitKind] = {
    "int_literal": LitKind.INT,
    "float_literal": LitKind.FLOAT,
    "imaginary_literal": LitKind.IMAG,
    "rune_literal": LitKind.CHAR,
    "interpreted_string_literal": LitKind.STRING,
    "raw_string_literal": LitKind.STRING,
}

PREDECLARED_VALUES = frozenset({"true", "false", "nil", "iota"})

UNARY_OPERATORS = frozenset({"+", "-", "!", "^", "*", "&", "<-"})

BINARY_OPERATORS = frozenset({
    "*", "/", "%", "<<", ">>", "&", "&^",
    "+", "-", "|", "^",
    "==", "!=", "<", "<=", ">", ">=",
    "&&", "||",
})


def parse_expression(
    span: str,
    pos: int,
    location: Optional[SourceLocation] = None,
) -> Expr:
    """
    Parse a raw text span into a Bake expression.

    Args:
        span: Expression text, exactly as it appears in the source
        pos: 1-based position of the span's first byte
        location: Location of the span, used in error messages

    Returns:
        The expression node

    Raises:
        MalformedLiteralError: If the span is empty, is not a single Go
            expression, or uses a form Bake does not represent
    """
    if not span.strip():
        raise MalformedLiteralError(span, "expected an expression", location)

    source = SPAN_PREFIX + span.encode("utf-8") + b"\n"
    tree = TreeSitterParser(GO_LANGUAGE).parse(source)
    converter = _ExpressionConverter(span, pos, location)

    if tree.root_node.has_error:
        raise converter.syntax_error(tree.root_node)

    return converter.convert(converter.initializer(tree.root_node))


def _named(node: TSNode) -> list[TSNode]:
    """Named children without comments."""
    return [child for child in node.named_children if child.type != "comment"]


class _ExpressionConverter:
    """Converts one tree-sitter Go expression into Bake nodes."""

    def __init__(self, span: str, pos: int, location: Optional[SourceLocation]):
        self.span = span
        self.pos = pos
        self.location = location

    def convert(self, node: TSNode) -> Expr:
        method = getattr(self, f"_convert_{node.type}", None)
        if method is None:
            raise self._unsupported(node.type.replace("_", " "))
        return method(node)

    def initializer(self, root: TSNode) -> TSNode:
        """Find the single initializer expression of the wrapping declaration."""
        decls = [n for n in _named(root) if n.type != "package_clause"]
        if len(decls) == 1 and decls[0].type == "var_declaration":
            specs = _named(decls[0])
            if len(specs) == 1 and specs[0].type == "var_spec":
                values = specs[0].child_by_field_name("value")
                if values is not None:
                    exprs = _named(values)
                    if len(exprs) == 1:
                        return exprs[0]
                    raise MalformedLiteralError(
                        self.span, "expected a single expression", self.location
                    )
        raise MalformedLiteralError(self.span, "expected an expression", self.location)

    # =========================================================================
    # Errors
    # =========================================================================

    def syntax_error(self, root: TSNode) -> MalformedLiteralError:
        """Describe the first error or missing node under ``root``."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                return self._malformed(f"missing {node.type!r}")
            if node.type == "ERROR":
                text = node.text.decode("utf-8", errors="replace").strip()
                if self._offset(node) < 0 or not text:
                    return self._malformed("syntax error")
                return self._malformed(f"unexpected {text!r}")
            stack.extend(reversed(node.children))
        return self._malformed("syntax error")

    def _malformed(self, reason: str) -> MalformedLiteralError:
        return MalformedLiteralError(self.span, reason, self.location)

    def _unsupported(self, what: str) -> MalformedLiteralError:
        return self._malformed(f"unsupported expression form: {what}")

    # =========================================================================
    # Positions
    # =========================================================================

    def _offset(self, node: TSNode) -> int:
        return node.start_byte - len(SPAN_PREFIX)

    def _node_pos(self, node: TSNode) -> int:
        return self.pos + self._offset(node)

    def _end_pos(self, node: TSNode) -> int:
        """Position of the node's last byte."""
        return self.pos + node.end_byte - 1 - len(SPAN_PREFIX)

    # =========================================================================
    # Leaves
    # =========================================================================

    def _literal(self, node: TSNode) -> Expr:
        return BasicLit(
            pos=self._node_pos(node),
            kind=LITERAL_KINDS[node.type],
            value=node.text.decode("utf-8"),
        )

    _convert_int_literal = _literal
    _convert_float_literal = _literal
    _convert_imaginary_literal = _literal
    _convert_rune_literal = _literal
    _convert_interpreted_string_literal = _literal
    _convert_raw_string_literal = _literal

    def _ident(self, node: TSNode) -> Ident:
        return Ident(pos=self._node_pos(node), name=node.text.decode("utf-8"))

    _convert_identifier = _ident
    _convert_field_identifier = _ident
    _convert_type_identifier = _ident
    _convert_package_identifier = _ident

    def _predeclared(self, node: TSNode) -> Ident:
        return Ident(pos=self._node_pos(node), name=node.type)

    _convert_true = _predeclared
    _convert_false = _predeclared
    _convert_nil = _predeclared
    _convert_iota = _predeclared

    # =========================================================================
    # Operators
    # =========================================================================

    def _convert_parenthesized_expression(self, node: TSNode) -> Expr:
        inner = _named(node)
        if len(inner) != 1:
            raise self._unsupported("parenthesized type")
        return self.convert(inner[0])

    def _convert_unary_expression(self, node: TSNode) -> Expr:
        op = node.child_by_field_name("operator").type
        if op not in UNARY_OPERATORS:
            raise self._unsupported(f"operator {op}")
        return UnaryExpr(
            pos=self._node_pos(node),
            op=op,
            x=self.convert(node.child_by_field_name("operand")),
        )

    def _convert_binary_expression(self, node: TSNode) -> Expr:
        op = node.child_by_field_name("operator").type
        if op not in BINARY_OPERATORS:
            raise self._unsupported(f"operator {op}")
        return BinaryExpr(
            pos=self._node_pos(node),
            op=op,
            x=self.convert(node.child_by_field_name("left")),
            y=self.convert(node.child_by_field_name("right")),
        )

    # =========================================================================
    # Primary Forms
    # =========================================================================

    def _convert_call_expression(self, node: TSNode) -> Expr:
        if node.child_by_field_name("type_arguments") is not None:
            raise self._unsupported("type arguments")
        arguments = node.child_by_field_name("arguments")
        args = []
        for arg in _named(arguments):
            if arg.type == "variadic_argument":
                raise self._unsupported("variadic argument")
            args.append(self.convert(arg))
        return CallExpr(
            pos=self._node_pos(node),
            fun=self.convert(node.child_by_field_name("function")),
            args=args,
            lparen=self._node_pos(arguments),
            rparen=self._end_pos(arguments),
        )

    def _convert_selector_expression(self, node: TSNode) -> Expr:
        return SelectorExpr(
            pos=self._node_pos(node),
            x=self.convert(node.child_by_field_name("operand")),
            sel=self._ident(node.child_by_field_name("field")),
        )

    def _convert_index_expression(self, node: TSNode) -> Expr:
        return IndexExpr(
            pos=self._node_pos(node),
            x=self.convert(node.child_by_field_name("operand")),
            index=self.convert(node.child_by_field_name("index")),
        )

    # =========================================================================
    # Composite Literals
    # =========================================================================

    def _convert_composite_literal(self, node: TSNode) -> Expr:
        type_node = node.child_by_field_name("type")
        if type_node.type not in ("type_identifier", "qualified_type"):
            raise self._unsupported(f"composite literal of {type_node.type.replace('_', ' ')}")
        literal = self._convert_literal_value(node.child_by_field_name("body"))
        return CompositeLit(
            pos=self._node_pos(node),
            type=self.convert(type_node),
            elts=literal.elts,
            lbrace=literal.lbrace,
            rbrace=literal.rbrace,
        )

    def _convert_qualified_type(self, node: TSNode) -> Expr:
        return SelectorExpr(
            pos=self._node_pos(node),
            x=self._ident(node.child_by_field_name("package")),
            sel=self._ident(node.child_by_field_name("name")),
        )

    def _convert_literal_value(self, node: TSNode) -> CompositeLit:
        """{...} with the type elided, as in a nested element."""
        return CompositeLit(
            pos=self._node_pos(node),
            type=None,
            elts=[self._element(child) for child in _named(node)],
            lbrace=self._node_pos(node),
            rbrace=self._end_pos(node),
        )

    def _element(self, node: TSNode) -> Expr:
        if node.type == "keyed_element":
            key, value = _named(node)
            colon = next(c for c in node.children if c.type == ":")
            return KeyValueExpr(
                pos=self._node_pos(node),
                key=self._element(key),
                value=self._element(value),
                colon=self._node_pos(colon),
            )
        if node.type == "literal_element":
            return self._element(_named(node)[0])
        return self.convert(node)
