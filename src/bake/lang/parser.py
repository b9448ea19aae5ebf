"""
Bake Recursive Descent Parser
=============================

This module implements a recursive descent parser for the Bake language.
It pulls tokens from the Scanner with exactly one token of lookahead and
builds a position-annotated AST.

Grammar (Informal EBNF)
-----------------------
unit            ::= decl*
decl            ::= import | var_decl | type_decl | func_decl
import          ::= 'import' STRING ';'
var_decl        ::= 'var' IDENT ( '=' span | type '=' span ) ';'
type_decl       ::= 'type' IDENT type ';'
func_decl       ::= 'fn' field_list? IDENT field_list result? body ';'
result          ::= type_list | type

type            ::= '*' type | struct_type | union_type | interface_type | IDENT
struct_type     ::= 'struct' 'begin' (IDENT type ';')* 'end'
interface_type  ::= 'interface' 'begin' (IDENT field_list type_list ';')* 'end'
union_type      ::= 'union' '=' type ('|' type)* ';'
field_list      ::= '(' (IDENT type (',' IDENT type)*)? ')'
type_list       ::= '(' (type (',' type)*)? ')'

body            ::= 'begin' stmt* 'end'
stmt            ::= var_decl | return_stmt | switch_stmt | call
return_stmt     ::= 'return' span? ';'
switch_stmt     ::= 'switch' span ';' case_clause* 'end'
case_clause     ::= 'case' span ':' ';' stmt* | 'default' ':' stmt*
call            ::= IDENT '(' (operand (',' operand)*)? ')'
operand         ::= INT | FLOAT | IMAG | CHAR | STRING | IDENT

``span`` is the raw text up to the end of the statement (newline or ';'),
handed verbatim to the expression parser. Newlines are scanned as ';'.

Every decision is made on the literal of the current token; there is no
backtracking and no error recovery. The first error aborts the parse.

Example Usage
-------------
>>> parser = Parser('fn main() begin\\n  greet("hi")\\nend', "hello.bake")
>>> unit = parser.parse_unit()
>>> unit.decls[0].name.name
'main'
"""

import logging
from typing import Callable, Optional, Union

from bake.lang.ast import (
    BasicLit,
    Block,
    CallExpr,
    CaseClause,
    CompilationUnit,
    DeclStmt,
    Expr,
    ExprStmt,
    Field,
    FieldList,
    FuncDecl,
    FuncType,
    Ident,
    ImportDecl,
    InterfaceType,
    LitKind,
    NamedType,
    PointerType,
    ReturnStmt,
    Stmt,
    StructType,
    SwitchStmt,
    TypeDecl,
    TypeExpr,
    UnionType,
    VarDecl,
)
from bake.lang.errors import MissingTokenError, UnexpectedTokenError
from bake.lang.expressions import parse_expression
from bake.lang.scanner import STATEMENT_DELIMITERS, Scanner, Token, TokenKind
from bake.lang.source import NO_POS, SourceMap, load_source

logger = logging.getLogger(__name__)


# =============================================================================
# Keywords
# =============================================================================

KEYWORD_SEMICOLON = ";"
KEYWORD_FN = "fn"
KEYWORD_BEGIN = "begin"
KEYWORD_END = "end"
KEYWORD_IMPORT = "import"
KEYWORD_VAR = "var"
KEYWORD_RETURN = "return"
KEYWORD_TYPE = "type"
KEYWORD_SWITCH = "switch"
KEYWORD_CASE = "case"
KEYWORD_DEFAULT = "default"
KEYWORD_STRUCT = "struct"
KEYWORD_UNION = "union"
KEYWORD_INTERFACE = "interface"

_OPERAND_KINDS = {
    TokenKind.INT: LitKind.INT,
    TokenKind.FLOAT: LitKind.FLOAT,
    TokenKind.IMAG: LitKind.IMAG,
    TokenKind.CHAR: LitKind.CHAR,
    TokenKind.STRING: LitKind.STRING,
    TokenKind.RAW_STRING: LitKind.STRING,
}

TraceSink = Callable[[str], None]


class Parser:
    """
    Recursive descent parser for one Bake source buffer.

    Attributes:
        filename: Source filename for positions and error messages
        data: The trimmed source bytes that positions refer to
        source_map: Offset to line/column mapping for ``data``
    """

    def __init__(
        self,
        source: Union[bytes, str],
        filename: str = "<input>",
        trace: Optional[TraceSink] = None,
    ):
        """
        Initialize the parser and scan the first token.

        Args:
            source: Source text; leading and trailing whitespace is trimmed
            filename: Source filename for error messages
            trace: Optional sink receiving one line per consumed token
        """
        self.filename = filename
        self.data = load_source(source, filename)
        self.source_map = SourceMap(filename, self.data)
        self._scanner = Scanner(self.source_map)
        self._trace = trace
        self._curr: Optional[Token] = None
        self._next()

    @property
    def token_count(self) -> int:
        return self._scanner.token_count

    # =========================================================================
    # Entry Point
    # =========================================================================

    def parse_unit(self) -> CompilationUnit:
        """
        Parse declarations until end of input.

        Parsing also stops at a leading token that does not start a
        declaration; the rest of the input is left unconsumed and its
        position is recorded in ``unparsed_pos``.

        Returns:
            The raw CompilationUnit (unions not yet lowered, builtins not
            yet rewritten)

        Raises:
            BakeSyntaxError: On the first syntax error
        """
        self._skip_newlines()
        decls = []
        unparsed_pos = NO_POS

        while not self._at_end():
            lit = self._curr.literal
            if lit == KEYWORD_VAR:
                decl = self._parse_var_decl()
            elif lit == KEYWORD_IMPORT:
                decl = self._parse_import_decl()
            elif lit == KEYWORD_FN:
                decl = self._parse_func_decl()
            elif lit == KEYWORD_TYPE:
                decl = self._parse_type_decl()
            else:
                unparsed_pos = self._curr.pos
                logger.warning(
                    f"{self._location(self._curr.offset)}: stopped at {lit!r}, "
                    f"remaining input ignored"
                )
                break
            decls.append(decl)

        logger.debug(f"{self.filename}: parsed {len(decls)} declarations")
        return CompilationUnit(
            pos=1,
            package="main",
            decls=decls,
            unparsed_pos=unparsed_pos,
        )

    # =========================================================================
    # Lookahead Cursor
    # =========================================================================

    def _next(self) -> None:
        """Advance to the next token. No-op once EOF has been reached."""
        if self._curr is not None and self._curr.kind is TokenKind.EOF:
            return
        self._curr = self._scanner.scan()
        if self._trace is not None:
            self._trace(f"{self._location(self._curr.offset)} \t lit:{self._curr.literal!r}")

    def _at_end(self) -> bool:
        return self._curr.kind is TokenKind.EOF

    def _skip_newlines(self) -> None:
        while self._curr.kind is TokenKind.SEMICOLON:
            self._next()

    def _expect_semicolon(self) -> None:
        """Consume a statement terminator; end of input also terminates."""
        if self._at_end():
            return
        self._expect_literal(KEYWORD_SEMICOLON)
        self._skip_newlines()

    def _expect_literal(self, want: str) -> int:
        """
        Consume the current token if its literal is ``want``.

        Returns:
            Position of the consumed token

        Raises:
            UnexpectedTokenError: If the literal differs
            MissingTokenError: If input ended instead
        """
        tok = self._curr
        if tok.literal != want or tok.kind is TokenKind.EOF:
            raise self._unexpected(f"'{want}'")
        self._next()
        return tok.pos

    def _unexpected(self, expected: str) -> UnexpectedTokenError:
        tok = self._curr
        location = self._location(tok.offset)
        source_line = self.source_map.line_text(location.line)
        if tok.kind is TokenKind.EOF:
            return MissingTokenError(expected, location, source_line)
        return UnexpectedTokenError(tok.literal, expected, location, source_line)

    def _location(self, offset: int):
        return self.source_map.offset_location(offset)

    # =========================================================================
    # Terminals
    # =========================================================================

    def _parse_ident(self) -> Ident:
        tok = self._curr
        if tok.kind is not TokenKind.IDENT:
            raise self._unexpected("identifier")
        self._next()
        return Ident(pos=tok.pos, name=tok.literal)

    def _parse_string(self) -> tuple[str, int]:
        tok = self._curr
        if tok.kind not in (TokenKind.STRING, TokenKind.RAW_STRING):
            raise self._unexpected("string literal")
        self._next()
        return tok.literal[1:-1], tok.pos

    def _parse_operand(self) -> Expr:
        """A call argument: exactly one literal or identifier token."""
        tok = self._curr
        if tok.kind is TokenKind.IDENT:
            self._next()
            return Ident(pos=tok.pos, name=tok.literal)
        kind = _OPERAND_KINDS.get(tok.kind)
        if kind is None:
            raise self._unexpected("literal or identifier")
        self._next()
        return BasicLit(pos=tok.pos, kind=kind, value=tok.literal)

    # =========================================================================
    # Delegated Spans
    # =========================================================================

    def _span_to_end_of_statement(self) -> tuple[str, int]:
        """
        Collect the raw text from the current token up to the statement end.

        The current token was already scanned normally; everything after it
        is scanned in stop-at mode so the rest of the line comes back as one
        opaque word. The span is cut from the source buffer so its spacing
        is kept.

        Returns:
            (span text, byte offset of the span start)
        """
        start = self._curr.offset
        end = start
        self._scanner.stop_at(*STATEMENT_DELIMITERS)
        try:
            while self._curr.kind not in (TokenKind.EOF, TokenKind.SEMICOLON):
                end = self._curr.end
                self._next()
        finally:
            self._scanner.stop_at()
        return self.data[start:end].decode("utf-8"), start

    def _parse_value(self, span: str, offset: int) -> Expr:
        return parse_expression(span, offset + 1, self._location(offset))

    def _parse_value_to_end_of_statement(self) -> Expr:
        span, offset = self._span_to_end_of_statement()
        expr = self._parse_value(span, offset)
        self._expect_semicolon()
        return expr

    # =========================================================================
    # Type Expressions
    # =========================================================================

    def _parse_type(self) -> TypeExpr:
        lit = self._curr.literal
        if lit == "*" and self._curr.kind is TokenKind.PUNCT:
            star = self._curr.pos
            self._next()
            return PointerType(pos=star, elem=self._parse_type())
        if lit == KEYWORD_STRUCT:
            return self._parse_struct_type()
        if lit == KEYWORD_UNION:
            return self._parse_union_type()
        if lit == KEYWORD_INTERFACE:
            return self._parse_interface_type()
        ident = self._parse_ident()
        return NamedType(pos=ident.pos, name=ident.name)

    def _parse_struct_type(self) -> StructType:
        struct_pos = self._expect_literal(KEYWORD_STRUCT)
        opening = self._expect_literal(KEYWORD_BEGIN)

        fields = []
        while True:
            self._skip_newlines()
            if self._curr.literal == KEYWORD_END or self._at_end():
                break
            fields.append(self._parse_arg_param())
            if self._curr.literal != KEYWORD_END:
                self._expect_semicolon()

        closing = self._expect_literal(KEYWORD_END)
        return StructType(
            pos=struct_pos,
            fields=FieldList(pos=opening, fields=fields, closing=closing),
        )

    def _parse_interface_type(self) -> InterfaceType:
        interface_pos = self._expect_literal(KEYWORD_INTERFACE)
        opening = self._expect_literal(KEYWORD_BEGIN)

        methods = []
        while True:
            self._skip_newlines()
            if self._curr.literal == KEYWORD_END or self._at_end():
                break
            methods.append(self._parse_method_spec())

        closing = self._expect_literal(KEYWORD_END)
        return InterfaceType(
            pos=interface_pos,
            methods=FieldList(pos=opening, fields=methods, closing=closing),
        )

    def _parse_method_spec(self) -> Field:
        ident = self._parse_ident()
        params = self._parse_field_list()
        results = self._parse_type_list()
        if self._curr.literal != KEYWORD_END:
            self._expect_semicolon()
        return Field(
            pos=ident.pos,
            name=ident,
            type_expr=FuncType(pos=params.pos, params=params, results=results),
        )

    def _parse_union_type(self) -> UnionType:
        """
        union = A | B | C

        The member list ends at the statement terminator, so a union fits
        on one line. A line break directly after '|' continues the list.
        """
        union_pos = self._expect_literal(KEYWORD_UNION)
        self._expect_literal("=")

        members = [self._parse_type()]
        while self._curr.literal == "|":
            self._next()
            self._skip_newlines()
            members.append(self._parse_type())

        if not (self._at_end() or self._curr.kind is TokenKind.SEMICOLON):
            raise self._unexpected("'|' or end of line")

        return UnionType(pos=union_pos, members=members)

    def _parse_arg_param(self) -> Field:
        ident = self._parse_ident()
        return Field(pos=ident.pos, name=ident, type_expr=self._parse_type())

    def _parse_ret_param(self) -> Field:
        type_expr = self._parse_type()
        return Field(pos=type_expr.pos, name=None, type_expr=type_expr)

    def _parse_field_list(self) -> FieldList:
        return self._parse_parenthesized(self._parse_arg_param)

    def _parse_type_list(self) -> FieldList:
        return self._parse_parenthesized(self._parse_ret_param)

    def _parse_parenthesized(self, parse_item: Callable[[], Field]) -> FieldList:
        opening = self._expect_literal("(")

        items = []
        while self._curr.literal != ")":
            items.append(parse_item())
            if self._curr.literal == ",":
                self._next()
            elif self._curr.literal != ")":
                raise self._unexpected("',' or ')'")

        closing = self._expect_literal(")")
        return FieldList(pos=opening, fields=items, closing=closing)

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_stmts_until(self, *enders: str) -> list[Stmt]:
        stmts = []
        while True:
            self._skip_newlines()
            if self._at_end() or self._curr.literal in enders:
                break
            stmts.append(self._parse_stmt())
        return stmts

    def _parse_stmt(self) -> Stmt:
        lit = self._curr.literal
        if lit == KEYWORD_VAR:
            decl = self._parse_var_decl()
            return DeclStmt(pos=decl.pos, decl=decl)
        if lit == KEYWORD_RETURN:
            return self._parse_return_stmt()
        if lit == KEYWORD_SWITCH:
            return self._parse_switch_stmt()
        call = self._parse_call_expr()
        self._expect_semicolon()
        return ExprStmt(pos=call.pos, expr=call)

    def _parse_return_stmt(self) -> ReturnStmt:
        pos = self._expect_literal(KEYWORD_RETURN)
        if self._at_end() or self._curr.kind is TokenKind.SEMICOLON:
            self._expect_semicolon()
            return ReturnStmt(pos=pos, value=None)
        return ReturnStmt(pos=pos, value=self._parse_value_to_end_of_statement())

    def _parse_switch_stmt(self) -> SwitchStmt:
        pos = self._expect_literal(KEYWORD_SWITCH)

        span, offset = self._span_to_end_of_statement()
        if span.endswith(":"):
            span = span[:-1].rstrip()
        tag = self._parse_value(span, offset)
        self._expect_semicolon()

        clauses = []
        while self._curr.literal in (KEYWORD_CASE, KEYWORD_DEFAULT):
            clauses.append(self._parse_case_clause())

        closing = self._expect_literal(KEYWORD_END)
        self._expect_semicolon()
        return SwitchStmt(pos=pos, tag=tag, clauses=clauses, closing=closing)

    def _parse_case_clause(self) -> CaseClause:
        pos = self._curr.pos
        value = None

        if self._curr.literal == KEYWORD_DEFAULT:
            self._next()
            colon = self._expect_literal(":")
        else:
            self._expect_literal(KEYWORD_CASE)
            span, offset = self._span_to_end_of_statement()
            if not span.endswith(":"):
                raise UnexpectedTokenError(
                    span[-1:] or ";",
                    "':'",
                    self._location(offset + len(span.encode("utf-8"))),
                    self.source_map.line_text(self._location(offset).line),
                )
            colon = offset + len(span.encode("utf-8"))
            value = self._parse_value(span[:-1].rstrip(), offset)
            self._expect_semicolon()

        body = self._parse_stmts_until(KEYWORD_END, KEYWORD_CASE, KEYWORD_DEFAULT)
        return CaseClause(pos=pos, value=value, colon=colon, body=body)

    def _parse_call_expr(self) -> CallExpr:
        """
        name(arg, arg, ...) where each argument is a single token.

        Builtins such as printf are left as plain calls here; see
        bake.lang.builtins for their rewriting.
        """
        name = self._parse_ident()
        lparen = self._expect_literal("(")

        args = []
        if self._curr.literal != ")":
            while True:
                args.append(self._parse_operand())
                if self._curr.literal != ",":
                    break
                self._next()

        rparen = self._expect_literal(")")
        return CallExpr(pos=name.pos, fun=name, args=args, lparen=lparen, rparen=rparen)

    def _parse_body(self) -> Block:
        opening = self._expect_literal(KEYWORD_BEGIN)
        stmts = self._parse_stmts_until(KEYWORD_END)
        closing = self._expect_literal(KEYWORD_END)
        return Block(pos=opening, stmts=stmts, closing=closing)

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_var_decl(self) -> VarDecl:
        """
        var x = value          (type inferred)
        var x Type = value     (explicit type)

        The token after the name decides: '=' means no type follows.
        """
        var_pos = self._expect_literal(KEYWORD_VAR)
        name = self._parse_ident()

        type_expr = None
        if self._curr.literal != "=":
            type_expr = self._parse_type()
        self._expect_literal("=")
        value = self._parse_value_to_end_of_statement()

        return VarDecl(pos=var_pos, name=name, type_expr=type_expr, value=value)

    def _parse_import_decl(self) -> ImportDecl:
        import_pos = self._expect_literal(KEYWORD_IMPORT)
        path, _ = self._parse_string()
        self._expect_semicolon()
        return ImportDecl(pos=import_pos, path=path)

    def _parse_type_decl(self) -> TypeDecl:
        type_pos = self._expect_literal(KEYWORD_TYPE)
        name = self._parse_ident()
        type_expr = self._parse_type()
        self._expect_semicolon()
        return TypeDecl(pos=type_pos, name=name, type_expr=type_expr)

    def _parse_func_decl(self) -> FuncDecl:
        func_pos = self._expect_literal(KEYWORD_FN)

        recv = None
        if self._curr.literal == "(":
            recv = self._parse_field_list()

        name = self._parse_ident()
        params = self._parse_field_list()

        results = None
        if self._curr.literal != KEYWORD_BEGIN:
            if self._curr.literal == "(":
                results = self._parse_type_list()
            else:
                result = self._parse_ret_param()
                results = FieldList(pos=result.pos, fields=[result], closing=NO_POS)

        body = self._parse_body()
        self._expect_semicolon()

        return FuncDecl(
            pos=func_pos,
            recv=recv,
            name=name,
            type_expr=FuncType(pos=params.pos, params=params, results=results),
            body=body,
        )


