# =============================================================================
# test_lowering.py - Union Lowering and Builtin Rewriting Tests
# =============================================================================
# Both passes are pure: they return a new CompilationUnit and leave the
# parsed one alone.
#
# Union lowering:
#   type Shape union = Circle | Square
# becomes a marker declaration plus a carrier record appended at the end:
#   type Shape interface{}
#   type __Shape struct { Type Shape; Field0 Circle; Field1 Square }
#
# Builtin rewriting:
#   printf(...)  ->  fmt.Printf(...)   and import "fmt" added exactly once
# =============================================================================

from bake.lang.ast import (
    CallExpr,
    ExprStmt,
    Ident,
    ImportDecl,
    InterfaceType,
    SelectorExpr,
    StructType,
    TypeDecl,
    UnionType,
    walk,
)
from bake.lang.builtins import BUILTINS, add_import, rewrite_builtins
from bake.lang.compiler import parse_source
from bake.lang.lowering import CARRIER_PREFIX, carrier_name, lower_unions
from bake.lang.source import NO_POS


SHAPES = """
type Circle struct begin
  r float64
end

type Square struct begin
  side float64
end

type Triangle struct begin
  base float64
end

type Shape union = Circle | Square | Triangle
"""


def calls(unit) -> list[CallExpr]:
    return [n for n in walk(unit) if isinstance(n, CallExpr)]


def imports(unit) -> list[ImportDecl]:
    return [d for d in unit.decls if isinstance(d, ImportDecl)]


# =============================================================================
# Union Lowering
# =============================================================================

class TestLowerUnions:
    """Unions become a marker interface plus a carrier record."""

    def test_carrier_name(self):
        assert CARRIER_PREFIX == "__"
        assert carrier_name("Shape") == "__Shape"

    def test_shape_union(self):
        raw = parse_source(SHAPES)
        unit = lower_unions(raw)

        assert len(unit.decls) == len(raw.decls) + 1
        shape = unit.decls[3]
        assert shape.name.name == "Shape"
        assert isinstance(shape.type_expr, InterfaceType)
        assert len(shape.type_expr.methods) == 0

        carrier = unit.decls[-1]
        assert isinstance(carrier, TypeDecl)
        assert carrier.name.name == "__Shape"
        assert carrier.pos == NO_POS
        struct = carrier.type_expr
        assert isinstance(struct, StructType)
        fields = struct.fields.fields
        assert [f.name.name for f in fields] == ["Type", "Field0", "Field1", "Field2"]
        assert [f.type_expr.name for f in fields] == ["Shape", "Circle", "Square", "Triangle"]

    def test_no_union_remains(self):
        unit = lower_unions(parse_source(SHAPES))
        assert not any(isinstance(n, UnionType) for n in walk(unit))

    def test_marker_keeps_union_position(self):
        raw = parse_source(SHAPES)
        union_pos = raw.decls[3].type_expr.pos
        assert lower_unions(raw).decls[3].type_expr.pos == union_pos

    def test_input_unit_untouched(self):
        raw = parse_source(SHAPES)
        lower_unions(raw)
        assert isinstance(raw.decls[3].type_expr, UnionType)
        assert len(raw.decls) == 4

    def test_carriers_in_source_order(self):
        raw = parse_source(
            "type A union = int | string\n"
            "var x = 1\n"
            "type B union = bool\n"
        )
        unit = lower_unions(raw)
        names = [d.name.name for d in unit.decls]
        assert names == ["A", "x", "B", "__A", "__B"]
        assert len(unit.decls[-1].type_expr.fields) == 2

    def test_members_not_deduplicated(self):
        unit = lower_unions(parse_source("type D union = int | int"))
        assert len(unit.decls[-1].type_expr.fields) == 3

    def test_self_reference_allowed(self):
        unit = lower_unions(parse_source("type List union = int | *List"))
        assert unit.decls[-1].type_expr.fields.fields[2].type_expr.elem.name == "List"

    def test_anonymous_union_erased(self):
        """A union used as a field type has no carrier, only the marker."""
        raw = parse_source("type Box struct begin\n  v union = int | string\nend")
        unit = lower_unions(raw)
        assert len(unit.decls) == 1
        field = unit.decls[0].type_expr.fields.fields[0]
        assert isinstance(field.type_expr, InterfaceType)
        assert not any(isinstance(n, UnionType) for n in walk(unit))

    def test_no_unions_returns_same_unit(self):
        raw = parse_source("var x = 1")
        assert lower_unions(raw) is raw


# =============================================================================
# Builtin Rewriting
# =============================================================================

class TestRewriteBuiltins:
    """printf becomes fmt.Printf and fmt is imported once."""

    def test_printf_mapping(self):
        assert BUILTINS["printf"] == ("fmt", "Printf")

    def test_single_import_for_two_calls(self):
        raw = parse_source('fn main() begin\n  printf("a")\n  printf("b")\nend')
        unit = rewrite_builtins(raw)

        assert len(imports(unit)) == 1
        assert unit.decls[0].path == "fmt"
        for call in calls(unit):
            assert isinstance(call.fun, SelectorExpr)
            assert call.fun.x.name == "fmt"
            assert call.fun.sel.name == "Printf"

    def test_arguments_kept(self):
        raw = parse_source('fn main() begin\n  printf("%d", n)\nend')
        call = calls(rewrite_builtins(raw))[0]
        assert call.args[0].value == '"%d"'
        assert call.args[1].name == "n"

    def test_existing_import_not_duplicated(self):
        raw = parse_source('import "fmt"\nfn main() begin\n  printf("a")\nend')
        unit = rewrite_builtins(raw)
        assert len(imports(unit)) == 1

    def test_import_after_existing_imports(self):
        raw = parse_source('import "os"\nfn main() begin\n  printf("a")\nend')
        unit = rewrite_builtins(raw)
        assert [d.path for d in imports(unit)] == ["os", "fmt"]
        assert isinstance(unit.decls[1], ImportDecl)

    def test_rewrites_inside_switch(self):
        raw = parse_source(
            "fn main() begin\n"
            "  switch x\n"
            "  case 1:\n"
            "    printf(\"one\")\n"
            "  default:\n"
            "    printf(\"other\")\n"
            "  end\n"
            "end"
        )
        unit = rewrite_builtins(raw)
        assert all(isinstance(c.fun, SelectorExpr) for c in calls(unit))
        assert len(imports(unit)) == 1

    def test_rewrites_inside_expressions(self):
        raw = parse_source("fn main() begin\n  return printf(\"x\") + 1\nend")
        unit = rewrite_builtins(raw)
        assert isinstance(calls(unit)[0].fun, SelectorExpr)

    def test_rewrites_inside_composite_literal(self):
        raw = parse_source("fn main() begin\n  var m = Msg{text: printf(\"x\")}\nend")
        unit = rewrite_builtins(raw)
        assert isinstance(calls(unit)[0].fun, SelectorExpr)
        assert len(imports(unit)) == 1

    def test_second_rewrite_changes_nothing(self):
        unit = rewrite_builtins(parse_source('fn main() begin\n  printf("a")\nend'))
        assert rewrite_builtins(unit) is unit

    def test_input_unit_untouched(self):
        raw = parse_source('fn main() begin\n  printf("a")\nend')
        rewrite_builtins(raw)
        assert isinstance(calls(raw)[0].fun, Ident)
        assert imports(raw) == []

    def test_other_calls_unchanged(self):
        raw = parse_source('fn main() begin\n  greet("a")\nend')
        assert rewrite_builtins(raw) is raw

    def test_add_import_is_idempotent(self):
        decls = [ImportDecl(pos=1, path="fmt")]
        assert add_import(decls, "fmt") is decls

    def test_add_import_without_imports_goes_first(self):
        unit = parse_source("var x = 1")
        decls = add_import(unit.decls, "fmt")
        assert isinstance(decls[0], ImportDecl)
        assert isinstance(decls[1], type(unit.decls[0]))

    def test_call_statement_position_kept(self):
        raw = parse_source('fn main() begin\n  printf("a")\nend')
        stmt = rewrite_builtins(raw).decls[1].body.stmts[0]
        assert isinstance(stmt, ExprStmt)
        assert stmt.expr.pos == raw.decls[0].body.stmts[0].expr.pos
