"""
Declaration Checker Tests
=========================

The checker reports problems as Diagnostic values and never raises.
"""

from bake.lang.checker import PREDECLARED_TYPES, check_unit
from bake.lang.compiler import parse_source
from bake.lang.errors import Diagnostic
from bake.lang.lowering import lower_unions
from bake.lang.parser import Parser


def check(source: str, filename: str = "test.bake") -> list[Diagnostic]:
    parser = Parser(source, filename)
    unit = lower_unions(parser.parse_unit())
    return check_unit(unit, parser.source_map)


def messages(source: str) -> list[str]:
    return [d.message for d in check(source)]


class TestCleanPrograms:
    """Valid programs produce no diagnostics."""

    def test_greet_program(self):
        source = (
            'import "fmt"\n'
            "fn greet(name string) begin\n"
            '  printf("hello %s", name)\n'
            "end\n"
            "fn main() begin\n"
            '  greet("world")\n'
            "end\n"
        )
        assert check(source) == []

    def test_union_members_declared(self):
        source = (
            "type Circle struct begin\n  r float64\nend\n"
            "type Square struct begin\n  side float64\nend\n"
            "type Shape union = Circle | *Square\n"
        )
        assert check(source) == []

    def test_methods_on_different_types(self):
        source = (
            "type A struct begin\nend\n"
            "type B struct begin\nend\n"
            "fn (a A) Name() (string) begin\n  return \"a\"\nend\n"
            "fn (b *B) Name() (string) begin\n  return \"b\"\nend\n"
        )
        assert check(source) == []

    def test_carrier_literal_after_lowering(self):
        source = (
            "type Circle struct begin\n  r float64\nend\n"
            "type Shape union = Circle | int\n"
            "var c = Circle{r: 1.0}\n"
            "var s = __Shape{Type: c, Field0: c}\n"
        )
        assert check(source) == []

    def test_qualified_literal_type_not_checked(self):
        assert check("import \"image\"\nvar p = image.Point{}") == []

    def test_predeclared_types(self):
        assert {"int", "string", "bool", "float64", "error", "rune"} <= PREDECLARED_TYPES


class TestDiagnostics:
    """Each kind of problem the checker reports."""

    def test_undeclared_type(self):
        diagnostics = check("var x Foo = 1")
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.is_error
        assert diagnostic.message == "undeclared type 'Foo'"
        assert str(diagnostic) == "test.bake:1:7: error: undeclared type 'Foo'"

    def test_undeclared_literal_type(self):
        diagnostics = check("var p = Pointt{1, 2}")
        assert [d.message for d in diagnostics] == ["undeclared type 'Pointt'"]
        assert diagnostics[0].location.column == 9

    def test_undeclared_union_member(self):
        assert messages("type S union = Circle | int") == ["undeclared type 'Circle'"]

    def test_duplicate_function(self):
        source = "fn f() begin\nend\nfn f() begin\nend"
        diagnostics = check(source)
        assert [d.message for d in diagnostics] == ["f redeclared in this unit"]
        assert diagnostics[0].location.line == 3

    def test_duplicate_method(self):
        source = (
            "type A struct begin\nend\n"
            "fn (a A) M() begin\nend\n"
            "fn (x *A) M() begin\nend\n"
        )
        assert messages(source) == ["A.M redeclared in this unit"]

    def test_var_and_type_share_namespace(self):
        assert messages("type T struct begin\nend\nvar T = 1") == ["T redeclared in this unit"]

    def test_multiple_defaults(self):
        source = (
            "fn g() begin\nend\n"
            "fn f(n int) begin\n"
            "  switch n\n"
            "  default:\n"
            "    g()\n"
            "  default:\n"
            "    g()\n"
            "  end\n"
            "end\n"
        )
        diagnostics = check(source)
        assert [d.message for d in diagnostics] == ["multiple defaults in switch"]
        assert diagnostics[0].location.line == 7

    def test_wrong_argument_count(self):
        source = "fn g(a int) begin\nend\nfn main() begin\n  g(1, 2)\nend"
        assert messages(source) == ["wrong argument count in call to g: have 2, want 1"]

    def test_unknown_functions_not_checked(self):
        assert check("fn main() begin\n  external(1, 2, 3)\nend") == []

    def test_trailing_input_is_warning(self):
        diagnostics = check("fn main() begin\nend\nfoo bar")
        assert len(diagnostics) == 1
        assert not diagnostics[0].is_error
        assert diagnostics[0].severity == "warning"
        assert diagnostics[0].location.line == 3

    def test_sorted_by_location(self):
        source = "var a Y = 1\nvar b X = 2"
        diagnostics = check(source)
        assert [d.location.line for d in diagnostics] == [1, 2]

    def test_without_source_map(self):
        diagnostics = check_unit(parse_source("var x Foo = 1"))
        assert diagnostics[0].location is None
        assert str(diagnostics[0]) == "error: undeclared type 'Foo'"
