"""
Union Lowering Pass
===================

Go has no discriminated unions, so every named union is rewritten into
two declarations:

    type Shape union = Circle | Square | Triangle

becomes

    type Shape interface{}          (marker, at the union's position)

    type __Shape struct {           (carrier, appended after all decls)
        Type     Shape
        Field0   Circle
        Field1   Square
        Field2   Triangle
    }

Carriers are appended in the order their unions appear in the source.
The pass does not deduplicate members and does not detect a union that
names itself as a member.

Unions that are not the direct type of a ``type`` declaration (a union
used as a field or parameter type) have no name to build a carrier from;
they are replaced by the marker type only.
"""

import logging

from bake.lang.ast import (
    ASTTransformer,
    CompilationUnit,
    Field,
    FieldList,
    Ident,
    InterfaceType,
    NamedType,
    StructType,
    TypeDecl,
    TypeExpr,
    UnionType,
)
from bake.lang.source import NO_POS

logger = logging.getLogger(__name__)

CARRIER_PREFIX = "__"
TAG_FIELD = "Type"
MEMBER_FIELD = "Field"


def carrier_name(union_name: str) -> str:
    """Name of the record type generated for a union."""
    return f"{CARRIER_PREFIX}{union_name}"


def marker_type(pos: int) -> InterfaceType:
    """The empty interface that stands in for a union."""
    return InterfaceType(pos=pos, methods=FieldList(pos=pos, fields=[], closing=pos))


def _carrier_decl(name: str, members: list[TypeExpr]) -> TypeDecl:
    fields = [
        Field(
            pos=NO_POS,
            name=Ident(pos=NO_POS, name=TAG_FIELD),
            type_expr=NamedType(pos=NO_POS, name=name),
        )
    ]
    for i, member in enumerate(members):
        fields.append(
            Field(
                pos=NO_POS,
                name=Ident(pos=NO_POS, name=f"{MEMBER_FIELD}{i}"),
                type_expr=member,
            )
        )

    return TypeDecl(
        pos=NO_POS,
        name=Ident(pos=NO_POS, name=carrier_name(name)),
        type_expr=StructType(pos=NO_POS, fields=FieldList(pos=NO_POS, fields=fields)),
    )


class _UnionEraser(ASTTransformer):
    """Replaces every remaining UnionType with the marker type."""

    def visit_UnionType(self, node: UnionType) -> InterfaceType:
        logger.debug(f"lowering: anonymous union @{node.pos} replaced by interface{{}}")
        return marker_type(node.pos)


def lower_unions(unit: CompilationUnit) -> CompilationUnit:
    """
    Replace every union type with a marker interface and a carrier record.

    The input unit is not modified.

    Returns:
        A new unit with no UnionType nodes left
    """
    eraser = _UnionEraser()
    decls = []
    carriers = []

    for decl in unit.decls:
        if isinstance(decl, TypeDecl) and isinstance(decl.type_expr, UnionType):
            union = decl.type_expr
            members = [eraser.visit(member) for member in union.members]
            carriers.append(_carrier_decl(decl.name.name, members))
            decl = TypeDecl(pos=decl.pos, name=decl.name, type_expr=marker_type(union.pos))
            logger.debug(
                f"lowering: union {decl.name.name} ({len(union.members)} members) "
                f"-> {carrier_name(decl.name.name)}"
            )
        else:
            decl = eraser.visit(decl)
        decls.append(decl)

    if not carriers and all(new is old for new, old in zip(decls, unit.decls)):
        return unit

    return CompilationUnit(
        pos=unit.pos,
        package=unit.package,
        decls=decls + carriers,
        unparsed_pos=unit.unparsed_pos,
    )
