"""Finding the AST node under a cursor position."""

from dataclasses import dataclass
from typing import Any

from graphql import (
    ArgumentNode,
    DirectiveNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLArgument,
    GraphQLDirective,
    GraphQLField,
    GraphQLNamedType,
    GraphQLSchema,
    NamedTypeNode,
    Node,
    TypeInfo,
    TypeInfoVisitor,
    get_named_type,
)
from graphql.language import SKIP, Visitor, visit
from lsprotocol import types as lsp

from gqlls.core.entities.cached_document import OperationUnit
from gqlls.utils.positions import position_to_offset, unshift_position


@dataclass(frozen=True)
class NodeContext:
    """The node under the cursor plus the schema context it was found in.

    Attributes:
        node: The innermost interesting node (field, fragment spread,
            named type, argument, directive or fragment definition).
        parent_type: Type owning the field, for field nodes.
        field_def: Schema definition of the field, for field nodes.
        argument: Schema definition of the argument, for argument nodes.
        directive: Schema definition of the directive, if inside one.
    """

    node: Node
    parent_type: GraphQLNamedType | None = None
    field_def: GraphQLField | None = None
    argument: GraphQLArgument | None = None
    directive: GraphQLDirective | None = None


def _within(node: Node | None, offset: int) -> bool:
    loc = getattr(node, "loc", None)
    return loc is not None and loc.start <= offset <= loc.end


class _NodeLocator(Visitor):
    def __init__(self, offset: int, type_info: TypeInfo | None) -> None:
        super().__init__()
        self.offset = offset
        self.type_info = type_info
        self.found: NodeContext | None = None

    def enter(self, node: Node, *_args: Any) -> Any:
        if not _within(node, self.offset):
            return SKIP

        if isinstance(node, FieldNode):
            if _within(node.name, self.offset) or _within(node.alias, self.offset):
                self._record(node)
        elif isinstance(node, (ArgumentNode, FragmentDefinitionNode)):
            if _within(node.name, self.offset):
                self._record(node)
        elif isinstance(node, DirectiveNode):
            if node.loc is not None and node.name.loc is not None:
                if node.loc.start <= self.offset <= node.name.loc.end:
                    self._record(node)
        elif isinstance(node, (FragmentSpreadNode, NamedTypeNode)):
            self._record(node)
        return None

    def _record(self, node: Node) -> None:
        type_info = self.type_info
        if type_info is None:
            self.found = NodeContext(node=node)
            return
        parent = type_info.get_parent_type()
        self.found = NodeContext(
            node=node,
            parent_type=get_named_type(parent) if parent is not None else None,
            field_def=type_info.get_field_def(),
            argument=type_info.get_argument(),
            directive=type_info.get_directive(),
        )


def locate_node(
    unit: OperationUnit,
    position: lsp.Position,
    schema: GraphQLSchema | None = None,
) -> NodeContext | None:
    """Find the innermost interesting node of ``unit`` at ``position``.

    Args:
        unit: A parsed operation unit.
        position: Cursor position in file coordinates.
        schema: Schema used to attach type information, if available.

    Returns:
        The node context, or None if the cursor is not on a name.
    """
    if unit.document is None:
        return None
    local = unshift_position(unit.range.start, position)
    offset = position_to_offset(unit.query, local)

    type_info = TypeInfo(schema) if schema is not None else None
    locator = _NodeLocator(offset, type_info)
    if type_info is not None:
        visit(unit.document, TypeInfoVisitor(type_info, locator))
    else:
        visit(unit.document, locator)
    return locator.found
