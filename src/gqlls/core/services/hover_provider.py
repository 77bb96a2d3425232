"""Hover content for the node under the cursor."""

from graphql import (
    ArgumentNode,
    DirectiveNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLNamedType,
    GraphQLSchema,
    NamedTypeNode,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_object_type,
    is_union_type,
)
from lsprotocol import types as lsp

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.services.node_locator import NodeContext, locate_node
from gqlls.core.services.project_cache import ProjectCache


def _keyword(named: GraphQLNamedType) -> str:
    if is_object_type(named):
        return "type"
    if is_interface_type(named):
        return "interface"
    if is_union_type(named):
        return "union"
    if is_enum_type(named):
        return "enum"
    if is_input_object_type(named):
        return "input"
    return "scalar"


def _render(signature: str, description: str | None) -> str:
    text = f"```graphql\n{signature}\n```"
    if description:
        text += f"\n\n{description}"
    return text


class HoverProvider:
    """Renders the type signature and description of a node as markdown."""

    def hover(
        self,
        document: CachedDocument,
        position: lsp.Position,
        project: ProjectCache,
    ) -> str | None:
        """Describe the node at ``position``.

        Args:
            document: The cached document.
            position: The cursor position.
            project: The project the document belongs to.

        Returns:
            Markdown text, or None if there is nothing to show.
        """
        schema_state = project.get_schema()
        if schema_state is None:
            return None
        unit = document.unit_at(position)
        if unit is None:
            return None
        context = locate_node(unit, position, schema_state.schema)
        if context is None:
            return None
        return self._describe(context, schema_state.schema, project)

    def _describe(
        self,
        context: NodeContext,
        schema: GraphQLSchema,
        project: ProjectCache,
    ) -> str | None:
        node = context.node

        if isinstance(node, FieldNode) and context.field_def is not None:
            owner = context.parent_type.name if context.parent_type is not None else ""
            field = context.field_def
            args = ", ".join(f"{name}: {arg.type}" for name, arg in field.args.items())
            signature = f"{owner}.{node.name.value}"
            if args:
                signature += f"({args})"
            return _render(f"{signature}: {field.type}", field.description)

        if isinstance(node, ArgumentNode) and context.argument is not None:
            return _render(
                f"{node.name.value}: {context.argument.type}",
                context.argument.description,
            )

        if isinstance(node, DirectiveNode) and context.directive is not None:
            return _render(f"@{context.directive.name}", context.directive.description)

        if isinstance(node, NamedTypeNode):
            named = schema.get_type(node.name.value)
            if named is None:
                return None
            return _render(f"{_keyword(named)} {named.name}", named.description)

        if isinstance(node, (FragmentSpreadNode, FragmentDefinitionNode)):
            entry = project.fragment_definitions.get(node.name.value)
            if entry is None:
                return None
            return _render(f"fragment {entry.name} on {entry.type_condition}", None)

        return None
