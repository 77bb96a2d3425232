"""Go-to-definition across documents and schema files."""

import logging

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    NamedTypeNode,
)
from lsprotocol import types as lsp
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.definitions import (
    FragmentDefinitionEntry,
    TypeDefinitionEntry,
)
from gqlls.core.services.node_locator import locate_node
from gqlls.core.services.project_cache import ProjectCache
from gqlls.utils.positions import location_to_range

logger = logging.getLogger(__name__)


def _to_location(entry: TypeDefinitionEntry | FragmentDefinitionEntry) -> lsp.Location:
    uri = uris.from_fs_path(str(entry.file_path)) or str(entry.file_path)
    return lsp.Location(uri=uri, range=entry.range)


class DefinitionResolver:
    """Maps the node under the cursor to where it is defined.

    Unresolved references are a normal state while editing, so every
    miss yields an empty list rather than an error.
    """

    def resolve(
        self,
        document: CachedDocument,
        position: lsp.Position,
        project: ProjectCache,
    ) -> list[lsp.Location]:
        """Resolve the definition of the symbol at ``position``.

        Args:
            document: The cached document.
            position: The cursor position.
            project: The project the document belongs to.

        Returns:
            Zero or more definition locations.
        """
        unit = document.unit_at(position)
        if unit is None:
            return []

        schema_state = project.get_schema()
        context = locate_node(
            unit,
            position,
            schema_state.schema if schema_state is not None else None,
        )
        if context is None:
            return []

        node = context.node
        if isinstance(node, (FragmentSpreadNode, FragmentDefinitionNode)):
            name = node.name.value
            return self._local_fragment(document, name) or self._fragment(project, name)
        if isinstance(node, NamedTypeNode):
            return self._type(project, node.name.value)
        if isinstance(node, FieldNode) and context.parent_type is not None:
            return self._type(project, context.parent_type.name)

        logger.debug("No definition for %s at %s", node.kind, position)
        return []

    @staticmethod
    def _local_fragment(document: CachedDocument, name: str) -> list[lsp.Location]:
        # Fragments declared in the same file resolve against its live text.
        for unit in document.contents:
            for fragment in unit.fragment_definitions:
                if fragment.name.value == name and fragment.loc is not None:
                    return [
                        lsp.Location(
                            uri=document.uri,
                            range=location_to_range(fragment.loc, unit.range.start),
                        )
                    ]
        return []

    @staticmethod
    def _fragment(project: ProjectCache, name: str) -> list[lsp.Location]:
        entry = project.fragment_definitions.get(name)
        return [_to_location(entry)] if entry is not None else []

    @staticmethod
    def _type(project: ProjectCache, name: str) -> list[lsp.Location]:
        entry = project.type_definitions.get(name)
        return [_to_location(entry)] if entry is not None else []
