"""Document outline and workspace symbol search."""

from collections.abc import Iterable

from graphql import (
    EnumTypeDefinitionNode,
    FieldNode,
    FragmentDefinitionNode,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    Node,
    OperationDefinitionNode,
    SelectionSetNode,
    TypeDefinitionNode,
)
from lsprotocol import types as lsp
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument, OperationUnit
from gqlls.core.services.project_cache import ProjectCache
from gqlls.utils.positions import location_to_range

_TYPE_KINDS: dict[type[TypeDefinitionNode], lsp.SymbolKind] = {
    EnumTypeDefinitionNode: lsp.SymbolKind.Enum,
    InputObjectTypeDefinitionNode: lsp.SymbolKind.Struct,
    InterfaceTypeDefinitionNode: lsp.SymbolKind.Interface,
}


class SymbolProvider:
    """Outlines documents and searches project symbols."""

    def document_symbols(self, document: CachedDocument) -> list[lsp.DocumentSymbol]:
        """Outline of the operations and fragments of a document."""
        symbols: list[lsp.DocumentSymbol] = []
        for unit in document.contents:
            if unit.document is None:
                continue
            for definition in unit.document.definitions:
                symbol = self._definition_symbol(definition, unit)
                if symbol is not None:
                    symbols.append(symbol)
        return symbols

    def workspace_symbols(
        self,
        query: str,
        projects: Iterable[ProjectCache],
    ) -> list[lsp.WorkspaceSymbol]:
        """Fragments and types whose names contain ``query`` (case-insensitive).

        Args:
            query: The search string; empty matches everything.
            projects: Projects to search.

        Returns:
            Matching symbols, fragments first, each group sorted by name.
        """
        needle = query.lower()
        symbols: list[lsp.WorkspaceSymbol] = []
        for project in projects:
            for name, fragment in sorted(project.fragment_definitions.items()):
                if needle in name.lower():
                    symbols.append(
                        lsp.WorkspaceSymbol(
                            name=name,
                            kind=lsp.SymbolKind.Function,
                            location=lsp.Location(
                                uri=uris.from_fs_path(str(fragment.file_path)) or "",
                                range=fragment.range,
                            ),
                            container_name=project.project.name,
                        )
                    )
            for name, entry in sorted(project.type_definitions.items()):
                if needle in name.lower():
                    symbols.append(
                        lsp.WorkspaceSymbol(
                            name=name,
                            kind=_TYPE_KINDS.get(type(entry.definition), lsp.SymbolKind.Class),
                            location=lsp.Location(
                                uri=uris.from_fs_path(str(entry.file_path)) or "",
                                range=entry.range,
                            ),
                            container_name=project.project.name,
                        )
                    )
        return symbols

    def _definition_symbol(self, node: Node, unit: OperationUnit) -> lsp.DocumentSymbol | None:
        if node.loc is None:
            return None
        if isinstance(node, OperationDefinitionNode):
            name = node.name.value if node.name else f"<anonymous {node.operation.value}>"
            kind = lsp.SymbolKind.Method
            anchor: Node = node.name or node
        elif isinstance(node, FragmentDefinitionNode):
            name = node.name.value
            kind = lsp.SymbolKind.Function
            anchor = node.name
        else:
            return None

        return lsp.DocumentSymbol(
            name=name,
            kind=kind,
            range=location_to_range(node.loc, unit.range.start),
            selection_range=location_to_range(anchor.loc or node.loc, unit.range.start),
            children=self._field_symbols(node.selection_set, unit),
        )

    def _field_symbols(
        self,
        selection_set: SelectionSetNode | None,
        unit: OperationUnit,
    ) -> list[lsp.DocumentSymbol]:
        if selection_set is None:
            return []
        symbols = []
        for selection in selection_set.selections:
            if not isinstance(selection, FieldNode) or selection.loc is None:
                continue
            name_node = selection.alias or selection.name
            name_loc = name_node.loc or selection.loc
            symbols.append(
                lsp.DocumentSymbol(
                    name=name_node.value,
                    kind=lsp.SymbolKind.Field,
                    range=location_to_range(selection.loc, unit.range.start),
                    selection_range=location_to_range(name_loc, unit.range.start),
                    children=self._field_symbols(selection.selection_set, unit),
                )
            )
        return symbols
