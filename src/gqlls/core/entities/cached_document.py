"""Cached document entities."""

from dataclasses import dataclass
from pathlib import Path

from graphql import DocumentNode, FragmentDefinitionNode, GraphQLSyntaxError
from lsprotocol import types as lsp
from pygls import uris

from gqlls.utils.positions import range_contains


@dataclass(frozen=True)
class OperationUnit:
    """One GraphQL document embedded in a file.

    Plain GraphQL files have a single unit spanning the whole file; host
    language files have one unit per embedded template.

    Attributes:
        query: The raw GraphQL text of the unit.
        range: Where the unit sits inside the file.
        offset: Character offset of the unit's first character in the file.
        document: The parsed AST, or None if parsing failed.
        error: The parse error, or None if parsing succeeded.
    """

    query: str
    range: lsp.Range
    offset: int = 0
    document: DocumentNode | None = None
    error: GraphQLSyntaxError | None = None

    @property
    def is_valid(self) -> bool:
        """Check if the unit parsed successfully."""
        return self.document is not None

    @property
    def fragment_definitions(self) -> list[FragmentDefinitionNode]:
        """Fragment definitions declared in this unit."""
        if self.document is None:
            return []
        return [
            definition
            for definition in self.document.definitions
            if isinstance(definition, FragmentDefinitionNode)
        ]


@dataclass(frozen=True)
class CachedDocument:
    """Parsed content of one open or tracked file.

    Replaced as a whole on every open/change/save of the file.
    """

    uri: str
    text: str
    contents: tuple[OperationUnit, ...]
    version: int | None = None

    @property
    def path(self) -> Path | None:
        """Filesystem path of the document, if it has one."""
        fs_path = uris.to_fs_path(self.uri)
        return Path(fs_path) if fs_path else None

    def unit_at(self, position: lsp.Position) -> OperationUnit | None:
        """Find the unit whose range contains ``position``.

        Args:
            position: A position in file coordinates.

        Returns:
            The matching unit, or None if the position is outside every unit.
        """
        for unit in self.contents:
            if range_contains(unit.range, position):
                return unit
        return None

    @property
    def has_errors(self) -> bool:
        """Check if any unit failed to parse."""
        return any(not unit.is_valid for unit in self.contents)
