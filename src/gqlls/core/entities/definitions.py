"""Definition entries stored in the project caches."""

from dataclasses import dataclass
from pathlib import Path

from graphql import FragmentDefinitionNode, TypeDefinitionNode
from lsprotocol import types as lsp


@dataclass(frozen=True)
class TypeDefinitionEntry:
    """One named type's definition and where it was found.

    Attributes:
        name: The type name.
        definition: The SDL definition node.
        file_path: File the definition was parsed from.
        range: Range of the whole definition inside that file.
    """

    name: str
    definition: TypeDefinitionNode
    file_path: Path
    range: lsp.Range


@dataclass(frozen=True)
class FragmentDefinitionEntry:
    """One named fragment's definition and where it was found.

    Attributes:
        name: The fragment name.
        definition: The fragment definition node.
        file_path: File the fragment was parsed from.
        range: Range of the whole definition inside that file.
    """

    name: str
    definition: FragmentDefinitionNode
    file_path: Path
    range: lsp.Range

    @property
    def type_condition(self) -> str:
        """Name of the type the fragment applies to."""
        return self.definition.type_condition.name.value
