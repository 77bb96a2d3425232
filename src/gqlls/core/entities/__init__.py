"""Domain entities for gqlls."""

from gqlls.core.entities.cached_document import CachedDocument, OperationUnit
from gqlls.core.entities.definitions import (
    FragmentDefinitionEntry,
    TypeDefinitionEntry,
)
from gqlls.core.entities.project_config import (
    DEFAULT_PROJECT_NAME,
    ProjectConfig,
    SchemaPointer,
)
from gqlls.core.entities.schema_state import SchemaSourceKind, SchemaState
from gqlls.core.entities.server_config import ServerConfig

__all__ = [
    "ServerConfig",
    "ProjectConfig",
    "SchemaPointer",
    "DEFAULT_PROJECT_NAME",
    "SchemaState",
    "SchemaSourceKind",
    "TypeDefinitionEntry",
    "FragmentDefinitionEntry",
    "CachedDocument",
    "OperationUnit",
]
