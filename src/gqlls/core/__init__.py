"""Core domain layer for gqlls."""

from gqlls.core.entities import (
    CachedDocument,
    FragmentDefinitionEntry,
    OperationUnit,
    ProjectConfig,
    SchemaPointer,
    SchemaSourceKind,
    SchemaState,
    ServerConfig,
    TypeDefinitionEntry,
)
from gqlls.core.errors import (
    ConfigError,
    ConfigMissingError,
    GqllsError,
    SchemaBuildError,
    SchemaFetchError,
)
from gqlls.core.interfaces import IConfigLoader, IParseCache, ISchemaFetcher
from gqlls.core.services import (
    DefinitionResolver,
    DiagnosticsEngine,
    GraphQLCache,
    HoverProvider,
    ProjectCache,
    SchemaSource,
    SymbolProvider,
    TextDocumentCache,
)

__all__ = [
    # Entities
    "ServerConfig",
    "ProjectConfig",
    "SchemaPointer",
    "SchemaState",
    "SchemaSourceKind",
    "TypeDefinitionEntry",
    "FragmentDefinitionEntry",
    "CachedDocument",
    "OperationUnit",
    # Errors
    "GqllsError",
    "ConfigError",
    "ConfigMissingError",
    "SchemaFetchError",
    "SchemaBuildError",
    # Interfaces
    "IConfigLoader",
    "ISchemaFetcher",
    "IParseCache",
    # Services
    "SchemaSource",
    "ProjectCache",
    "GraphQLCache",
    "TextDocumentCache",
    "DefinitionResolver",
    "HoverProvider",
    "DiagnosticsEngine",
    "SymbolProvider",
]
