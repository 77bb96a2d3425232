"""gqlls - GraphQL language server.

Answers definition, hover, symbol and diagnostics requests for GraphQL
documents and for GraphQL embedded in JavaScript, TypeScript and Python
sources. Projects are described by a graphql-config style JSON file in
the workspace root; schemas come from local SDL files or from a remote
endpoint via introspection.

Example:
    from gqlls import MessageProcessor
    from gqlls.adapters.pygls import create_server

    server = create_server(MessageProcessor())
    server.start_io()

Command line:
    gqlls --log-level INFO
    gqlls --tcp --port 2087
"""

__version__ = "0.1.0"

from gqlls.core.entities import (  # noqa: E402
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
from gqlls.core.errors import (  # noqa: E402
    ConfigError,
    ConfigMissingError,
    GqllsError,
    SchemaBuildError,
    SchemaFetchError,
)
from gqlls.core.interfaces import IConfigLoader, IParseCache, ISchemaFetcher  # noqa: E402
from gqlls.core.services import (  # noqa: E402
    DefinitionResolver,
    DiagnosticsEngine,
    GraphQLCache,
    HoverProvider,
    ProjectCache,
    SchemaSource,
    SymbolProvider,
    TextDocumentCache,
)
from gqlls.infrastructure import (  # noqa: E402
    HttpSchemaFetcher,
    InMemoryParseCache,
    JsonConfigLoader,
)
from gqlls.message_processor import MessageProcessor  # noqa: E402

__all__ = [
    # Version
    "__version__",
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
    "MessageProcessor",
    # Infrastructure implementations
    "JsonConfigLoader",
    "HttpSchemaFetcher",
    "InMemoryParseCache",
]
