"""Domain services for gqlls."""

from gqlls.core.services.definition_resolver import DefinitionResolver
from gqlls.core.services.diagnostics_engine import DEFAULT_RULES, DiagnosticsEngine
from gqlls.core.services.document_parser import find_embedded, split_document
from gqlls.core.services.hover_provider import HoverProvider
from gqlls.core.services.node_locator import NodeContext, locate_node
from gqlls.core.services.project_cache import GraphQLCache, ProjectCache
from gqlls.core.services.schema_source import SchemaSource
from gqlls.core.services.symbol_provider import SymbolProvider
from gqlls.core.services.text_document_cache import TextDocumentCache

__all__ = [
    "SchemaSource",
    "ProjectCache",
    "GraphQLCache",
    "TextDocumentCache",
    "split_document",
    "find_embedded",
    "locate_node",
    "NodeContext",
    "DefinitionResolver",
    "HoverProvider",
    "DiagnosticsEngine",
    "DEFAULT_RULES",
    "SymbolProvider",
]
