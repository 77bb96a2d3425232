"""Core interfaces (Protocol classes) for gqlls."""

from gqlls.core.interfaces.config_loader import IConfigLoader
from gqlls.core.interfaces.parse_cache import IParseCache
from gqlls.core.interfaces.schema_fetcher import ISchemaFetcher

__all__ = [
    "IConfigLoader",
    "ISchemaFetcher",
    "IParseCache",
]
