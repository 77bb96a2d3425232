"""Infrastructure layer implementations for gqlls."""

from gqlls.infrastructure.backends import InMemoryParseCache
from gqlls.infrastructure.config_loaders import JsonConfigLoader
from gqlls.infrastructure.fetchers import HttpSchemaFetcher

__all__ = [
    "InMemoryParseCache",
    "JsonConfigLoader",
    "HttpSchemaFetcher",
]
