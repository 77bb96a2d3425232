"""Remote schema fetchers."""

from gqlls.infrastructure.fetchers.http import HttpSchemaFetcher

__all__ = ["HttpSchemaFetcher"]
