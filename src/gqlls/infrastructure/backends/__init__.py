"""Parse cache backends."""

from gqlls.infrastructure.backends.memory import InMemoryParseCache

__all__ = ["InMemoryParseCache"]
