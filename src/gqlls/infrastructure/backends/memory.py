"""In-memory parse cache implementation."""

from cachetools import LRUCache  # type: ignore[import-untyped]

from gqlls.core.entities.cached_document import CachedDocument


class InMemoryParseCache:
    """In-memory cache of parsed project files using LRU eviction.

    Keeps fragment rebuilds cheap: a file whose modification time has not
    changed since it was last parsed is not read or parsed again.
    """

    def __init__(self, maxsize: int = 1000) -> None:
        """Initialize the parse cache.

        Args:
            maxsize: Maximum number of files kept in the cache.
        """
        self._maxsize = maxsize
        self._cache: LRUCache[str, tuple[int, CachedDocument]] = LRUCache(
            maxsize=maxsize
        )

    def get(self, path: str, mtime_ns: int) -> CachedDocument | None:
        """Retrieve a parsed file.

        Args:
            path: Absolute file path.
            mtime_ns: Current modification time of the file.

        Returns:
            The cached document, or None if missing or stale.
        """
        entry = self._cache.get(path)
        if entry is None:
            return None
        stamp, document = entry
        if stamp != mtime_ns:
            return None
        return document

    def set(self, path: str, mtime_ns: int, document: CachedDocument) -> None:
        """Store a parsed file.

        Args:
            path: Absolute file path.
            mtime_ns: Modification time the document was parsed at.
            document: The parsed document.
        """
        self._cache[path] = (mtime_ns, document)

    def delete(self, path: str) -> bool:
        """Drop a parsed file.

        Args:
            path: Absolute file path.

        Returns:
            True if an entry existed and was deleted, False otherwise.
        """
        try:
            del self._cache[path]
            return True
        except KeyError:
            return False

    def clear(self) -> None:
        """Drop all entries."""
        self._cache.clear()

    def __len__(self) -> int:
        """Return the number of files in the cache."""
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize
