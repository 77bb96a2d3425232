"""Parse cache interface."""

from typing import Protocol

from gqlls.core.entities.cached_document import CachedDocument


class IParseCache(Protocol):
    """Contract for caching parsed files that are not open in the editor.

    Entries are keyed by file path and stamped with the file's
    modification time; a stamp mismatch is a miss.
    """

    def get(self, path: str, mtime_ns: int) -> CachedDocument | None:
        """Retrieve a parsed file.

        Args:
            path: Absolute file path.
            mtime_ns: Current modification time of the file.

        Returns:
            The cached document, or None if missing or stale.
        """
        ...

    def set(self, path: str, mtime_ns: int, document: CachedDocument) -> None:
        """Store a parsed file.

        Args:
            path: Absolute file path.
            mtime_ns: Modification time the document was parsed at.
            document: The parsed document.
        """
        ...

    def delete(self, path: str) -> bool:
        """Drop a parsed file.

        Args:
            path: Absolute file path.

        Returns:
            True if an entry existed and was deleted, False otherwise.
        """
        ...

    def clear(self) -> None:
        """Drop all entries."""
        ...
