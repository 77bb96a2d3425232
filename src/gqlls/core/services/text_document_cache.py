"""Per-document cache of parsed operation units."""

from collections.abc import Iterator

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.server_config import ServerConfig
from gqlls.core.services.document_parser import split_document


class TextDocumentCache:
    """Cache of parsed documents keyed by URI.

    Holds one CachedDocument per open or tracked file. Entries are replaced
    in full on every open/change/save and removed when the document is
    closed.
    """

    def __init__(self, config: ServerConfig | None = None) -> None:
        """Initialize the cache.

        Args:
            config: Server configuration used to split documents.
        """
        self._config = config or ServerConfig()
        self._documents: dict[str, CachedDocument] = {}

    def set(self, uri: str, text: str, version: int | None = None) -> CachedDocument:
        """Parse ``text`` and store it as the current content of ``uri``.

        An update carrying an older version than the cached one is ignored
        so that a late notification never overwrites newer content.

        Args:
            uri: The document URI.
            text: The full document text.
            version: The editor's document version, if known.

        Returns:
            The document now cached for ``uri``.
        """
        current = self._documents.get(uri)
        if (
            current is not None
            and version is not None
            and current.version is not None
            and version < current.version
        ):
            return current

        document = CachedDocument(
            uri=uri,
            text=text,
            contents=split_document(text, uri, self._config),
            version=version,
        )
        self._documents[uri] = document
        return document

    def get(self, uri: str) -> CachedDocument | None:
        """Get the cached document for ``uri``."""
        return self._documents.get(uri)

    def delete(self, uri: str) -> bool:
        """Drop the cached document for ``uri``.

        Returns:
            True if an entry existed and was deleted, False otherwise.
        """
        return self._documents.pop(uri, None) is not None

    def clear(self) -> None:
        """Drop all documents."""
        self._documents.clear()

    def uris(self) -> list[str]:
        """URIs of all cached documents."""
        return list(self._documents)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def __iter__(self) -> Iterator[CachedDocument]:
        return iter(list(self._documents.values()))

    def __len__(self) -> int:
        """Return the number of cached documents."""
        return len(self._documents)
