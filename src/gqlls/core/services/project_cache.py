"""Per-project caches of schema, type definitions and fragment definitions."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from graphql import TypeDefinitionNode
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.definitions import (
    FragmentDefinitionEntry,
    TypeDefinitionEntry,
)
from gqlls.core.entities.project_config import ProjectConfig
from gqlls.core.entities.schema_state import SchemaState
from gqlls.core.entities.server_config import ServerConfig
from gqlls.core.interfaces.parse_cache import IParseCache
from gqlls.core.services.document_parser import split_document
from gqlls.core.services.schema_source import SchemaSource
from gqlls.core.services.text_document_cache import TextDocumentCache
from gqlls.utils.globs import iter_matching_files
from gqlls.utils.positions import location_to_range

logger = logging.getLogger(__name__)

SCHEMA = "schema"
FRAGMENTS = "fragments"


class ProjectCache:
    """Caches owned by one project root.

    Holds the project's SchemaState, the type-definition mapping derived
    from it, and the fragment-definition mapping derived from the files
    matched by the documents globs.

    Rebuilds of the same project never run concurrently. Each rebuild
    request takes a ticket; a queued request whose ticket was already
    covered by a rebuild that started after it is dropped, so a burst of
    change notifications collapses into one rebuild.
    """

    def __init__(
        self,
        project: ProjectConfig,
        schema_source: SchemaSource,
        parse_cache: IParseCache,
        config: ServerConfig | None = None,
        text_documents: TextDocumentCache | None = None,
    ) -> None:
        """Initialize the project cache.

        Args:
            project: The project configuration.
            schema_source: Resolves the project's schema.
            parse_cache: Cache of parsed files that are not open.
            config: Server configuration.
            text_documents: Open documents; their live text takes
                precedence over the file on disk.
        """
        self._project = project
        self._schema_source = schema_source
        self._parse_cache = parse_cache
        self._config = config or ServerConfig()
        self._text_documents = text_documents

        self._schema: SchemaState | None = None
        self._type_definitions: dict[str, TypeDefinitionEntry] = {}
        self._fragment_definitions: dict[str, FragmentDefinitionEntry] = {}

        self._lock = asyncio.Lock()
        self._requested = {SCHEMA: 0, FRAGMENTS: 0}
        self._completed = {SCHEMA: 0, FRAGMENTS: 0}
        self._force_pending = False

    @property
    def project(self) -> ProjectConfig:
        """The project configuration."""
        return self._project

    @property
    def key(self) -> str:
        """The project root identifier."""
        return self._project.key

    @property
    def type_definitions(self) -> Mapping[str, TypeDefinitionEntry]:
        """Read-only view of the type-definition mapping."""
        return MappingProxyType(self._type_definitions)

    @property
    def fragment_definitions(self) -> Mapping[str, FragmentDefinitionEntry]:
        """Read-only view of the fragment-definition mapping."""
        return MappingProxyType(self._fragment_definitions)

    def get_schema(self) -> SchemaState | None:
        """Return the most recently built schema, or None before the first build."""
        return self._schema

    async def wait_idle(self) -> None:
        """Wait until no rebuild is in flight."""
        async with self._lock:
            pass

    async def refresh_schema(self, force: bool = False) -> SchemaState | None:
        """Resolve the schema and rebuild the type definitions if it changed.

        On failure the previous SchemaState stays in place and the error
        propagates to the caller.

        Args:
            force: Rebuild even if the inputs look unchanged.

        Returns:
            The current SchemaState.

        Raises:
            SchemaFetchError: If a remote schema cannot be fetched.
            SchemaBuildError: If the schema cannot be built.
        """
        if force:
            self._force_pending = True
        await self._serialized(SCHEMA, self._rebuild_schema)
        return self._schema

    async def _rebuild_schema(self) -> None:
        # A forced request queued while this resolve is in flight keeps its flag.
        force, self._force_pending = self._force_pending, False
        try:
            state = await self._schema_source.resolve(self._project, self._schema, force)
        except Exception:
            self._force_pending = self._force_pending or force
            raise
        if state is not self._schema:
            self.rebuild_type_definitions(state)

    def rebuild_type_definitions(self, schema_state: SchemaState) -> None:
        """Replace the type-definition mapping from ``schema_state``.

        The mapping is rebuilt from scratch and swapped in together with
        the schema, so a renamed type never leaves an entry behind.

        Args:
            schema_state: The schema to index.
        """
        definitions: dict[str, TypeDefinitionEntry] = {}
        for path, document in schema_state.documents:
            for definition in document.definitions:
                if not isinstance(definition, TypeDefinitionNode) or definition.loc is None:
                    continue
                name = definition.name.value
                definitions[name] = TypeDefinitionEntry(
                    name=name,
                    definition=definition,
                    file_path=path,
                    range=location_to_range(definition.loc),
                )
        self._type_definitions = definitions
        self._schema = schema_state

    async def rebuild_fragment_definitions(self) -> None:
        """Rebuild the fragment-definition mapping from the project documents.

        Files are processed in sorted path order; when two files define a
        fragment with the same name, the later path wins.
        """
        await self._serialized(FRAGMENTS, self._rebuild_fragments)

    async def _rebuild_fragments(self) -> None:
        definitions: dict[str, FragmentDefinitionEntry] = {}
        for path in self.document_paths():
            document = await self.load_document(path)
            if document is None:
                continue
            for unit in document.contents:
                for fragment in unit.fragment_definitions:
                    if fragment.loc is None:
                        continue
                    name = fragment.name.value
                    definitions[name] = FragmentDefinitionEntry(
                        name=name,
                        definition=fragment,
                        file_path=path,
                        range=location_to_range(fragment.loc, unit.range.start),
                    )
        self._fragment_definitions = definitions
        logger.debug("Indexed %d fragment(s) for %s", len(definitions), self.key)

    def indexes_fragments_of(self, document: CachedDocument) -> bool:
        """Check if the fragment index already reflects ``document``.

        Compares the fragments the document declares, with their ranges,
        against the index entries attributed to the document's file.

        Args:
            document: A parsed project document.

        Returns:
            True if a fragment rebuild would not change anything for it.
        """
        path = document.path
        indexed = {
            name: (entry.range, entry.definition)
            for name, entry in self._fragment_definitions.items()
            if entry.file_path == path
        }
        declared = {
            fragment.name.value: (location_to_range(fragment.loc, unit.range.start), fragment)
            for unit in document.contents
            for fragment in unit.fragment_definitions
            if fragment.loc is not None
        }
        return indexed == declared

    def document_paths(self) -> list[Path]:
        """Files matched by the documents globs, in sorted order.

        Open documents matching the globs are included even if they have
        not been saved to disk yet.
        """
        paths = {
            path
            for path in iter_matching_files(
                self._project.root_dir,
                self._project.documents,
                self._config.ignored_dirs,
            )
            if self._config.is_supported_file(path)
        }
        if self._text_documents is not None:
            for document in self._text_documents:
                path = document.path
                if path is not None and self._project.matches_documents(path):
                    paths.add(path)
        return sorted(paths)

    def invalidate_file(self, path: Path) -> None:
        """Forget the parsed content of ``path``."""
        self._parse_cache.delete(str(path))

    async def load_document(self, path: Path) -> CachedDocument | None:
        """Get the parsed content of a project file.

        The live text of an open document wins over the file on disk;
        files on disk go through the parse cache.

        Args:
            path: The file path.

        Returns:
            The parsed document, or None if the file cannot be read.
        """
        uri = uris.from_fs_path(str(path)) or str(path)
        if self._text_documents is not None:
            live = self._text_documents.get(uri)
            if live is not None:
                return live

        try:
            mtime_ns = path.stat().st_mtime_ns
        except FileNotFoundError:
            self._parse_cache.delete(str(path))
            return None

        cached = self._parse_cache.get(str(path), mtime_ns)
        if cached is not None:
            return cached

        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable document %s: %s", path, e)
            return None

        document = CachedDocument(
            uri=uri,
            text=text,
            contents=split_document(text, uri, self._config),
        )
        self._parse_cache.set(str(path), mtime_ns, document)
        return document

    async def _serialized(self, kind: str, rebuild: Callable[[], Awaitable[None]]) -> bool:
        self._requested[kind] += 1
        ticket = self._requested[kind]
        async with self._lock:
            if self._completed[kind] >= ticket:
                return False
            covered = self._requested[kind]
            await rebuild()
            self._completed[kind] = covered
            return True


class GraphQLCache:
    """Mapping from project root identifier to its ProjectCache."""

    def __init__(
        self,
        schema_source: SchemaSource,
        parse_cache: IParseCache,
        config: ServerConfig | None = None,
        text_documents: TextDocumentCache | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            schema_source: Shared schema resolver.
            parse_cache: Shared parse cache.
            config: Server configuration.
            text_documents: Open documents of the workspace.
        """
        self._schema_source = schema_source
        self._parse_cache = parse_cache
        self._config = config or ServerConfig()
        self._text_documents = text_documents
        self._projects: dict[str, ProjectCache] = {}

    def load_projects(self, projects: list[ProjectConfig]) -> list[ProjectCache]:
        """Install a new set of project configs.

        Projects whose configuration did not change keep their caches; the
        others get a fresh ProjectCache, seeded with the previous schema when
        the schema pointers are unchanged.

        Args:
            projects: The resolved project configs.

        Returns:
            The ProjectCaches that are new and still need a build.
        """
        current: dict[str, ProjectCache] = {}
        created: list[ProjectCache] = []
        for project in projects:
            existing = self._projects.get(project.key)
            if existing is not None and existing.project == project:
                current[project.key] = existing
                continue
            cache = ProjectCache(
                project,
                self._schema_source,
                self._parse_cache,
                self._config,
                self._text_documents,
            )
            if existing is not None and existing.project.schema == project.schema:
                previous = existing.get_schema()
                if previous is not None:
                    cache.rebuild_type_definitions(previous)
            current[project.key] = cache
            created.append(cache)
        self._projects = current
        return created

    def get(self, key: str) -> ProjectCache | None:
        """Get the cache of a project by its root identifier."""
        return self._projects.get(key)

    def project_for_path(self, path: Path) -> ProjectCache | None:
        """Find the project a file belongs to.

        A project whose documents or schema globs match the file wins;
        otherwise the first project whose root contains the file is used.

        Args:
            path: The file path.

        Returns:
            The owning ProjectCache, or None if no project covers the file.
        """
        for cache in self._projects.values():
            if cache.project.matches_documents(path) or cache.project.matches_schema(path):
                return cache
        for cache in self._projects.values():
            try:
                path.resolve().relative_to(cache.project.root_dir.resolve())
            except ValueError:
                continue
            return cache
        return None

    def get_schema(self, key: str | None = None) -> SchemaState | None:
        """Return the schema of a project (the first project if no key)."""
        if key is None:
            cache = next(iter(self._projects.values()), None)
        else:
            cache = self._projects.get(key)
        return cache.get_schema() if cache is not None else None

    def get_type_definitions(self, key: str) -> Mapping[str, TypeDefinitionEntry] | None:
        """Type-definition mapping of a project."""
        cache = self._projects.get(key)
        return cache.type_definitions if cache is not None else None

    def get_fragment_definitions(
        self, key: str
    ) -> Mapping[str, FragmentDefinitionEntry] | None:
        """Fragment-definition mapping of a project."""
        cache = self._projects.get(key)
        return cache.fragment_definitions if cache is not None else None

    def clear(self) -> None:
        """Drop all projects."""
        self._projects.clear()
        self._parse_cache.clear()

    def __iter__(self) -> Iterator[ProjectCache]:
        return iter(list(self._projects.values()))

    def __len__(self) -> int:
        return len(self._projects)
