"""Protocol state machine of the GraphQL language server.

MessageProcessor receives already-decoded protocol messages, keeps the
workspace caches in step with them and answers queries. It knows nothing
about the transport; see ``gqlls.adapters.pygls`` for the binding to a
running server.
"""

import asyncio
import logging
import os
from pathlib import Path

from lsprotocol import types as lsp
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.server_config import ServerConfig
from gqlls.core.errors import (
    ConfigError,
    ConfigMissingError,
    SchemaBuildError,
    SchemaFetchError,
)
from gqlls.core.interfaces.config_loader import IConfigLoader
from gqlls.core.interfaces.parse_cache import IParseCache
from gqlls.core.interfaces.schema_fetcher import ISchemaFetcher
from gqlls.core.services.definition_resolver import DefinitionResolver
from gqlls.core.services.diagnostics_engine import DiagnosticsEngine
from gqlls.core.services.hover_provider import HoverProvider
from gqlls.core.services.project_cache import GraphQLCache, ProjectCache
from gqlls.core.services.schema_source import SchemaSource
from gqlls.core.services.symbol_provider import SymbolProvider
from gqlls.core.services.text_document_cache import TextDocumentCache
from gqlls.infrastructure.backends.memory import InMemoryParseCache
from gqlls.infrastructure.config_loaders.json_loader import JsonConfigLoader
from gqlls.infrastructure.fetchers.http import HttpSchemaFetcher
from gqlls.utils.hashing import hash_value
from gqlls.utils.positions import position_to_offset


SERVER_NAME = "gqlls"
REFRESH_SCHEMA_COMMAND = "gqlls.refreshSchema"


def _uri_to_path(uri: str) -> Path | None:
    fs_path = uris.to_fs_path(uri)
    return Path(fs_path) if fs_path else None


def _apply_changes(text: str, changes: list[lsp.TextDocumentContentChangeEvent]) -> str:
    for change in changes:
        rng = getattr(change, "range", None)
        if rng is None:
            text = change.text
            continue
        start = position_to_offset(text, rng.start)
        end = position_to_offset(text, rng.end)
        text = text[:start] + change.text + text[end:]
    return text


class MessageProcessor:
    """Routes lifecycle notifications and query requests for one workspace.

    The processor is Uninitialized until a config file resolves to at
    least one project with a usable schema. While Uninitialized every
    query returns an empty result and nothing is validated.

    A raw watched-file change of the config file does not initialize the
    server; only opening or saving the config file (or the initialize
    request itself) does. Once Initialized, either kind of event reloads
    the config when its content changed.

    Example:
        processor = MessageProcessor()
        await processor.handle_initialize_request(params)
        result = await processor.handle_did_open_or_save(open_params)
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        config_loader: IConfigLoader | None = None,
        schema_fetcher: ISchemaFetcher | None = None,
        parse_cache: IParseCache | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Server configuration.
            config_loader: Resolves the workspace config file. Defaults to
                JsonConfigLoader.
            schema_fetcher: Introspects remote schemas. Defaults to
                HttpSchemaFetcher.
            parse_cache: Cache of parsed files that are not open. Defaults
                to an InMemoryParseCache.
            logger: Logger for lifecycle messages.
        """
        self._config = config or ServerConfig()
        self._config_loader = config_loader or JsonConfigLoader(
            self._config.config_file_names
        )
        self._schema_fetcher = schema_fetcher or HttpSchemaFetcher(
            timeout=self._config.fetch_timeout
        )
        self._logger = logger or logging.getLogger(__name__)

        self._text_document_cache = TextDocumentCache(self._config)
        self._schema_source = SchemaSource(self._config, self._schema_fetcher)
        self._graphql_cache = GraphQLCache(
            self._schema_source,
            parse_cache or InMemoryParseCache(maxsize=self._config.parse_cache_size),
            self._config,
            self._text_document_cache,
        )
        self._definition_resolver = DefinitionResolver()
        self._hover_provider = HoverProvider()
        self._diagnostics_engine = DiagnosticsEngine()
        self._symbol_provider = SymbolProvider()

        self._root_dir: Path | None = None
        self._is_initialized = False
        self._is_graphql_config_missing = False
        self._config_fingerprint: str | None = None
        self._init_lock = asyncio.Lock()

    @property
    def config(self) -> ServerConfig:
        """The server configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Check if a valid config and schema are in place."""
        return self._is_initialized

    @property
    def is_graphql_config_missing(self) -> bool:
        """Check if the last config resolution found no config file."""
        return self._is_graphql_config_missing

    @property
    def graphql_cache(self) -> GraphQLCache:
        """The per-project caches of the workspace."""
        return self._graphql_cache

    @property
    def text_document_cache(self) -> TextDocumentCache:
        """The open documents of the workspace."""
        return self._text_document_cache

    @property
    def root_dir(self) -> Path | None:
        """The workspace root, known after the initialize request."""
        return self._root_dir

    # Lifecycle

    async def handle_initialize_request(
        self, params: lsp.InitializeParams
    ) -> lsp.InitializeResult:
        """Resolve the workspace root and build the caches.

        A missing or invalid config does not fail the request; the server
        stays Uninitialized and waits for the config file to be opened or
        saved.

        Args:
            params: The initialize request parameters.

        Returns:
            The server capabilities.
        """
        root: str | None = None
        if params.root_uri:
            root = uris.to_fs_path(params.root_uri)
        elif params.workspace_folders:
            root = uris.to_fs_path(params.workspace_folders[0].uri)
        elif params.root_path:
            root = params.root_path
        self._root_dir = Path(root or os.getcwd())

        self._logger.info("Starting GraphQL language server in %s", self._root_dir)
        await self._initialize_caches()

        return lsp.InitializeResult(
            capabilities=lsp.ServerCapabilities(
                text_document_sync=lsp.TextDocumentSyncOptions(
                    open_close=True,
                    change=lsp.TextDocumentSyncKind.Incremental,
                    save=lsp.SaveOptions(include_text=True),
                ),
                definition_provider=True,
                hover_provider=True,
                document_symbol_provider=True,
                workspace_symbol_provider=True,
                execute_command_provider=lsp.ExecuteCommandOptions(
                    commands=[REFRESH_SCHEMA_COMMAND]
                ),
            ),
            server_info=lsp.ServerInfo(name=SERVER_NAME),
        )

    def handle_shutdown_request(self) -> None:
        """Drop every cache."""
        self._graphql_cache.clear()
        self._text_document_cache.clear()
        self._is_initialized = False
        self._config_fingerprint = None

    async def _initialize_caches(self) -> None:
        root_dir = self._root_dir
        if root_dir is None:
            self._logger.debug("Ignoring config reload before the initialize request")
            return
        async with self._init_lock:
            await self._load_config(root_dir)

    async def _load_config(self, root_dir: Path) -> None:
        try:
            projects = await self._config_loader.load(root_dir)
        except ConfigMissingError as e:
            self._fail_initialization(e, missing=True)
            return
        except ConfigError as e:
            self._fail_initialization(e, missing=False)
            return

        fingerprint = hash_value([repr(project) for project in projects])
        if self._is_initialized and fingerprint == self._config_fingerprint:
            self._logger.debug("GraphQL config unchanged, keeping caches")
            return

        was_initialized = self._is_initialized
        self._config_fingerprint = fingerprint
        self._is_graphql_config_missing = False

        created = self._graphql_cache.load_projects(projects)
        for project in self._graphql_cache:
            if project in created or project.get_schema() is None:
                await self._build_project(project)

        ready = [p for p in self._graphql_cache if p.get_schema() is not None]
        self._is_initialized = bool(ready)
        if not self._is_initialized:
            return

        names = ", ".join(p.project.name for p in ready)
        if was_initialized:
            self._logger.info("Reloaded GraphQL config, projects: %s", names)
        else:
            self._logger.info("GraphQL language server initialized, projects: %s", names)

    def _fail_initialization(self, error: ConfigError, missing: bool) -> None:
        self._is_initialized = False
        self._is_graphql_config_missing = missing
        self._config_fingerprint = None
        self._logger.error(str(error))

    async def _build_project(self, project: ProjectCache) -> None:
        try:
            await project.refresh_schema()
        except (SchemaFetchError, SchemaBuildError) as e:
            self._logger.error("Could not load schema for project %s: %s", project.project.name, e)
        await project.rebuild_fragment_definitions()

    def is_config_uri(self, uri: str) -> bool:
        """Check if ``uri`` is the workspace config file."""
        path = _uri_to_path(uri)
        if path is None or self._root_dir is None:
            return False
        return self._config_loader.is_config_file(path, self._root_dir)

    # Text document synchronization

    async def handle_did_open_or_save(
        self,
        params: lsp.DidOpenTextDocumentParams | lsp.DidSaveTextDocumentParams,
    ) -> lsp.PublishDiagnosticsParams | None:
        """Cache the document and validate it.

        Opening or saving the config file (re)initializes the server
        instead.

        Args:
            params: didOpen or didSave parameters. A didSave without text
                reads the file from disk.

        Returns:
            The diagnostics of the document, or None if the document was
            not validated.
        """
        uri = params.text_document.uri
        if self.is_config_uri(uri):
            await self._initialize_caches()
            return None

        path = _uri_to_path(uri)
        if not self._config.is_supported_file(path or uri):
            return None

        text = getattr(params.text_document, "text", None)
        if text is None:
            text = getattr(params, "text", None)
        if text is None:
            text = await self._read_text(path)
            if text is None:
                return None

        document = self._text_document_cache.set(
            uri, text, getattr(params.text_document, "version", None)
        )
        if not self._is_initialized:
            return None
        return await self._diagnose(document)

    async def handle_did_change(
        self, params: lsp.DidChangeTextDocumentParams
    ) -> lsp.PublishDiagnosticsParams | None:
        """Apply edits to the cached text and re-validate it.

        Args:
            params: didChange parameters; full and ranged changes are
                both accepted.

        Returns:
            The diagnostics of the new version, or None if the document
            was not validated or a newer version superseded it meanwhile.
        """
        uri = params.text_document.uri
        path = _uri_to_path(uri)
        if not self._config.is_supported_file(path or uri):
            return None

        current = self._text_document_cache.get(uri)
        if current is not None:
            text = current.text
        else:
            text = await self._read_text(path) or ""
        text = _apply_changes(text, list(params.content_changes))

        document = self._text_document_cache.set(uri, text, params.text_document.version)
        if not self._is_initialized:
            return None
        return await self._diagnose(document)

    async def handle_did_close(self, params: lsp.DidCloseTextDocumentParams) -> None:
        """Forget the document; its file on disk becomes authoritative again."""
        uri = params.text_document.uri
        if not self._text_document_cache.delete(uri) or not self._is_initialized:
            return
        path = _uri_to_path(uri)
        project = self._graphql_cache.project_for_path(path) if path else None
        if project is not None and project.project.matches_documents(path):
            await project.rebuild_fragment_definitions()

    async def handle_watched_files_changed(
        self, params: lsp.DidChangeWatchedFilesParams
    ) -> list[lsp.PublishDiagnosticsParams]:
        """React to files changed on disk.

        Schema files trigger a forced schema rebuild, document files a
        fragment rebuild of their project. Open documents of the affected
        projects are validated again.

        Args:
            params: The watched-file changes.

        Returns:
            Fresh diagnostics of the open documents of affected projects.
        """
        if not self._is_initialized:
            self._logger.debug("Ignoring %d file change(s) before initialization", len(params.changes))
            return []

        changes = []
        for change in params.changes:
            if self.is_config_uri(change.uri):
                await self._initialize_caches()
                if not self._is_initialized:
                    return []
                continue
            changes.append(change)

        schema_changed: set[str] = set()
        documents_changed: set[str] = set()
        for change in changes:
            path = _uri_to_path(change.uri)
            project = self._graphql_cache.project_for_path(path) if path else None
            if project is None:
                continue
            project.invalidate_file(path)
            if project.project.matches_schema(path):
                schema_changed.add(project.key)
            if project.project.matches_documents(path):
                documents_changed.add(project.key)

        for key in schema_changed:
            await self._refresh_project_schema(key)
        for key in documents_changed:
            project = self._graphql_cache.get(key)
            if project is not None:
                await project.rebuild_fragment_definitions()

        affected = schema_changed | documents_changed
        if not affected:
            return []
        return await self.revalidate_open_documents(affected)

    async def refresh_schema(
        self, project_key: str | None = None
    ) -> list[lsp.PublishDiagnosticsParams]:
        """Rebuild schemas regardless of whether their inputs changed.

        This is the only way a remote schema is fetched again while the
        server runs.

        Args:
            project_key: Project root identifier; all projects if None.

        Returns:
            Fresh diagnostics of the open documents of refreshed projects.
        """
        if not self._is_initialized:
            return []
        if project_key is None:
            keys = [project.key for project in self._graphql_cache]
        else:
            keys = [project_key]

        refreshed = set()
        for key in keys:
            if await self._refresh_project_schema(key):
                refreshed.add(key)
        return await self.revalidate_open_documents(refreshed)

    async def _refresh_project_schema(self, key: str) -> bool:
        project = self._graphql_cache.get(key)
        if project is None:
            return False
        try:
            await project.refresh_schema(force=True)
        except (SchemaFetchError, SchemaBuildError) as e:
            self._logger.error("Could not rebuild schema for project %s: %s", project.project.name, e)
            return False
        return True

    async def revalidate_open_documents(
        self, project_keys: set[str] | None = None
    ) -> list[lsp.PublishDiagnosticsParams]:
        """Validate every open document again.

        Args:
            project_keys: Limit to documents of these projects.

        Returns:
            One diagnostics entry per validated document.
        """
        if not self._is_initialized:
            return []
        results = []
        for document in self._text_document_cache:
            path = document.path
            project = self._graphql_cache.project_for_path(path) if path else None
            if project is None:
                continue
            if project_keys is not None and project.key not in project_keys:
                continue
            await project.wait_idle()
            results.append(self._publishable(document, self._validate(document, project)))
        return results

    async def _diagnose(self, document: CachedDocument) -> lsp.PublishDiagnosticsParams | None:
        path = document.path
        project = self._graphql_cache.project_for_path(path) if path else None
        if project is None:
            diagnostics = self._diagnostics_engine.validate(document, None, {})
            return self._publishable(document, diagnostics)

        await project.wait_idle()
        if project.project.matches_documents(path) and not project.indexes_fragments_of(document):
            await project.rebuild_fragment_definitions()
        if self._text_document_cache.get(document.uri) is not document:
            self._logger.debug("Dropping diagnostics of superseded %s", document.uri)
            return None
        return self._publishable(document, self._validate(document, project))

    def _validate(self, document: CachedDocument, project: ProjectCache) -> list[lsp.Diagnostic]:
        path = document.path
        return self._diagnostics_engine.validate(
            document,
            project.get_schema(),
            project.fragment_definitions,
            syntax_only=path is not None and project.project.matches_schema(path),
        )

    @staticmethod
    def _publishable(
        document: CachedDocument, diagnostics: list[lsp.Diagnostic]
    ) -> lsp.PublishDiagnosticsParams:
        return lsp.PublishDiagnosticsParams(
            uri=document.uri,
            diagnostics=diagnostics,
            version=document.version,
        )

    async def _read_text(self, path: Path | None) -> str | None:
        if path is None:
            return None
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._logger.debug("Could not read %s: %s", path, e)
            return None

    # Queries

    async def _locate(self, uri: str) -> tuple[CachedDocument, ProjectCache] | None:
        path = _uri_to_path(uri)
        if path is None:
            return None
        project = self._graphql_cache.project_for_path(path)
        if project is None:
            self._logger.debug("No project covers %s", uri)
            return None
        await project.wait_idle()
        document = self._text_document_cache.get(uri) or await project.load_document(path)
        if document is None:
            return None
        return document, project

    async def handle_definition_request(
        self, params: lsp.TextDocumentPositionParams
    ) -> list[lsp.Location]:
        """Resolve where the symbol under the cursor is defined.

        Args:
            params: Document URI and cursor position.

        Returns:
            Zero or more locations; empty when nothing resolves.
        """
        if not self._is_initialized:
            return []
        located = await self._locate(params.text_document.uri)
        if located is None:
            return []
        document, project = located
        return self._definition_resolver.resolve(document, params.position, project)

    async def handle_hover_request(self, params: lsp.TextDocumentPositionParams) -> lsp.Hover:
        """Describe the symbol under the cursor.

        Args:
            params: Document URI and cursor position.

        Returns:
            Markdown hover content, or a hover with empty content.
        """
        empty = lsp.Hover(contents=[])
        if not self._is_initialized:
            return empty
        located = await self._locate(params.text_document.uri)
        if located is None:
            return empty
        document, project = located
        text = self._hover_provider.hover(document, params.position, project)
        if text is None:
            return empty
        return lsp.Hover(
            contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=text)
        )

    async def handle_document_symbol_request(
        self, params: lsp.DocumentSymbolParams
    ) -> list[lsp.DocumentSymbol]:
        """Outline of the operations and fragments of a document."""
        if not self._is_initialized:
            return []
        located = await self._locate(params.text_document.uri)
        if located is None:
            return []
        return self._symbol_provider.document_symbols(located[0])

    async def handle_workspace_symbol_request(
        self, params: lsp.WorkspaceSymbolParams
    ) -> list[lsp.WorkspaceSymbol]:
        """Fragments and types of every project matching the query."""
        if not self._is_initialized:
            return []
        projects = list(self._graphql_cache)
        for project in projects:
            await project.wait_idle()
        return self._symbol_provider.workspace_symbols(params.query, projects)
