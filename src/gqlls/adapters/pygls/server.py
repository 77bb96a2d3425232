"""pygls binding for MessageProcessor."""

import logging
from collections.abc import Iterable
from typing import Any

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from gqlls import __version__
from gqlls.adapters.pygls.log_handler import ClientLogHandler
from gqlls.message_processor import REFRESH_SCHEMA_COMMAND, SERVER_NAME, MessageProcessor

logger = logging.getLogger(__name__)

WATCHER_REGISTRATION_ID = "gqlls-watched-files"


def watcher_globs(processor: MessageProcessor) -> list[str]:
    """Glob patterns of the files the client should watch."""
    config = processor.config
    extensions = ",".join(
        ext.lstrip(".") for ext in config.graphql_extensions + config.embedded_extensions
    )
    return [
        f"**/*.{{{extensions}}}",
        f"**/{{{','.join(config.config_file_names)}}}",
    ]


def _project_key(arguments: Iterable[Any]) -> str | None:
    # Commands arrive either unpacked or as a single argument list.
    for argument in arguments:
        if isinstance(argument, str):
            return argument
        if isinstance(argument, list):
            return _project_key(argument)
    return None


def create_server(
    processor: MessageProcessor | None = None,
    forward_logs: bool = True,
) -> LanguageServer:
    """Create a LanguageServer that delegates to ``processor``.

    Args:
        processor: The processor to serve. A default one is created if None.
        forward_logs: Forward WARNING and above records of the ``gqlls``
            logger to the client.

    Returns:
        The configured server, ready for ``start_io`` or ``start_tcp``.
    """
    processor = processor or MessageProcessor()
    server = LanguageServer(
        SERVER_NAME,
        __version__,
        text_document_sync_kind=lsp.TextDocumentSyncKind.Incremental,
    )
    pending_init: dict[str, lsp.InitializeParams] = {}

    if forward_logs:
        logging.getLogger("gqlls").addHandler(ClientLogHandler(server))

    def publish(results: Iterable[lsp.PublishDiagnosticsParams | None]) -> None:
        for result in results:
            if result is not None:
                server.text_document_publish_diagnostics(result)

    @server.feature(lsp.INITIALIZE)
    def on_initialize(params: lsp.InitializeParams) -> None:
        # Caches are built once the client confirms with "initialized".
        pending_init["params"] = params

    @server.feature(lsp.INITIALIZED)
    async def on_initialized(params: lsp.InitializedParams) -> None:
        init_params = pending_init.pop("params", None)
        if init_params is None:
            return
        await processor.handle_initialize_request(init_params)

        capabilities = init_params.capabilities.workspace
        watched = capabilities.did_change_watched_files if capabilities else None
        if watched is not None and watched.dynamic_registration:
            await server.client_register_capability_async(
                lsp.RegistrationParams(
                    registrations=[
                        lsp.Registration(
                            id=WATCHER_REGISTRATION_ID,
                            method=lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES,
                            register_options=lsp.DidChangeWatchedFilesRegistrationOptions(
                                watchers=[
                                    lsp.FileSystemWatcher(glob_pattern=pattern)
                                    for pattern in watcher_globs(processor)
                                ]
                            ),
                        )
                    ]
                )
            )
        # Documents opened while the caches were being built.
        publish(await processor.revalidate_open_documents())

    @server.feature(lsp.SHUTDOWN)
    def on_shutdown(params: None) -> None:
        processor.handle_shutdown_request()

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    async def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
        await _open_or_save(params)

    @server.feature(lsp.TEXT_DOCUMENT_DID_SAVE, lsp.SaveOptions(include_text=True))
    async def did_save(params: lsp.DidSaveTextDocumentParams) -> None:
        await _open_or_save(params)

    async def _open_or_save(
        params: lsp.DidOpenTextDocumentParams | lsp.DidSaveTextDocumentParams,
    ) -> None:
        publish([await processor.handle_did_open_or_save(params)])
        if processor.is_config_uri(params.text_document.uri):
            publish(await processor.revalidate_open_documents())

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    async def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
        publish([await processor.handle_did_change(params)])

    @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
    async def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
        await processor.handle_did_close(params)
        server.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(uri=params.text_document.uri, diagnostics=[])
        )

    @server.feature(lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES)
    async def did_change_watched_files(params: lsp.DidChangeWatchedFilesParams) -> None:
        publish(await processor.handle_watched_files_changed(params))

    @server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
    async def definition(params: lsp.DefinitionParams) -> list[lsp.Location]:
        return await processor.handle_definition_request(params)

    @server.feature(lsp.TEXT_DOCUMENT_HOVER)
    async def hover(params: lsp.HoverParams) -> lsp.Hover:
        return await processor.handle_hover_request(params)

    @server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
    async def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
        return await processor.handle_document_symbol_request(params)

    @server.feature(lsp.WORKSPACE_SYMBOL)
    async def workspace_symbol(params: lsp.WorkspaceSymbolParams) -> list[lsp.WorkspaceSymbol]:
        return await processor.handle_workspace_symbol_request(params)

    @server.command(REFRESH_SCHEMA_COMMAND)
    async def refresh_schema(*arguments: Any) -> None:
        publish(await processor.refresh_schema(_project_key(arguments)))

    logger.debug("Created %s %s", SERVER_NAME, __version__)
    return server
