"""Forward log records to the editor."""

import logging

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

_MESSAGE_TYPES = {
    logging.DEBUG: lsp.MessageType.Debug,
    logging.INFO: lsp.MessageType.Info,
    logging.WARNING: lsp.MessageType.Warning,
    logging.ERROR: lsp.MessageType.Error,
    logging.CRITICAL: lsp.MessageType.Error,
}


class ClientLogHandler(logging.Handler):
    """Logging handler that sends records as ``window/logMessage``.

    Only records at WARNING and above are forwarded by default so that
    the editor's output panel shows problems, not chatter.
    """

    def __init__(self, server: LanguageServer, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self._server = server

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._server.window_log_message(
                lsp.LogMessageParams(
                    type=_MESSAGE_TYPES.get(record.levelno, lsp.MessageType.Log),
                    message=self.format(record),
                )
            )
        except Exception:
            self.handleError(record)
