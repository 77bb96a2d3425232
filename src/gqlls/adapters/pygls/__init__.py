"""pygls adapter for gqlls."""

from gqlls.adapters.pygls.log_handler import ClientLogHandler
from gqlls.adapters.pygls.server import create_server, watcher_globs

__all__ = [
    "create_server",
    "watcher_globs",
    "ClientLogHandler",
]
