"""Command line entry point."""

import logging
import sys
from pathlib import Path

import typer

from gqlls import __version__
from gqlls.core.entities.server_config import ServerConfig

app = typer.Typer(name="gqlls", help="GraphQL language server.", add_completion=False)


def _version(value: bool) -> None:
    if value:
        typer.echo(f"gqlls {__version__}")
        raise typer.Exit()


@app.command()
def serve(
    tcp: bool = typer.Option(False, "--tcp", help="Listen on TCP instead of stdio."),
    host: str = typer.Option("127.0.0.1", help="TCP host."),
    port: int = typer.Option(2087, help="TCP port."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
    generated_schema_dir: Path | None = typer.Option(
        None, help="Directory for SDL generated from remote schemas."
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version, is_eager=True, help="Show the version."
    ),
) -> None:
    """Start the language server."""
    from gqlls.adapters.pygls.server import create_server
    from gqlls.message_processor import MessageProcessor

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    # stdout carries the protocol.
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    processor = MessageProcessor(ServerConfig(generated_schema_dir=generated_schema_dir))
    server = create_server(processor)
    if tcp:
        server.start_tcp(host, port)
    else:
        server.start_io()


def main() -> None:
    """Run the CLI."""
    app()
