#!/usr/bin/env python
"""Command line interface for qreph."""

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from qreph.cli.utils.interrupts import forward_stop_signals
from qreph.cli.utils.payload import read_payload, stdin_is_piped
from qreph.config import load_config
from qreph.exceptions import QrephException
from qreph.session import share
from qreph.signals import OneShotSignal

USAGE = "usage: qreph [--] <text> | <command> | qreph"

app = typer.Typer(
    help="Share a note once over a local HTTP link, then exit.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                rich_tracebacks=True,
                show_time=True,
                log_time_format="%H:%M:%S",
            )
        ],
        force=True,
    )


@app.command()
def serve(
    text: Optional[List[str]] = typer.Argument(
        None, help="Note text; read from stdin instead when it is piped"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to let the response finish on shutdown"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Interface to listen on (default: all)"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", help="Port to listen on (default: any free port)"
    ),
    advertise_host: Optional[str] = typer.Option(
        None, "--advertise-host", help="Host to put in the link instead of the detected one"
    ),
    qr: Optional[bool] = typer.Option(
        None, "--qr/--no-qr", help="Print a QR code for the link"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
):
    """Serve a note exactly once."""
    _setup_logging(verbose)

    stdin = typer.get_binary_stream("stdin")
    try:
        payload = read_payload(text, stdin, stdin_is_piped(sys.stdin))
    except OSError as exc:
        err_console.print(f"[bold red]Error:[/bold red] failed to read from stdin: {exc}")
        raise typer.Exit(1) from exc

    if payload is None:
        console.print(USAGE, highlight=False)
        return

    try:
        config = load_config(
            {
                "bind_host": host,
                "port": port,
                "shutdown_timeout": timeout,
                "advertise_host": advertise_host,
                "show_qr": qr,
            }
        )
        with forward_stop_signals(OneShotSignal("interrupted")) as interrupt:
            share(payload, config, console=console, interrupt=interrupt)
    except QrephException as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}", highlight=False)
        raise typer.Exit(1) from exc


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
