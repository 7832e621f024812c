#!/usr/bin/env python3

from __future__ import annotations
import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from shared.config import ClientConfig, load_config, with_overrides
from shared.errors import ConfigError
from shared.log import configure_root_logging, get_logger
from shared.message import InboundMessage
from .ws_client import MessagingClient

app = typer.Typer(help="wscount WebSocket client")
console = Console()
logger = get_logger(__name__)


def _resolve(config_path: Optional[Path], **overrides) -> ClientConfig:
    try:
        return with_overrides(load_config(config_path).client, **overrides)
    except ConfigError as e:
        console.print(f"[red]Configuration error[/]: {e}")
        raise typer.Exit(code=2)


def _print_record(message: InboundMessage) -> None:
    console.print(message.to_record())


@app.command()
def run(
    server: Optional[str] = typer.Option(None, help="WebSocket URL to connect to (default: $WSCOUNT_SERVER or ws://localhost:8080/)"),
    interval: Optional[float] = typer.Option(None, help="Seconds between counted messages"),
    count: Optional[int] = typer.Option(None, help="Stop after sending this many messages"),
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    log_level: str = typer.Option("INFO", help="Log level"),
):
    """Connect, send a counted message every interval and print every inbound message."""
    configure_root_logging(log_level)
    cfg = _resolve(config, endpoint=server, interval=interval, max_messages=count)

    console.print(f"[bold green]wscount client[/] connecting to {cfg.endpoint}")
    client = MessagingClient.from_config(cfg, sink=_print_record)

    try:
        connected = asyncio.run(client.run())
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/]")
        return
    if not connected:
        console.print(f"[red]Could not connect to {cfg.endpoint}[/]")
        raise typer.Exit(code=1)
    console.print(f"[dim]Sent {client.counter.value}, received {client.received_count}[/]")


@app.command("config")
def show_config(
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
):
    """Print the resolved client configuration."""
    cfg = _resolve(config)
    table = Table(title="Client configuration")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in vars(cfg).items():
        table.add_row(key, str(value))
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
