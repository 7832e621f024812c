#!/usr/bin/env python3

from __future__ import annotations
import asyncio
from pathlib import Path
from typing import Any, Dict, Optional, Set

import typer
import websockets

from shared.config import DEFAULT_HOST, DEFAULT_MAX_SIZE, DEFAULT_PORT, ServerConfig, load_config, with_overrides
from shared.errors import ConfigError
from shared.log import configure_root_logging, get_logger

app = typer.Typer(help="wscount local echo endpoint")
logger = get_logger(__name__)


class EchoServer:
    """Local WebSocket endpoint that sends every frame back to its sender, same kind"""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        max_size: Optional[int] = DEFAULT_MAX_SIZE,
    ) -> None:
        self.host = host
        self.port = port
        self.max_size = max_size
        self.connections: Set[websockets.ServerConnection] = set()
        self.frames_echoed = 0

    @classmethod
    def from_config(cls, config: ServerConfig) -> "EchoServer":
        return cls(config.host, config.port, max_size=config.max_size)

    async def start_server(self) -> None:
        """Serve until cancelled"""
        logger.info(f"Starting echo server on {self.host}:{self.port}")
        async with websockets.serve(
            self.handle_connection,
            self.host,
            self.port,
            max_size=self.max_size,
        ):
            logger.info(f"Echo server listening on ws://{self.host}:{self.port}")
            try:
                await asyncio.Future()  # Run forever
            except asyncio.CancelledError:
                logger.info("Echo server stopped")
                raise

    async def handle_connection(self, websocket: websockets.ServerConnection) -> None:
        remote_addr = websocket.remote_address
        logger.info(f"New connection from {remote_addr}")
        self.connections.add(websocket)
        try:
            # str frames go back as text, bytes as binary
            async for message in websocket:
                await websocket.send(message)
                self.frames_echoed += 1
        except websockets.exceptions.ConnectionClosedError as e:
            logger.warning(f"Connection from {remote_addr} closed abnormally: {e}")
        finally:
            self.connections.discard(websocket)
            logger.info(f"Connection from {remote_addr} closed (code={websocket.close_code})")

    def get_status(self) -> Dict[str, Any]:
        return {
            "address": f"ws://{self.host}:{self.port}",
            "open_connections": len(self.connections),
            "frames_echoed": self.frames_echoed,
        }


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help=f"Bind address (default: $WSCOUNT_HOST or {DEFAULT_HOST})"),
    port: Optional[int] = typer.Option(None, help=f"Port (default: $WSCOUNT_PORT or {DEFAULT_PORT})"),
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    log_level: str = typer.Option("INFO", help="Log level"),
) -> None:
    """Run the local echo endpoint."""
    configure_root_logging(log_level)
    try:
        cfg = with_overrides(load_config(config).server, host=host, port=port)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        raise typer.Exit(code=2)

    server = EchoServer.from_config(cfg)
    try:
        asyncio.run(server.start_server())
    except KeyboardInterrupt:
        logger.info("Interrupted")


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
