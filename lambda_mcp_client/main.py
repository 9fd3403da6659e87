import os
import sys
import signal
import logging
import asyncio
from typing import Callable, Optional, TextIO

from pydantic import ValidationError

from lambda_mcp_client.adapter import ProtocolAdapter
from lambda_mcp_client.config import Settings, get_settings
from lambda_mcp_client.server import MAX_LINE_BYTES, serve_stdio
from lambda_mcp_client.services.forwarder import RequestForwarder

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("lambda_mcp_client")

SignalHandler = Callable[[int, object], None]


def exit_on_signal(signum: int, frame: object) -> None:
    """Terminate at once with status 0; in-flight calls are abandoned."""
    logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
    os._exit(0)


def install_signal_handlers(handler: SignalHandler = exit_on_signal) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, handler)


def setup_logging(level: str) -> None:
    """All diagnostics go to stderr; stdout carries protocol messages only."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


async def open_stdio_reader(stream: Optional[TextIO] = None) -> asyncio.StreamReader:
    """Attach an asyncio reader to stdin."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, stream or sys.stdin)
    return reader


async def run_server(settings: Settings) -> None:
    logger.info(f"Starting {settings.app_name}...")
    reader = await open_stdio_reader()

    # Forwarder owns the connection pool for the process lifetime
    forwarder = RequestForwarder(settings)
    try:
        adapter = ProtocolAdapter(settings, forwarder)
        logger.info(f"{settings.app_name} running on stdio")
        await serve_stdio(reader, sys.stdout, adapter, settings)
    finally:
        await forwarder.close()


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging("INFO")
        logger.error(f"Fatal error running server: invalid configuration: {e}")
        return 1

    setup_logging(settings.log_level)
    install_signal_handlers()

    try:
        asyncio.run(run_server(settings))
    except Exception as e:
        logger.error(f"Fatal error running server: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
