"""Tests for process bootstrap: signals, exit codes and the stdin transport."""

import os
import json
import asyncio
import signal

import pytest

from lambda_mcp_client import main as main_module
from lambda_mcp_client.config import Settings, get_settings
from lambda_mcp_client.services.forwarder import RequestForwarder


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def no_signal_handlers(monkeypatch):
    installed = []
    monkeypatch.setattr(main_module, "install_signal_handlers", lambda: installed.append(True))
    return installed


def test_install_signal_handlers_covers_sigint_and_sigterm() -> None:
    previous = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}

    def handler(signum, frame):
        pass

    try:
        main_module.install_signal_handlers(handler)
        assert signal.getsignal(signal.SIGINT) is handler
        assert signal.getsignal(signal.SIGTERM) is handler
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


@pytest.mark.parametrize("signum", [signal.SIGINT, signal.SIGTERM])
def test_signal_exits_immediately_with_zero(monkeypatch, signum) -> None:
    codes = []
    monkeypatch.setattr(main_module.os, "_exit", codes.append)

    main_module.exit_on_signal(signum, None)

    assert codes == [0]


def test_main_returns_zero_when_stdin_closes(monkeypatch, no_signal_handlers) -> None:
    seen = []

    async def fake_run_server(settings):
        seen.append(settings)

    monkeypatch.setattr(main_module, "run_server", fake_run_server)

    assert main_module.main() == 0
    assert seen[0].app_name == "lambda-mcp-client"
    assert no_signal_handlers == [True]


def test_main_returns_one_on_fatal_error(monkeypatch, no_signal_handlers, caplog) -> None:
    async def broken_run_server(settings):
        raise OSError("stdin is not a pipe")

    monkeypatch.setattr(main_module, "run_server", broken_run_server)

    assert main_module.main() == 1
    assert "Fatal error running server" in caplog.text


def test_main_returns_one_on_invalid_config(monkeypatch, no_signal_handlers) -> None:
    monkeypatch.setenv("LAMBDA_MCP_REQUEST_TIMEOUT", "-1")
    assert main_module.main() == 1
    assert no_signal_handlers == []


async def test_open_stdio_reader_reads_lines_from_pipe() -> None:
    read_fd, write_fd = os.pipe()
    with os.fdopen(read_fd, "r") as stream:
        os.write(write_fd, b'{"jsonrpc": "2.0", "method": "ping", "id": 1}\n')
        os.close(write_fd)

        reader = await main_module.open_stdio_reader(stream)

        assert await reader.readline() == b'{"jsonrpc": "2.0", "method": "ping", "id": 1}\n'
        assert await reader.readline() == b""


class ClosingRecorder(RequestForwarder):
    closed = []

    async def close(self):
        ClosingRecorder.closed.append(self)
        await super().close()


@pytest.fixture
def fed_stdin(monkeypatch):
    def install(data: bytes) -> None:
        async def fake_open_stdio_reader(stream=None):
            reader = asyncio.StreamReader()
            reader.feed_data(data)
            reader.feed_eof()
            return reader

        monkeypatch.setattr(main_module, "open_stdio_reader", fake_open_stdio_reader)

    return install


async def test_run_server_serves_stdin_and_closes_forwarder(monkeypatch, fed_stdin, capsys) -> None:
    ClosingRecorder.closed.clear()
    monkeypatch.setattr(main_module, "RequestForwarder", ClosingRecorder)
    fed_stdin(b'{"jsonrpc": "2.0", "method": "ping", "id": 1}\n')

    await main_module.run_server(Settings(_env_file=None))

    assert json.loads(capsys.readouterr().out) == {"jsonrpc": "2.0", "result": {}, "id": 1}
    assert len(ClosingRecorder.closed) == 1
    assert ClosingRecorder.closed[0].client.is_closed


async def test_run_server_closes_forwarder_on_failure(monkeypatch, fed_stdin) -> None:
    ClosingRecorder.closed.clear()
    monkeypatch.setattr(main_module, "RequestForwarder", ClosingRecorder)
    fed_stdin(b"")

    async def broken_serve_stdio(reader, writer, adapter, settings):
        raise OSError("stdout closed")

    monkeypatch.setattr(main_module, "serve_stdio", broken_serve_stdio)

    with pytest.raises(OSError, match="stdout closed"):
        await main_module.run_server(Settings(_env_file=None))

    assert len(ClosingRecorder.closed) == 1
