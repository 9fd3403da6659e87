import logging

import httpx
import pytest

from lambda_mcp_client.adapter import ProtocolAdapter
from lambda_mcp_client.config import Settings
from lambda_mcp_client.services.forwarder import RequestForwarder
from tests.support import ENDPOINT_URL, build_remote_app


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, endpoint_url=ENDPOINT_URL, request_timeout=2.0)


@pytest.fixture
def adapter_logger() -> logging.Logger:
    return logging.getLogger("tests.lambda_mcp_client")


@pytest.fixture
def make_adapter(settings: Settings, adapter_logger: logging.Logger):
    """Build an adapter whose HTTP client is served by the given transport."""

    def factory(transport: httpx.AsyncBaseTransport, adapter_settings: Settings = settings) -> ProtocolAdapter:
        client = httpx.AsyncClient(transport=transport)
        forwarder = RequestForwarder(adapter_settings, client=client, logger=adapter_logger)
        return ProtocolAdapter(adapter_settings, forwarder, logger=adapter_logger)

    return factory


@pytest.fixture
def remote_transport() -> httpx.ASGITransport:
    return httpx.ASGITransport(app=build_remote_app())
