import json
import httpx
import logging
from typing import Any, Optional

from lambda_mcp_client.config import Settings
from lambda_mcp_client.models import (
    FALLBACK_RESOURCE,
    LEARN_MCP_TOOL,
    RemoteResource,
    ToolCallPayload,
)


class LambdaApiError(Exception):
    """The Lambda endpoint answered, but not with a usable resource."""


class RequestForwarder:
    """
    Forwards learn_mcp calls to the remote Lambda endpoint.
    Holds one shared httpx.AsyncClient; every call is attempted exactly once
    and any remote failure degrades to FALLBACK_RESOURCE.
    """
    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.client = client or httpx.AsyncClient(timeout=settings.request_timeout)
        self.logger = logger or logging.getLogger(__name__)

    def build_payload(self, topic: Any) -> ToolCallPayload:
        return ToolCallPayload(name=LEARN_MCP_TOOL.name, parameters={"topic": topic})

    async def fetch_resource(self, topic: Any = "") -> RemoteResource:
        """
        POST a tool_call to the Lambda endpoint and parse the resource it returns.
        Non-2xx status, network errors, timeouts and malformed bodies are logged
        and masked with the fallback resource.
        """
        try:
            self.logger.info(f'Calling Lambda MCP server with topic: "{topic}"')

            payload = self.build_payload(topic)
            response = await self.client.post(
                self.settings.endpoint_url,
                json=payload.model_dump(),
                headers={"Content-Type": "application/json"},
                timeout=self.settings.request_timeout,
            )

            if not response.is_success:
                raise LambdaApiError(
                    f"Lambda API error: {response.status_code} {response.reason_phrase}"
                )

            data = response.json()
            self.logger.info(f"Received response from Lambda server: {json.dumps(data)}")

            if not isinstance(data, dict):
                raise LambdaApiError(
                    f"Lambda API returned {type(data).__name__}, expected an object"
                )
            return RemoteResource.model_validate(data)

        except (httpx.HTTPError, LambdaApiError, ValueError) as exc:
            # ValueError covers both JSONDecodeError and pydantic's ValidationError
            self.logger.error(f"Error calling Lambda MCP server: {exc!r}")
            return FALLBACK_RESOURCE

    async def close(self):
        await self.client.aclose()
