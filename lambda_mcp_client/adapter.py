import json
import logging
from typing import Any, Dict, List, Optional

from lambda_mcp_client.config import Settings
from lambda_mcp_client.models import (
    LEARN_MCP_TOOL,
    CapabilityDescriptor,
    RemoteResource,
    ToolCallResult,
)
from lambda_mcp_client.services.forwarder import RequestForwarder


def format_resource(resource: RemoteResource) -> str:
    """Render a resource as the text block returned to the MCP client."""
    return (
        f"📚 {resource.title or 'MCP Learning Resource'}\n\n"
        f"{resource.description or 'A resource for learning about MCP'}\n\n"
        f"🔗 {resource.url or 'https://modelcontextprotocol.io/'}\n\n"
        f"Type: {resource.resource_type or 'documentation'}"
    )


class ProtocolAdapter:
    """
    Exposes the single learn_mcp tool and bridges its calls to the Lambda endpoint.

    Every outcome of invoke() is a ToolCallResult; nothing raised inside a
    tool call escapes to the transport.
    """
    def __init__(
        self,
        settings: Settings,
        forwarder: RequestForwarder,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.forwarder = forwarder
        self.logger = logger or logging.getLogger(__name__)

    def list_capabilities(self) -> List[CapabilityDescriptor]:
        self.logger.info("Handling list tools request")
        return [LEARN_MCP_TOOL]

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolCallResult:
        try:
            self.logger.info(
                f"Handling tool call: {name} with args: {json.dumps(arguments, default=str)}"
            )

            if arguments is None:
                if self.settings.require_arguments:
                    raise ValueError("No arguments provided")
                arguments = {}

            if name != LEARN_MCP_TOOL.name:
                return ToolCallResult.from_text(f"Unknown tool: {name}", is_error=True)

            topic = arguments.get("topic", "")
            resource = await self.forwarder.fetch_resource(topic)
            return ToolCallResult.from_text(format_resource(resource))

        except Exception as e:
            self.logger.error(f"Error handling tool call: {e}")
            return ToolCallResult.from_text(f"Error: {e}", is_error=True)
