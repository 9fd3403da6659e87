import json
import logging
import asyncio
from typing import Any, Dict, Optional, TextIO

from pydantic import ValidationError

from lambda_mcp_client.adapter import ProtocolAdapter
from lambda_mcp_client.config import Settings
from lambda_mcp_client.models import JsonRpcRequest, JsonRpcResponse, ToolCallParams

logger = logging.getLogger(__name__)

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Largest accepted stdin line
MAX_LINE_BYTES = 4 * 1024 * 1024

# MCP Capabilities - only tools are served
MCP_SERVER_CAPABILITIES: Dict[str, Any] = {
    "tools": {},
}


# ---------------------------------------------------------
# MCP PROTOCOL HANDLERS
# ---------------------------------------------------------

def handle_initialize(settings: Settings, params: Dict[str, Any]) -> Dict[str, Any]:
    """
    MCP initialize handler - establishes connection and negotiates capabilities.
    https://spec.modelcontextprotocol.io/specification/basic/lifecycle/
    """
    client_info = params.get("clientInfo") or {}
    logger.info(f"MCP Initialize from client: {client_info.get('name', 'unknown')} v{client_info.get('version', '?')}")

    return {
        "protocolVersion": params.get("protocolVersion") or settings.protocol_version,
        "serverInfo": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "capabilities": MCP_SERVER_CAPABILITIES,
    }


def handle_notifications_initialized() -> None:
    """
    MCP notifications/initialized - client confirms initialization complete.
    This is a notification (no response required).
    """
    logger.info("Client confirmed initialization complete")


def handle_tools_list(adapter: ProtocolAdapter) -> Dict[str, Any]:
    """
    MCP tools/list handler.
    https://spec.modelcontextprotocol.io/specification/server/tools/
    """
    return {"tools": [tool.to_wire() for tool in adapter.list_capabilities()]}


async def handle_tools_call(adapter: ProtocolAdapter, params: Dict[str, Any]) -> Dict[str, Any]:
    """MCP tools/call handler. Raises ValidationError on malformed params."""
    call = ToolCallParams.model_validate(params)
    result = await adapter.invoke(call.name, call.arguments)
    return result.to_wire()


# ---------------------------------------------------------
# MESSAGE ROUTING
# ---------------------------------------------------------

async def handle_message(
    adapter: ProtocolAdapter, settings: Settings, line: str
) -> Optional[Dict[str, Any]]:
    """
    Handle one stdin line. Returns the JSON-RPC response to write,
    or None when the message is a notification.
    """
    # 1. Parse & Validate Schema
    try:
        rpc_req = JsonRpcRequest.model_validate(json.loads(line))
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning(f"Malformed Request: {e}")
        return JsonRpcResponse.error_response(None, PARSE_ERROR, "Parse error").to_wire()

    method = rpc_req.method
    params = rpc_req.params if isinstance(rpc_req.params, dict) else {}

    # 2. Notifications never get a response
    if rpc_req.is_notification:
        if method == "notifications/initialized":
            handle_notifications_initialized()
        else:
            logger.debug(f"Ignoring notification: {method}")
        return None

    # 3. Dispatch
    try:
        if method == "initialize":
            result = handle_initialize(settings, params)
        elif method == "ping":
            result = {}
        elif method == "tools/list":
            result = handle_tools_list(adapter)
        elif method == "tools/call":
            try:
                result = await handle_tools_call(adapter, params)
            except ValidationError as e:
                logger.warning(f"Invalid tools/call params: {e}")
                return JsonRpcResponse.error_response(
                    rpc_req.id, INVALID_PARAMS, "Invalid params"
                ).to_wire()
        else:
            logger.warning(f"Method not found: {method}")
            return JsonRpcResponse.error_response(
                rpc_req.id, METHOD_NOT_FOUND, "Method not found", data={"method": method}
            ).to_wire()
    except Exception as e:
        logger.error(f"Internal error handling {method}: {e}")
        return JsonRpcResponse.error_response(
            rpc_req.id, INTERNAL_ERROR, "Internal error"
        ).to_wire()

    return JsonRpcResponse.success_response(rpc_req.id, result).to_wire()


def write_message(writer: TextIO, message: Dict[str, Any]) -> None:
    writer.write(json.dumps(message) + "\n")
    writer.flush()


async def discard_line(reader: asyncio.StreamReader, scanned: int) -> None:
    """Drop the rest of an oversized line, up to and including its newline or EOF."""
    await reader.readexactly(scanned)
    while True:
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as e:
            await reader.readexactly(e.consumed)
        except asyncio.IncompleteReadError:
            return


async def serve_stdio(
    reader: asyncio.StreamReader,
    writer: TextIO,
    adapter: ProtocolAdapter,
    settings: Settings,
) -> None:
    """
    Read line-delimited JSON-RPC from reader until EOF, answering on writer.
    Messages are handled one at a time, in arrival order.
    """
    while True:
        try:
            raw = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF; a final line may lack its newline
            raw = e.partial
        except asyncio.LimitOverrunError as e:
            await discard_line(reader, e.consumed)
            logger.warning("Dropped stdin line longer than the read limit")
            write_message(
                writer, JsonRpcResponse.error_response(None, PARSE_ERROR, "Parse error").to_wire()
            )
            continue

        if not raw:
            logger.info("stdin closed, stopping server")
            return

        line = raw.decode("utf-8", errors="replace").strip()
        if not line:
            continue

        try:
            response = await handle_message(adapter, settings, line)
        except Exception as e:
            logger.error(f"Unhandled error processing message: {e!r}")
            response = JsonRpcResponse.error_response(None, INTERNAL_ERROR, "Internal error").to_wire()
        if response is not None:
            write_message(writer, response)
