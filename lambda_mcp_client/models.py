from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union, Any, Dict, List, Literal


class JsonRpcRequest(BaseModel):
    """
    Strict implementation of JSON-RPC 2.0 Request object.
    A message without an "id" member is a notification and gets no response.
    """
    jsonrpc: Literal["2.0"] = "2.0"
    method: str = Field(..., min_length=1, description="The name of the method to be invoked.")
    params: Optional[Union[Dict[str, Any], List[Any]]] = None
    id: Optional[Union[str, int]] = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """
    Standard JSON-RPC 2.0 Response.
    """
    jsonrpc: Literal["2.0"] = "2.0"
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None
    id: Optional[Union[str, int]] = None

    @classmethod
    def success_response(cls, req_id: Any, result: Any):
        return cls(id=req_id, result=result)

    @classmethod
    def error_response(cls, req_id: Any, code: int, message: str, data: Any = None):
        return cls(
            id=req_id,
            error=JsonRpcError(code=code, message=message, data=data)
        )

    def to_wire(self) -> Dict[str, Any]:
        """Exactly one of result/error, and "id" even when it is null."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result if self.result is not None else {}
        message["id"] = self.id
        return message


# ---------------------------------------------------------
# MCP TOOL MODELS
# ---------------------------------------------------------

class CapabilityDescriptor(BaseModel):
    """Tool metadata as returned by tools/list."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(alias="inputSchema")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolCallParams(BaseModel):
    """params of a tools/call request."""
    name: str
    arguments: Optional[Dict[str, Any]] = None


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Uniform tool-call envelope, used for success and failure alike."""
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "ToolCallResult":
        return cls(content=[TextContent(text=text)], is_error=is_error)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------
# REMOTE LAMBDA MODELS
# ---------------------------------------------------------

class ToolCallPayload(BaseModel):
    """Body POSTed to the Lambda endpoint."""
    type: Literal["tool_call"] = "tool_call"
    name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class RemoteResource(BaseModel):
    """
    Educational resource returned by the Lambda endpoint.
    Every field is optional; missing ones are defaulted when formatting.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    resource_type: Optional[str] = None

    @field_validator("title", "description", "url", "resource_type", mode="before")
    @classmethod
    def drop_unusable_values(cls, v: Any) -> Any:
        """Values that are neither text nor numbers fall back to the default for that field only."""
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            return None
        return v


LEARN_MCP_TOOL = CapabilityDescriptor(
    name="learn_mcp",
    description=(
        "Provides educational resources about Model Context Protocol (MCP). "
        "This tool helps you learn about building and using MCP servers by returning "
        "documentation links, tutorials, examples, and other learning materials. "
        "Each call returns a different resource to explore the MCP ecosystem."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "topic": {
                "type": "string",
                "description": "Optional topic to focus on (e.g., 'implementation', 'architecture', 'examples')"
            }
        }
    },
)

# Served whenever the Lambda call fails
FALLBACK_RESOURCE = RemoteResource(
    title="MCP Documentation",
    description="Official Model Context Protocol documentation",
    url="https://modelcontextprotocol.io/docs/",
    resource_type="documentation",
)
