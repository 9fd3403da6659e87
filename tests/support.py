import json
from typing import Any, Callable, Dict, List

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

ENDPOINT_URL = "http://lambda.test/dev/"

FALLBACK_TEXT = (
    "📚 MCP Documentation\n\n"
    "Official Model Context Protocol documentation\n\n"
    "🔗 https://modelcontextprotocol.io/docs/\n\n"
    "Type: documentation"
)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


def json_handler(body: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status_code, json=body)


def raising_handler(exc: Exception) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc
    return handler


def build_remote_app() -> FastAPI:
    """In-process stand-in for the Lambda endpoint, keyed on the requested topic."""
    app = FastAPI(title="learn_mcp Lambda stub")

    @app.post("/dev/")
    async def tool_call(request: Request):
        body = await request.json()
        topic = body.get("parameters", {}).get("topic", "")
        if topic == "broken":
            return JSONResponse({"message": "Internal server error"}, status_code=502)
        if topic == "garbled":
            return PlainTextResponse("<html>not json</html>")
        return {
            "title": f"Guide: {topic or 'overview'}",
            "description": f"All about {topic or 'MCP'}",
            "url": f"https://modelcontextprotocol.io/docs/{topic}",
            "resource_type": "tutorial",
        }

    return app
