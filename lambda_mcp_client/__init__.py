"""Stdio MCP server exposing the learn_mcp tool backed by a remote Lambda endpoint."""

__version__ = "1.0.0"
