"""
Tool Registry

Maps tool names to their definitions and async handlers. Both transports
(MCP stdio and the HTTP API) dispatch through call_tool().
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from services.exceptions import UnknownToolError

from .base import TextContent, ToolDefinition, ToolResult
from .browser_install import browser_install, browser_install_tool
from .download_url import download_url, download_url_tool
from .fetch_url import fetch_url, fetch_url_tool
from .fetch_urls import fetch_urls, fetch_urls_tool

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Optional[Dict[str, Any]]], Awaitable[ToolResult]]

tools: List[ToolDefinition] = [
    fetch_url_tool,
    fetch_urls_tool,
    download_url_tool,
    browser_install_tool,
]

tool_handlers: Dict[str, ToolHandler] = {
    fetch_url_tool.name: fetch_url,
    fetch_urls_tool.name: fetch_urls,
    download_url_tool.name: download_url,
    browser_install_tool.name: browser_install,
}


async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
    """
    Dispatches a tool call.

    Raises:
        UnknownToolError: If no tool is registered under ``name``
        FetcherError: Whatever the handler raises (browser_install never does)
    """
    handler = tool_handlers.get(name)
    if handler is None:
        raise UnknownToolError(f"Unknown tool: {name}")

    logger.info(f"Tool call: {name}")
    return await handler(arguments or {})


__all__ = [
    "TextContent",
    "ToolDefinition",
    "ToolResult",
    "call_tool",
    "tool_handlers",
    "tools",
]
