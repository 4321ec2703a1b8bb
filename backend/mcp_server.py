"""
MCP stdio Server - stellt die Tools einem MCP-Client zur Verfügung
"""

import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from tools import call_tool, tools

logger = logging.getLogger(__name__)

SERVER_NAME = "fetchtool"

server = Server(SERVER_NAME)


@server.list_tools()
async def list_tools() -> List[types.Tool]:
    return [
        types.Tool(name=tool.name, description=tool.description, inputSchema=tool.inputSchema)
        for tool in tools
    ]


@server.call_tool()
async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
    # Exceptions werden vom MCP-Server als isError-Result an den Client gemeldet
    result = await call_tool(name, arguments)
    return [types.TextContent(type="text", text=item.text) for item in result.content]


async def run_stdio_server() -> None:
    logger.info("Starting MCP server on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
