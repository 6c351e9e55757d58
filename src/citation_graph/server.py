"""
Citation Graph MCP Server
=========================

This module implements an MCP server that builds pruned citation
graphs using the Semantic Scholar batch API.
"""

import logging
import sys
from typing import Any, Dict, List

import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from .config import Settings
from .tools import (
    build_graph_tool,
    handle_build_graph,
    resolve_ids_tool,
    handle_resolve_ids,
)

# Initialize settings and server
settings = Settings()

# Configure logging to stderr (stdout is reserved for MCP JSON-RPC)
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("citation-graph")

# Create MCP server
server = Server(settings.APP_NAME)


@server.list_tools()
async def list_tools() -> List[types.Tool]:
    """List available citation graph tools."""
    return [
        build_graph_tool,
        resolve_ids_tool,
    ]


@server.call_tool()
async def call_tool(
    name: str,
    arguments: Dict[str, Any],
) -> List[types.TextContent]:
    """Handle tool calls for citation graph operations."""
    logger.debug(f"Calling tool {name} with arguments {arguments}")

    try:
        if name == "build_citation_graph":
            return await handle_build_graph(arguments)
        elif name == "resolve_identifiers":
            return await handle_resolve_ids(arguments)
        else:
            return [
                types.TextContent(
                    type="text",
                    text=f"Error: Unknown tool '{name}'",
                )
            ]
    except Exception as e:
        logger.error(f"Tool error: {str(e)}")
        return [
            types.TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def _async_main():
    """Async entry point for the MCP server."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Semantic Scholar endpoint: {settings.S2_BASE_URL}")

    async with stdio_server() as streams:
        await server.run(
            streams[0],
            streams[1],
            InitializationOptions(
                server_name=settings.APP_NAME,
                server_version=settings.APP_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main():
    """Run the MCP server (synchronous entry point)."""
    import asyncio
    asyncio.run(_async_main())
