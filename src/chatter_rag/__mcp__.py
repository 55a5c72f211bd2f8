"""MCP Server for Chatter RAG.

Exposes semantic code search over one repository to MCP clients. The
server provides a single tool:
- search-code-semantically: find the code chunks most relevant to a
  natural-language query

Configuration comes from RAG_* environment variables (see
chatter_rag.config.settings); command-line flags override the repository
and a few common settings.

Run with: python -m chatter_rag.__mcp__ --repository-path /path/to/repo
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from chatter_rag import __version__
from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.rag.service import RAGService
from chatter_rag.tools.rag_tool import (
    DEFAULT_TOP_K,
    MAX_TOP_K,
    TOOL_DESCRIPTION,
    TOOL_NAME,
    SemanticSearchTool,
)

logger = logging.getLogger(__name__)

# Initialize MCP server
server = Server("chatter-rag")

# Bound at startup by main()
_search_tool: Optional[SemanticSearchTool] = None


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools."""
    return [
        Tool(
            name=TOOL_NAME,
            description=TOOL_DESCRIPTION,
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": (
                            "Natural language description of what code you're looking for "
                            "(e.g., 'authentication logic', 'database connection setup', 'error handling')"
                        ),
                    },
                    "top_k": {
                        "type": "integer",
                        "description": f"Number of code chunks to return (default: {DEFAULT_TOP_K}, max: {MAX_TOP_K})",
                        "default": DEFAULT_TOP_K,
                        "minimum": 1,
                        "maximum": MAX_TOP_K,
                    },
                },
                "required": ["query"],
            },
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    if name != TOOL_NAME:
        return [TextContent(type="text", text=f"✗ Unknown tool: {name}")]
    return await handle_search(**(arguments or {}))


async def handle_search(query: str, top_k: int = DEFAULT_TOP_K) -> list[TextContent]:
    """Handle search-code-semantically - return the SearchCodeResult as JSON."""
    tool = _search_tool or SemanticSearchTool(service=None, repository_name="")
    result = await tool.search_code_semantically(query=query, top_k=int(top_k))
    return [TextContent(type="text", text=result.model_dump_json(indent=2))]


def _configure_logging(debug: bool, log_dir: Path) -> None:
    # Logging to both stderr AND file when --debug is enabled; stdout carries the protocol
    log_level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if debug:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / f"mcp-{os.getpid()}.log", mode="w", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


async def main() -> None:
    """Main entry point for MCP server."""
    global _search_tool

    parser = argparse.ArgumentParser(description="Chatter RAG MCP Server")
    parser.add_argument('--repository-path', type=Path, required=True, help='Repository to search')
    parser.add_argument('--repository-name', type=str, help='Index name (default: directory name)')
    parser.add_argument('--reindex', action='store_true', help='Rebuild the index even if one exists')
    parser.add_argument('--data-dir', type=Path, help='Base directory for indices (default: ~/.chatter-rag)')
    parser.add_argument('--ollama-url', type=str, help='Ollama base URL (default: http://localhost:11434)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    overrides: dict[str, Any] = {"enabled": True}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.ollama_url:
        overrides["ollama_base_url"] = args.ollama_url
    if args.debug:
        overrides["debug"] = True
    config = EmbeddingConfig(**overrides)

    _configure_logging(config.debug, config.debug_log_dir)
    logger.info("Starting Chatter RAG MCP Server...")

    repository_path = args.repository_path.resolve()
    repository_name = args.repository_name or repository_path.name

    service = RAGService(config)
    if await service.initialize():
        if args.reindex or not await service.is_repository_indexed(repository_name):
            logger.info(f"Indexing {repository_path} as '{repository_name}'...")
            result = await service.index_repository(repository_path, repository_name)
            log = logger.info if result.success else logger.warning
            log(result.message)
        _search_tool = SemanticSearchTool(service, repository_name, config)
    else:
        logger.warning("RAG unavailable; searches will report that no context is available")
        _search_tool = SemanticSearchTool(None, repository_name, config)

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("MCP server ready and listening for requests")
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name="chatter-rag",
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )
    finally:
        service.metrics.log_summary()
        await service.close()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
