"""OpenAlex MCP Server.

FastMCP server exposing read-only research tools over the OpenAlex API.
Run: openalex-mcp
"""

from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .config import Settings, configure_logging
from .core.clients.openalex import OpenAlexFetcher
from .tools import ResearchTools

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

TOOL_NAMES = [
    "search_works",
    "search_authors",
    "search_institutions",
    "search_sources",
    "get_work_by_id",
    "get_author_by_id",
    "get_source_by_id",
    "autocomplete_entities",
    "group_entities",
]


def create_server(
    settings: Optional[Settings] = None,
    fetcher: Optional[OpenAlexFetcher] = None,
) -> FastMCP:
    """Build the MCP server with every research tool registered."""
    settings = settings or Settings.from_env()
    fetcher = fetcher or OpenAlexFetcher(timeout_ms=settings.timeout_ms)
    tools = ResearchTools(fetcher, settings)

    mcp = FastMCP(
        "OpenAlex Research",
        instructions="Search and retrieve scholarly works, authors, institutions and sources from OpenAlex.",
        host=settings.host,
        port=settings.port,
    )
    for name in TOOL_NAMES:
        mcp.add_tool(getattr(tools, name), name=name, annotations=READ_ONLY)
    return mcp


def main():
    """Entry point for the CLI command."""
    settings = Settings.from_env()
    configure_logging(settings)
    logger.info("Starting OpenAlex MCP server (%s)", settings.mcp_transport)
    create_server(settings).run(transport=settings.mcp_transport)


if __name__ == "__main__":
    main()
