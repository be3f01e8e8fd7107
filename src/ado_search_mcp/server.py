"""Azure DevOps Search MCP Server - Expose wiki and code search to AI assistants."""
import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    Tool,
    TextContent,
    ImageContent,
    EmbeddedResource,
)

from ado_search_core.audit import AuditLogger
from ado_search_core.client import AzureDevOpsClient
from ado_search_core.config import Settings, get_settings
from ado_search_core.errors import ConfigurationError, OperationError
from ado_search_core.service import SearchService

from . import formatters
from . import tools
from .dispatcher import Dispatcher
from .lines import serve_lines

logger = logging.getLogger("ado-search-mcp")


class ToolCallError(Exception):
    """A failed tool call; the MCP server reports its text with ``isError`` set."""


def configure_logging() -> None:
    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


def create_server(dispatcher: Dispatcher) -> Server:
    """Build the MCP server bound to ``dispatcher``."""
    app = Server("azure-devops-search-mcp")

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools for Azure DevOps search."""
        return tools.get_tools(dispatcher.prefix)

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent | ImageContent | EmbeddedResource]:
        """Handle MCP tool calls by delegating to the dispatcher."""
        try:
            outputs = await dispatcher.dispatch(name, arguments)
        except OperationError as e:
            raise ToolCallError(formatters.format_error(e.to_payload())) from e
        return formatters.to_text_content(formatters.format_outputs(outputs))

    return app


def build_dispatcher(settings: Settings, client: AzureDevOpsClient) -> Dispatcher:
    audit = AuditLogger(settings.audit_log_dir)
    service = SearchService(settings, client, audit)
    return Dispatcher(service, prefix=settings.tool_prefix, audit=audit)


async def main(settings: Settings) -> None:
    """Run the server on the configured transport."""
    logger.info(f"MCP Server starting for organization: {settings.org_url}")
    logger.info(f"Search endpoint: {settings.search_url}")
    if settings.default_project:
        logger.info(f"Default project: {settings.default_project}")
    else:
        logger.info("No default project configured; every call must name a project")

    async with AzureDevOpsClient(settings) as client:
        dispatcher = build_dispatcher(settings, client)
        try:
            if settings.transport == "lines":
                await serve_lines(dispatcher)
            else:
                app = create_server(dispatcher)
                async with stdio_server() as (read_stream, write_stream):
                    await app.run(read_stream, write_stream, app.create_initialization_options())
        finally:
            if dispatcher.audit is not None:
                dispatcher.audit.close()


def run() -> None:
    """Console entry point: load settings, fail fast if incomplete, serve."""
    configure_logging()
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        sys.exit(1)
    asyncio.run(main(settings))


if __name__ == "__main__":
    run()
