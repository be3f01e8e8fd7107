"""Azure DevOps Search MCP Server - Model Context Protocol integration.

This package exposes Azure DevOps wiki and code search to AI assistants.

Modules:
- server: stdio MCP server implementation and console entry point
- lines: line-delimited JSON transport
- dispatcher: tool registry, dispatch and response envelopes
- tools: MCP tool definitions
- handlers: tool implementation handlers
- formatters: response formatting utilities
"""
from ado_search_core import __version__

from . import formatters
from . import tools
from . import handlers

__all__ = ["formatters", "tools", "handlers", "__version__"]
