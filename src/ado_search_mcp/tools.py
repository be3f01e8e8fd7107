"""MCP tool definitions for Azure DevOps search.

This module is the single source of the tool catalog used by both the MCP
stdio transport and the line-delimited transport, so both expose identical
names and schemas.
"""
from mcp.types import Tool

from ado_search_core.config import DEFAULT_TOOL_PREFIX
from ado_search_core.schemas import (
    DEFAULT_MAX_RESULTS,
    MAX_RESULTS_LIMIT,
    CodeElement,
    RecursionLevel,
)

WIKI_SEARCH = "wiki_search"
CODE_SEARCH = "code_search"
CODE_RETRIEVAL = "code_retrieval"
WIKI_PAGE = "wiki_page"

OPERATIONS = (WIKI_SEARCH, CODE_SEARCH, CODE_RETRIEVAL, WIKI_PAGE)

_PROJECT = {
    "type": "string",
    "description": "The Azure DevOps project name (optional if a default project is configured)"
}
_MAX_RESULTS = {
    "type": "integer",
    "minimum": 1,
    "maximum": MAX_RESULTS_LIMIT,
    "default": DEFAULT_MAX_RESULTS,
    "description": f"Maximum number of results to return (default: {DEFAULT_MAX_RESULTS})"
}
_SKIP = {
    "type": "integer",
    "minimum": 0,
    "default": 0,
    "description": "Number of results to skip, for paging (default: 0)"
}
_INCLUDE_FACETS = {
    "type": "boolean",
    "default": True,
    "description": "Include facet counts (results per project, repository, ...) in the response (default: true)"
}


def tool_name(operation: str, prefix: str = DEFAULT_TOOL_PREFIX) -> str:
    """Exposed name of an operation, e.g. azure_devops_wiki_search."""
    return f"{prefix}_{operation}"


def get_tools(prefix: str = DEFAULT_TOOL_PREFIX) -> list[Tool]:
    """Get the list of all MCP tools for Azure DevOps search."""
    return [
        # ============================================================================
        # Wiki Tools
        # ============================================================================
        Tool(
            name=tool_name(WIKI_SEARCH, prefix),
            description="Search for content in Azure DevOps wikis. "
                        "Returns matching pages with a plain-text snippet and a link to the page. "
                        "Common pattern: wiki_search(query=...) → pick a hit → wiki_page(path=hit.path).",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query"
                    },
                    "project": _PROJECT,
                    "maxResults": _MAX_RESULTS,
                    "skip": _SKIP,
                    "includeFacets": _INCLUDE_FACETS
                },
                "required": ["query"]
            }
        ),
        Tool(
            name=tool_name(WIKI_PAGE, prefix),
            description="Get a wiki page by path, optionally expanding its child pages. "
                        "Errors: 404 (page or wiki not found).",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Wiki page path, e.g. '/Runbooks/Deployment'"
                    },
                    "project": _PROJECT,
                    "wiki": {
                        "type": "string",
                        "description": "Wiki name or id (default: the project wiki, '<project>.wiki')"
                    },
                    "recursionLevel": {
                        "type": "string",
                        "enum": [level.value for level in RecursionLevel],
                        "default": RecursionLevel.NONE.value,
                        "description": "Child pages to include: none, oneLevel or full (default: none)"
                    },
                    "includeContent": {
                        "type": "boolean",
                        "default": True,
                        "description": "Include page markdown content (default: true)"
                    }
                },
                "required": ["path"]
            }
        ),
        # ============================================================================
        # Code Tools
        # ============================================================================
        Tool(
            name=tool_name(CODE_SEARCH, prefix),
            description="Search for code in Azure DevOps repositories. "
                        "Results are ordered by file name and do not include file content; "
                        "use code_retrieval to read a file. Match positions are character "
                        "offsets (line is always 0).",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query"
                    },
                    "project": _PROJECT,
                    "repository": {
                        "type": "string",
                        "description": "The repository name to search in (optional)"
                    },
                    "branch": {
                        "type": "string",
                        "description": "The branch to search in (optional)"
                    },
                    "path": {
                        "type": "string",
                        "description": "Restrict results to this path (optional). Takes precedence over fileExtensions"
                    },
                    "fileExtensions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "File extensions to filter results (e.g., [\"js\", \"ts\"]). Ignored when path is set"
                    },
                    "codeElements": {
                        "type": "array",
                        "items": {
                            "type": "string",
                            "enum": [element.value for element in CodeElement]
                        },
                        "description": "Only match these code element kinds (optional)"
                    },
                    "maxResults": _MAX_RESULTS,
                    "skip": _SKIP,
                    "includeFacets": _INCLUDE_FACETS
                },
                "required": ["query"]
            }
        ),
        Tool(
            name=tool_name(CODE_RETRIEVAL, prefix),
            description="Retrieve the full content of a file from an Azure DevOps git repository. "
                        "Errors: 404 (repository or path not found).",
            inputSchema={
                "type": "object",
                "properties": {
                    "repository": {
                        "type": "string",
                        "description": "The repository name"
                    },
                    "path": {
                        "type": "string",
                        "description": "Path of the file in the repository, e.g. 'src/app.ts'"
                    },
                    "project": _PROJECT,
                    "branch": {
                        "type": "string",
                        "description": "Branch to read from (default: the repository's default branch)"
                    }
                },
                "required": ["repository", "path"]
            }
        ),
    ]
