"""Tool handlers shared between the MCP stdio and line-delimited transports.

All handlers follow a consistent pattern:
- Accept: arguments dict and the SearchService bound to the configured organization
- Return: the caller-facing outputs dict
- Raise: OperationError subclasses; the dispatcher turns them into error envelopes
"""
import logging

from ado_search_core.service import SearchService

logger = logging.getLogger("ado-search-mcp.handlers")


# ============================================================================
# Wiki Handlers
# ============================================================================

async def handle_wiki_search(arguments: dict, service: SearchService) -> dict:
    """Search wiki pages.

    RETURNS:
    • results: hits with id, title, content (highlight-free snippet), path, url
    • count: total matches upstream (may exceed len(results))
    • facets: per-project counts when includeFacets is true
    """
    results = await service.wiki_search(arguments)
    logger.info(f"Wiki search for '{arguments.get('query')}' returned {len(results.results)} hits")
    return results.to_output()


async def handle_wiki_page(arguments: dict, service: SearchService) -> dict:
    """Get one wiki page, with child pages when recursionLevel is oneLevel or full."""
    page = await service.wiki_page(arguments)
    return {"page": page.to_output()}


# ============================================================================
# Code Handlers
# ============================================================================

async def handle_code_search(arguments: dict, service: SearchService) -> dict:
    """Search code across the organization's repositories.

    COMMON PATTERNS:
    • Narrow by repo: code_search(query="Retry", repository="svc")
    • By language: code_search(query="TODO", fileExtensions=["ts", "js"])
    • Definitions only: code_search(query="Parser", codeElements=["class"])

    Hits never include file content; follow up with code_retrieval.
    """
    results = await service.code_search(arguments)
    logger.info(f"Code search for '{arguments.get('query')}' returned {len(results.results)} hits")
    return results.to_output()


async def handle_code_retrieval(arguments: dict, service: SearchService) -> dict:
    """Read a file from a git repository."""
    result = await service.code_retrieval(arguments)
    return {"file": result.to_output()}
