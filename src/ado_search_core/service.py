"""Search operations: normalize, call Azure DevOps, transform.

Each public coroutine takes the raw tool arguments, records them in the
audit log and either returns a result model or raises an ``OperationError``.
Nothing is retried and no partial result is ever returned.
"""
import logging
from typing import Optional

from . import normalizer, transform
from .audit import AuditLogger
from .client import AzureDevOpsClient
from .config import Settings
from .schemas import (
    CodeRetrievalQuery,
    CodeSearchQuery,
    RetrievedFile,
    SearchResults,
    WikiPage,
    WikiPageQuery,
    WikiSearchQuery,
)

logger = logging.getLogger("ado-search-mcp.service")


class SearchService:
    """Azure DevOps wiki and code search bound to one organization."""

    def __init__(
        self,
        settings: Settings,
        client: AzureDevOpsClient,
        audit: Optional[AuditLogger] = None,
    ):
        self.settings = settings
        self.client = client
        self.audit = audit

    def _record(self, kind: str, arguments: Optional[dict]) -> None:
        if self.audit is not None:
            self.audit.log_request(kind, dict(arguments or {}))

    async def wiki_search(self, arguments: Optional[dict]) -> SearchResults:
        self._record("wiki", arguments)
        query = normalizer.parse_arguments(WikiSearchQuery, arguments)
        request = normalizer.build_wiki_search(query, self.settings)

        payload = await self.client.search_wiki(request.project, request.body)
        return transform.to_wiki_results(payload, request.project, self.settings)

    async def code_search(self, arguments: Optional[dict]) -> SearchResults:
        self._record("code", arguments)
        query = normalizer.parse_arguments(CodeSearchQuery, arguments)
        request = normalizer.build_code_search(query, self.settings)

        payload = await self.client.search_code(request.body)
        return transform.to_code_results(payload, request.project, self.settings)

    async def code_retrieval(self, arguments: Optional[dict]) -> RetrievedFile:
        self._record("code_retrieval", arguments)
        query = normalizer.parse_arguments(CodeRetrievalQuery, arguments)
        request = normalizer.build_code_retrieval(query, self.settings)

        response = await self.client.get_item(request.project, request.repository, request.params)
        result = transform.to_retrieved_file(
            response,
            project=request.project,
            repository=request.repository,
            requested_path=request.requested_path,
            normalized_path=request.path,
            settings=self.settings,
        )
        logger.info(f"Retrieved {request.repository}:{request.path} ({result.size} chars)")
        return result

    async def wiki_page(self, arguments: Optional[dict]) -> WikiPage:
        self._record("wiki_page", arguments)
        query = normalizer.parse_arguments(WikiPageQuery, arguments)
        request = normalizer.build_wiki_page(query, self.settings)

        payload = await self.client.get_wiki_page(request.project, request.wiki, request.params)
        page = transform.to_wiki_page(payload, request.project, request.wiki, self.settings)
        logger.info(f"Retrieved wiki page {request.wiki}:{page.path} ({len(page.sub_pages)} sub-pages)")
        return page
