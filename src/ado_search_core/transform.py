"""Map Azure DevOps responses onto the stable result shapes."""
import json
import logging
from typing import Any, Optional

import httpx

from .client import COMMIT_ID_HEADER
from .config import Settings
from .schemas import (
    CodeSearchApiResponse,
    CodeSearchHit,
    MatchDescriptor,
    RetrievedFile,
    SearchResults,
    WikiPage,
    WikiPageApiResponse,
    WikiSearchApiResponse,
    WikiSearchHit,
)
from .urls import git_file_url, wiki_page_url

logger = logging.getLogger("ado-search-mcp.transform")

HIGHLIGHT_OPEN = "<highlighthit>"
HIGHLIGHT_CLOSE = "</highlighthit>"


def strip_highlight_tags(text: str) -> str:
    """Remove search highlight markers, leaving the surrounding text untouched."""
    return text.replace(HIGHLIGHT_OPEN, "").replace(HIGHLIGHT_CLOSE, "")


def to_wiki_results(payload: dict, project: str, settings: Settings) -> SearchResults:
    response = WikiSearchApiResponse.model_validate(payload)
    hits = []
    for item in response.results:
        content_hit = next(
            (hit for hit in item.hits if hit.field_reference_name == "content"), None
        )
        content = ""
        if content_hit is not None and content_hit.highlights:
            content = strip_highlight_tags(content_hit.highlights[0])

        if item.collection is not None and item.collection.name:
            wiki_name = item.collection.name
        elif item.wiki is not None and item.wiki.name:
            wiki_name = item.wiki.name
        else:
            wiki_name = f"{project}.wiki"

        hits.append(WikiSearchHit(
            id=item.content_id,
            title=item.file_name,
            content=content,
            path=item.path,
            url=wiki_page_url(settings.org_url, project, wiki_name, item.path),
        ))

    logger.info(f"Wiki search returned {len(hits)} of {response.count} results")
    return SearchResults(results=hits, count=response.count, facets=response.facets)


def to_code_results(payload: dict, project: str, settings: Settings) -> SearchResults:
    response = CodeSearchApiResponse.model_validate(payload)
    hits = []
    for item in response.results:
        content_matches = item.matches.content if item.matches is not None else []
        # Code search only reports character offsets; there are no line numbers
        matches = [
            MatchDescriptor(
                line=0,
                content=f"Match at offset {match.char_offset} with length {match.length}",
            )
            for match in content_matches
        ]
        repo_name = (item.repository.name if item.repository else None) or "Unknown"
        file_path = item.path or ""

        hits.append(CodeSearchHit(
            repository=repo_name,
            path=file_path,
            file_name=item.file_name or "Unknown",
            content="",
            url=git_file_url(settings.org_url, project, repo_name, file_path),
            matches=matches,
        ))

    logger.info(f"Code search returned {len(hits)} of {response.count} results")
    return SearchResults(results=hits, count=response.count, facets=response.facets)


def _item_content(response: httpx.Response) -> str:
    """Text of a git item, whichever way the items API chose to send it."""
    try:
        data: Any = response.json()
    except ValueError:
        return response.text

    if isinstance(data, str):
        return data
    if isinstance(data, dict) and isinstance(data.get("content"), str):
        return data["content"]
    # Structured body without a textual content field: return it serialized
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def to_retrieved_file(
    response: httpx.Response,
    project: str,
    repository: str,
    requested_path: str,
    normalized_path: str,
    settings: Settings,
) -> RetrievedFile:
    content = _item_content(response)
    file_name = normalized_path.rstrip("/").split("/")[-1] or "unknown"
    commit_id: Optional[str] = response.headers.get(COMMIT_ID_HEADER)

    return RetrievedFile(
        repository=repository,
        path=requested_path,
        content=content,
        file_name=file_name,
        size=len(content),
        commit_id=commit_id,
        url=git_file_url(settings.org_url, project, repository, normalized_path),
    )


def to_wiki_page(payload: dict, project: str, wiki: str, settings: Settings) -> WikiPage:
    return _convert_page(WikiPageApiResponse.model_validate(payload), project, wiki, settings)


def _convert_page(page: WikiPageApiResponse, project: str, wiki: str, settings: Settings) -> WikiPage:
    return WikiPage(
        id=page.id,
        path=page.path,
        content=page.content,
        url=page.remote_url or wiki_page_url(settings.org_url, project, wiki, page.path),
        sub_pages=[_convert_page(child, project, wiki, settings) for child in page.sub_pages],
    )
