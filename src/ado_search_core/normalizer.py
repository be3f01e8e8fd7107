"""Turn caller arguments into complete, upstream-ready requests.

Validation happens here, before any network access: a missing required
argument or an unresolvable project raises ``ValidationError``.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .config import Settings
from .errors import ValidationError
from .schemas import (
    CodeRetrievalQuery,
    CodeSearchQuery,
    WikiPageQuery,
    WikiSearchQuery,
)
from .urls import normalize_path

logger = logging.getLogger("ado-search-mcp.normalizer")

# Code search hits are always ordered by file name, ascending
CODE_SEARCH_ORDER_BY = [{"field": "filename", "sortOrder": "ASC"}]

QueryT = TypeVar("QueryT", bound=BaseModel)


def parse_arguments(model: Type[QueryT], arguments: Optional[dict]) -> QueryT:
    """Validate raw tool arguments against ``model``.

    Pydantic errors are flattened into one readable message, e.g.
    ``"Invalid arguments: query: Field required"``.
    """
    try:
        return model.model_validate(arguments or {})
    except PydanticValidationError as e:
        problems = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "arguments"
            problems.append(f"{location}: {err['msg']}")
        raise ValidationError(
            f"Invalid arguments: {'; '.join(problems)}",
            detail=e.errors(include_url=False, include_context=False),
        ) from e


def resolve_project(project: Optional[str], settings: Settings, operation: str) -> str:
    """Caller-supplied project, else the configured default."""
    resolved = project or settings.default_project
    if not resolved:
        raise ValidationError(f"Project name is required for {operation}")
    return resolved


@dataclass
class WikiSearchRequest:
    project: str
    body: dict[str, Any]


@dataclass
class CodeSearchRequest:
    project: str
    body: dict[str, Any]


@dataclass
class CodeRetrievalRequest:
    project: str
    repository: str
    path: str
    requested_path: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class WikiPageRequest:
    project: str
    wiki: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)


def build_wiki_search(query: WikiSearchQuery, settings: Settings) -> WikiSearchRequest:
    project = resolve_project(query.project, settings, "wiki search")
    body = {
        "searchText": query.query,
        "$skip": query.skip,
        "$top": query.max_results,
        "filters": {"Project": [project]},
        "$orderBy": None,
        "includeFacets": query.include_facets,
    }
    return WikiSearchRequest(project=project, body=body)


def build_code_search(query: CodeSearchQuery, settings: Settings) -> CodeSearchRequest:
    project = resolve_project(query.project, settings, "code search")

    # Insertion order mirrors filter precedence
    filters: dict[str, list[str]] = {"Project": [project]}
    if query.repository:
        filters["Repository"] = [query.repository]
    if query.branch:
        filters["Branch"] = [query.branch]
    if query.path:
        filters["Path"] = [query.path]
        if query.file_extensions:
            logger.info(
                f"Ignoring fileExtensions {query.file_extensions} because path '{query.path}' is set"
            )
    elif query.file_extensions:
        filters["Path"] = [f"**/*.{ext}" for ext in query.file_extensions]
    if query.code_elements:
        filters["CodeElement"] = [element.value for element in query.code_elements]

    body = {
        "searchText": query.query,
        "$skip": query.skip,
        "$top": query.max_results,
        "filters": filters,
        "includeFacets": query.include_facets,
        "$orderBy": [dict(order) for order in CODE_SEARCH_ORDER_BY],
    }
    return CodeSearchRequest(project=project, body=body)


def build_code_retrieval(query: CodeRetrievalQuery, settings: Settings) -> CodeRetrievalRequest:
    project = resolve_project(query.project, settings, "code retrieval")
    path = normalize_path(query.path)
    params: dict[str, Any] = {"path": path, "includeContent": "true"}
    if query.branch:
        params["versionDescriptor.version"] = query.branch
        params["versionDescriptor.versionType"] = "branch"
    return CodeRetrievalRequest(
        project=project,
        repository=query.repository,
        path=path,
        requested_path=query.path,
        params=params,
    )


def build_wiki_page(query: WikiPageQuery, settings: Settings) -> WikiPageRequest:
    project = resolve_project(query.project, settings, "wiki page lookup")
    # Project wikis are named "{project}.wiki" unless told otherwise
    wiki = query.wiki or f"{project}.wiki"
    path = normalize_path(query.path)
    params: dict[str, Any] = {
        "path": path,
        "recursionLevel": query.recursion_level.value,
        "includeContent": "true" if query.include_content else "false",
    }
    return WikiPageRequest(project=project, wiki=wiki, path=path, params=params)
