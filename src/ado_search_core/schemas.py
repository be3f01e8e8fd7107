"""Pydantic schemas for tool arguments, upstream payloads and tool results.

Three groups live here:

- Query schemas validate caller arguments (camelCase on the wire, snake_case
  in Python). Defaults that depend on configuration, like the project, are
  resolved later by the normalizer.
- Upstream schemas model the Azure DevOps responses we read. Every field the
  API may omit is Optional or has an explicit default.
- Result schemas are the stable shapes handed back to callers.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Azure DevOps caps $top for both search endpoints
MAX_RESULTS_LIMIT = 1000
DEFAULT_MAX_RESULTS = 10


class CodeElement(str, Enum):
    """Code element kinds accepted by the CodeElement search filter."""

    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    COMMENT = "comment"


class RecursionLevel(str, Enum):
    """How many levels of child pages to expand for wiki_page."""

    NONE = "none"
    ONE_LEVEL = "oneLevel"
    FULL = "full"


class _Arguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


# ============================================================================
# Query Schemas
# ============================================================================


class WikiSearchQuery(_Arguments):
    """Arguments for wiki_search."""

    query: str = Field(..., min_length=1)
    project: Optional[str] = None
    max_results: int = Field(DEFAULT_MAX_RESULTS, alias="maxResults", ge=1, le=MAX_RESULTS_LIMIT)
    skip: int = Field(0, ge=0)
    include_facets: bool = Field(True, alias="includeFacets")


class CodeSearchQuery(_Arguments):
    """Arguments for code_search.

    ``path`` and ``file_extensions`` may both be given; the normalizer lets
    ``path`` win and ignores the extensions.
    """

    query: str = Field(..., min_length=1)
    project: Optional[str] = None
    repository: Optional[str] = None
    branch: Optional[str] = None
    path: Optional[str] = None
    file_extensions: list[str] = Field(default_factory=list, alias="fileExtensions")
    code_elements: list[CodeElement] = Field(default_factory=list, alias="codeElements")
    max_results: int = Field(DEFAULT_MAX_RESULTS, alias="maxResults", ge=1, le=MAX_RESULTS_LIMIT)
    skip: int = Field(0, ge=0)
    include_facets: bool = Field(True, alias="includeFacets")

    @field_validator("file_extensions")
    @classmethod
    def _clean_extensions(cls, value: list[str]) -> list[str]:
        # "ts", ".ts" and " ts " all mean the same extension
        cleaned = []
        for ext in value:
            ext = ext.strip().lstrip(".")
            if ext and ext not in cleaned:
                cleaned.append(ext)
        return cleaned

    @field_validator("code_elements")
    @classmethod
    def _dedupe_elements(cls, value: list[CodeElement]) -> list[CodeElement]:
        return list(dict.fromkeys(value))


class CodeRetrievalQuery(_Arguments):
    """Arguments for code_retrieval."""

    repository: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    project: Optional[str] = None
    branch: Optional[str] = None


class WikiPageQuery(_Arguments):
    """Arguments for wiki_page."""

    path: str = Field(..., min_length=1)
    project: Optional[str] = None
    wiki: Optional[str] = None
    recursion_level: RecursionLevel = Field(RecursionLevel.NONE, alias="recursionLevel")
    include_content: bool = Field(True, alias="includeContent")


# ============================================================================
# Upstream Schemas (Azure DevOps REST 7.1)
# ============================================================================


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


class NamedRef(_Upstream):
    id: Optional[str] = None
    name: Optional[str] = None


class SearchHit(_Upstream):
    field_reference_name: str = Field("", alias="fieldReferenceName")
    highlights: list[str] = Field(default_factory=list)


class WikiSearchApiResult(_Upstream):
    file_name: str = Field("", alias="fileName")
    path: str = ""
    content_id: Optional[str] = Field(None, alias="contentId")
    collection: Optional[NamedRef] = None
    wiki: Optional[NamedRef] = None
    project: Optional[NamedRef] = None
    hits: list[SearchHit] = Field(default_factory=list)


class WikiSearchApiResponse(_Upstream):
    count: int = 0
    results: list[WikiSearchApiResult] = Field(default_factory=list)
    facets: Optional[dict[str, Any]] = None


class CodeMatch(_Upstream):
    char_offset: int = Field(0, alias="charOffset")
    length: int = 0


class CodeMatches(_Upstream):
    content: list[CodeMatch] = Field(default_factory=list)


class CodeSearchApiResult(_Upstream):
    file_name: Optional[str] = Field(None, alias="fileName")
    path: Optional[str] = None
    repository: Optional[NamedRef] = None
    project: Optional[NamedRef] = None
    matches: Optional[CodeMatches] = None


class CodeSearchApiResponse(_Upstream):
    count: int = 0
    results: list[CodeSearchApiResult] = Field(default_factory=list)
    facets: Optional[dict[str, Any]] = None


class WikiPageApiResponse(_Upstream):
    id: Optional[int] = None
    path: str = "/"
    content: Optional[str] = None
    git_item_path: Optional[str] = Field(None, alias="gitItemPath")
    remote_url: Optional[str] = Field(None, alias="remoteUrl")
    sub_pages: list["WikiPageApiResponse"] = Field(default_factory=list, alias="subPages")


# ============================================================================
# Result Schemas
# ============================================================================


class _Result(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_output(self) -> dict:
        """Caller-facing dict with camelCase keys; unset optionals are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class WikiSearchHit(_Result):
    id: Optional[str] = None
    title: str
    content: str
    path: str
    url: str


class MatchDescriptor(_Result):
    # Always 0: code search does not report line numbers
    line: int = 0
    content: str


class CodeSearchHit(_Result):
    repository: str
    path: str
    file_name: str = Field(alias="fileName")
    content: str = ""
    url: str
    matches: list[MatchDescriptor] = Field(default_factory=list)


class SearchResults(_Result):
    """One page of search hits plus the upstream total and optional facets."""

    results: list[Any] = Field(default_factory=list)
    count: int = 0
    facets: Optional[dict[str, Any]] = None

    def to_output(self) -> dict:
        output = {
            "results": [hit.to_output() for hit in self.results],
            "count": self.count,
        }
        if self.facets is not None:
            output["facets"] = self.facets
        return output


class RetrievedFile(_Result):
    repository: str
    path: str
    content: str
    file_name: str = Field(alias="fileName")
    size: int
    commit_id: Optional[str] = Field(None, alias="commitId")
    url: str


class WikiPage(_Result):
    id: Optional[int] = None
    path: str
    content: Optional[str] = None
    url: str
    sub_pages: list["WikiPage"] = Field(default_factory=list, alias="subPages")
