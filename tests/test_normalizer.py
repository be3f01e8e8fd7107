"""Tests for argument validation and upstream request assembly."""
import pytest

from ado_search_core.errors import ValidationError
from ado_search_core.normalizer import (
    CODE_SEARCH_ORDER_BY,
    build_code_retrieval,
    build_code_search,
    build_wiki_page,
    build_wiki_search,
    parse_arguments,
)
from ado_search_core.schemas import (
    CodeRetrievalQuery,
    CodeSearchQuery,
    WikiPageQuery,
    WikiSearchQuery,
)


def code_body(settings, **arguments):
    query = parse_arguments(CodeSearchQuery, arguments)
    return build_code_search(query, settings).body


class TestArgumentValidation:
    """Test required fields and type checks."""

    def test_missing_query(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_arguments(WikiSearchQuery, {"project": "Infra"})
        assert "query" in exc_info.value.message
        assert exc_info.value.kind == "validation"

    def test_retrieval_requires_repository_and_path(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_arguments(CodeRetrievalQuery, {})
        assert "repository" in exc_info.value.message
        assert "path" in exc_info.value.message

    def test_max_results_bounds(self):
        with pytest.raises(ValidationError):
            parse_arguments(WikiSearchQuery, {"query": "x", "maxResults": 0})
        with pytest.raises(ValidationError):
            parse_arguments(WikiSearchQuery, {"query": "x", "maxResults": 1001})

    def test_unknown_code_element(self):
        with pytest.raises(ValidationError):
            parse_arguments(CodeSearchQuery, {"query": "x", "codeElements": ["macro"]})

    def test_unknown_recursion_level(self):
        with pytest.raises(ValidationError):
            parse_arguments(WikiPageQuery, {"path": "/", "recursionLevel": "deep"})

    def test_defaults(self):
        query = parse_arguments(WikiSearchQuery, {"query": "deployment"})
        assert query.max_results == 10
        assert query.skip == 0
        assert query.include_facets is True


class TestProjectResolution:
    """Test project fallback to the configured default."""

    def test_unresolved_project_fails(self, settings):
        query = parse_arguments(WikiSearchQuery, {"query": "x"})
        with pytest.raises(ValidationError) as exc_info:
            build_wiki_search(query, settings)
        assert "Project name is required" in exc_info.value.message

    def test_configured_default_used(self, settings):
        settings = settings.model_copy(update={"default_project": "Platform"})
        query = parse_arguments(WikiSearchQuery, {"query": "x"})
        assert build_wiki_search(query, settings).project == "Platform"

    def test_caller_project_wins(self, settings):
        settings = settings.model_copy(update={"default_project": "Platform"})
        query = parse_arguments(WikiSearchQuery, {"query": "x", "project": "Infra"})
        assert build_wiki_search(query, settings).project == "Infra"


class TestWikiSearchBody:
    """Test the wiki search payload."""

    def test_deployment_scenario(self, settings):
        query = parse_arguments(WikiSearchQuery, {"query": "deployment", "project": "Infra"})
        body = build_wiki_search(query, settings).body

        assert body["searchText"] == "deployment"
        assert body["$top"] == 10
        assert body["$skip"] == 0
        assert body["filters"] == {"Project": ["Infra"]}
        assert body["includeFacets"] is True
        assert body["$orderBy"] is None


class TestCodeSearchFilters:
    """Test filter composition and ordering for code search."""

    def test_extensions_expand_to_globs(self, settings):
        body = code_body(settings, query="TODO", project="Infra", fileExtensions=["ts", "js"])
        assert body["filters"]["Path"] == ["**/*.ts", "**/*.js"]

    def test_extensions_leading_dot_tolerated(self, settings):
        body = code_body(settings, query="TODO", project="Infra", fileExtensions=[".ts", "ts", ""])
        assert body["filters"]["Path"] == ["**/*.ts"]

    def test_path_suppresses_extensions(self, settings):
        body = code_body(
            settings, query="TODO", project="Infra",
            path="/src/api", fileExtensions=["ts", "js"],
        )
        assert body["filters"]["Path"] == ["/src/api"]
        assert not any(p.startswith("**/*.") for p in body["filters"]["Path"])

    def test_filter_precedence_order(self, settings):
        body = code_body(
            settings, query="Parser", project="Infra", repository="svc", branch="main",
            path="/src", codeElements=["class", "function"],
        )
        assert list(body["filters"]) == ["Project", "Repository", "Branch", "Path", "CodeElement"]
        assert body["filters"]["Repository"] == ["svc"]
        assert body["filters"]["Branch"] == ["main"]
        assert body["filters"]["CodeElement"] == ["class", "function"]

    def test_only_project_filter_by_default(self, settings):
        body = code_body(settings, query="x", project="Infra")
        assert body["filters"] == {"Project": ["Infra"]}

    def test_order_always_filename_ascending(self, settings):
        for arguments in (
            {"query": "x", "project": "Infra"},
            {"query": "x", "project": "Infra", "orderBy": "path desc"},
            {"query": "x", "project": "Infra", "$orderBy": [{"field": "path", "sortOrder": "DESC"}]},
        ):
            body = code_body(settings, **arguments)
            assert body["$orderBy"] == [{"field": "filename", "sortOrder": "ASC"}]

    def test_order_directive_not_shared(self, settings):
        body = code_body(settings, query="x", project="Infra")
        body["$orderBy"][0]["sortOrder"] = "DESC"
        assert CODE_SEARCH_ORDER_BY == [{"field": "filename", "sortOrder": "ASC"}]

    def test_pagination_passed_through(self, settings):
        body = code_body(settings, query="x", project="Infra", maxResults=50, skip=100, includeFacets=False)
        assert body["$top"] == 50
        assert body["$skip"] == 100
        assert body["includeFacets"] is False


class TestRetrievalRequest:
    """Test file retrieval request parameters."""

    def test_path_gets_leading_slash(self, settings):
        query = parse_arguments(CodeRetrievalQuery, {"repository": "svc", "path": "src/app.ts", "project": "Infra"})
        request = build_code_retrieval(query, settings)
        assert request.path == "/src/app.ts"
        assert request.requested_path == "src/app.ts"
        assert request.params["path"] == "/src/app.ts"
        assert request.params["includeContent"] == "true"
        assert "versionDescriptor.version" not in request.params

    def test_absolute_path_unchanged(self, settings):
        query = parse_arguments(CodeRetrievalQuery, {"repository": "svc", "path": "/README.md", "project": "Infra"})
        assert build_code_retrieval(query, settings).path == "/README.md"

    def test_branch_version_descriptor(self, settings):
        query = parse_arguments(
            CodeRetrievalQuery,
            {"repository": "svc", "path": "a.py", "project": "Infra", "branch": "release/1.0"},
        )
        params = build_code_retrieval(query, settings).params
        assert params["versionDescriptor.version"] == "release/1.0"
        assert params["versionDescriptor.versionType"] == "branch"


class TestWikiPageRequest:
    """Test wiki page lookup parameters."""

    def test_defaults_to_project_wiki(self, settings):
        query = parse_arguments(WikiPageQuery, {"path": "Runbooks", "project": "Infra"})
        request = build_wiki_page(query, settings)
        assert request.wiki == "Infra.wiki"
        assert request.path == "/Runbooks"
        assert request.params == {"path": "/Runbooks", "recursionLevel": "none", "includeContent": "true"}

    def test_recursion_and_explicit_wiki(self, settings):
        query = parse_arguments(
            WikiPageQuery,
            {"path": "/", "project": "Infra", "wiki": "Handbook", "recursionLevel": "full", "includeContent": False},
        )
        request = build_wiki_page(query, settings)
        assert request.wiki == "Handbook"
        assert request.params["recursionLevel"] == "full"
        assert request.params["includeContent"] == "false"
