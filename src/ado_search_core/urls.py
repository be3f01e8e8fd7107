"""URL construction helpers.

Upstream request paths and canonical web links are joined here so that
project, repository and wiki names with spaces or other reserved characters
are percent-encoded consistently. Query parameters for upstream requests are
left to httpx.
"""
from urllib.parse import quote, urlencode


def quote_segment(segment: str) -> str:
    """Percent-encode a single path segment ("/" included)."""
    return quote(segment, safe="")


def quote_path(path: str) -> str:
    """Percent-encode a multi-segment path, keeping the "/" separators."""
    return quote(path, safe="/")


def normalize_path(path: str) -> str:
    """Ensure a repository or wiki path starts with "/"."""
    return path if path.startswith("/") else f"/{path}"


def build_url(base: str, *segments: str, tail: str = "") -> str:
    """Join ``base`` with encoded ``segments``.

    ``tail`` is a multi-segment path appended after encoding (used for wiki
    page paths, which already start with "/").
    """
    url = base.rstrip("/")
    for segment in segments:
        url += "/" + quote_segment(segment)
    if tail:
        url += quote_path(normalize_path(tail))
    return url


def wiki_page_url(org_url: str, project: str, wiki: str, path: str) -> str:
    """Web link to a wiki page: {org}/{project}/_wiki/wikis/{wiki}{path}."""
    return build_url(org_url, project, "_wiki", "wikis", wiki, tail=path)


def git_file_url(org_url: str, project: str, repository: str, path: str) -> str:
    """Web link to a file: {org}/{project}/_git/{repository}?path={path}.

    The path value is fully encoded, "/" included, as the web UI expects.
    """
    query = urlencode({"path": path}, quote_via=quote)
    return f"{build_url(org_url, project, '_git', repository)}?{query}"
