"""Authenticated HTTP client for the Azure DevOps search and git REST APIs.

One method per upstream resource. Every method raises one of the
``OperationError`` subclasses on failure:

- ``UpstreamHttpError`` for non-2xx responses (status + upstream message)
- ``TransportError`` when no response was received
- ``ConfigurationError`` when the server rejects our pinned api-version
"""
import base64
import logging
from typing import Any, Optional

import httpx

from .config import API_VERSION, Settings
from .errors import ConfigurationError, TransportError, UpstreamHttpError
from .urls import build_url

logger = logging.getLogger("ado-search-mcp.client")

COMMIT_ID_HEADER = "x-tfsgit-commitid"

# typeKeys Azure DevOps returns when it does not support the requested api-version
_VERSION_ERROR_TYPES = {
    "VssVersionOutOfRangeException",
    "VssInvalidPreviewVersionException",
    "VssVersionNotSupportedException",
}


def basic_auth_header(token: str) -> str:
    """Basic auth with an empty user name and the PAT as password."""
    encoded = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class AzureDevOpsClient:
    """Thin async wrapper over ``httpx.AsyncClient``.

    The client is created once per server process; requests do not share any
    other state, so concurrent calls are safe.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = http_client is None
        if http_client is None:
            kwargs: dict[str, Any] = {}
            if settings.timeout is not None:
                kwargs["timeout"] = settings.timeout
            http_client = httpx.AsyncClient(**kwargs)
        self._http = http_client
        self._headers = {"Authorization": basic_auth_header(settings.pat)}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AzureDevOpsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def search_wiki(self, project: str, body: dict) -> dict:
        """POST {search}/{project}/_apis/search/wikisearchresults"""
        url = build_url(self.settings.search_url, project, "_apis", "search", "wikisearchresults")
        response = await self._send("Wiki search", "POST", url, json=body)
        return self._json("Wiki search", response)

    async def search_code(self, body: dict) -> dict:
        """POST {search}/_apis/search/codesearchresults (organization scoped)"""
        url = build_url(self.settings.search_url, "_apis", "search", "codesearchresults")
        response = await self._send("Code search", "POST", url, json=body)
        return self._json("Code search", response)

    async def get_item(self, project: str, repository: str, params: dict) -> httpx.Response:
        """GET {org}/{project}/_apis/git/repositories/{repository}/items

        Returns the raw response: the caller needs both the body and the
        commit id header.
        """
        url = build_url(
            self.settings.org_url, project, "_apis", "git", "repositories", repository, "items"
        )
        return await self._send(
            "Code retrieval", "GET", url, params=params, headers={"Accept": "application/json"}
        )

    async def get_wiki_page(self, project: str, wiki: str, params: dict) -> dict:
        """GET {org}/{project}/_apis/wiki/wikis/{wiki}/pages"""
        url = build_url(self.settings.org_url, project, "_apis", "wiki", "wikis", wiki, "pages")
        response = await self._send(
            "Wiki page lookup", "GET", url, params=params, headers={"Accept": "application/json"}
        )
        return self._json("Wiki page lookup", response)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        request_headers = dict(self._headers)
        if json is not None:
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)
        request_params = {"api-version": API_VERSION, **(params or {})}

        try:
            response = await self._http.request(
                method, url, params=request_params, json=json, headers=request_headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._map_status_error(operation, e) from e
        except httpx.RequestError as e:
            logger.error(f"Request error during {operation}:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  URL: {url}")
            raise TransportError(
                f"{operation} failed: {str(e) or type(e).__name__}",
                detail=type(e).__name__,
            ) from e
        return response

    @staticmethod
    def _json(operation: str, response: httpx.Response) -> dict:
        # An invalid PAT gets a 203 with an HTML sign-in page instead of a 401
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamHttpError(
                f"{operation} returned a non-JSON response with status {response.status_code}; "
                "check that the personal access token is valid",
                status=response.status_code,
                detail=response.text[:500] or None,
            ) from e

    def _map_status_error(self, operation: str, e: httpx.HTTPStatusError):
        status = e.response.status_code
        logger.error(f"HTTP error during {operation}:")
        logger.error(f"  Status: {status}")
        logger.error(f"  URL: {e.request.url}")

        body: Any = None
        try:
            body = e.response.json()
            logger.error(f"  Response body: {body}")
        except ValueError:
            logger.error(f"  Response text: {e.response.text}")

        upstream_message = None
        type_key = None
        if isinstance(body, dict):
            if isinstance(body.get("message"), str):
                upstream_message = body["message"]
            type_key = body.get("typeKey")
        if not upstream_message:
            upstream_message = e.response.text or str(e)

        if status == 400 and (
            type_key in _VERSION_ERROR_TYPES or "api-version" in upstream_message.lower()
        ):
            return ConfigurationError(
                f"{operation} rejected api-version {API_VERSION}: {upstream_message}",
                status=status,
                detail=body,
            )

        return UpstreamHttpError(
            f"{operation} failed with status {status}: {upstream_message}",
            status=status,
            detail=body if body is not None else e.response.text or None,
        )
