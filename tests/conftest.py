"""Shared fixtures: settings, a fake Azure DevOps upstream and wired services."""
import json
from typing import Any, Optional

import httpx
import pytest

from ado_search_core.audit import AuditLogger
from ado_search_core.client import AzureDevOpsClient
from ado_search_core.config import Settings
from ado_search_core.service import SearchService
from ado_search_mcp.dispatcher import Dispatcher


class FakeAzureDevOps:
    """Records every request and answers from canned routes.

    Routes match on HTTP method and the end of the decoded URL path.
    Unmatched requests get a 404 with an Azure DevOps style error body.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: list[tuple[str, str, httpx.Response]] = []

    def add(
        self,
        method: str,
        path_suffix: str,
        json: Any = None,
        text: Optional[str] = None,
        status: int = 200,
        headers: Optional[dict] = None,
    ) -> None:
        if text is not None:
            response = httpx.Response(status, text=text, headers=headers)
        else:
            response = httpx.Response(status, json=json, headers=headers)
        self.routes.append((method, path_suffix, response))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, suffix, response in self.routes:
            if request.method == method and request.url.path.endswith(suffix):
                return httpx.Response(
                    response.status_code,
                    content=response.content,
                    headers=response.headers,
                )
        return httpx.Response(404, json={"message": f"No route for {request.url.path}"})

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        org_url="https://dev.azure.com/contoso",
        pat="secret-token",
        default_project=None,
        display_name=None,
        log_dir=None,
    )


@pytest.fixture
def upstream() -> FakeAzureDevOps:
    return FakeAzureDevOps()


@pytest.fixture
def client(settings, upstream) -> AzureDevOpsClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    return AzureDevOpsClient(settings, http_client=http_client)


@pytest.fixture
def audit(tmp_path):
    audit = AuditLogger(str(tmp_path / "logs"))
    yield audit
    audit.close()


@pytest.fixture
def service(settings, client, audit) -> SearchService:
    return SearchService(settings, client, audit)


@pytest.fixture
def dispatcher(service, audit) -> Dispatcher:
    return Dispatcher(service, audit=audit)


def read_audit_entries(audit: AuditLogger) -> list[dict]:
    for handler in audit._logger.handlers:
        handler.flush()
    with open(audit.log_file, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
