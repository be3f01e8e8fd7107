"""Tool registry and dispatch.

The dispatcher owns the fixed operation set, resolves exposed tool names to
handlers, and is the single place where failures are logged, written to the
audit log and reduced to the caller-facing error shape.
"""
import logging
import traceback
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

from ado_search_core import __version__
from ado_search_core.audit import AuditLogger
from ado_search_core.errors import OperationError, UnknownOperationError, ValidationError
from ado_search_core.service import SearchService

from . import handlers, tools

logger = logging.getLogger("ado-search-mcp.dispatcher")

SERVER_NAME = "Azure DevOps Search MCP Server"

Handler = Callable[[dict, SearchService], Awaitable[dict]]


class ToolRequest(BaseModel):
    """One line-protocol request: ``{id, method?, inputs?: {tool, ...arguments}}``."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    method: Optional[str] = None
    inputs: Optional[dict[str, Any]] = None
    jsonrpc: Optional[str] = None


class ToolResponse(BaseModel):
    """Response envelope carrying either outputs or an error, never both."""

    id: Optional[Union[str, int]] = None
    outputs: Optional[dict[str, Any]] = None
    error: Optional[dict[str, Any]] = None
    jsonrpc: Optional[str] = None

    def to_wire(self) -> dict:
        data = self.model_dump(exclude_none=True)
        data.setdefault("id", None)
        return data


class Dispatcher:
    """Routes tool invocations to handlers."""

    def __init__(
        self,
        service: SearchService,
        prefix: str = tools.DEFAULT_TOOL_PREFIX,
        audit: Optional[AuditLogger] = None,
    ):
        self.service = service
        self.prefix = prefix
        self.audit = audit
        self.handler_map: dict[str, Handler] = {
            tools.WIKI_SEARCH: handlers.handle_wiki_search,
            tools.WIKI_PAGE: handlers.handle_wiki_page,
            tools.CODE_SEARCH: handlers.handle_code_search,
            tools.CODE_RETRIEVAL: handlers.handle_code_retrieval,
        }

    def resolve(self, name: Optional[str]) -> Optional[str]:
        """Operation for an exposed tool name; bare operation names are accepted too."""
        if not name:
            return None
        marker = f"{self.prefix}_"
        if name.startswith(marker) and name[len(marker):] in self.handler_map:
            return name[len(marker):]
        if name in self.handler_map:
            return name
        return None

    def catalog(self) -> dict:
        """Handshake payload: server info plus every tool and its schema."""
        return {
            "serverInfo": {
                "name": SERVER_NAME,
                "version": __version__,
            },
            "capabilities": {
                "tools": [
                    tool.model_dump(by_alias=True, exclude_none=True)
                    for tool in tools.get_tools(self.prefix)
                ],
            },
        }

    async def dispatch(self, name: Optional[str], arguments: Optional[dict]) -> dict:
        """Run one tool invocation and return its outputs.

        Raises:
            OperationError: for every failure, already logged and audited
        """
        arguments = dict(arguments or {})
        logger.info(f"Tool call: {name} with arguments: {arguments}")
        try:
            operation = self.resolve(name)
            if operation is None:
                logger.warning(f"Unknown tool requested: {name}")
                self.audit_request("unknown", {"tool": name, **arguments})
                raise UnknownOperationError(str(name))
            return await self.handler_map[operation](arguments, self.service)

        except OperationError as e:
            logger.error(f"{type(e).__name__} during {name} call: {e.message}")
            self.audit_error(e)
            raise

        except Exception as e:
            logger.error(f"Unexpected error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Arguments: {arguments}")
            logger.error(f"  Traceback:\n{traceback.format_exc()}")
            self.audit_error(e)
            raise OperationError(
                f"{type(e).__name__}: {str(e)}",
                detail=traceback.format_exc(),
            ) from e

    def audit_request(self, kind: str, request: dict) -> None:
        if self.audit is not None:
            self.audit.log_request(kind, request)

    def audit_error(self, error: BaseException) -> None:
        if self.audit is not None:
            self.audit.log_error(error)

    async def handle_request(self, raw: dict) -> dict:
        """Answer one line-protocol request with a response envelope."""
        request = ToolRequest.model_validate(raw)
        response = ToolResponse(id=request.id, jsonrpc=request.jsonrpc)

        if request.method == "initialize":
            response.outputs = self.catalog()
            return response.to_wire()

        if request.inputs is None:
            error = ValidationError("Request inputs are required")
            self.audit_request("invalid", raw)
            self.audit_error(error)
            response.error = error.to_payload()
            return response.to_wire()

        arguments = dict(request.inputs)
        name = arguments.pop("tool", None)
        if name is None and request.method:
            # Other protocol methods (notifications, shutdown) carry no tool
            return response.to_wire()

        try:
            response.outputs = await self.dispatch(name, arguments)
        except OperationError as e:
            response.error = e.to_payload()

        return response.to_wire()
