"""Error types raised by the search core.

Every failure that reaches a caller is one of the OperationError subclasses
below. Each carries a machine-readable ``kind``, a human-readable message and
optionally the upstream HTTP status and a free-form detail (usually traceback
text or the upstream response body).
"""
from typing import Any, Optional


class OperationError(Exception):
    """Base class for all errors surfaced to tool callers."""

    kind = "internal"

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        detail: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.detail = detail

    def to_payload(self, include_detail: bool = True) -> dict:
        """Reduced error shape returned to callers."""
        payload: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.status is not None:
            payload["status"] = self.status
        if include_detail and self.detail is not None:
            payload["details"] = self.detail
        return payload


class ValidationError(OperationError):
    """Missing or invalid tool argument, or no project could be resolved."""

    kind = "validation"


class UpstreamHttpError(OperationError):
    """Azure DevOps answered with a non-2xx status."""

    kind = "upstream_http"

    def __init__(self, message: str, status: int, detail: Any = None):
        super().__init__(message, status=status, detail=detail)


class TransportError(OperationError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""

    kind = "transport"


class UnknownOperationError(OperationError):
    """The invocation names a tool that is not registered."""

    kind = "unknown_operation"

    def __init__(self, name: str):
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ConfigurationError(OperationError):
    """Fatal misconfiguration: missing credentials or an unsupported api-version."""

    kind = "configuration"
