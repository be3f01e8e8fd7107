"""Append-only audit log of tool requests and errors.

Each entry is one JSON object per line in ``{log_dir}/search-requests.log``.
Writes go through a dedicated ``logging.FileHandler`` so concurrent appends
are serialized by the handler lock and a failing write is reported on stderr
instead of breaking the tool call.
"""
import json
import logging
import os
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import OperationError

logger = logging.getLogger("ado-search-mcp.audit")

AUDIT_FILE_NAME = "search-requests.log"


class AuditLogger:
    """Writes request and error entries to a newline-delimited JSON file."""

    def __init__(self, log_dir: str):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, AUDIT_FILE_NAME)
        self._logger = logging.getLogger(f"ado-search-mcp.audit.{id(self)}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._handler: Optional[logging.Handler] = None

    def _ensure_handler(self) -> logging.Logger:
        if self._handler is None:
            os.makedirs(self.log_dir, exist_ok=True)
            handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
            self._handler = handler
            logger.info(f"Audit log: {self.log_file}")
        return self._logger

    def _write(self, entry: dict) -> None:
        try:
            line = json.dumps(entry, default=str, ensure_ascii=False)
            self._ensure_handler().info(line)
        except OSError as e:
            logger.error(f"Failed to write audit entry to {self.log_file}: {e}")

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def log_request(self, kind: str, request: dict[str, Any]) -> None:
        """Record one request.

        ``kind`` is wiki, code, code_retrieval or wiki_page for tool calls, and
        unknown or invalid for requests that never reached a handler.
        """
        self._write({"timestamp": self._timestamp(), "type": kind, "request": request})

    def log_error(self, error: BaseException) -> None:
        """Record a failure with its full traceback text."""
        entry: dict[str, Any] = {"timestamp": self._timestamp(), "type": "error"}
        if isinstance(error, OperationError):
            entry["kind"] = error.kind
            entry["error"] = error.detail if error.detail is not None else error.message
            entry["message"] = error.message
            if error.status is not None:
                entry["status"] = error.status
        else:
            entry["error"] = str(error) or type(error).__name__
        entry["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        self._write(entry)

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
