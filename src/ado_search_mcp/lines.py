"""Line-delimited JSON transport.

Reads one request object per line from stdin and writes one response object
per line to stdout. Requests are handled one at a time, in order.
"""
import asyncio
import json
import logging
import sys
from typing import Callable, Optional, TextIO

from pydantic import ValidationError as PydanticValidationError

from ado_search_core.errors import ValidationError

from .dispatcher import Dispatcher

logger = logging.getLogger("ado-search-mcp.lines")

INITIALIZED_NOTIFICATION = {"method": "initialized", "jsonrpc": "2.0"}


async def process_line(dispatcher: Dispatcher, line: str) -> list[dict]:
    """Handle one input line; returns the messages to write, in order."""
    try:
        raw = json.loads(line)
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        response = await dispatcher.handle_request(raw)
    except (ValueError, PydanticValidationError) as e:
        logger.error(f"Error processing input: {e}")
        error = ValidationError(f"Failed to process input: {e}")
        dispatcher.audit_request("invalid", {"line": line.rstrip("\n")})
        dispatcher.audit_error(error)
        return [{"id": "error", "error": error.to_payload()}]

    if raw.get("method") == "initialize":
        return [INITIALIZED_NOTIFICATION, response]
    return [response]


async def serve_lines(
    dispatcher: Dispatcher,
    stdin: Optional[TextIO] = None,
    write: Optional[Callable[[str], None]] = None,
) -> None:
    """Serve requests until stdin is closed."""
    stdin = stdin or sys.stdin
    if write is None:
        def write(text: str) -> None:
            sys.stdout.write(text + "\n")
            sys.stdout.flush()

    logger.info("Serving line-delimited requests on stdin/stdout")
    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        if not line.strip():
            continue
        for message in await process_line(dispatcher, line):
            write(json.dumps(message, ensure_ascii=False, default=str))
    logger.info("stdin closed, shutting down")
