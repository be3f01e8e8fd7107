"""Shared formatting functions for tool responses.

Outputs are rendered as JSON so agents get the same structured contract over
MCP as over the line-delimited transport.
"""
import json

from mcp.types import TextContent


def format_outputs(outputs: dict) -> str:
    """Render tool outputs as indented JSON."""
    return json.dumps(outputs, indent=2, ensure_ascii=False)


def format_error(error: dict) -> str:
    """Format a reduced error payload for display."""
    status_info = f" (status {error['status']})" if error.get("status") is not None else ""
    text = f"Error: {error['message']}{status_info}"
    details = error.get("details")
    if details:
        if not isinstance(details, str):
            details = json.dumps(details, ensure_ascii=False, default=str)
        text += f"\nDetails: {details}"
    return text


def to_text_content(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]
