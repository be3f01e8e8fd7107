"""Tests for the line-delimited JSON transport."""
import io
import json

import pytest

from ado_search_mcp.lines import INITIALIZED_NOTIFICATION, process_line, serve_lines

from conftest import read_audit_entries


class TestProcessLine:
    """One input line in, zero or more output messages out."""

    @pytest.mark.asyncio
    async def test_initialize_sends_notification_then_catalog(self, dispatcher):
        messages = await process_line(dispatcher, json.dumps({"id": "1", "method": "initialize"}))
        assert messages[0] == INITIALIZED_NOTIFICATION
        assert messages[1]["id"] == "1"
        assert "tools" in messages[1]["outputs"]["capabilities"]

    @pytest.mark.asyncio
    async def test_invalid_json(self, dispatcher, upstream):
        messages = await process_line(dispatcher, "{not json")
        assert messages[0]["id"] == "error"
        assert messages[0]["error"]["message"].startswith("Failed to process input")
        assert upstream.call_count == 0

    @pytest.mark.asyncio
    async def test_non_object(self, dispatcher):
        messages = await process_line(dispatcher, "[1, 2]")
        assert messages[0]["id"] == "error"

    @pytest.mark.asyncio
    async def test_invalid_line_is_audited(self, dispatcher, audit):
        await process_line(dispatcher, "{not json\n")

        request_entry, error_entry = read_audit_entries(audit)
        assert request_entry["type"] == "invalid"
        assert request_entry["request"] == {"line": "{not json"}
        assert error_entry["kind"] == "validation"

    @pytest.mark.asyncio
    async def test_tool_call(self, dispatcher, upstream):
        upstream.add("POST", "/codesearchresults", json={"count": 0, "results": []})
        line = json.dumps({"id": "9", "inputs": {
            "tool": "azure_devops_code_search", "query": "x", "project": "Infra",
        }})
        messages = await process_line(dispatcher, line)
        assert messages == [{"id": "9", "outputs": {"results": [], "count": 0}}]


class TestServeLines:
    """Requests are answered in order until stdin closes."""

    @pytest.mark.asyncio
    async def test_round_trip(self, dispatcher):
        stdin = io.StringIO(
            json.dumps({"id": "a", "method": "initialize"}) + "\n"
            + "\n"
            + json.dumps({"id": "b", "inputs": {"tool": "missing"}}) + "\n"
        )
        written: list[str] = []

        await serve_lines(dispatcher, stdin=stdin, write=written.append)

        messages = [json.loads(line) for line in written]
        assert [m.get("id") for m in messages] == [None, "a", "b"]
        assert messages[2]["error"]["kind"] == "unknown_operation"
