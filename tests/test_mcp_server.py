"""
Tests for the MCP handlers in mcp_server.py, called directly as coroutines.
"""

import asyncio

import pytest

import config
import mcp_server
from pbmc_tools import pbmc_query


@pytest.fixture
def recorded(monkeypatch):
    urls = []

    def fake_fetch_json(url):
        urls.append(url)
        return {"results": []}

    monkeypatch.setattr(config, "PBMC_API_URL", "https://api.test/v1/")
    monkeypatch.setattr(pbmc_query, "fetch_json", fake_fetch_json)
    return urls


def test_list_tools_matches_dispatch():
    tools = asyncio.run(mcp_server.list_tools())
    assert [t.name for t in tools] == list(mcp_server.DISPATCH)
    degs = next(t for t in tools if t.name == "getDEGs")
    assert degs.inputSchema["required"] == ["disease"]
    assert degs.inputSchema["properties"]["ageGroup"]["default"] == "all"
    assert degs.inputSchema["properties"]["limit"]["default"] == 100


def test_call_tool_maps_wire_argument_names(recorded):
    res = asyncio.run(mcp_server.call_tool("getDEGs", {
        "disease": "covid-19",
        "ageGroup": "young",
        "celltype_broad": ["B cell", "B cell"],
    }))
    assert not res.isError
    assert len(recorded) == 2
    assert "age=young" in recorded[0]
    assert "cell_type=B cell" in recorded[1]
    assert res.structuredContent["broad"] == [{"cell_type": "B cell", "degs": []}]


def test_call_tool_unknown_name():
    res = asyncio.run(mcp_server.call_tool("getWeather", {}))
    assert res.isError
    assert res.content[0].text == "Unknown tool: getWeather"


def test_call_tool_bad_arguments(recorded):
    res = asyncio.run(mcp_server.call_tool("getDEGs", {"colour": "red"}))
    assert res.isError
    assert res.content[0].text.startswith("Invalid arguments for getDEGs")
    assert recorded == []


def test_call_tool_ignores_fetch_argument(recorded):
    res = asyncio.run(mcp_server.call_tool("getPathways", {"disease": "tb", "fetch": "x"}))
    assert not res.isError
    assert len(recorded) == 2


def test_description_resource():
    resources = asyncio.run(mcp_server.list_resources())
    assert [str(r.uri).rstrip("/") for r in resources] == [mcp_server.DESCRIPTION_URI]
    contents = asyncio.run(mcp_server.read_resource(mcp_server.DESCRIPTION_URI))
    assert "PBMCpedia" in contents[0].content
