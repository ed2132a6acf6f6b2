"""Tests for the MCP server, driven through an in-memory fastmcp client."""

import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError
from mcp.shared.exceptions import McpError

from pagegraph.server import create_server


@pytest.fixture
def mcp_server(registry):
    return create_server(registry)


async def _call(server, tool, arguments):
    async with Client(server) as client:
        result = await client.call_tool(tool, arguments)
    return json.loads(result.content[0].text)


# ============================================================
# Tools
# ============================================================


class TestTools:
    async def test_lists_tools(self, mcp_server):
        async with Client(mcp_server) as client:
            tools = await client.list_tools()
        assert {tool.name for tool in tools} == {"search_pages", "analyze_connections", "extract_themes"}

    async def test_search_pages(self, mcp_server):
        data = await _call(mcp_server, "search_pages", {"query": "poetry"})
        assert data["query"] == "poetry"
        first = data["results"][0]
        assert first["title"] == "My Poetry Notes"
        assert first["relevanceScore"] == pytest.approx(5.2)
        assert first["tags"] == ["poetry", "rain"]
        assert first["creativeType"] == "poetry"

    async def test_search_pages_limit(self, mcp_server):
        data = await _call(mcp_server, "search_pages", {"query": "rain", "limit": 1})
        assert data["totalResults"] == 3
        assert len(data["results"]) == 1

    async def test_search_pages_context_capped(self, mcp_server):
        data = await _call(mcp_server, "search_pages", {"query": "rain"})
        assert all(len(hit["context"]) <= 3 for hit in data["results"])

    async def test_analyze_connections(self, mcp_server):
        data = await _call(
            mcp_server,
            "analyze_connections",
            {"project_name": "notebook", "page_title": "My Poetry Notes"},
        )
        assert data["sourcePage"] == "My Poetry Notes"
        assert data["connections"][0] == {
            "source": "My Poetry Notes",
            "target": "Rain Diary",
            "connectionType": "direct_link",
            "strength": 1.0,
        }

    async def test_analyze_connections_unknown_project(self, mcp_server):
        async with Client(mcp_server) as client:
            with pytest.raises(ToolError, match="Project missing not found"):
                await client.call_tool(
                    "analyze_connections",
                    {"project_name": "missing", "page_title": "x"},
                )

    @pytest.mark.parametrize("tool", ["search_pages", "extract_themes"])
    async def test_limit_below_one_rejected(self, mcp_server, tool):
        arguments = {"query": "rain"} if tool == "search_pages" else {"project_name": "notebook"}
        async with Client(mcp_server) as client:
            with pytest.raises(ToolError):
                await client.call_tool(tool, {**arguments, "limit": 0})

    async def test_extract_themes_with_date_range(self, mcp_server):
        data = await _call(
            mcp_server,
            "extract_themes",
            {"project_name": "notebook", "date_range": {"start": "2024-02-01", "end": "2024-03-10"}},
        )
        assert data["analyzedPages"] == 1
        assert [t["theme"] for t in data["themes"]] == ["diary", "rain"]
        assert data["themes"][0]["relatedPages"] == ["Rain Diary"]


# ============================================================
# Resources
# ============================================================


class TestResources:
    async def test_projects(self, mcp_server):
        async with Client(mcp_server) as client:
            contents = await client.read_resource("scrapbox://projects")
        projects = json.loads(contents[0].text)
        assert projects[0]["name"] == "notebook"
        assert projects[0]["displayName"] == "Notebook"
        assert projects[0]["pageCount"] == 4

    async def test_pages(self, mcp_server):
        async with Client(mcp_server) as client:
            contents = await client.read_resource("scrapbox://projects/notebook/pages")
        pages = json.loads(contents[0].text)
        assert [p["title"] for p in pages][:2] == ["My Poetry Notes", "Rain Diary"]
        assert pages[1]["creativeType"] == "diary"
        assert pages[0]["created"].startswith("2024-01-10T12:00:00")

    async def test_page_text(self, mcp_server):
        async with Client(mcp_server) as client:
            contents = await client.read_resource("scrapbox://projects/notebook/pages/Rain%20Diary")
        assert contents[0].text == "Rain Diary\n日記 today #diary #rain\nback to [My Poetry Notes]"

    async def test_tags(self, mcp_server):
        async with Client(mcp_server) as client:
            contents = await client.read_resource("scrapbox://projects/notebook/tags")
        tags = {entry["tag"]: entry for entry in json.loads(contents[0].text)}
        assert tags["rain"]["pageCount"] == 2
        assert tags["rain"]["pages"] == ["My Poetry Notes", "Rain Diary"]

    async def test_unknown_project(self, mcp_server):
        async with Client(mcp_server) as client:
            with pytest.raises(McpError):
                await client.read_resource("scrapbox://projects/missing/pages")


# ============================================================
# Prompts
# ============================================================


class TestPrompts:
    async def test_lists_prompts(self, mcp_server):
        async with Client(mcp_server) as client:
            prompts = await client.list_prompts()
        assert {p.name for p in prompts} == {"literary_analysis", "creative_continuation", "knowledge_synthesis"}

    async def test_get_prompt(self, mcp_server):
        async with Client(mcp_server) as client:
            result = await client.get_prompt("knowledge_synthesis", {"pages": "Rain Diary"})
        message = result.messages[0]
        assert message.role == "user"
        assert "対象ページ: Rain Diary" in message.content.text
