"""FastMCP server for pagegraph.

Thin MCP wrappers around the project registry. All query logic lives in
``pagegraph.core``; this module only maps arguments and serializes results.
"""

import json
from typing import Annotated, Any
from urllib.parse import unquote

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from pydantic import Field

from pagegraph import views
from pagegraph.config import Settings, settings as default_settings
from pagegraph.core.errors import NotFoundError
from pagegraph.core.models import ConnectionType, CreativeType, DateRange
from pagegraph.core.registry import ProjectRegistry
from pagegraph.prompts import render_prompt


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def create_server(registry: ProjectRegistry, settings: Settings | None = None) -> FastMCP:
    """Build an MCP server exposing ``registry`` as tools, resources and prompts."""
    settings = settings or default_settings

    mcp = FastMCP(
        name="pagegraph",
        instructions=(
            "Scrapbox knowledge base. Use search_pages to find pages, "
            "analyze_connections to explore links and shared tags, "
            "extract_themes for tag frequency."
        ),
    )

    # ─────────────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────────────

    @mcp.tool(
        name="search_pages",
        description="Search pages across Scrapbox projects with intelligent filtering",
    )
    def search_pages(
        query: str,
        projects: list[str] | None = None,
        tags: list[str] | None = None,
        creative_type: CreativeType | None = None,
        limit: Annotated[int, Field(ge=1)] = settings.search_limit,
    ) -> dict[str, Any]:
        response = registry.search(
            query,
            projects=projects,
            tags=tags,
            creative_type=creative_type,
            limit=limit,
        )
        return views.search_results(response, settings.context_lines)

    @mcp.tool(
        name="analyze_connections",
        description="Analyze connections and relationships between pages",
    )
    def analyze_connections(
        project_name: str,
        page_title: str,
        depth: int = 2,
        connection_types: list[ConnectionType] | None = None,
    ) -> dict[str, Any]:
        try:
            report = registry.analyze_connections(
                project_name,
                page_title,
                depth=depth,
                types=connection_types,
            )
        except (NotFoundError, ValueError) as e:
            raise ToolError(str(e)) from e
        return views.connection_results(report, settings.connection_limit)

    @mcp.tool(
        name="extract_themes",
        description="Extract themes and patterns from pages",
    )
    def extract_themes(
        project_name: str,
        date_range: DateRange | None = None,
        tags: list[str] | None = None,
        limit: Annotated[int, Field(ge=1)] = settings.theme_limit,
    ) -> dict[str, Any]:
        try:
            report = registry.extract_themes(
                project_name,
                date_range=date_range,
                tags=tags,
                limit=limit,
            )
        except NotFoundError as e:
            raise ToolError(str(e)) from e
        return views.theme_results(report)

    # ─────────────────────────────────────────────────────────────────────
    # Resources
    # ─────────────────────────────────────────────────────────────────────

    def _project(project_name: str):
        try:
            return registry.get_project(project_name)
        except NotFoundError as e:
            raise ResourceError(str(e)) from e

    @mcp.resource(
        "scrapbox://projects",
        name="Available Scrapbox Projects",
        description="List of all available Scrapbox projects",
        mime_type="application/json",
    )
    def projects_resource() -> str:
        return _dumps([views.project_summary(project) for project in registry.list_projects()])

    @mcp.resource(
        "scrapbox://projects/{project_name}/pages",
        description="Pages of a project with dates, tags and creative type",
        mime_type="application/json",
    )
    def pages_resource(project_name: str) -> str:
        return _dumps(views.page_list(_project(project_name)))

    @mcp.resource(
        "scrapbox://projects/{project_name}/pages/{page_title}",
        description="Plain text of a single page",
        mime_type="text/plain",
    )
    def page_resource(project_name: str, page_title: str) -> str:
        try:
            page = registry.get_page(project_name, unquote(page_title))
        except NotFoundError as e:
            raise ResourceError(str(e)) from e
        return page.text

    @mcp.resource(
        "scrapbox://projects/{project_name}/tags",
        description="Tags of a project with page counts",
        mime_type="application/json",
    )
    def tags_resource(project_name: str) -> str:
        return _dumps(views.tag_list(_project(project_name), settings.tag_list_pages))

    # ─────────────────────────────────────────────────────────────────────
    # Prompts
    # ─────────────────────────────────────────────────────────────────────

    @mcp.prompt(
        name="literary_analysis",
        description="Analyze text from a literary criticism perspective",
    )
    def literary_analysis(text: str, perspective: str | None = None) -> str:
        return render_prompt("literary_analysis", {"text": text, "perspective": perspective})

    @mcp.prompt(
        name="creative_continuation",
        description="Continue or develop creative writing",
    )
    def creative_continuation(fragment: str, style: str | None = None) -> str:
        return render_prompt("creative_continuation", {"fragment": fragment, "style": style})

    @mcp.prompt(
        name="knowledge_synthesis",
        description="Synthesize knowledge from multiple sources",
    )
    def knowledge_synthesis(pages: str, focus: str | None = None) -> str:
        return render_prompt("knowledge_synthesis", {"pages": pages, "focus": focus})

    return mcp
