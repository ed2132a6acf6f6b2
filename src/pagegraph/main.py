"""PageGraph FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Annotated, Any

from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from pagegraph import views
from pagegraph.config import settings
from pagegraph.core.errors import NotFoundError, SourceUnavailableError
from pagegraph.core.loader import load_configured_projects
from pagegraph.core.models import ConnectionType, CreativeType, DateRange
from pagegraph.core.registry import ProjectRegistry
from pagegraph.core.sources import ScrapboxClient
from pagegraph.prompts import PROMPTS, PromptNotFoundError, render_prompt

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> ProjectRegistry:
    return request.app.state.registry


def create_app(registry: ProjectRegistry | None = None) -> FastAPI:
    """Create the HTTP API.

    Without a registry, the lifespan loads the projects named in the
    sources config.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: load configured projects."""
        if registry is None:
            async with ScrapboxClient(settings) as client:
                await load_configured_projects(app.state.registry, settings.config_path, client)
        logger.info("Serving %d projects", len(app.state.registry))
        yield

    app = FastAPI(
        title=settings.app_title,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.registry = registry if registry is not None else ProjectRegistry()

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SourceUnavailableError)
    async def source_unavailable_handler(request: Request, exc: SourceUnavailableError):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    # ========== Projects & pages ==========

    @app.get("/api/projects")
    async def list_projects(request: Request):
        """List loaded projects."""
        return [views.project_summary(p) for p in get_registry(request).list_projects()]

    @app.get("/api/projects/{project_name}/pages")
    async def list_pages(request: Request, project_name: str):
        """List pages of a project."""
        return views.page_list(get_registry(request).get_project(project_name))

    @app.get("/api/projects/{project_name}/pages/{page_title:path}/raw", response_class=PlainTextResponse)
    async def raw_page(request: Request, project_name: str, page_title: str):
        """Get the plain text of a page."""
        return get_registry(request).get_page(project_name, page_title).text

    @app.get("/api/projects/{project_name}/pages/{page_title:path}")
    async def get_page(request: Request, project_name: str, page_title: str):
        """Get a normalized page with tags, links and backlinks."""
        page = get_registry(request).get_page(project_name, page_title)
        return page.model_dump(by_alias=True)

    @app.get("/api/projects/{project_name}/tags")
    async def list_tags(request: Request, project_name: str):
        """Tag index with page counts."""
        project = get_registry(request).get_project(project_name)
        return views.tag_list(project, settings.tag_list_pages)

    @app.get("/api/projects/{project_name}/graph")
    async def project_graph(request: Request, project_name: str):
        """Return the link graph as JSON for visualization."""
        return views.link_graph(get_registry(request).get_project(project_name))

    # ========== Queries ==========

    @app.get("/api/search")
    async def search(
        request: Request,
        q: str,
        project: Annotated[list[str] | None, Query()] = None,
        tag: Annotated[list[str] | None, Query()] = None,
        creative_type: CreativeType | None = None,
        limit: Annotated[int, Query(ge=1)] = settings.search_limit,
    ):
        """Search pages across projects."""
        response = get_registry(request).search(
            q,
            projects=project,
            tags=tag,
            creative_type=creative_type,
            limit=limit,
        )
        return views.search_results(response, settings.context_lines)

    @app.get("/api/projects/{project_name}/connections")
    async def connections(
        request: Request,
        project_name: str,
        page: str,
        depth: Annotated[int, Query(ge=1)] = 2,
        types: Annotated[list[ConnectionType] | None, Query(alias="type")] = None,
    ):
        """Analyze connections of one page."""
        report = get_registry(request).analyze_connections(
            project_name,
            page,
            depth=depth,
            types=types,
        )
        return views.connection_results(report, settings.connection_limit)

    @app.get("/api/projects/{project_name}/themes")
    async def themes(
        request: Request,
        project_name: str,
        start: date | None = None,
        end: date | None = None,
        tag: Annotated[list[str] | None, Query()] = None,
        limit: Annotated[int, Query(ge=1)] = settings.theme_limit,
    ):
        """Extract tag themes from a project."""
        date_range = None
        if start is not None or end is not None:
            if start is None or end is None:
                raise HTTPException(status_code=422, detail="start and end must be given together")
            date_range = DateRange(start=start, end=end)
        report = get_registry(request).extract_themes(
            project_name,
            date_range=date_range,
            tags=tag,
            limit=limit,
        )
        return views.theme_results(report)

    # ========== Prompts ==========

    @app.get("/api/prompts")
    async def list_prompts():
        """List available prompts and their arguments."""
        return [
            {
                "name": spec.name,
                "description": spec.description,
                "arguments": [
                    {"name": a.name, "description": a.description, "required": a.required}
                    for a in spec.arguments
                ],
            }
            for spec in PROMPTS.values()
        ]

    @app.post("/api/prompts/{name}")
    async def get_prompt(name: str, arguments: Annotated[dict[str, Any] | None, Body()] = None):
        """Render a prompt."""
        try:
            text = render_prompt(name, arguments or {})
        except PromptNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        return {"name": name, "messages": [{"role": "user", "content": text}]}

    return app


app = create_app()
