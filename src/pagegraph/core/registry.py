"""Named project registry and the query operations over it."""

import logging
from collections.abc import Iterable, Sequence

from pagegraph.core import connections, themes
from pagegraph.core import search as search_engine
from pagegraph.core.errors import PageNotFoundError, ProjectNotFoundError
from pagegraph.core.indexer import index_raw_pages, merge_batches
from pagegraph.core.models import (
    ConnectionReport,
    ConnectionType,
    DateRange,
    ExportData,
    Page,
    Project,
    RawPage,
    SearchResponse,
    ThemeReport,
)
from pagegraph.core.normalizer import CreativeTypeClassifier, classify_creative_type

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """Holds one snapshot per project name.

    Adding a project under an existing name swaps in the new snapshot;
    callers holding the old one keep a consistent view.
    """

    def __init__(
        self,
        classifier: CreativeTypeClassifier = classify_creative_type,
        token_counter: search_engine.TokenCounter = search_engine.count_literal,
    ) -> None:
        self._projects: dict[str, Project] = {}
        self.classifier = classifier
        self.token_counter = token_counter

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __len__(self) -> int:
        return len(self._projects)

    def add_project(
        self,
        name: str,
        raw_pages: Iterable[RawPage] | None = None,
        raw_batches: Sequence[ExportData] | None = None,
        display_name: str | None = None,
        description: str | None = None,
    ) -> Project:
        """Build a snapshot from raw pages or ordered batches and register it.

        ``raw_batches`` wins when both are given.
        """
        if raw_batches:
            project = merge_batches(name, raw_batches, description=description, classifier=self.classifier)
            if display_name:
                project = project.model_copy(update={"display_name": display_name})
        else:
            project = index_raw_pages(
                name,
                raw_pages or [],
                display_name=display_name,
                description=description,
                classifier=self.classifier,
            )
        self.register(project)
        return project

    def register(self, project: Project) -> None:
        if project.name in self._projects:
            logger.info("Replacing project %s", project.name)
        self._projects[project.name] = project
        logger.info(
            "Registered project %s: %d pages, %d tags",
            project.name,
            project.page_count,
            len(project.tag_index),
        )

    def list_projects(self) -> list[Project]:
        return list(self._projects.values())

    def get_project(self, name: str) -> Project:
        """Return a snapshot by name.

        Raises:
            ProjectNotFoundError: No project is registered under ``name``.
        """
        try:
            return self._projects[name]
        except KeyError:
            raise ProjectNotFoundError(name) from None

    def get_page(self, project_name: str, page_title: str) -> Page:
        project = self.get_project(project_name)
        page = project.find_page(page_title)
        if page is None:
            raise PageNotFoundError(page_title, project_name)
        return page

    def search(
        self,
        query: str,
        projects: list[str] | None = None,
        tags: list[str] | None = None,
        creative_type: str | None = None,
        limit: int = search_engine.DEFAULT_LIMIT,
    ) -> SearchResponse:
        """Search all projects, or only the named ones that exist."""
        if projects is None:
            selected = self.list_projects()
        else:
            selected = [self._projects[name] for name in projects if name in self._projects]
        return search_engine.search_projects(
            selected,
            query,
            tags=tags,
            creative_type=creative_type,
            limit=limit,
            counter=self.token_counter,
        )

    def analyze_connections(
        self,
        project_name: str,
        page_title: str,
        depth: int = connections.DEFAULT_DEPTH,
        types: Iterable[ConnectionType] | None = None,
    ) -> ConnectionReport:
        project = self.get_project(project_name)
        return connections.analyze_connections(project, page_title, depth=depth, types=types)

    def extract_themes(
        self,
        project_name: str,
        date_range: DateRange | None = None,
        tags: list[str] | None = None,
        limit: int = themes.DEFAULT_LIMIT,
    ) -> ThemeReport:
        project = self.get_project(project_name)
        return themes.extract_themes(project, date_range=date_range, tags=tags, limit=limit)
