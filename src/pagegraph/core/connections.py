"""Connection analysis from a single start page."""

import logging
from collections.abc import Iterable

from pagegraph.core.errors import PageNotFoundError
from pagegraph.core.models import CONNECTION_TYPES, Connection, ConnectionReport, ConnectionType, Page, Project

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 2
DIRECT_LINK_STRENGTH = 1.0


def tag_similarity(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """Shared tags divided by the size of the larger tag set."""
    set_a, set_b = set(tags_a), set(tags_b)
    denominator = max(len(set_a), len(set_b))
    if denominator == 0:
        return 0.0
    return len(set_a & set_b) / denominator


def direct_link_edges(page: Page) -> list[Connection]:
    return [
        Connection(
            source=page.title,
            target=linked_title,
            connection_type="direct_link",
            strength=DIRECT_LINK_STRENGTH,
        )
        for linked_title in page.links
    ]


def tag_similarity_edges(project: Project, page: Page) -> list[Connection]:
    edges = []
    start_tags = set(page.tags)
    for other in project.pages:
        if other.title == page.title:
            continue
        if start_tags.isdisjoint(other.tags):
            continue
        edges.append(
            Connection(
                source=page.title,
                target=other.title,
                connection_type="tag_similarity",
                strength=tag_similarity(page.tags, other.tags),
            )
        )
    return edges


def analyze_connections(
    project: Project,
    page_title: str,
    depth: int = DEFAULT_DEPTH,
    types: Iterable[ConnectionType] | None = None,
) -> ConnectionReport:
    """List typed edges leaving ``page_title``.

    Only direct neighbors are evaluated whatever ``depth`` is. Direct-link
    edges come first in link order, then tag-similarity edges in page order.
    ``content_similarity`` has no scoring rule and yields no edges.

    Raises:
        PageNotFoundError: No page in the project has that title.
        ValueError: ``depth`` is below 1.
    """
    if depth < 1:
        raise ValueError("depth must be at least 1")

    page = project.find_page(page_title)
    if page is None:
        raise PageNotFoundError(page_title, project.name)

    requested = set(CONNECTION_TYPES if types is None else types)
    if depth > 1:
        logger.debug("Connection depth %d requested, evaluating direct neighbors only", depth)

    connections: list[Connection] = []
    if "direct_link" in requested:
        connections.extend(direct_link_edges(page))
    if "tag_similarity" in requested:
        connections.extend(tag_similarity_edges(project, page))

    return ConnectionReport(
        source_page=page.title,
        total_connections=len(connections),
        connections=connections,
    )
