"""Build project snapshots: backlinks, tag index and link graph."""

import logging
from collections.abc import Iterable, Sequence

from pagegraph.core.models import ExportData, Page, Project, RawPage
from pagegraph.core.normalizer import CreativeTypeClassifier, classify_creative_type, normalize_pages

logger = logging.getLogger(__name__)


def compute_backlinks(pages: Sequence[Page]) -> list[Page]:
    """Return copies of ``pages`` with backlinks filled in.

    A page's backlinks are the titles of every page whose links contain
    its title, in page order.
    """
    referrers: dict[str, list[str]] = {}
    for page in pages:
        for linked_title in page.links:
            referrers.setdefault(linked_title, []).append(page.title)

    return [
        page.model_copy(update={"backlinks": tuple(referrers.get(page.title, ()))})
        for page in pages
    ]


def build_tag_index(pages: Iterable[Page]) -> dict[str, tuple[str, ...]]:
    """Map each tag to the titles carrying it, in first-seen order."""
    index: dict[str, list[str]] = {}
    for page in pages:
        for tag in page.tags:
            index.setdefault(tag, []).append(page.title)
    return {tag: tuple(titles) for tag, titles in index.items()}


def build_link_graph(pages: Iterable[Page]) -> dict[str, tuple[str, ...]]:
    """Map each title to its links followed by its backlinks.

    Neighbors are not deduplicated. With duplicate titles the last page wins.
    """
    return {page.title: page.links + page.backlinks for page in pages}


def build_project(
    name: str,
    pages: Sequence[Page],
    display_name: str | None = None,
    description: str | None = None,
) -> Project:
    """Compute backlinks and indexes over ``pages`` and freeze a snapshot."""
    logger.debug("Calculating backlinks for %d pages", len(pages))
    linked_pages = compute_backlinks(pages)
    logger.debug("Building indexes for project %s", name)
    return Project(
        name=name,
        display_name=display_name or name,
        description=description,
        pages=tuple(linked_pages),
        tag_index=build_tag_index(linked_pages),
        link_graph=build_link_graph(linked_pages),
    )


def index_raw_pages(
    name: str,
    raw_pages: Iterable[RawPage],
    display_name: str | None = None,
    description: str | None = None,
    classifier: CreativeTypeClassifier = classify_creative_type,
) -> Project:
    """Normalize one batch of raw records and build its snapshot."""
    pages = normalize_pages(raw_pages, classifier)
    return build_project(name, pages, display_name=display_name, description=description)


def merge_batches(
    name: str,
    batches: Sequence[ExportData],
    description: str | None = None,
    classifier: CreativeTypeClassifier = classify_creative_type,
) -> Project:
    """Normalize several export parts in order and build one snapshot.

    Pages are concatenated without deduplication. The display name comes
    from the first part.
    """
    merged: list[Page] = []
    for position, batch in enumerate(batches, start=1):
        pages = normalize_pages(batch.pages, classifier)
        merged.extend(pages)
        logger.info(
            "Merged part %d/%d of %s: %d pages (total: %d)",
            position,
            len(batches),
            name,
            len(pages),
            len(merged),
        )

    display_name = batches[0].display_name if batches else None
    return build_project(name, merged, display_name=display_name, description=description)
