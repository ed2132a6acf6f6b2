"""Tag-frequency theme extraction."""

from collections.abc import Sequence

from pagegraph.core.models import DateRange, Page, Project, Theme, ThemeReport

DEFAULT_LIMIT = 10


def select_pages(
    pages: Sequence[Page],
    date_range: DateRange | None = None,
    tags: list[str] | None = None,
) -> list[Page]:
    """Narrow pages by ``updated`` range, then by any-of ``tags``."""
    selected = list(pages)
    if date_range is not None:
        selected = [page for page in selected if date_range.contains(page.updated)]
    if tags is not None:
        selected = [page for page in selected if any(tag in page.tags for tag in tags)]
    return selected


def extract_themes(
    project: Project,
    date_range: DateRange | None = None,
    tags: list[str] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> ThemeReport:
    """Rank tags by how many selected pages carry them.

    Ties keep the order in which tags were first seen.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    pages = select_pages(project.pages, date_range, tags)

    themes: dict[str, Theme] = {}
    for page in pages:
        for tag in page.tags:
            theme = themes.get(tag)
            if theme is None:
                theme = themes[tag] = Theme(theme=tag)
            theme.frequency += 1
            theme.related_pages.append(page.title)

    ranked = sorted(themes.values(), key=lambda theme: theme.frequency, reverse=True)
    return ThemeReport(
        project_name=project.name,
        analyzed_pages=len(pages),
        themes=ranked[:limit],
    )
