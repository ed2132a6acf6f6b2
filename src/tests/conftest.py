"""Shared fixtures: a small Scrapbox-like corpus."""

import json
import logging

import pytest

from pagegraph.core.models import RawPage
from pagegraph.core.registry import ProjectRegistry

# 2024-01-10, 2024-02-10, 2024-03-10 at 12:00 UTC
JAN = 1704888000
FEB = 1707566400
MAR = 1710072000


def raw(title: str, *lines: str, updated: int = JAN, created: int | None = None) -> RawPage:
    return RawPage(
        id=f"id-{title}",
        title=title,
        lines=[title, *lines],
        created=created if created is not None else updated,
        updated=updated,
    )


@pytest.fixture
def corpus() -> list[RawPage]:
    return [
        raw("My Poetry Notes", "a poem about rain #poetry #rain", "see [Rain Diary]", updated=JAN),
        raw("Rain Diary", "日記 today #diary #rain", "back to [My Poetry Notes]", updated=FEB),
        raw("Essay on Maps", "an essay #essay", "links [Rain Diary] and [Nowhere]", updated=MAR),
        raw("Loose Note", "nothing special here", updated=MAR),
    ]


@pytest.fixture
def registry(corpus) -> ProjectRegistry:
    registry = ProjectRegistry()
    registry.add_project("notebook", raw_pages=corpus, display_name="Notebook")
    return registry


@pytest.fixture
def export_file(tmp_path, corpus):
    """Write the corpus as a single export file."""
    path = tmp_path / "notebook.json"
    data = {
        "name": "notebook",
        "displayName": "Notebook",
        "exported": FEB,
        "users": [],
        "pages": [page.model_dump() for page in corpus],
    }
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo configure_logging so caplog sees package records."""
    yield
    package_logger = logging.getLogger("pagegraph")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
