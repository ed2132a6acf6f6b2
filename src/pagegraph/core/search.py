"""Keyword search with heuristic relevance scoring."""

import logging
import re
from collections.abc import Iterable
from typing import Protocol

from pagegraph.core.models import Page, Project, SearchHit, SearchResponse

logger = logging.getLogger(__name__)

TITLE_MATCH_SCORE = 3.0
TAG_MATCH_SCORE = 2.0
TOKEN_MATCH_SCORE = 0.1
MAX_MATCHED_CONTEXT = 5
DEFAULT_LIMIT = 10


class TokenCounter(Protocol):
    def __call__(self, token: str, content: str) -> int:
        """Count occurrences of ``token`` in ``content``."""
        ...


def count_literal(token: str, content: str) -> int:
    """Count non-overlapping literal occurrences."""
    if not token:
        return 0
    return content.count(token)


def count_pattern(token: str, content: str) -> int:
    """Count matches of ``token`` used as a regular expression.

    Tokens that do not compile are counted literally.
    """
    if not token:
        return 0
    try:
        pattern = re.compile(token, re.IGNORECASE)
    except re.error:
        logger.debug("Token %r is not a valid pattern, counting literally", token)
        return count_literal(token, content)
    return len(pattern.findall(content))


def calculate_relevance(page: Page, query: str, counter: TokenCounter = count_literal) -> float:
    """Score a page against a query.

    Title substring match, tag substring match and per-token content
    occurrences, all case-insensitive.
    """
    lower_query = query.lower()
    content = " ".join(page.lines).lower()

    score = 0.0
    if lower_query in page.title.lower():
        score += TITLE_MATCH_SCORE
    if any(lower_query in tag.lower() for tag in page.tags):
        score += TAG_MATCH_SCORE
    for token in lower_query.split():
        score += counter(token, content) * TOKEN_MATCH_SCORE
    return score


def extract_matched_context(page: Page, query: str, limit: int = MAX_MATCHED_CONTEXT) -> list[str]:
    """Return up to ``limit`` raw lines containing the query, in line order."""
    lower_query = query.lower()
    contexts = [line for line in page.lines if lower_query in line.lower()]
    return contexts[:limit]


def _passes_filters(page: Page, tags: list[str] | None, creative_type: str | None) -> bool:
    if tags is not None and not any(tag in page.tags for tag in tags):
        return False
    if creative_type and page.metadata.creative_type != creative_type:
        return False
    return True


def search_projects(
    projects: Iterable[Project],
    query: str,
    tags: list[str] | None = None,
    creative_type: str | None = None,
    limit: int = DEFAULT_LIMIT,
    counter: TokenCounter = count_literal,
) -> SearchResponse:
    """Score every page of ``projects`` and return the top ``limit`` hits.

    Ties keep project order, then page order.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    hits: list[SearchHit] = []
    for project in projects:
        for page in project.pages:
            if not _passes_filters(page, tags, creative_type):
                continue
            score = calculate_relevance(page, query, counter)
            if score > 0:
                hits.append(
                    SearchHit(
                        page=page,
                        relevance_score=score,
                        matched_context=extract_matched_context(page, query),
                    )
                )

    hits.sort(key=lambda hit: hit.relevance_score, reverse=True)
    return SearchResponse(query=query, total_results=len(hits), results=hits[:limit])
