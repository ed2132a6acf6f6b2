"""Turn raw page records into normalized pages.

Tags and links follow Scrapbox notation: ``#tag`` and ``[Page Title]``.
"""

import re
from collections.abc import Iterable, Sequence
from typing import Protocol

from pagegraph.core.models import CreativeType, Page, PageMetadata, RawPage

# Pattern for tags: '#' then one or more characters that are neither
# whitespace nor '#'. Shared by every tag consumer in the package.
TAG_PATTERN = re.compile(r"#([^\s#]+)")

# Pattern for links: [Page Title]. No nesting.
LINK_PATTERN = re.compile(r"\[([^\]]+)\]")

# Checked in order, first hit wins.
CREATIVE_TYPE_KEYWORDS: tuple[tuple[CreativeType, tuple[str, ...]], ...] = (
    ("poetry", ("poem", "詩")),
    ("criticism", ("criticism", "批評")),
    ("essay", ("essay", "エッセイ")),
    ("diary", ("diary", "日記")),
)


class CreativeTypeClassifier(Protocol):
    def __call__(self, lines: Sequence[str]) -> CreativeType: ...


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def extract_tags(lines: Iterable[str]) -> tuple[str, ...]:
    """Extract hash tags from lines.

    Args:
        lines: Raw page lines.

    Returns:
        Tags without the leading '#', deduplicated in first-seen order.
    """
    return _unique(tag for line in lines for tag in TAG_PATTERN.findall(line))


def extract_links(lines: Iterable[str]) -> tuple[str, ...]:
    """Extract bracket links from lines.

    The inner text is kept verbatim. An unterminated bracket yields nothing.
    """
    return _unique(link for line in lines for link in LINK_PATTERN.findall(line))


def count_characters(lines: Sequence[str]) -> int:
    """Character length of the lines joined by newlines."""
    return len("\n".join(lines))


def classify_creative_type(lines: Sequence[str]) -> CreativeType:
    """Label a page by the first keyword pair found in its content."""
    content = "\n".join(lines).lower()
    for creative_type, keywords in CREATIVE_TYPE_KEYWORDS:
        if any(keyword in content for keyword in keywords):
            return creative_type
    return "note"


def normalize_page(
    raw: RawPage,
    classifier: CreativeTypeClassifier = classify_creative_type,
) -> Page:
    """Build a Page from a raw record. Backlinks are left empty."""
    lines = tuple(raw.lines)
    links = extract_links(lines)
    return Page(
        id=raw.id if raw.id is not None else raw.title,
        title=raw.title,
        lines=lines,
        created=raw.created,
        updated=raw.updated,
        tags=extract_tags(lines),
        links=links,
        metadata=PageMetadata(
            word_count=count_characters(lines),
            link_count=len(links),
            creative_type=classifier(lines),
        ),
    )


def normalize_pages(
    raw_pages: Iterable[RawPage],
    classifier: CreativeTypeClassifier = classify_creative_type,
) -> list[Page]:
    return [normalize_page(raw, classifier) for raw in raw_pages]
