"""Offline utilities over export files: splitting and tag reports."""

import json
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pagegraph.core.errors import SourceUnavailableError
from pagegraph.core.models import RawPage
from pagegraph.core.normalizer import TAG_PATTERN
from pagegraph.core.sources import load_export

logger = logging.getLogger(__name__)

DEFAULT_PARTS = 15
FIRST_LINES = 5


def split_export(
    input_path: Path,
    output_dir: Path,
    parts: int = DEFAULT_PARTS,
    stem: str | None = None,
) -> list[Path]:
    """Split one export file into ordered part files.

    Each part keeps the export header (name, displayName, exported, users)
    and gains a ``partInfo`` block. Parts that would be empty are skipped.

    Args:
        input_path: Export JSON file.
        output_dir: Directory for the parts, created if missing.
        parts: Number of parts to cut.
        stem: File name prefix, defaults to the input file's stem.

    Returns:
        Paths of the written parts, in order.
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")

    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SourceUnavailableError(str(input_path), str(e)) from e
    pages = data.get("pages") if isinstance(data, dict) else None
    if not isinstance(pages, list):
        raise SourceUnavailableError(str(input_path), "invalid export format: pages array not found")

    total = len(pages)
    per_part = math.ceil(total / parts) if total else 0
    stem = stem or input_path.stem
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Splitting %d pages into %d parts of %d", total, parts, per_part)

    written = []
    for index in range(parts):
        start = index * per_part
        end = min(start + per_part, total)
        part_pages = pages[start:end]
        if not part_pages:
            logger.info("Part %d: skipping (no pages)", index + 1)
            continue

        part = {
            "name": data.get("name"),
            "displayName": data.get("displayName"),
            "exported": data.get("exported"),
            "users": data.get("users"),
            "pages": part_pages,
            "partInfo": {
                "partNumber": index + 1,
                "totalParts": parts,
                "pagesInPart": len(part_pages),
                "pageRange": f"{start + 1}-{end}",
            },
        }
        output_path = output_dir / f"{stem}-part{index + 1}.json"
        output_path.write_text(json.dumps(part, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Part %d: %d pages -> %s", index + 1, len(part_pages), output_path)
        written.append(output_path)

    return written


@dataclass
class TagReportEntry:
    title: str
    created: str
    updated: str
    tags: list[str] = field(default_factory=list)
    content_lines: int = 0
    first_lines: list[str] = field(default_factory=list)
    file: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "created": self.created,
            "updated": self.updated,
            "tags": self.tags,
            "contentLines": self.content_lines,
            "firstLines": self.first_lines,
            "file": self.file,
        }


def _iso_date(timestamp: int) -> str:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return ""


def _report_entry(page: RawPage, source: Path) -> TagReportEntry:
    content = [line for line in page.lines if line]
    hashtags = [f"#{tag}" for line in content for tag in TAG_PATTERN.findall(line)]
    return TagReportEntry(
        title=page.title,
        created=_iso_date(page.created),
        updated=_iso_date(page.updated),
        tags=list(dict.fromkeys(hashtags)),
        content_lines=len(content),
        first_lines=content[:FIRST_LINES],
        file=source.name,
    )


def tag_report(paths: Sequence[Path], tag: str) -> list[TagReportEntry]:
    """List pages carrying ``tag`` across export files, newest update first.

    ``tag`` may be given with or without its leading '#'.
    """
    wanted = tag.removeprefix("#")
    entries: list[tuple[int, TagReportEntry]] = []
    for path in paths:
        export = load_export(path)
        for page in export.pages:
            page_tags = {t for line in page.lines for t in TAG_PATTERN.findall(line)}
            if wanted in page_tags:
                entries.append((page.updated, _report_entry(page, path)))

    entries.sort(key=lambda item: item[0], reverse=True)
    return [entry for _, entry in entries]
