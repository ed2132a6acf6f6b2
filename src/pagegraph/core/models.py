"""Data models for PageGraph."""

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

CreativeType = Literal["poetry", "essay", "criticism", "note", "diary"]
ConnectionType = Literal["direct_link", "tag_similarity", "content_similarity"]

CONNECTION_TYPES: tuple[ConnectionType, ...] = (
    "direct_link",
    "tag_similarity",
    "content_similarity",
)


class CamelModel(BaseModel):
    """Base model that serializes with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawPage(BaseModel):
    """A page record as it comes out of an export file or the API.

    Validation is lenient: missing fields fall back to empty defaults so one
    bad record never rejects its batch.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str = ""
    lines: list[str] = Field(default_factory=list)
    created: int = 0
    updated: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("lines", mode="before")
    @classmethod
    def _coerce_lines(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        lines = []
        for line in value:
            # Exports "with metadata" store each line as {"text": ..., ...}
            if isinstance(line, dict):
                lines.append(str(line.get("text") or ""))
            elif line is not None:
                lines.append(str(line))
        return lines

    @field_validator("created", "updated", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0

    @model_validator(mode="after")
    def _default_id(self) -> "RawPage":
        if self.id is None:
            self.id = self.title
        return self


class ExportData(BaseModel):
    """Contents of one export file (a whole export or one split part)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    exported: int | None = None
    pages: list[RawPage]

    @field_validator("pages", mode="before")
    @classmethod
    def _drop_non_records(cls, value: Any) -> Any:
        if not isinstance(value, list):
            raise ValueError("pages array not found")
        records = [record for record in value if isinstance(record, (dict, RawPage))]
        if len(records) != len(value):
            logger.warning("Skipped %d malformed page records", len(value) - len(records))
        return records


class PageMetadata(CamelModel):
    """Values derived from page lines at normalization time."""

    model_config = ConfigDict(frozen=True)

    word_count: int = 0
    link_count: int = 0
    creative_type: CreativeType = "note"


class Page(CamelModel):
    """A normalized page. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    lines: tuple[str, ...] = ()
    created: int = 0
    updated: int = 0
    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    backlinks: tuple[str, ...] = ()
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @property
    def text(self) -> str:
        """Page body as a single newline-joined string."""
        return "\n".join(self.lines)


class Project(CamelModel):
    """Snapshot of one project's pages and indexes.

    Query code only reads from a snapshot; a rebuild produces a new one.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str | None = None
    pages: tuple[Page, ...] = ()
    tag_index: Mapping[str, tuple[str, ...]] = Field(default_factory=dict, validate_default=True)
    link_graph: Mapping[str, tuple[str, ...]] = Field(default_factory=dict, validate_default=True)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("tag_index", "link_graph", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("tag_index", "link_graph")
    def _serialize_index(self, value: Mapping[str, tuple[str, ...]]) -> dict[str, list[str]]:
        return {key: list(titles) for key, titles in value.items()}

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def find_page(self, title: str) -> Page | None:
        """Return the first page with an exactly matching title."""
        for page in self.pages:
            if page.title == title:
                return page
        return None


class SearchHit(CamelModel):
    page: Page
    relevance_score: float
    matched_context: list[str] = Field(default_factory=list)


class SearchResponse(CamelModel):
    query: str
    total_results: int
    results: list[SearchHit] = Field(default_factory=list)


class Connection(CamelModel):
    source: str
    target: str
    connection_type: ConnectionType
    strength: float


class ConnectionReport(CamelModel):
    source_page: str
    total_connections: int
    connections: list[Connection] = Field(default_factory=list)


class DateRange(BaseModel):
    """Inclusive range on a page's ``updated`` timestamp.

    Plain dates mean midnight UTC, naive datetimes are read as UTC.
    """

    start: date | datetime
    end: date | datetime

    @staticmethod
    def _to_timestamp(value: date | datetime) -> float:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.min)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()

    @property
    def start_timestamp(self) -> float:
        return self._to_timestamp(self.start)

    @property
    def end_timestamp(self) -> float:
        return self._to_timestamp(self.end)

    def contains(self, timestamp: float) -> bool:
        return self.start_timestamp <= timestamp <= self.end_timestamp


class Theme(CamelModel):
    theme: str
    frequency: int = 0
    related_pages: list[str] = Field(default_factory=list)
    # Reserved for content-derived keywords, always empty for now.
    keywords: list[str] = Field(default_factory=list)


class ThemeReport(CamelModel):
    project_name: str
    analyzed_pages: int
    themes: list[Theme] = Field(default_factory=list)
