"""Where raw pages come from: export files and the Scrapbox API."""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
from cachetools import TTLCache
from pydantic import ValidationError

from pagegraph.config import Settings, settings as default_settings
from pagegraph.core.errors import SourceUnavailableError
from pagegraph.core.models import ExportData, RawPage

logger = logging.getLogger(__name__)


def load_export(path: Path) -> ExportData:
    """Read one export file (a whole export or one split part).

    Raises:
        SourceUnavailableError: The file is missing, unreadable, not JSON or
            has no pages array.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SourceUnavailableError(str(path), str(e)) from e

    if not isinstance(raw, dict):
        raise SourceUnavailableError(str(path), "export is not a JSON object")
    try:
        return ExportData.model_validate(raw)
    except ValidationError as e:
        raise SourceUnavailableError(str(path), "invalid export format: pages array not found") from e


def load_raw_batches(paths: Sequence[Path]) -> list[ExportData]:
    """Read export parts strictly in the given order.

    The first failing part aborts the whole load.
    """
    batches = []
    for position, path in enumerate(paths, start=1):
        logger.info("Loading part %d/%d: %s", position, len(paths), path)
        batches.append(load_export(path))
    return batches


class ScrapboxClient:
    """Async client for the Scrapbox page API.

    Successful responses are cached for ``cache_ttl`` seconds.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or default_settings
        self._http = httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout,
            headers={"User-Agent": self.settings.user_agent},
            transport=transport,
        )
        self._cache: TTLCache[str, Any] = TTLCache(
            maxsize=self.settings.cache_maxsize,
            ttl=self.settings.cache_ttl,
        )

    async def __aenter__(self) -> "ScrapboxClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def _page_path(project_name: str, page_title: str) -> str:
        return f"/api/pages/{project_name}/{quote(page_title, safe='')}"

    async def get_project_pages(self, project_name: str, limit: int | None = None) -> list[RawPage]:
        """Fetch the page list of a project.

        Raises:
            SourceUnavailableError: The request failed or returned bad data.
        """
        cache_key = f"pages_{project_name}_{limit or 'all'}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        params = {"limit": limit} if limit else {}
        try:
            response = await self._http.get(f"/api/pages/{project_name}", params=params)
            response.raise_for_status()
            records = response.json().get("pages") or []
            pages = [RawPage.model_validate(record) for record in records if isinstance(record, dict)]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error("Failed to fetch project pages for %s: %s", project_name, e)
            raise SourceUnavailableError(f"scrapbox project {project_name}", str(e)) from e

        self._cache[cache_key] = pages
        return pages

    async def get_page(self, project_name: str, page_title: str) -> RawPage | None:
        """Fetch one page. Returns None if the API answers 404."""
        cache_key = f"page_{project_name}_{page_title}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        try:
            response = await self._http.get(self._page_path(project_name, page_title))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch page %s from %s: %s", page_title, project_name, e)
            raise SourceUnavailableError(f"scrapbox page {project_name}/{page_title}", str(e)) from e

        if not isinstance(data, dict):
            return None
        page = RawPage.model_validate(data)
        self._cache[cache_key] = page
        return page

    async def get_page_text(self, project_name: str, page_title: str) -> str | None:
        """Fetch a page's plain text. Any failure yields None."""
        try:
            response = await self._http.get(f"{self._page_path(project_name, page_title)}/text")
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to fetch page text for %s: %s", page_title, e)
            return None
        return response.text or None

    async def search_titles(self, project_name: str, query: str) -> list[str]:
        """Search page titles through the API. Any failure yields []."""
        try:
            response = await self._http.get(
                f"/api/pages/{project_name}/search/titles",
                params={"q": query},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to search page titles in %s: %s", project_name, e)
            return []
        if isinstance(data, dict):
            return list(data.get("titles") or [])
        return []
