"""Paginated customer list with caching and next-page prefetch."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ...config import settings
from ...errors import PrefetchError, ValidationError
from ...models.domain import CustomerRow, PageResult
from .cache import ListCache
from .fetcher import FullDatasetFetcher, PageFetcher
from .filters import FilterState
from .keys import build_key

logger = logging.getLogger(__name__)


class ListController:
    """Answers "page N under the current filters" for one browsing session.

    The controller is the only writer of its cache. Results are keyed by the
    filter snapshot taken when a load is issued; ``latest_key`` tracks the most
    recent request so a slow response for a superseded query never replaces
    ``view``.
    """

    def __init__(
        self,
        page_fetcher: PageFetcher,
        full_fetcher: Optional[FullDatasetFetcher] = None,
        cache: Optional[ListCache] = None,
        *,
        page_size: Optional[int] = None,
        prefetch: Optional[bool] = None,
    ) -> None:
        self.page_fetcher = page_fetcher
        self.full_fetcher = full_fetcher
        self.cache = cache if cache is not None else ListCache()
        self.filters = FilterState()
        self.page = 1
        self.page_size = page_size or settings.default_page_size
        self.prefetch_enabled = settings.prefetch_enabled if prefetch is None else prefetch
        self.view: Optional[PageResult] = None
        self.view_key: Optional[str] = None
        self.latest_key: Optional[str] = None
        self.last_prefetch_error: Optional[PrefetchError] = None
        self._prefetch_tasks: dict[str, asyncio.Task] = {}

    def key_for(self, page: int, page_size: int, filters: Optional[FilterState] = None) -> str:
        filters = filters or self.filters
        return build_key(filters.search, filters, page, page_size)

    async def set_query(self, filters: FilterState, page: int = 1, page_size: Optional[int] = None) -> PageResult:
        """Replace the query and load the requested page from cache or store."""
        self.filters = filters
        return await self.load_page(page, page_size)

    async def load_page(self, page: Optional[int] = None, page_size: Optional[int] = None) -> PageResult:
        page = self.page if page is None else page
        page_size = self.page_size if page_size is None else page_size
        if page < 1:
            raise ValidationError(f"Page must be 1 or greater, got {page}", reason="invalid_page")
        if page_size < 1:
            raise ValidationError(f"Page size must be 1 or greater, got {page_size}", reason="invalid_page_size")

        filters = self.filters
        key = self.key_for(page, page_size, filters)
        self.latest_key = key

        result = self.cache.get(key)
        if result is None:
            generation = self.cache.generation
            result = await self.page_fetcher.fetch_page(filters.search, filters, page, page_size)
            self.cache.put(key, result, generation)
        else:
            logger.debug(f"List cache hit for page {page}")

        if key == self.latest_key:
            self.view = result
            self.view_key = key
            self.page, self.page_size = page, page_size
            self._schedule_prefetch(filters, result)
        return result

    async def reload(self) -> PageResult:
        self.invalidate()
        return await self.load_page()

    async def clear_filters(self) -> PageResult:
        self.filters = FilterState()
        self.invalidate()
        return await self.load_page(1)

    def invalidate(self) -> None:
        self.cache.invalidate_all()
        for task in self._prefetch_tasks.values():
            task.cancel()
        self._prefetch_tasks.clear()

    async def rows_for_report(self, filters: FilterState, page: PageResult) -> list[CustomerRow]:
        """Every row under ``filters``, reusing ``page`` when it already holds them all.

        ``page`` must be the result loaded for ``filters``; ``view`` may
        already belong to another query.
        """
        if page.is_complete or self.full_fetcher is None:
            return list(page.rows)
        return await self.full_fetcher.fetch_all(filters.search, filters)

    async def wait_for_prefetch(self) -> None:
        if self._prefetch_tasks:
            await asyncio.gather(*self._prefetch_tasks.values(), return_exceptions=True)

    async def aclose(self) -> None:
        tasks = list(self._prefetch_tasks.values())
        self.invalidate()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _schedule_prefetch(self, filters: FilterState, result: PageResult) -> None:
        if not self.prefetch_enabled:
            return
        next_page = result.page + 1
        if next_page > result.total_pages:
            return
        key = self.key_for(next_page, result.page_size, filters)
        if key in self.cache or key in self._prefetch_tasks:
            return
        task = asyncio.create_task(
            self._prefetch(key, filters, next_page, result.page_size, self.cache.generation)
        )
        self._prefetch_tasks[key] = task
        task.add_done_callback(lambda done, key=key: self._forget_prefetch(key, done))

    def _forget_prefetch(self, key: str, task: asyncio.Task) -> None:
        if self._prefetch_tasks.get(key) is task:
            del self._prefetch_tasks[key]

    async def _prefetch(self, key: str, filters: FilterState, page: int, page_size: int, generation: int) -> None:
        try:
            result = await self.page_fetcher.fetch_page(filters.search, filters, page, page_size)
        except Exception as exc:
            self.last_prefetch_error = PrefetchError(key, exc)
            logger.debug(str(self.last_prefetch_error))
            return
        self.cache.put(key, result, generation)
