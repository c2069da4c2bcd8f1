"""Process-local cache of list pages."""

from __future__ import annotations

from typing import Optional

from ...models.domain import PageResult


class ListCache:
    """Maps cache keys to page results until the next invalidation.

    Every mutation can shift aggregates on every page, so invalidation always
    wipes the whole map. ``generation`` counts invalidations; a writer that
    captured an older generation before suspending has its ``put`` dropped.
    """

    def __init__(self) -> None:
        self._pages: dict[str, PageResult] = {}
        self.generation = 0

    def get(self, key: str) -> Optional[PageResult]:
        return self._pages.get(key)

    def put(self, key: str, result: PageResult, generation: Optional[int] = None) -> bool:
        if generation is not None and generation != self.generation:
            return False
        self._pages[key] = result
        return True

    def invalidate_all(self) -> None:
        self._pages.clear()
        self.generation += 1

    def __contains__(self, key: object) -> bool:
        return key in self._pages

    def __len__(self) -> int:
        return len(self._pages)
