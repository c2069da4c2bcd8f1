"""Cache keys for paginated list queries."""

from __future__ import annotations

import json

from .filters import FilterState


def normalize_search(search: str | None) -> str:
    return (search or "").strip()


def build_key(search: str | None, filters: FilterState, page: int, page_size: int) -> str:
    """Serialize a list query into a deterministic cache key.

    Keys are sorted at every level, so structurally equal filter states give
    byte-identical keys regardless of how they were built.
    """
    payload = {
        "q": normalize_search(search),
        "filters": filters.to_key_dict(),
        "page": page,
        "per_page": page_size,
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
