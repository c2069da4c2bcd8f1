"""Fetching customer rows and list pages from the store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ...errors import StoreError
from ...models.domain import CustomerRow, PageResult, Points
from .filters import FilterState
from .keys import normalize_search

if TYPE_CHECKING:
    from ...persistence.store import CustomerStore

logger = logging.getLogger(__name__)

# The store has served two naming schemes over time; first non-empty spelling wins.
ROW_FIELDS: dict[str, tuple[str, ...]] = {
    "code": ("customer_code", "CUSTOMER CODE"),
    "name": ("customer_name", "CUSTOMER NAME"),
    "house_name": ("house_name", "HOUSE NAME"),
    "street": ("street", "STREET"),
    "place": ("place", "PLACE"),
    "pin_code": ("pin_code", "PIN CODE"),
    "mobile": ("mobile", "MOBILE"),
    "net_weight": ("net_weight", "NET WEIGHT"),
    "last_sales_date": ("original_date", "last_sales_date", "LAST SALES DATE"),
    "parsed_date": ("parsed_date",),
    "total": ("total_points",),
    "claimed": ("claimed_points",),
    "unclaimed": ("unclaimed_points",),
    "last_updated": ("points_last_updated",),
}


def _first(row: Mapping[str, Any], spellings: tuple[str, ...]) -> Any:
    for spelling in spellings:
        value = row.get(spelling)
        if value is not None and value != "":
            return value
    return None


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _points(value: Any) -> Points:
    if value is None:
        return 0
    number = float(value)
    return int(number) if number.is_integer() else number


def _weight(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_row(row: Mapping[str, Any]) -> CustomerRow:
    """Map a raw store row onto :class:`CustomerRow`."""
    value = {name: _first(row, spellings) for name, spellings in ROW_FIELDS.items()}
    return CustomerRow(
        code=_text(value["code"]) or "",
        name=_text(value["name"]),
        house_name=_text(value["house_name"]),
        street=_text(value["street"]),
        place=_text(value["place"]),
        pin_code=_text(value["pin_code"]),
        mobile=_text(value["mobile"]),
        net_weight=_weight(value["net_weight"]),
        last_sales_date=_text(value["last_sales_date"]),
        parsed_date=_text(value["parsed_date"]),
        total=_points(value["total"]),
        claimed=_points(value["claimed"]),
        unclaimed=_points(value["unclaimed"]),
        last_updated=_text(value["last_updated"]),
    )


def build_rpc_params(search: str, filters: FilterState, page: int, page_size: int) -> dict[str, Any]:
    points = filters.points
    return {
        "p_query": normalize_search(search) or None,
        "p_start_date": filters.date_range.start.isoformat() if filters.date_range.start else None,
        "p_end_date": filters.date_range.end.isoformat() if filters.date_range.end else None,
        "p_min_total": points.min_total,
        "p_max_total": points.max_total,
        "p_min_claimed": points.min_claimed,
        "p_max_claimed": points.max_claimed,
        "p_min_unclaimed": points.min_unclaimed,
        "p_max_unclaimed": points.max_unclaimed,
        "p_has_claimed": filters.claim_status.has_claimed,
        "p_has_eligible_claims": filters.claim_status.has_eligible_claims,
        "p_page": page,
        "p_items_per_page": page_size,
    }


def page_from_payload(payload: Any, page: int, page_size: int) -> PageResult:
    # Set-returning procedures come back as a one-element list.
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    payload = payload or {}
    if not isinstance(payload, Mapping):
        raise StoreError(f"Unexpected list payload: {type(payload).__name__}", "get_customer_list_data")
    return PageResult(
        rows=tuple(normalize_row(row) for row in payload.get("rows") or []),
        total_count=int(payload.get("total_count") or 0),
        eligible_count=int(payload.get("eligible_count") or 0),
        total_points=_points(payload.get("total_points")),
        total_claimed=_points(payload.get("total_claimed")),
        total_unclaimed=_points(payload.get("total_unclaimed")),
        page=page,
        page_size=page_size,
    )


class PageFetcher:
    """Loads one filtered page with aggregates through the list procedure."""

    def __init__(self, store: CustomerStore) -> None:
        self.store = store

    async def fetch_page(self, search: str, filters: FilterState, page: int, page_size: int) -> PageResult:
        payload = await self.store.get_customer_list_data(build_rpc_params(search, filters, page, page_size))
        result = page_from_payload(payload, page, page_size)
        logger.info(
            f"Loaded page {page} ({len(result.rows)} rows, {result.total_count} matching, page size {page_size})"
        )
        return result


class FullDatasetFetcher:
    """Loads every row under the filters, ordered by customer code."""

    def __init__(self, store: CustomerStore) -> None:
        self.store = store

    async def fetch_all(self, search: str, filters: FilterState) -> list[CustomerRow]:
        rows = await self.store.fetch_summary_rows(normalize_search(search), filters)
        customers = [normalize_row(row) for row in rows]
        customers.sort(key=lambda customer: customer.code)
        return customers
