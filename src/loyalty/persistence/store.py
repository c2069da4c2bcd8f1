"""Customer ledger persistence backed by Supabase.

The list page, claims and maintenance jobs go through stored procedures; the
tables are touched directly only for full exports, single-row reads and
customer create/update/delete.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from supabase import Client

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import StoreError
from ..services.ledger.filters import FilterState
from ..services.ledger.policy import CLAIM_UNIT

logger = logging.getLogger(__name__)

CODE_COLUMN = '"CUSTOMER CODE"'

SUMMARY_COLUMNS = ",".join(
    [
        '"CUSTOMER CODE"',
        '"CUSTOMER NAME"',
        '"HOUSE NAME"',
        '"STREET"',
        '"PLACE"',
        '"PIN CODE"',
        '"MOBILE"',
        '"NET WEIGHT"',
        "original_date",
        "parsed_date",
        "total_points",
        "claimed_points",
        "unclaimed_points",
        "points_last_updated",
    ]
)


class CustomerStore(Protocol):
    """Remote operations the ledger core depends on."""

    async def get_customer_list_data(self, params: Mapping[str, Any]) -> Any: ...

    async def fetch_summary_rows(self, search: str, filters: FilterState) -> list[dict]: ...

    async def fetch_customer(self, code: str) -> Optional[dict]: ...

    async def claim_points(self, customer_code: str, amount: int) -> str: ...

    async def refresh_accrual(self) -> str: ...

    async def refresh_parsed_dates(self) -> str: ...

    async def insert_customer(self, record: Mapping[str, Any]) -> None: ...

    async def update_customer(self, code: str, record: Mapping[str, Any]) -> None: ...

    async def delete_customer(self, code: str) -> None: ...


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def apply_filters(query: Any, search: str, filters: FilterState) -> Any:
    """Apply search and filter constraints to a PostgREST query builder."""
    term = search.strip()
    if term:
        pattern = _quote(f"%{term}%")
        query = query.or_(
            f'"CUSTOMER CODE".ilike.{pattern},"CUSTOMER NAME".ilike.{pattern},"MOBILE".ilike.{pattern}'
        )

    if filters.date_range.start:
        query = query.gte("parsed_date", filters.date_range.start.isoformat())
    if filters.date_range.end:
        query = query.lte("parsed_date", filters.date_range.end.isoformat())

    points = filters.points
    bounds = (
        ("gte", "total_points", points.min_total),
        ("lte", "total_points", points.max_total),
        ("gte", "claimed_points", points.min_claimed),
        ("lte", "claimed_points", points.max_claimed),
        ("gte", "unclaimed_points", points.min_unclaimed),
        ("lte", "unclaimed_points", points.max_unclaimed),
    )
    for operator, column, bound in bounds:
        if bound is not None:
            query = getattr(query, operator)(column, bound)

    if filters.claim_status.has_claimed:
        query = query.gt("claimed_points", 0)
    if filters.claim_status.has_eligible_claims:
        query = query.gte("unclaimed_points", CLAIM_UNIT)
    return query


class SupabaseCustomerStore:
    """``CustomerStore`` over the synchronous Supabase client.

    Each round trip runs in a worker thread so the event loop stays free while
    the request is in flight.
    """

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client | None:
        return self._client or get_supabase_client()

    async def _execute(self, operation: str, build: Callable[[Client], Any]) -> Any:
        client = self.client
        if client is None:
            raise StoreError("Supabase is not configured", operation)
        try:
            response = await asyncio.to_thread(lambda: build(client).execute())
        except Exception as exc:
            logger.error(f"Store operation '{operation}' failed: {exc}")
            raise StoreError(str(exc), operation) from exc
        return response.data

    async def get_customer_list_data(self, params: Mapping[str, Any]) -> Any:
        return await self._execute(
            "get_customer_list_data",
            lambda client: client.rpc("get_customer_list_data", dict(params)),
        )

    async def fetch_summary_rows(self, search: str, filters: FilterState) -> list[dict]:
        def build(client: Client) -> Any:
            query = (
                client.table(settings.customer_summary_view)
                .select(SUMMARY_COLUMNS)
                .order(CODE_COLUMN, desc=False)
            )
            return apply_filters(query, search, filters)

        data = await self._execute("fetch_summary_rows", build)
        rows = list(data or [])
        logger.info(f"Fetched {len(rows)} rows from {settings.customer_summary_view}")
        return rows

    async def fetch_customer(self, code: str) -> Optional[dict]:
        data = await self._execute(
            "fetch_customer",
            lambda client: client.table(settings.customer_summary_view)
            .select(SUMMARY_COLUMNS)
            .eq(CODE_COLUMN, code)
            .limit(1),
        )
        return data[0] if data else None

    async def claim_points(self, customer_code: str, amount: int) -> str:
        data = await self._execute(
            "claim_customer_points",
            lambda client: client.rpc(
                "claim_customer_points",
                {"customer_code": customer_code, "points_to_claim": amount},
            ),
        )
        return "" if data is None else str(data)

    async def refresh_accrual(self) -> str:
        data = await self._execute(
            "refresh_customer_points", lambda client: client.rpc("refresh_customer_points", {})
        )
        return "" if data is None else str(data)

    async def refresh_parsed_dates(self) -> str:
        data = await self._execute(
            "update_parsed_dates", lambda client: client.rpc("update_parsed_dates", {})
        )
        return "" if data is None else str(data)

    async def insert_customer(self, record: Mapping[str, Any]) -> None:
        await self._execute(
            "insert_customer",
            lambda client: client.table(settings.sales_records_table).insert([dict(record)]),
        )

    async def update_customer(self, code: str, record: Mapping[str, Any]) -> None:
        await self._execute(
            "update_customer",
            lambda client: client.table(settings.sales_records_table).update(dict(record)).eq(CODE_COLUMN, code),
        )

    async def delete_customer(self, code: str) -> None:
        await self._execute(
            "delete_customer",
            lambda client: client.table(settings.sales_records_table).delete().eq(CODE_COLUMN, code),
        )
