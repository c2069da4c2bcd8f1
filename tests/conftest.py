import asyncio
from collections import Counter
from typing import Any, Mapping, Optional

import pytest

from loyalty.errors import StoreError
from loyalty.services.ledger.controller import ListController
from loyalty.services.ledger.fetcher import FullDatasetFetcher, PageFetcher, build_rpc_params
from loyalty.services.ledger.filters import FilterState
from loyalty.services.ledger.policy import CLAIM_UNIT
from loyalty.services.ledger.service import LedgerService


def _customer(code: str, total: int, claimed: int = 0, **extra: Any) -> dict:
    return {
        "customer_code": code,
        "customer_name": extra.pop("name", f"Customer {code}"),
        "house_name": extra.pop("house_name", "Rose Villa"),
        "street": extra.pop("street", "Main Street"),
        "place": extra.pop("place", "Thrissur"),
        "pin_code": extra.pop("pin_code", "680001"),
        "mobile": extra.pop("mobile", f"98{code[-3:].rjust(3, '0')}00000"),
        "net_weight": extra.pop("net_weight", total * 10),
        "original_date": extra.pop("original_date", "05/01/2024"),
        "parsed_date": extra.pop("parsed_date", "2024-01-05"),
        "total_points": total,
        "claimed_points": claimed,
        "unclaimed_points": total - claimed,
        "points_last_updated": "2024-02-01T10:00:00",
        **extra,
    }


def _to_summary_spelling(row: dict) -> dict:
    """Rows read straight from the view use the upper-case column names."""
    return {
        "CUSTOMER CODE": row["customer_code"],
        "CUSTOMER NAME": row["customer_name"],
        "HOUSE NAME": row["house_name"],
        "STREET": row["street"],
        "PLACE": row["place"],
        "PIN CODE": row["pin_code"],
        "MOBILE": row["mobile"],
        "NET WEIGHT": row["net_weight"],
        "original_date": row["original_date"],
        "parsed_date": row["parsed_date"],
        "total_points": row["total_points"],
        "claimed_points": row["claimed_points"],
        "unclaimed_points": row["unclaimed_points"],
        "points_last_updated": row["points_last_updated"],
    }


def _matches(row: dict, params: Mapping[str, Any]) -> bool:
    query = params.get("p_query")
    if query:
        needle = query.lower()
        haystack = (row["customer_code"], row["customer_name"] or "", row["mobile"] or "")
        if not any(needle in value.lower() for value in haystack):
            return False
    if params.get("p_start_date") and row["parsed_date"] < params["p_start_date"]:
        return False
    if params.get("p_end_date") and row["parsed_date"] > params["p_end_date"]:
        return False
    for suffix, column in (("total", "total_points"), ("claimed", "claimed_points"), ("unclaimed", "unclaimed_points")):
        low, high = params.get(f"p_min_{suffix}"), params.get(f"p_max_{suffix}")
        if low is not None and row[column] < low:
            return False
        if high is not None and row[column] > high:
            return False
    if params.get("p_has_claimed") and row["claimed_points"] <= 0:
        return False
    if params.get("p_has_eligible_claims") and row["unclaimed_points"] < CLAIM_UNIT:
        return False
    return True


class FakeStore:
    """In-memory ``CustomerStore`` that counts calls and can be told to fail."""

    def __init__(self, rows: Optional[list[dict]] = None) -> None:
        self.rows: list[dict] = rows if rows is not None else []
        self.calls: Counter[str] = Counter()
        self.list_params: list[dict] = []
        self.fail: set[str] = set()
        self.fail_pages: set[int] = set()
        self.gate: Optional[asyncio.Event] = None

    def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        if operation in self.fail:
            raise StoreError("connection reset by peer", operation)

    def _find(self, code: str) -> Optional[dict]:
        return next((row for row in self.rows if row["customer_code"] == code), None)

    async def get_customer_list_data(self, params: Mapping[str, Any]) -> Any:
        self._enter("get_customer_list_data")
        self.list_params.append(dict(params))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if params["p_page"] in self.fail_pages:
            raise StoreError("timeout", "get_customer_list_data")
        matching = sorted((row for row in self.rows if _matches(row, params)), key=lambda row: row["customer_code"])
        start = (params["p_page"] - 1) * params["p_items_per_page"]
        return {
            "rows": [dict(row) for row in matching[start:start + params["p_items_per_page"]]],
            "total_count": len(matching),
            "eligible_count": sum(1 for row in matching if row["unclaimed_points"] >= CLAIM_UNIT),
            "total_points": sum(row["total_points"] for row in matching),
            "total_claimed": sum(row["claimed_points"] for row in matching),
            "total_unclaimed": sum(row["unclaimed_points"] for row in matching),
        }

    async def fetch_summary_rows(self, search: str, filters: FilterState) -> list[dict]:
        self._enter("fetch_summary_rows")
        params = build_rpc_params(search, filters, 1, 1)
        # Deliberately unordered to show the fetcher sorts.
        matching = [row for row in reversed(self.rows) if _matches(row, params)]
        return [_to_summary_spelling(row) for row in matching]

    async def fetch_customer(self, code: str) -> Optional[dict]:
        self._enter("fetch_customer")
        row = self._find(code)
        return _to_summary_spelling(row) if row else None

    async def claim_points(self, customer_code: str, amount: int) -> str:
        self._enter("claim_points")
        row = self._find(customer_code)
        if row is None:
            raise StoreError(f"Customer {customer_code} not found", "claim_customer_points")
        if amount > row["unclaimed_points"]:
            raise StoreError("Insufficient unclaimed points", "claim_customer_points")
        row["claimed_points"] += amount
        row["unclaimed_points"] -= amount
        return f"Successfully claimed {amount} points for customer {customer_code}"

    async def refresh_accrual(self) -> str:
        self._enter("refresh_accrual")
        for row in self.rows:
            row["total_points"] = int((row["net_weight"] or 0) // 10)
            row["unclaimed_points"] = row["total_points"] - row["claimed_points"]
        return f"Points refreshed for {len(self.rows)} customers."

    async def refresh_parsed_dates(self) -> str:
        self._enter("refresh_parsed_dates")
        return "Parsed dates updated."

    async def insert_customer(self, record: Mapping[str, Any]) -> None:
        self._enter("insert_customer")
        self.rows.append(
            _customer(
                record["CUSTOMER CODE"],
                total=0,
                name=record["CUSTOMER NAME"],
                mobile=record["MOBILE"],
                net_weight=record["NET WEIGHT"],
            )
        )

    async def update_customer(self, code: str, record: Mapping[str, Any]) -> None:
        self._enter("update_customer")
        row = self._find(code)
        if row is None:
            raise StoreError(f"Customer {code} not found", "update_customer")
        row.update(
            customer_code=record["CUSTOMER CODE"],
            customer_name=record["CUSTOMER NAME"],
            mobile=record["MOBILE"],
            place=record["PLACE"],
            net_weight=record["NET WEIGHT"],
        )

    async def delete_customer(self, code: str) -> None:
        self._enter("delete_customer")
        self.rows = [row for row in self.rows if row["customer_code"] != code]


def make_customers(count: int) -> list[dict]:
    return [_customer(f"C{index:03d}", total=index * 3, claimed=5 if index % 4 == 0 else 0) for index in range(1, count + 1)]


@pytest.fixture
def customer():
    return _customer


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(make_customers(25))


@pytest.fixture
def controller(store: FakeStore) -> ListController:
    return ListController(PageFetcher(store), FullDatasetFetcher(store), page_size=10, prefetch=False)


@pytest.fixture
def ledger(store: FakeStore) -> LedgerService:
    controller = ListController(PageFetcher(store), FullDatasetFetcher(store), page_size=10, prefetch=False)
    return LedgerService(store, controller)
