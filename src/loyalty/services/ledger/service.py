"""Customer ledger session: list browsing plus the mutation flows around it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ...errors import ValidationError, success_banner
from ...models.domain import ClaimOutcome, CustomerForm, CustomerRow, PageResult, Points
from ..export import customers_to_csv_bytes, render_report
from .claims import claim, validate_amount
from .controller import ListController
from .fetcher import FullDatasetFetcher, PageFetcher, normalize_row
from .filters import FilterState

if TYPE_CHECKING:
    from ...persistence.store import CustomerStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MutationResult:
    message: str
    page: PageResult
    claim: Optional[ClaimOutcome] = None


def form_to_record(form: CustomerForm, net_weight: float) -> dict[str, Any]:
    return {
        "CUSTOMER CODE": form.customer_code.strip(),
        "CUSTOMER NAME": form.customer_name.strip(),
        "HOUSE NAME": form.house_name.strip(),
        "STREET": form.street.strip(),
        "PLACE": form.place.strip(),
        "PIN CODE": form.pin_code.strip(),
        "MOBILE": form.mobile.strip(),
        "NET WEIGHT": net_weight,
        "LAST SALES DATE": form.last_sales_date or None,
    }


class LedgerService:
    """Owns one list controller and keeps its cache honest across mutations.

    Every mutation waits for the store to confirm before invalidating, so a
    failed save, delete, claim or refresh leaves the cached pages untouched.
    """

    def __init__(self, store: CustomerStore, controller: Optional[ListController] = None) -> None:
        self.store = store
        self.controller = controller or ListController(PageFetcher(store), FullDatasetFetcher(store))

    async def list_customers(
        self, filters: FilterState, page: int = 1, page_size: Optional[int] = None
    ) -> PageResult:
        return await self.controller.set_query(filters, page, page_size)

    async def clear_filters(self) -> PageResult:
        return await self.controller.clear_filters()

    async def refresh_points(self) -> MutationResult:
        """Recompute accrual and parsed sale dates, surfacing both store messages."""
        points_message = await self.store.refresh_accrual()
        self.controller.invalidate()
        dates_message = await self.store.refresh_parsed_dates()
        logger.info("Refreshed customer points and parsed dates")
        page = await self.controller.reload()
        return MutationResult(success_banner(f"{points_message} {dates_message}".strip()), page)

    async def save_customer(self, form: CustomerForm, original_code: Optional[str] = None) -> MutationResult:
        """Create a customer, or update the one stored under ``original_code``."""
        if not form.customer_code or not form.customer_code.strip():
            raise ValidationError("Customer Code is required", reason="missing_code")

        if original_code is None:
            await self.store.insert_customer(form_to_record(form, net_weight=0))
            action = "created"
        else:
            existing = self._row_from_view(original_code)
            if existing is None:
                raw = await self.store.fetch_customer(original_code)
                existing = normalize_row(raw) if raw else None
            net_weight = existing.net_weight if existing and existing.net_weight is not None else 0
            await self.store.update_customer(original_code, form_to_record(form, net_weight=net_weight))
            action = "updated"
        self.controller.invalidate()
        logger.info(f"Customer {form.customer_code.strip()} {action}")

        # Accrual is computed by the store from the sales records just written.
        result = await self.refresh_points()
        return MutationResult(success_banner(f"Customer {form.customer_code.strip()} {action}."), result.page)

    async def delete_customer(self, code: str) -> MutationResult:
        if not code or not code.strip():
            raise ValidationError("Customer Code is required", reason="missing_code")
        await self.store.delete_customer(code)
        logger.info(f"Customer {code} deleted")
        page = await self.controller.reload()
        return MutationResult(success_banner(f"Customer {code} deleted."), page)

    async def current_unclaimed(self, code: str) -> Points:
        """Unclaimed balance from the loaded page, or read directly when not on it."""
        row = self._row_from_view(code)
        if row is None:
            raw = await self.store.fetch_customer(code)
            if raw is None:
                raise ValidationError(f"Customer {code} not found", reason="unknown_customer")
            row = normalize_row(raw)
        return row.unclaimed

    async def claim_points(
        self, code: str, amount: Any, current_unclaimed: Optional[Points] = None
    ) -> MutationResult:
        if current_unclaimed is None:
            if not code or not code.strip():
                raise ValidationError("Customer code is required", reason="missing_code")
            validate_amount(amount)
            current_unclaimed = await self.current_unclaimed(code)
        outcome = await claim(self.store, code, amount, current_unclaimed)
        page = await self.controller.reload()
        banner = success_banner(f"{outcome.message} ({outcome.remaining} points remaining)")
        return MutationResult(banner, page, claim=outcome)

    async def export_csv(
        self, filters: FilterState, page: int = 1, page_size: Optional[int] = None
    ) -> bytes:
        summary = await self.list_customers(filters, page, page_size)
        rows = await self.controller.rows_for_report(filters, summary)
        return customers_to_csv_bytes(rows)

    async def print_report(
        self, filters: FilterState, page: int = 1, page_size: Optional[int] = None, mode: str = "table"
    ) -> str:
        """Aggregates come from the page loaded for ``filters``, rows from the whole filtered set."""
        summary = await self.list_customers(filters, page, page_size)
        rows = await self.controller.rows_for_report(filters, summary)
        return render_report(rows, summary, mode=mode)

    async def aclose(self) -> None:
        await self.controller.aclose()

    def _row_from_view(self, code: str) -> Optional[CustomerRow]:
        view = self.controller.view
        if view is None:
            return None
        return next((row for row in view.rows if row.code == code), None)
