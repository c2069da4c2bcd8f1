"""Domain models for customer ledger records."""

import math
from dataclasses import dataclass
from typing import Optional, Union

Points = Union[int, float]


@dataclass(slots=True, frozen=True)
class CustomerRow:
    """Read-only snapshot of one customer's ledger state as reported by the store."""

    code: str
    name: Optional[str]
    house_name: Optional[str]
    street: Optional[str]
    place: Optional[str]
    pin_code: Optional[str]
    mobile: Optional[str]
    net_weight: Optional[float]
    last_sales_date: Optional[str]
    parsed_date: Optional[str]
    total: Points
    claimed: Points
    unclaimed: Points
    last_updated: Optional[str]


@dataclass(slots=True, frozen=True)
class PageResult:
    """One page of rows plus aggregates computed over the whole filtered set."""

    rows: tuple[CustomerRow, ...]
    total_count: int
    eligible_count: int
    total_points: Points
    total_claimed: Points
    total_unclaimed: Points
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_count / self.page_size))

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def is_complete(self) -> bool:
        """True when the page already holds every row of the filtered set."""
        return len(self.rows) >= self.total_count


@dataclass(slots=True, frozen=True)
class ClaimOutcome:
    customer_code: str
    amount: int
    message: str
    # Estimated from the caller's snapshot; the store is authoritative.
    remaining: Points


@dataclass(slots=True)
class CustomerForm:
    """Editable customer fields as entered by an administrator."""

    customer_code: str
    customer_name: str = ""
    house_name: str = ""
    street: str = ""
    place: str = ""
    pin_code: str = ""
    mobile: str = ""
    last_sales_date: Optional[str] = None
