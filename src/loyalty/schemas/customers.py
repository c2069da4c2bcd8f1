"""Customer-facing API schemas."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..models.domain import ClaimOutcome, CustomerForm, CustomerRow, PageResult, Points
from ..services.ledger.policy import claim_options, default_claim_amount, is_eligible, max_claimable


class CustomerRowModel(BaseModel):
    code: str
    name: Optional[str] = None
    house_name: Optional[str] = None
    street: Optional[str] = None
    place: Optional[str] = None
    pin_code: Optional[str] = None
    mobile: Optional[str] = None
    last_sales_date: Optional[str] = None
    total: Points
    claimed: Points
    unclaimed: Points
    max_claimable: int
    eligible: bool
    last_updated: Optional[str] = None

    @classmethod
    def from_row(cls, row: CustomerRow) -> "CustomerRowModel":
        return cls(
            code=row.code,
            name=row.name,
            house_name=row.house_name,
            street=row.street,
            place=row.place,
            pin_code=row.pin_code,
            mobile=row.mobile,
            last_sales_date=row.last_sales_date,
            total=row.total,
            claimed=row.claimed,
            unclaimed=row.unclaimed,
            max_claimable=max_claimable(row.unclaimed),
            eligible=is_eligible(row.unclaimed),
            last_updated=row.last_updated,
        )


class TotalStatisticsModel(BaseModel):
    totalPoints: Points
    totalClaimed: Points
    totalUnclaimed: Points


class CustomerPageResponse(BaseModel):
    items: List[CustomerRowModel]
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next_page: bool
    eligible_count: int
    statistics: TotalStatisticsModel

    @classmethod
    def from_page(cls, result: PageResult) -> "CustomerPageResponse":
        return cls(
            items=[CustomerRowModel.from_row(row) for row in result.rows],
            page=result.page,
            page_size=result.page_size,
            total=result.total_count,
            total_pages=result.total_pages,
            has_next_page=result.has_next_page,
            eligible_count=result.eligible_count,
            statistics=TotalStatisticsModel(
                totalPoints=result.total_points,
                totalClaimed=result.total_claimed,
                totalUnclaimed=result.total_unclaimed,
            ),
        )


class CustomerFormModel(BaseModel):
    customer_code: str = Field(description="Unique customer identifier")
    customer_name: str = ""
    house_name: str = ""
    street: str = ""
    place: str = ""
    pin_code: str = ""
    mobile: str = ""
    last_sales_date: Optional[str] = None

    def to_form(self) -> CustomerForm:
        return CustomerForm(**self.model_dump())


class ClaimRequestModel(BaseModel):
    amount: Union[int, float]
    current_unclaimed: Optional[Points] = Field(
        default=None,
        description="Balance shown to the user; looked up when omitted.",
    )


class ClaimOptionsResponse(BaseModel):
    code: str
    unclaimed: Points
    eligible: bool
    max_claimable: int
    options: List[int]
    default_amount: int

    @classmethod
    def for_balance(cls, code: str, unclaimed: Points) -> "ClaimOptionsResponse":
        return cls(
            code=code,
            unclaimed=unclaimed,
            eligible=is_eligible(unclaimed),
            max_claimable=max_claimable(unclaimed),
            options=claim_options(unclaimed),
            default_amount=default_claim_amount(unclaimed),
        )


class ClaimOutcomeModel(BaseModel):
    customer_code: str
    amount: int
    remaining: Points

    @classmethod
    def from_outcome(cls, outcome: ClaimOutcome) -> "ClaimOutcomeModel":
        return cls(customer_code=outcome.customer_code, amount=outcome.amount, remaining=outcome.remaining)


class MutationResponse(BaseModel):
    message: str
    page: CustomerPageResponse
    claim: Optional[ClaimOutcomeModel] = None


class ErrorResponse(BaseModel):
    message: str
    reason: Optional[str] = None
