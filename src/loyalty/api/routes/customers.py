"""Customer ledger endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from fastapi.responses import HTMLResponse

from ...config import settings
from ...services.export import export_file_name
from ...services.ledger.filters import FilterState, normalize
from ...services.ledger.service import LedgerService, MutationResult
from ...schemas.customers import (
    ClaimOptionsResponse,
    ClaimOutcomeModel,
    ClaimRequestModel,
    CustomerFormModel,
    CustomerPageResponse,
    ErrorResponse,
    MutationResponse,
)

router = APIRouter(prefix="/customers", tags=["customers"])

ERROR_RESPONSES = {
    422: {"model": ErrorResponse},
    status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
}


@dataclass
class ListQuery:
    filters: FilterState
    page: int
    page_size: int


def get_ledger(request: Request) -> LedgerService:
    return request.app.state.ledger


def list_query(
    search: str | None = Query(default=None, description="Matches customer code, name or mobile"),
    start_date: str | None = Query(default=None, description="Earliest last-sale date (YYYY-MM-DD)"),
    end_date: str | None = Query(default=None, description="Latest last-sale date (YYYY-MM-DD)"),
    min_total: str | None = Query(default=None),
    max_total: str | None = Query(default=None),
    min_claimed: str | None = Query(default=None),
    max_claimed: str | None = Query(default=None),
    min_unclaimed: str | None = Query(default=None),
    max_unclaimed: str | None = Query(default=None),
    has_claimed: bool = Query(default=False, description="Only customers who have claimed before"),
    has_eligible_claims: bool = Query(default=False, description="Only customers who can claim now"),
    page: int = Query(default=1, ge=1, description="1-based page index for pagination"),
    page_size: int | None = Query(default=None, ge=1, le=1000, description="Records per page"),
) -> ListQuery:
    # Bounds arrive as raw text; anything non-numeric leaves that bound open.
    filters = normalize(
        {
            "search": search,
            "start_date": start_date,
            "end_date": end_date,
            "min_total": min_total,
            "max_total": max_total,
            "min_claimed": min_claimed,
            "max_claimed": max_claimed,
            "min_unclaimed": min_unclaimed,
            "max_unclaimed": max_unclaimed,
            "has_claimed": has_claimed,
            "has_eligible_claims": has_eligible_claims,
        }
    )
    return ListQuery(filters=filters, page=page, page_size=page_size or settings.default_page_size)


def _mutation_response(result: MutationResult) -> MutationResponse:
    return MutationResponse(
        message=result.message,
        page=CustomerPageResponse.from_page(result.page),
        claim=ClaimOutcomeModel.from_outcome(result.claim) if result.claim else None,
    )


@router.get("", response_model=CustomerPageResponse, responses=ERROR_RESPONSES, status_code=status.HTTP_200_OK)
async def list_customers(
    query: ListQuery = Depends(list_query),
    ledger: LedgerService = Depends(get_ledger),
) -> CustomerPageResponse:
    result = await ledger.list_customers(query.filters, query.page, query.page_size)
    return CustomerPageResponse.from_page(result)


@router.get("/page-sizes", status_code=status.HTTP_200_OK)
def list_page_sizes() -> dict:
    return {"options": list(settings.page_size_options), "default": settings.default_page_size}


@router.get("/export.csv", responses=ERROR_RESPONSES, status_code=status.HTTP_200_OK)
async def export_customers_csv(
    query: ListQuery = Depends(list_query),
    ledger: LedgerService = Depends(get_ledger),
) -> Response:
    payload = await ledger.export_csv(query.filters, query.page, query.page_size)
    file_name = export_file_name()
    return Response(
        content=payload,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/report", response_class=HTMLResponse, responses=ERROR_RESPONSES, status_code=status.HTTP_200_OK)
async def print_customer_report(
    mode: Literal["table", "stacked"] = Query(default="table", description="Layout shown first"),
    query: ListQuery = Depends(list_query),
    ledger: LedgerService = Depends(get_ledger),
) -> HTMLResponse:
    report = await ledger.print_report(query.filters, query.page, query.page_size, mode=mode)
    return HTMLResponse(report)


@router.post("/filters/clear", response_model=CustomerPageResponse, responses=ERROR_RESPONSES)
async def clear_customer_filters(ledger: LedgerService = Depends(get_ledger)) -> CustomerPageResponse:
    return CustomerPageResponse.from_page(await ledger.clear_filters())


@router.post("/refresh-points", response_model=MutationResponse, responses=ERROR_RESPONSES)
async def refresh_customer_points(ledger: LedgerService = Depends(get_ledger)) -> MutationResponse:
    return _mutation_response(await ledger.refresh_points())


@router.post(
    "",
    response_model=MutationResponse,
    responses=ERROR_RESPONSES,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    form: CustomerFormModel,
    ledger: LedgerService = Depends(get_ledger),
) -> MutationResponse:
    return _mutation_response(await ledger.save_customer(form.to_form()))


@router.put("/{code}", response_model=MutationResponse, responses=ERROR_RESPONSES)
async def update_customer(
    form: CustomerFormModel,
    code: str = Path(..., description="Customer code the record is currently stored under"),
    ledger: LedgerService = Depends(get_ledger),
) -> MutationResponse:
    return _mutation_response(await ledger.save_customer(form.to_form(), original_code=code))


@router.delete("/{code}", response_model=MutationResponse, responses=ERROR_RESPONSES)
async def delete_customer(
    code: str = Path(...),
    ledger: LedgerService = Depends(get_ledger),
) -> MutationResponse:
    return _mutation_response(await ledger.delete_customer(code))


@router.get("/{code}/claim-options", response_model=ClaimOptionsResponse, responses=ERROR_RESPONSES)
async def get_claim_options(
    code: str = Path(...),
    ledger: LedgerService = Depends(get_ledger),
) -> ClaimOptionsResponse:
    unclaimed = await ledger.current_unclaimed(code)
    return ClaimOptionsResponse.for_balance(code, unclaimed)


@router.post("/{code}/claims", response_model=MutationResponse, responses=ERROR_RESPONSES)
async def claim_customer_points(
    payload: ClaimRequestModel,
    code: str = Path(...),
    ledger: LedgerService = Depends(get_ledger),
) -> MutationResponse:
    result = await ledger.claim_points(code, payload.amount, payload.current_unclaimed)
    return _mutation_response(result)
