"""Health endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from supabase import Client

from ...config import settings
from ...db.supabase import get_supabase_client
from ...persistence.store import CODE_COLUMN

router = APIRouter(tags=["health"])


def _count_rows(client: Client, relation: str) -> int:
    response = client.table(relation).select(CODE_COLUMN, count="exact").limit(1).execute()
    return response.count or 0


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Liveness probe; touches nothing outside the process."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Report whether the customer view and the sales records table answer."""
    client = get_supabase_client()
    if client is None:
        return {
            "configured": False,
            "connected": False,
            "message": "Supabase not configured. Set LOYALTY_SUPABASE_URL and LOYALTY_SUPABASE_KEY.",
        }

    counts: dict[str, int] = {}
    for relation in (settings.customer_summary_view, settings.sales_records_table):
        try:
            counts[relation] = _count_rows(client, relation)
        except Exception as exc:
            logging.error(f"Health check against {relation} failed: {exc}")
            return {
                "configured": True,
                "connected": False,
                "error": str(exc),
                "message": f"❌ Could not read {relation}: {exc}",
            }

    customers = counts[settings.customer_summary_view]
    return {
        "configured": True,
        "connected": True,
        "customers_count": customers,
        "sales_records_count": counts[settings.sales_records_table],
        "message": f"✅ Database connected. {customers} customers in {settings.customer_summary_view}.",
    }
