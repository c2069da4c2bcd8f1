import pytest

from loyalty.errors import StoreError
from loyalty.services.ledger.fetcher import (
    FullDatasetFetcher,
    build_rpc_params,
    normalize_row,
    page_from_payload,
)
from loyalty.services.ledger.filters import FilterState, normalize


def test_normalize_row_reads_procedure_spelling(customer) -> None:
    row = normalize_row(customer("C001", total=47, claimed=10, name="Ravi"))

    assert row.code == "C001"
    assert row.name == "Ravi"
    assert row.total == 47
    assert row.claimed == 10
    assert row.unclaimed == 37
    assert row.last_sales_date == "05/01/2024"
    assert row.net_weight == 470.0


def test_normalize_row_reads_view_spelling() -> None:
    row = normalize_row(
        {
            "CUSTOMER CODE": "C002",
            "CUSTOMER NAME": "Anu",
            "PIN CODE": 680001,
            "LAST SALES DATE": "2024-01-05",
            "total_points": "12.0",
            "claimed_points": None,
            "unclaimed_points": 12.5,
        }
    )

    assert row.code == "C002"
    assert row.name == "Anu"
    assert row.pin_code == "680001"
    assert row.last_sales_date == "2024-01-05"
    assert row.total == 12
    assert row.claimed == 0
    assert row.unclaimed == 12.5
    assert row.mobile is None


def test_normalize_row_skips_empty_spellings() -> None:
    row = normalize_row({"customer_code": "", "CUSTOMER CODE": "C003", "original_date": "", "LAST SALES DATE": "x"})

    assert row.code == "C003"
    assert row.last_sales_date == "x"


def test_build_rpc_params_maps_filters() -> None:
    filters = normalize({"start_date": "2024-01-01", "min_unclaimed": 5, "has_claimed": True})

    params = build_rpc_params("  ravi ", filters, 3, 25)

    assert params["p_query"] == "ravi"
    assert params["p_start_date"] == "2024-01-01"
    assert params["p_end_date"] is None
    assert params["p_min_unclaimed"] == 5
    assert params["p_max_total"] is None
    assert params["p_has_claimed"] is True
    assert params["p_has_eligible_claims"] is False
    assert (params["p_page"], params["p_items_per_page"]) == (3, 25)


def test_build_rpc_params_sends_null_for_blank_search() -> None:
    assert build_rpc_params("   ", FilterState(), 1, 10)["p_query"] is None


def test_page_from_payload_unwraps_single_row_list(customer) -> None:
    payload = [
        {
            "rows": [customer("C001", total=47)],
            "total_count": 31,
            "eligible_count": 20,
            "total_points": 900,
            "total_claimed": 100,
            "total_unclaimed": 800.0,
        }
    ]

    result = page_from_payload(payload, 4, 10)

    assert result.total_count == 31
    assert result.total_pages == 4
    assert not result.has_next_page
    assert not result.is_complete
    assert result.total_unclaimed == 800
    assert result.rows[0].code == "C001"


def test_page_from_payload_empty() -> None:
    result = page_from_payload([], 1, 10)

    assert result.rows == ()
    assert result.total_count == 0
    assert result.total_pages == 1
    assert result.is_complete


def test_page_from_payload_rejects_unexpected_shape() -> None:
    with pytest.raises(StoreError):
        page_from_payload("oops", 1, 10)


@pytest.mark.asyncio
async def test_full_dataset_is_sorted_by_code(store) -> None:
    rows = await FullDatasetFetcher(store).fetch_all("", normalize({"has_claimed": True}))

    assert [row.code for row in rows] == ["C004", "C008", "C012", "C016", "C020", "C024"]
    assert all(row.claimed == 5 for row in rows)
