import csv
import io
from datetime import date, datetime

import pytest

from loyalty.models.domain import PageResult
from loyalty.services.export import CSV_COLUMNS, customers_to_csv, customers_to_csv_bytes, export_file_name, render_report
from loyalty.services.export.csv_export import customer_to_record
from loyalty.services.ledger.fetcher import normalize_row


@pytest.fixture
def rows(customer):
    return [
        normalize_row(customer("C001", total=47, claimed=10, name="Ravi <Admin>", house_name=None)),
        normalize_row(customer("C002", total=3, name="Anu, K", mobile="9847011111")),
    ]


def _summary(rows) -> PageResult:
    return PageResult(
        rows=tuple(rows),
        total_count=len(rows),
        eligible_count=1,
        total_points=50,
        total_claimed=10,
        total_unclaimed=40,
        page=1,
        page_size=10,
    )


def test_csv_has_fixed_columns_and_quoting(rows) -> None:
    text = customers_to_csv(rows)
    parsed = list(csv.DictReader(io.StringIO(text)))

    assert text.splitlines()[0] == ",".join(CSV_COLUMNS)
    assert parsed[0]["Max Claimable (Multiple of 5)"] == "35"
    assert parsed[0]["House Name"] == ""
    assert parsed[1]["Customer Name"] == "Anu, K"
    assert parsed[1]["Unclaimed Points"] == "3"
    assert parsed[1]["Max Claimable (Multiple of 5)"] == "0"


def test_customer_record_follows_column_order(rows) -> None:
    record = customer_to_record(rows[0])

    assert list(record) == CSV_COLUMNS
    assert record["Customer Code"] == "C001"
    assert record["Last Updated"] == "2024-02-01T10:00:00"


def test_csv_bytes_carry_byte_order_mark(rows) -> None:
    assert customers_to_csv_bytes(rows).startswith(b"\xef\xbb\xbfCustomer Code,")


def test_export_file_name() -> None:
    assert export_file_name(date(2024, 3, 9)) == "customer_loyalty_data_2024-03-09.csv"


def test_report_escapes_and_summarises(rows) -> None:
    html = render_report(rows, _summary(rows), generated_at=datetime(2024, 3, 9, 14, 5, 0))

    assert "Ravi &lt;Admin&gt;" in html
    assert "Ravi <Admin>" not in html
    assert "Generated on 2024-03-09 at 14:05:00" in html
    assert "<strong>Total Points Available:</strong> 40" in html
    assert '<div id="table-report" style="display:block;">' in html
    assert 'id="btn-table" class="toggle-btn active"' in html


def test_report_stacked_mode_shows_cards_first(rows) -> None:
    html = render_report(rows, _summary(rows), mode="stacked")

    assert '<div id="table-report" style="display:none;">' in html
    assert 'class="stacked-grid" style="display:grid;"' in html
    assert '<div class="customer-title">C002</div>' in html
    assert "setReportStyle" in html


def test_report_rejects_unknown_mode(rows) -> None:
    with pytest.raises(ValueError):
        render_report(rows, _summary(rows), mode="landscape")
