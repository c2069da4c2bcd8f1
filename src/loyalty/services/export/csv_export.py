"""Serialize customer rows into the CSV export format."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Optional, Sequence

from ...models.domain import CustomerRow
from ..ledger.policy import CLAIM_UNIT, max_claimable

CSV_ENCODING = "utf-8-sig"

CSV_COLUMNS = [
    "Customer Code",
    "Customer Name",
    "House Name",
    "Street",
    "Place",
    "PIN Code",
    "Mobile",
    "Last Sales Date",
    "Total Points",
    "Claimed Points",
    "Unclaimed Points",
    f"Max Claimable (Multiple of {CLAIM_UNIT})",
    "Last Updated",
]


def _cell(value: object) -> object:
    return "" if value is None else value


def customer_to_record(customer: CustomerRow) -> dict[str, object]:
    values = [
        customer.code,
        customer.name,
        customer.house_name,
        customer.street,
        customer.place,
        customer.pin_code,
        customer.mobile,
        customer.last_sales_date,
        customer.total,
        customer.claimed,
        customer.unclaimed,
        max_claimable(customer.unclaimed),
        customer.last_updated,
    ]
    return {column: _cell(value) for column, value in zip(CSV_COLUMNS, values)}


def customers_to_csv(customers: Sequence[CustomerRow]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for customer in customers:
        writer.writerow(customer_to_record(customer))
    return buffer.getvalue()


def customers_to_csv_bytes(customers: Sequence[CustomerRow]) -> bytes:
    return customers_to_csv(customers).encode(CSV_ENCODING)


def export_file_name(today: Optional[date] = None) -> str:
    return f"customer_loyalty_data_{(today or date.today()).isoformat()}.csv"
