"""Printable HTML report for the customer list.

The document carries both renderings (a table and a grid of address cards)
and a small script to switch between them, so changing the layout never needs
another round trip for data.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Literal, Optional, Sequence

from ...models.domain import CustomerRow, PageResult
from ..ledger.policy import CLAIM_UNIT, max_claimable

ReportMode = Literal["table", "stacked"]
REPORT_MODES: tuple[str, ...] = ("table", "stacked")

_STYLE = """
    body { font-family: Arial, sans-serif; margin: 0; padding: 15px; }
    table { border-collapse: collapse; width: 100%; font-size: 12px; }
    th, td { border: 1px solid #ddd; padding: 6px; text-align: left; }
    th { background-color: #f2f2f2; font-weight: bold; }
    .header { text-align: center; margin-bottom: 20px; }
    .summary { margin-bottom: 20px; }
    .rules { background: #f0f8ff; padding: 10px; margin-bottom: 20px; border-left: 4px solid #007bff; }
    .stacked-grid { display: grid; grid-template-columns: repeat(3, minmax(0, 1fr)); gap: 12px; align-items: start; }
    .customer-card { border: 1px solid #ddd; border-radius: 8px; padding: 10px; page-break-inside: avoid;
                     box-sizing: border-box; display: flex; flex-direction: column; gap: 6px; }
    .customer-title { font-size: 14px; font-weight: 700; color: #1f2937; line-height: 1.2; }
    .stack-line { font-size: 12px; color: #111827; line-height: 1.25; margin: 0; }
    .toggle-btn { padding: 8px 14px; border: 1px solid #d1d5db; background: #fff; border-radius: 6px; cursor: pointer; }
    .toggle-btn.active { background: #dbeafe; color: #1d4ed8; border-color: #93c5fd; font-weight: 600; }
    @media print { .no-print, .no-print * { display: none !important; } }
    @media (max-width: 1100px) { .stacked-grid { grid-template-columns: repeat(2, minmax(0, 1fr)); } }
    @media (max-width: 700px) { .stacked-grid { grid-template-columns: 1fr; } }
"""

_SCRIPT = """
    function setReportStyle(style) {
      var stacked = style === 'stacked';
      document.getElementById('table-report').style.display = stacked ? 'none' : 'block';
      document.getElementById('stacked-report').style.display = stacked ? 'grid' : 'none';
      document.getElementById('btn-table').classList.toggle('active', !stacked);
      document.getElementById('btn-stacked').classList.toggle('active', stacked);
    }
"""

_TABLE_HEADINGS = (
    "Code",
    "Customer Name",
    "Place",
    "Mobile",
    "Total Points",
    "Claimed",
    "Unclaimed",
    "Max Claimable",
    "Last Sales Date",
)


def _text(value: object) -> str:
    return "" if value is None else escape(str(value).strip())


def render_table_rows(customers: Sequence[CustomerRow]) -> str:
    lines = []
    for customer in customers:
        cells = (
            customer.code,
            customer.name,
            customer.place,
            customer.mobile,
            customer.total,
            customer.claimed,
            customer.unclaimed,
            max_claimable(customer.unclaimed),
            customer.last_sales_date,
        )
        lines.append("<tr>" + "".join(f"<td>{_text(cell)}</td>" for cell in cells) + "</tr>")
    return "\n".join(lines)


def render_stacked_cards(customers: Sequence[CustomerRow]) -> str:
    cards = []
    for customer in customers:
        address = " ".join(
            part
            for part in (_text(customer.house_name), _text(customer.street), _text(customer.place), _text(customer.pin_code))
            if part
        )
        lines = [f'<div class="customer-title">{_text(customer.code)}</div>']
        for line in (_text(customer.name), address, _text(customer.mobile)):
            if line:
                lines.append(f'<div class="stack-line">{line}</div>')
        cards.append('<div class="customer-card">' + "".join(lines) + "</div>")
    return "\n".join(cards)


def render_report(
    customers: Sequence[CustomerRow],
    summary: PageResult,
    mode: ReportMode = "table",
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the full printable report; ``mode`` picks the layout shown first."""
    if mode not in REPORT_MODES:
        raise ValueError(f"Unknown report mode '{mode}'")
    generated_at = generated_at or datetime.now()
    stacked = mode == "stacked"
    headings = "".join(f"<th>{heading}</th>" for heading in _TABLE_HEADINGS)

    return f"""<html>
  <head>
    <title>Customer Loyalty Program - Report</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <div class="header">
      <h1>Customer Loyalty Program Report</h1>
      <p>Generated on {generated_at:%Y-%m-%d} at {generated_at:%H:%M:%S}</p>
    </div>
    <div class="rules">
      <h3>Claiming Rules:</h3>
      <p>&bull; Claims must be in multiples of {CLAIM_UNIT} points</p>
      <p>&bull; Minimum eligibility: {CLAIM_UNIT} points</p>
    </div>
    <div class="summary">
      <p><strong>Total Customers:</strong> {summary.total_count}</p>
      <p><strong>Eligible for Claims (&ge;{CLAIM_UNIT} points):</strong> {summary.eligible_count}</p>
      <p><strong>Total Points Issued:</strong> {summary.total_points}</p>
      <p><strong>Total Points Claimed:</strong> {summary.total_claimed}</p>
      <p><strong>Total Points Available:</strong> {summary.total_unclaimed}</p>
    </div>
    <div id="print-controls" class="no-print" style="margin-bottom: 20px; display: flex; justify-content: center; gap: 10px;">
      <button id="btn-table" class="toggle-btn{'' if stacked else ' active'}" onclick="setReportStyle('table')">Table</button>
      <button id="btn-stacked" class="toggle-btn{' active' if stacked else ''}" onclick="setReportStyle('stacked')">Stacked</button>
      <button onclick="window.print()">Print Report</button>
    </div>
    <div id="table-report" style="display:{'none' if stacked else 'block'};">
      <table>
        <thead><tr>{headings}</tr></thead>
        <tbody>
{render_table_rows(customers)}
        </tbody>
      </table>
    </div>
    <div id="stacked-report" class="stacked-grid" style="display:{'grid' if stacked else 'none'};">
{render_stacked_cards(customers)}
    </div>
    <div style="margin-top: 20px; font-size: 10px; color: #666;">
      <p>Claims must be in multiples of {CLAIM_UNIT} points | Minimum eligibility: {CLAIM_UNIT} points</p>
      <p>Report generated from Customer Loyalty Management System</p>
    </div>
    <script>{_SCRIPT}</script>
  </body>
</html>
"""
