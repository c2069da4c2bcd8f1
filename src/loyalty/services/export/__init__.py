"""Export services."""

from .csv_export import CSV_COLUMNS, customers_to_csv, customers_to_csv_bytes, export_file_name
from .report import REPORT_MODES, render_report

__all__ = [
    "CSV_COLUMNS",
    "customers_to_csv",
    "customers_to_csv_bytes",
    "export_file_name",
    "REPORT_MODES",
    "render_report",
]
