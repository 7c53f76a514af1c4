"""Export helpers: JSON / HTML reports, issues CSV, and debug overlays."""

from .csv_export import ISSUE_COLUMNS, export_issues_csv
from .overlay import draw_grid_overlay
from .report import write_report_html, write_report_json

__all__ = [
    "ISSUE_COLUMNS",
    "draw_grid_overlay",
    "export_issues_csv",
    "write_report_html",
    "write_report_json",
]
