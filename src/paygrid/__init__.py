"""Payment-history grid reconstruction for credit-report PDFs.

Frequently-used symbols are re-exported here for convenience.  The PDF
adapter, exports, and HTTP app live in their own subpackages::

    from paygrid.tocr import extract_text_items
    from paygrid.export import export_issues_csv
    from paygrid.api import create_app
"""

# ── Core models & config ──────────────────────────────────────────────

from .config import ConfigValidationError, GridConfig
from .grid import parse_payment_grid, select_grid_items
from .issues import extract_issues
from .legend import STATUS_LEGEND, resolve_status_label
from .locate import AnalysisError, UnsupportedDocumentError, locate_accounts
from .models import (
    BUREAUS,
    AccountAnchor,
    AccountRecord,
    Grid,
    Header,
    Issue,
    TextItem,
)
from .pipeline import (
    AnalysisReport,
    StageResult,
    analyze_account,
    analyze_items_report,
    analyze_pdf,
    analyze_text_items,
)

__version__ = "0.1.0"

__all__ = [
    # Models & config
    "GridConfig",
    "ConfigValidationError",
    "TextItem",
    "AccountAnchor",
    "Header",
    "Grid",
    "Issue",
    "AccountRecord",
    "BUREAUS",
    # Legend
    "STATUS_LEGEND",
    "resolve_status_label",
    # Stages
    "locate_accounts",
    "select_grid_items",
    "parse_payment_grid",
    "extract_issues",
    # Pipeline
    "AnalysisError",
    "UnsupportedDocumentError",
    "AnalysisReport",
    "StageResult",
    "analyze_account",
    "analyze_items_report",
    "analyze_pdf",
    "analyze_text_items",
]
