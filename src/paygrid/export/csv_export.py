"""Flat CSV export of analysis results: one row per issue."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Sequence

from ..models import AccountRecord

ISSUE_COLUMNS = ["account", "bureau", "month", "year", "status"]


def _safe_str(val: Any) -> str:
    """Convert to string, handling None gracefully."""
    if val is None:
        return ""
    return str(val)


def export_issues_csv(records: Sequence[AccountRecord], out_path: Path) -> Path:
    """Write every issue of every account to *out_path*.

    Rows follow account order, then issue order.  A header row is always
    written, even when *records* is empty.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=ISSUE_COLUMNS)
        writer.writeheader()
        for rec in records:
            for issue in rec.issues:
                writer.writerow(
                    {
                        "account": _safe_str(rec.name),
                        "bureau": _safe_str(issue.bureau),
                        "month": _safe_str(issue.month),
                        "year": _safe_str(issue.year),
                        "status": _safe_str(issue.status),
                    }
                )
    return out_path
