"""Grid extraction and parsing for one payment-history section.

A section's grid is plain positioned text with no table markup:

    ┌───────────┬─────┬─────┬─────┐
    │           │ Jan │ Feb │ ... │   month row
    │           │ 23  │ 23  │ ... │   year row
    │ TransUnion│ OK  │ 30  │ ... │   one row per bureau
    │ Experian  │ OK  │     │ ... │
    └───────────┴─────┴─────┴─────┘

Rows come from y-bucketing, columns from the month row's x positions, and
every other cell snaps to its nearest column.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ._geometry import nearest_header_index, round_half_up
from .config import GridConfig
from .models import BUREAUS, Grid, Header, TextItem

log = logging.getLogger(__name__)

MONTHS = frozenset(
    ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
     "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
)

_RE_TWO_DIGIT_YEAR = re.compile(r"^\d{2}$")


@dataclass
class GridRows:
    """Rows of one grid window, picked out by content."""

    month: Optional[List[TextItem]] = None
    year: Optional[List[TextItem]] = None
    bureaus: Dict[str, List[TextItem]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Grid extractor
# ---------------------------------------------------------------------------


def select_grid_items(
    marker: TextItem,
    items: Sequence[TextItem],
    cfg: GridConfig,
) -> List[TextItem]:
    """Items on the marker's page inside its fixed vertical window.

    Both window edges are exclusive.  Stream order is preserved.
    """
    top = marker.y - cfg.window_top_offset
    bottom = marker.y - cfg.window_bottom_offset
    return [
        it for it in items if it.page == marker.page and top < it.y < bottom
    ]


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def cluster_rows(items: Sequence[TextItem], quantum: float = 1.0) -> List[List[TextItem]]:
    """Group items into physical rows by rounded y, topmost row first."""
    buckets: Dict[int, List[TextItem]] = {}
    for it in items:
        buckets.setdefault(round_half_up(it.y, quantum), []).append(it)
    rows = list(buckets.values())
    rows.sort(key=lambda row: row[0].y, reverse=True)
    return rows


def _is_month_row(row: Sequence[TextItem]) -> bool:
    return any(it.text.strip() in MONTHS for it in row)


def _is_year_row(row: Sequence[TextItem]) -> bool:
    return any(_RE_TWO_DIGIT_YEAR.match(it.text.strip()) for it in row)


def _first_row(rows, predicate) -> Optional[List[TextItem]]:
    return next((row for row in rows if predicate(row)), None)


def classify_rows(rows: Sequence[List[TextItem]]) -> GridRows:
    """Pick the month, year, and bureau rows; each is the first match top-down.

    One physical row may fill more than one role.
    """
    found = GridRows(
        month=_first_row(rows, _is_month_row),
        year=_first_row(rows, _is_year_row),
    )
    for bureau in BUREAUS:
        row = _first_row(rows, lambda r, b=bureau: any(b in it.text for it in r))
        if row is not None:
            found.bureaus[bureau] = row
    return found


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


def build_headers(month_row: Sequence[TextItem]) -> List[Header]:
    """One header per month-row item, ordered left to right."""
    headers = [Header(month=it.text.strip(), x=it.x) for it in month_row]
    headers.sort(key=lambda h: h.x)
    return headers


def assign_years(
    headers: Sequence[Header],
    year_row: Sequence[TextItem],
    century_prefix: str = "20",
) -> List[Header]:
    """Give each year label to its nearest column; later labels overwrite."""
    years: List[Optional[str]] = [h.year for h in headers]
    for it in year_row:
        idx = nearest_header_index(headers, it.x)
        if idx is not None:
            years[idx] = f"{century_prefix}{it.text.strip()}"
    return [
        Header(month=h.month, x=h.x, year=y) for h, y in zip(headers, years)
    ]


def decode_bureau_row(
    bureau: str,
    row: Sequence[TextItem],
    headers: Sequence[Header],
) -> Tuple[str, ...]:
    """Snap a bureau row's status cells onto the columns.

    The row-label cell (the one naming the bureau) is skipped.  Columns
    that receive nothing stay ``""``.
    """
    statuses = [""] * len(headers)
    for it in row:
        if bureau in it.text:
            continue
        idx = nearest_header_index(headers, it.x)
        if idx is not None:
            statuses[idx] = it.text.strip()
    return tuple(statuses)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def parse_payment_grid(
    items: Sequence[TextItem],
    cfg: Optional[GridConfig] = None,
) -> Grid:
    """Rebuild the payment grid from a window of positioned items.

    Returns an empty :class:`Grid` when the month or year row is missing.
    """
    if cfg is None:
        cfg = GridConfig()
    if not items:
        return Grid()

    rows = cluster_rows(items, cfg.row_quantum)
    found = classify_rows(rows)
    if found.month is None or found.year is None:
        log.debug(
            "Grid window of %d item(s) has no %s row; skipping",
            len(items),
            "month" if found.month is None else "year",
        )
        return Grid()

    headers = assign_years(
        build_headers(found.month), found.year, cfg.century_prefix
    )
    statuses = {
        bureau: decode_bureau_row(bureau, row, headers)
        for bureau, row in found.bureaus.items()
    }
    return Grid(headers=tuple(headers), statuses=statuses)
