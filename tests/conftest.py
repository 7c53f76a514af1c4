"""Shared test fixtures for paygrid."""

from __future__ import annotations

import pytest

from paygrid.config import GridConfig
from paygrid.models import TextItem

SENTINEL = "Two-Year payment history"

# Column x positions used by the synthetic grids below.
COLUMN_XS = (100.0, 130.0, 160.0, 190.0)

# ── Helpers ────────────────────────────────────────────────────────────


def make_item(text: str, x: float = 0.0, y: float = 0.0, page: int = 1) -> TextItem:
    """Create a TextItem with sane defaults."""
    return TextItem(text=text, page=page, x=x, y=y)


def make_account_items(
    name: str | None,
    months: list[str],
    years: list[str] | None,
    bureau_rows: dict[str, list[str]] | None = None,
    marker_y: float = 500.0,
    page: int = 1,
    xs: tuple[float, ...] = COLUMN_XS,
) -> list[TextItem]:
    """Build the items of one payment-history section.

    Layout (y grows upward)::

        name            marker_y + 30
        marker          marker_y
        months          marker_y - 30
        years           marker_y - 40
        bureau rows     marker_y - 50, -60, -70

    A bureau row's first value is the row label (placed at x=20); the rest
    are status cells in column order, ``""`` meaning no item.  Pass
    ``years=None`` to omit the year row.
    """
    items: list[TextItem] = []
    if name is not None:
        items.append(make_item(name, x=20, y=marker_y + 30, page=page))
    items.append(make_item(SENTINEL, x=20, y=marker_y, page=page))
    for x, month in zip(xs, months):
        items.append(make_item(month, x=x, y=marker_y - 30, page=page))
    if years is not None:
        for x, year in zip(xs, years):
            items.append(make_item(year, x=x, y=marker_y - 40, page=page))
    for offset, (bureau, cells) in enumerate((bureau_rows or {}).items()):
        y = marker_y - 50 - 10 * offset
        label, *codes = cells
        items.append(make_item(label, x=20, y=y, page=page))
        for x, code in zip(xs, codes):
            if code:
                items.append(make_item(code, x=x, y=y, page=page))
    return items


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> GridConfig:
    """Return a default GridConfig."""
    return GridConfig()


@pytest.fixture
def late_account_items() -> list[TextItem]:
    """One account with a 30-day late on TransUnion in Jan 2023."""
    return make_account_items(
        "CAPITAL BANK",
        ["Jan", "Feb"],
        ["23", "23"],
        {"TransUnion": ["TransUnion", "30", ""]},
    )


@pytest.fixture
def two_account_items() -> list[TextItem]:
    """Two accounts on one page; the lower one has 60 and CO on Experian."""
    first = make_account_items(
        "FIRST CARD",
        ["Nov", "Dec", "Jan"],
        ["22", "22", "23"],
        {
            "TransUnion": ["TransUnion", "OK", "OK", "OK"],
            "Experian": ["Experian", "OK", "60", "CO"],
        },
        marker_y=700.0,
    )
    second = make_account_items(
        "AUTO LOAN CO",
        ["Mar", "Apr"],
        ["24", "24"],
        {"Equifax": ["Equifax", "90", "OK"]},
        marker_y=400.0,
    )
    return first + second
