"""Account locator: payment-history markers and the account names above them."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ._geometry import nearest
from .config import GridConfig
from .models import AccountAnchor, TextItem

log = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base class for failures that abort a whole document analysis."""


class UnsupportedDocumentError(AnalysisError):
    """Raised when the text stream holds no payment-history marker."""


def find_markers(items: Sequence[TextItem], cfg: GridConfig) -> List[TextItem]:
    """Return every item containing the sentinel phrase, in stream order."""
    return [it for it in items if cfg.sentinel in it.text]


def _is_name_candidate(item: TextItem, cfg: GridConfig) -> bool:
    text = item.text.strip()
    return len(text) > cfg.name_min_length and item.text.upper() == item.text


def resolve_account_name(
    marker: TextItem,
    items: Sequence[TextItem],
    cfg: GridConfig,
) -> str:
    """Closest all-caps label above *marker* on the same page.

    Falls back to ``cfg.unknown_account_name``; equal distances keep the
    item that comes first in the stream.
    """
    hit = nearest(
        items,
        distance=lambda it: it.y - marker.y,
        eligible=lambda it: (
            it.page == marker.page
            and it.y > marker.y
            and _is_name_candidate(it, cfg)
        ),
    )
    if hit is None:
        return cfg.unknown_account_name
    return hit[1].text.strip()


def locate_accounts(
    items: Sequence[TextItem],
    cfg: Optional[GridConfig] = None,
) -> List[AccountAnchor]:
    """Pair every marker with its account name.

    Raises
    ------
    UnsupportedDocumentError
        When no item contains the sentinel phrase.
    """
    if cfg is None:
        cfg = GridConfig()

    markers = find_markers(items, cfg)
    if not markers:
        raise UnsupportedDocumentError(
            f"Could not find any '{cfg.sentinel}' sections in the document. "
            "The format might not be supported."
        )

    anchors = [
        AccountAnchor(marker=m, name=resolve_account_name(m, items, cfg))
        for m in markers
    ]
    log.info(
        "Located %d payment-history section(s) across %d item(s)",
        len(anchors),
        len(items),
    )
    return anchors
