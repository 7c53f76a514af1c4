"""Text-layer extraction: PDF words → positioned :class:`TextItem` stream.

Words come from ``pdfplumber.Page.extract_words`` with blank characters
kept, so a phrase set in one run ("Two-Year payment history") stays one
item while cells separated only by position split apart.  Coordinates are
flipped into PDF user space: ``x`` is the word's left edge and ``y`` is
measured up from the bottom of the page to the word's bottom edge.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import pdfplumber

from ..config import GridConfig
from ..ingest import IngestError
from ..models import TextItem

log = logging.getLogger(__name__)

PdfSource = Union[Path, str, bytes]

# C0 controls other than tab, newline and carriage return, plus BOM
_RE_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufeff]")


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class TextLayerResult:
    """Text items for a whole document plus per-page sizes and counters."""

    items: List[TextItem]
    page_count: int
    page_sizes: List[Tuple[float, float]] = field(default_factory=list)
    diagnostics: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _empty_diagnostics() -> dict[str, Any]:
    """Fresh counters for one extraction run."""
    return {
        "words_raw": 0,
        "items_total": 0,
        "degenerate_skipped": 0,
        "control_char_cleaned": 0,
        "blank_dropped": 0,
        "empty_pages": [],
    }


def _build_extract_words_kwargs(cfg: GridConfig) -> dict[str, Any]:
    """Keyword arguments for ``Page.extract_words`` from the tocr_* settings."""
    kw: dict[str, Any] = {
        "x_tolerance": cfg.tocr_x_tolerance,
        "y_tolerance": cfg.tocr_y_tolerance,
    }
    if cfg.tocr_keep_blank_chars:
        kw["keep_blank_chars"] = True
    if cfg.tocr_use_text_flow:
        kw["use_text_flow"] = True
    return kw


def _word_to_item(
    w: dict,
    page_num: int,
    page_h: float,
    cfg: GridConfig,
    diag: dict[str, Any],
) -> Optional[TextItem]:
    """Convert a pdfplumber word dict into a TextItem, or ``None`` to drop it."""
    x0 = float(w.get("x0", 0.0))
    x1 = float(w.get("x1", 0.0))
    top = float(w.get("top", 0.0))
    bottom = float(w.get("bottom", 0.0))
    if x1 <= x0 or bottom <= top:
        diag["degenerate_skipped"] += 1
        return None

    text = w.get("text", "")
    if cfg.tocr_filter_control_chars and _RE_CONTROL.search(text):
        text = _RE_CONTROL.sub("", text)
        diag["control_char_cleaned"] += 1

    text = text.strip()
    if not text:
        diag["blank_dropped"] += 1
        return None

    return TextItem(
        text=text,
        page=page_num,
        x=x0,
        y=page_h - bottom,
        width=x1 - x0,
        height=bottom - top,
    )


def _open(source: PdfSource):
    if isinstance(source, (bytes, bytearray)):
        return pdfplumber.open(io.BytesIO(source))
    return pdfplumber.open(source)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_text_items_from_page(
    page: "pdfplumber.page.Page",
    page_num: int,
    cfg: GridConfig | None = None,
    diag: dict[str, Any] | None = None,
) -> List[TextItem]:
    """Extract text items from an already-opened pdfplumber Page.

    Parameters
    ----------
    page : pdfplumber.page.Page
        An opened page object.
    page_num : int
        1-based page number stored on every item.
    cfg : GridConfig, optional
        Extraction settings.  Defaults are used when ``None``.
    diag : dict, optional
        Counters to update in place; see :func:`_empty_diagnostics`.
    """
    if cfg is None:
        cfg = GridConfig()
    if diag is None:
        diag = _empty_diagnostics()

    page_h = float(page.height)
    words = page.extract_words(**_build_extract_words_kwargs(cfg))
    diag["words_raw"] += len(words)

    items: List[TextItem] = []
    for w in words:
        item = _word_to_item(w, page_num, page_h, cfg, diag)
        if item is not None:
            items.append(item)

    if not items:
        diag["empty_pages"].append(page_num)
        log.warning(
            "Page %d: zero text items extracted (blank or image-only page)",
            page_num,
        )
    return items


def extract_text_items(
    source: PdfSource,
    cfg: GridConfig | None = None,
) -> TextLayerResult:
    """Extract the text-item stream for every page of a PDF.

    *source* may be a path or the raw bytes of an upload.  Items are
    returned in page order, then in pdfplumber's reading order.

    Raises
    ------
    IngestError
        When the document cannot be opened or read.
    """
    if cfg is None:
        cfg = GridConfig()

    diag = _empty_diagnostics()
    items: List[TextItem] = []
    sizes: List[Tuple[float, float]] = []
    try:
        with _open(source) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                sizes.append((float(page.width), float(page.height)))
                items.extend(extract_text_items_from_page(page, page_num, cfg, diag))
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot extract text from PDF: {exc}") from exc

    diag["items_total"] = len(items)
    log.info("Extracted %d text items from %d pages", len(items), len(sizes))
    return TextLayerResult(
        items=items,
        page_count=len(sizes),
        page_sizes=sizes,
        diagnostics=diag,
    )
