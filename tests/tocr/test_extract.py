"""Tests for paygrid.tocr.extract: pdfplumber words to text items.

Covers:
- _build_extract_words_kwargs
- _word_to_item (coordinate flip, cleanup, drops)
- extract_text_items_from_page (mock page)
- extract_text_items (mock pdfplumber.open, error wrapping)
"""

from unittest.mock import MagicMock, patch

import pytest

from paygrid.config import GridConfig
from paygrid.ingest import IngestError
from paygrid.tocr.extract import (
    TextLayerResult,
    _build_extract_words_kwargs,
    _empty_diagnostics,
    _word_to_item,
    extract_text_items,
    extract_text_items_from_page,
)

# ── Helpers ────────────────────────────────────────────────────────────


def _word(
    x0: float = 10,
    top: float = 20,
    x1: float = 50,
    bottom: float = 32,
    text: str = "HELLO",
) -> dict:
    """Build a dict matching pdfplumber's extract_words output."""
    return {"x0": x0, "x1": x1, "top": top, "bottom": bottom, "text": text}


def _page(words: list[dict], width: float = 612, height: float = 792) -> MagicMock:
    page = MagicMock()
    page.width = width
    page.height = height
    page.extract_words.return_value = words
    return page


def _pdf(pages: list[MagicMock]) -> MagicMock:
    pdf = MagicMock()
    pdf.pages = pages
    pdf.__enter__.return_value = pdf
    pdf.__exit__.return_value = False
    return pdf


# ── kwargs ─────────────────────────────────────────────────────────────


class TestBuildKwargs:
    def test_defaults(self):
        kw = _build_extract_words_kwargs(GridConfig())
        assert kw == {"x_tolerance": 3.0, "y_tolerance": 3.0, "keep_blank_chars": True}

    def test_text_flow_and_no_blanks(self):
        kw = _build_extract_words_kwargs(
            GridConfig(tocr_keep_blank_chars=False, tocr_use_text_flow=True)
        )
        assert "keep_blank_chars" not in kw
        assert kw["use_text_flow"] is True


# ── _word_to_item ──────────────────────────────────────────────────────


class TestWordToItem:
    def test_flips_y_into_user_space(self):
        diag = _empty_diagnostics()
        item = _word_to_item(_word(x0=72, top=100, x1=120, bottom=112), 1, 792.0, GridConfig(), diag)
        assert item.x == 72
        assert item.y == 680
        assert item.width == 48
        assert item.height == 12
        assert item.page == 1

    def test_text_trimmed(self):
        item = _word_to_item(_word(text="  Two-Year payment history "), 1, 792, GridConfig(), _empty_diagnostics())
        assert item.text == "Two-Year payment history"

    def test_degenerate_dropped(self):
        diag = _empty_diagnostics()
        assert _word_to_item(_word(x0=50, x1=50), 1, 792, GridConfig(), diag) is None
        assert diag["degenerate_skipped"] == 1

    def test_blank_dropped(self):
        diag = _empty_diagnostics()
        assert _word_to_item(_word(text="   "), 1, 792, GridConfig(), diag) is None
        assert diag["blank_dropped"] == 1

    def test_control_chars_removed(self):
        diag = _empty_diagnostics()
        item = _word_to_item(_word(text="O\x01K\ufeff"), 1, 792, GridConfig(), diag)
        assert item.text == "OK"
        assert diag["control_char_cleaned"] == 1

    def test_control_filter_can_be_disabled(self):
        cfg = GridConfig(tocr_filter_control_chars=False)
        item = _word_to_item(_word(text="O\x01K"), 1, 792, cfg, _empty_diagnostics())
        assert item.text == "O\x01K"


# ── Page / document extraction ─────────────────────────────────────────


class TestExtractFromPage:
    def test_items_in_word_order(self):
        page = _page([_word(text="Jan", x0=100, x1=120), _word(text="Feb", x0=130, x1=150)])
        items = extract_text_items_from_page(page, 3, GridConfig())
        assert [(i.text, i.page) for i in items] == [("Jan", 3), ("Feb", 3)]
        page.extract_words.assert_called_once_with(
            x_tolerance=3.0, y_tolerance=3.0, keep_blank_chars=True
        )

    def test_empty_page_recorded(self):
        diag = _empty_diagnostics()
        assert extract_text_items_from_page(_page([]), 2, GridConfig(), diag) == []
        assert diag["empty_pages"] == [2]


class TestExtractTextItems:
    def test_pages_numbered_from_one(self):
        pdf = _pdf([_page([_word(text="A")]), _page([_word(text="B")], height=600)])
        with patch("paygrid.tocr.extract.pdfplumber.open", return_value=pdf):
            result = extract_text_items("report.pdf")
        assert isinstance(result, TextLayerResult)
        assert result.page_count == 2
        assert [(i.text, i.page) for i in result.items] == [("A", 1), ("B", 2)]
        assert result.page_sizes == [(612.0, 792.0), (612.0, 600.0)]
        assert result.diagnostics["items_total"] == 2

    def test_bytes_source_wrapped(self):
        pdf = _pdf([])
        with patch("paygrid.tocr.extract.pdfplumber.open", return_value=pdf) as opener:
            extract_text_items(b"%PDF-1.4 ...")
        (arg,), _ = opener.call_args
        assert arg.read() == b"%PDF-1.4 ..."

    def test_open_failure_wrapped(self):
        with patch(
            "paygrid.tocr.extract.pdfplumber.open", side_effect=ValueError("bad xref")
        ):
            with pytest.raises(IngestError, match="bad xref"):
                extract_text_items("broken.pdf")
