"""Text-layer extraction: PDF words to positioned text items.

Public API
----------
- :func:`extract_text_items`: extract the item stream from a PDF path or bytes
- :func:`extract_text_items_from_page`: extract from an open pdfplumber Page
- :class:`TextLayerResult`: extraction result container
"""

from .extract import TextLayerResult, extract_text_items, extract_text_items_from_page

__all__ = [
    "TextLayerResult",
    "extract_text_items",
    "extract_text_items_from_page",
]
