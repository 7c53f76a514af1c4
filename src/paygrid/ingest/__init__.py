"""Ingest stage: PDF validation, metadata, and rendering.

Public API
----------
- :func:`ingest_pdf`: open + validate a PDF path or upload, return :class:`PdfMeta`
- :func:`validate_pdf_bytes`: size and header checks for uploaded bytes
- :func:`render_page_image`: render one page to PIL Image at a given DPI
- :class:`PdfMeta`: PDF-level metadata container
- :class:`PageInfo`: per-page dimensions
- :class:`IngestError`: raised on validation failures
"""

from .ingest import (
    IngestError,
    PageInfo,
    PdfMeta,
    ingest_pdf,
    render_page_image,
    validate_pdf_bytes,
)

__all__ = [
    "IngestError",
    "PageInfo",
    "PdfMeta",
    "ingest_pdf",
    "render_page_image",
    "validate_pdf_bytes",
]
