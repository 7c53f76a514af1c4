"""Ingest stage: check a credit-report PDF before any text is pulled from it.

Uploads arrive as bytes and the CLI passes paths; both are checked here so
the text layer only ever opens a document that looks like a readable PDF.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

import pdfplumber
from PIL import Image

log = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"

PdfInput = Union[Path, str, bytes]


class IngestError(Exception):
    """The input cannot be read as a PDF."""


@dataclass
class PageInfo:
    """Size of one page in points; ``number`` is 1-based like ``TextItem.page``."""

    number: int
    width: float
    height: float

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }


@dataclass
class PdfMeta:
    """What ingest learned about a document.  Holds no open file handle."""

    name: str
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)
    file_size_bytes: int = 0
    pdf_metadata: dict = field(default_factory=dict)
    path: Optional[Path] = None

    def page(self, number: int) -> PageInfo:
        """Look up a page by its 1-based *number*."""
        if number < 1:
            raise IndexError(f"page numbers start at 1, got {number}")
        return self.pages[number - 1]

    def to_dict(self) -> dict:
        out: dict = {
            "name": self.name,
            "num_pages": self.num_pages,
            "file_size_bytes": self.file_size_bytes,
        }
        if self.path is not None:
            out["path"] = str(self.path)
        if self.pdf_metadata:
            out["pdf_metadata"] = self.pdf_metadata
        out["pages"] = [p.to_dict() for p in self.pages]
        return out


# ── Checks ─────────────────────────────────────────────────────────────


def validate_pdf_bytes(data: bytes, max_bytes: Optional[int] = None) -> None:
    """Reject an upload that is empty, over *max_bytes*, or lacks ``%PDF``."""
    if not data:
        raise IngestError("Empty upload")
    if max_bytes is not None and len(data) > max_bytes:
        raise IngestError(
            f"Upload of {len(data)} bytes exceeds limit of {max_bytes} bytes"
        )
    if not data.startswith(PDF_MAGIC):
        raise IngestError("Upload is not a PDF (missing %PDF header)")


def _check_report_path(path: Path) -> int:
    """Return the file size of a usable report path, else raise."""
    if not path.is_file():
        reason = "Not a file" if path.exists() else "File not found"
        raise IngestError(f"{reason}: {path}")
    if path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={path.suffix!r}): {path}")
    size = path.stat().st_size
    if size == 0:
        raise IngestError(f"Empty file: {path}")
    return size


def _prepare(
    source: PdfInput,
    name: Optional[str],
    max_bytes: Optional[int],
) -> Tuple[Union[Path, BinaryIO], int, str, Optional[Path]]:
    """Check *source* and return ``(openable, size, display_name, path)``."""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        validate_pdf_bytes(data, max_bytes)
        return io.BytesIO(data), len(data), name or "upload.pdf", None
    path = Path(source)
    size = _check_report_path(path)
    return path, size, name or path.name, path.resolve()


def _info_dict(raw: dict) -> dict:
    # pdfminer hands back bytes for some info fields
    return {
        str(key): (
            value.decode("utf-8", errors="replace")
            if isinstance(value, bytes)
            else ("" if value is None else str(value))
        )
        for key, value in raw.items()
    }


# ── Public API ─────────────────────────────────────────────────────────


def ingest_pdf(
    source: PdfInput,
    name: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> PdfMeta:
    """Check a report PDF and describe its pages.

    *source* is a path or the raw bytes of an upload; *name* overrides the
    display name (``"upload.pdf"`` for bytes by default) and *max_bytes*
    caps the size of byte sources.

    Raises
    ------
    IngestError
        For a missing, empty, oversized, non-PDF, extraction-locked, or
        unparseable document.
    """
    openable, size, display, path = _prepare(source, name, max_bytes)

    try:
        with pdfplumber.open(openable) as pdf:
            doc = getattr(pdf, "doc", None)
            if doc is not None and getattr(doc, "is_extractable", True) is False:
                raise IngestError(
                    f"PDF is password-protected or encrypted "
                    f"(text extraction not permitted): {display}"
                )
            pages = [
                PageInfo(number=n, width=float(p.width), height=float(p.height))
                for n, p in enumerate(pdf.pages, start=1)
            ]
            info = _info_dict(pdf.metadata or {})
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    log.info("Ingested %s: %d page(s), %d bytes", display, len(pages), size)
    return PdfMeta(
        name=display,
        num_pages=len(pages),
        pages=pages,
        file_size_bytes=size,
        pdf_metadata=info,
        path=path,
    )


def render_page_image(
    source: PdfInput,
    page_number: int,
    resolution: int = 100,
) -> Image.Image:
    """Render 1-based *page_number* as an RGB image, for overlays."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))
    with pdfplumber.open(source) as pdf:
        rendered = pdf.pages[page_number - 1].to_image(resolution=resolution)
        img = rendered.original.copy()
    return img if img.mode == "RGB" else img.convert("RGB")
