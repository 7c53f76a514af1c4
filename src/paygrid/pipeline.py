"""Analysis pipeline: stage records, per-account analysis, and aggregation.

Document flow::

    ingest → tocr → locate → grids

``ingest`` and ``tocr`` turn a PDF into the text-item stream; ``locate``
finds every payment-history marker; ``grids`` extracts, parses, and scans
one grid per marker and keeps the accounts that have issues.

:func:`analyze_text_items` is the I/O-free core and can be called with
any item stream.  :func:`analyze_pdf` wraps it with the PDF stages and
returns an :class:`AnalysisReport` whose :meth:`~AnalysisReport.to_dict`
is the upload endpoint's response body.
"""

from __future__ import annotations

import logging
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Mapping, Optional, Sequence, Union

from .config import GridConfig
from .grid import parse_payment_grid, select_grid_items
from .issues import extract_issues
from .legend import STATUS_LEGEND, legend_as_dict
from .locate import locate_accounts
from .models import AccountAnchor, AccountRecord, TextItem

logger = logging.getLogger("paygrid.pipeline")

STAGE_ORDER: List[str] = ["ingest", "tocr", "locate", "grids"]


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Timing, counts, and error of one analysis stage."""

    stage: str
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form; empty counts and a missing error are left out."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "ran": self.ran,
            "status": self.status,
            "duration_ms": self.duration_ms,
        }
        if self.counts:
            d["counts"] = self.counts
        if self.error is not None:
            d["error"] = self.error
        return d


@contextmanager
def run_stage(stage: str) -> Generator[StageResult, None, None]:
    """Wrap a pipeline stage with timing and failure capture.

    Usage::

        with run_stage("tocr") as sr:
            items = ...
            sr.counts["items"] = len(items)

    Exceptions are recorded on the :class:`StageResult` and re-raised.
    """
    sr = StageResult(stage=stage, ran=True)
    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


# ── Core analysis ──────────────────────────────────────────────────────


def analyze_account(
    anchor: AccountAnchor,
    items: Sequence[TextItem],
    cfg: GridConfig,
    legend: Optional[Mapping[str, str]] = None,
) -> AccountRecord:
    """Extract, parse, and scan the grid under one marker."""
    window = select_grid_items(anchor.marker, items, cfg)
    grid = parse_payment_grid(window, cfg)
    issues = extract_issues(grid, legend, cfg)
    return AccountRecord(name=anchor.name, issues=tuple(issues))


def analyze_anchors(
    anchors: Sequence[AccountAnchor],
    items: Sequence[TextItem],
    cfg: GridConfig,
    legend: Optional[Mapping[str, str]] = None,
) -> List[AccountRecord]:
    """One :class:`AccountRecord` per anchor, in anchor order.

    Runs on a thread pool when ``cfg.max_workers > 1``; accounts never
    share state so the result is the same either way.
    """
    if cfg.max_workers > 1 and len(anchors) > 1:
        with ThreadPoolExecutor(max_workers=cfg.max_workers) as pool:
            return list(
                pool.map(lambda a: analyze_account(a, items, cfg, legend), anchors)
            )
    return [analyze_account(a, items, cfg, legend) for a in anchors]


def analyze_text_items(
    items: Sequence[TextItem],
    cfg: Optional[GridConfig] = None,
    legend: Optional[Mapping[str, str]] = None,
) -> List[AccountRecord]:
    """Accounts with at least one issue, in marker discovery order.

    Raises
    ------
    UnsupportedDocumentError
        When the stream contains no payment-history marker.
    """
    if cfg is None:
        cfg = GridConfig()
    anchors = locate_accounts(items, cfg)
    records = analyze_anchors(anchors, items, cfg, legend)
    return [r for r in records if r.has_issues]


# ── Document-level result ──────────────────────────────────────────────


@dataclass
class AnalysisReport:
    """Everything one document analysis produced."""

    filename: str
    total_pages: int
    results: List[AccountRecord] = field(default_factory=list)
    legend: Mapping[str, str] = field(default_factory=lambda: STATUS_LEGEND)
    accounts_found: int = 0
    stages: Dict[str, StageResult] = field(default_factory=dict)

    @property
    def accounts_with_issues(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        """Response body for a successful analysis."""
        return {
            "success": True,
            "filename": self.filename,
            "totalPages": self.total_pages,
            "accountsWithIssues": self.accounts_with_issues,
            "results": [r.to_dict() for r in self.results],
            "legend": legend_as_dict(self.legend),
        }

    def to_summary_dict(self) -> Dict[str, Any]:
        """:meth:`to_dict` plus stage timings and counts."""
        d = self.to_dict()
        d["accountsFound"] = self.accounts_found
        d["stages"] = {n: sr.to_dict() for n, sr in self.stages.items()}
        return d


def analyze_items_report(
    items: Sequence[TextItem],
    total_pages: int,
    filename: str = "",
    cfg: Optional[GridConfig] = None,
    legend: Optional[Mapping[str, str]] = None,
) -> AnalysisReport:
    """Run the locate and grids stages over an existing item stream."""
    if cfg is None:
        cfg = GridConfig()
    if legend is None:
        legend = STATUS_LEGEND

    report = AnalysisReport(filename=filename, total_pages=total_pages, legend=legend)

    with run_stage("locate") as sr:
        report.stages["locate"] = sr
        anchors = locate_accounts(items, cfg)
        sr.counts = {"items": len(items), "markers": len(anchors)}

    with run_stage("grids") as sr:
        report.stages["grids"] = sr
        records = analyze_anchors(anchors, items, cfg, legend)
        report.accounts_found = len(records)
        report.results = [r for r in records if r.has_issues]
        sr.counts = {
            "accounts": len(records),
            "accounts_with_issues": len(report.results),
            "issues": sum(len(r.issues) for r in report.results),
        }

    logger.info(
        "Analysis complete: %d of %d account(s) with issues",
        report.accounts_with_issues,
        report.accounts_found,
    )
    return report


def analyze_pdf(
    source: Union[Path, str, bytes],
    filename: Optional[str] = None,
    cfg: Optional[GridConfig] = None,
    legend: Optional[Mapping[str, str]] = None,
) -> AnalysisReport:
    """Ingest a PDF, extract its text layer, and analyse it.

    Raises
    ------
    IngestError
        When the PDF is invalid or unreadable.
    UnsupportedDocumentError
        When the document contains no payment-history section.
    """
    from .ingest import ingest_pdf
    from .tocr import extract_text_items

    if cfg is None:
        cfg = GridConfig()

    stages: Dict[str, StageResult] = {}
    with run_stage("ingest") as sr:
        stages["ingest"] = sr
        meta = ingest_pdf(source, name=filename, max_bytes=cfg.max_upload_bytes)
        sr.counts = {"pages": meta.num_pages, "bytes": meta.file_size_bytes}

    with run_stage("tocr") as sr:
        stages["tocr"] = sr
        layer = extract_text_items(source, cfg)
        sr.counts = {"items": len(layer.items), "pages": layer.page_count}

    report = analyze_items_report(
        layer.items, layer.page_count, filename=meta.name, cfg=cfg, legend=legend
    )
    report.stages = {**stages, **report.stages}
    return report
