"""
Command-line interface for paygrid.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import ConfigValidationError, GridConfig
from .ingest import IngestError, render_page_image
from .locate import AnalysisError, locate_accounts
from .models import TextItem
from .pipeline import AnalysisReport, analyze_items_report, analyze_pdf

log = logging.getLogger(__name__)


def load_items_json(path: Path) -> Tuple[List[TextItem], int]:
    """Read a text-item dump.

    Accepts a bare list of items or ``{"items": [...], "totalPages": n}``.
    Each item is ``{text, page, transform}`` or ``{text, page, x, y}``.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise IngestError(f"Cannot read text items from {path}: {exc}") from exc

    try:
        if isinstance(payload, dict):
            raw = payload.get("items", [])
            total_pages = int(payload.get("totalPages") or 0)
        else:
            raw, total_pages = payload, 0
        items = [TextItem.from_dict(d) for d in raw]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise IngestError(f"Malformed text item in {path}: {exc}") from exc

    if not total_pages:
        total_pages = max((it.page for it in items), default=0)
    return items, total_pages


def _write_overlays(
    pdf_path: Path,
    report_items: Sequence[TextItem],
    cfg: GridConfig,
    out_dir: Path,
    resolution: int,
) -> List[Path]:
    from .export import draw_grid_overlay

    anchors = locate_accounts(report_items, cfg)
    written = []
    scale = resolution / 72.0
    for page_number in sorted({a.marker.page for a in anchors}):
        bg = render_page_image(pdf_path, page_number, resolution=resolution)
        out_path = out_dir / f"{pdf_path.stem}_page_{page_number}_grid.png"
        written.append(
            draw_grid_overlay(
                report_items,
                anchors,
                page_number,
                page_width=bg.width / scale,
                page_height=bg.height / scale,
                out_path=out_path,
                cfg=cfg,
                scale=scale,
                background=bg,
            )
        )
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paygrid",
        description="Find late and derogatory months in credit-report payment-history grids",
    )
    parser.add_argument(
        "report", type=Path, help="Credit report PDF, or a JSON dump of text items"
    )
    parser.add_argument("--json", type=Path, default=None, help="Write the JSON report here")
    parser.add_argument("--csv", type=Path, default=None, help="Write one CSV row per issue")
    parser.add_argument("--html", type=Path, default=None, help="Write an HTML report")
    parser.add_argument(
        "--overlay-dir",
        type=Path,
        default=None,
        help="Save grid-detection overlays for pages with markers (PDF input only)",
    )
    parser.add_argument(
        "--resolution", type=int, default=100, help="Overlay render resolution (DPI)"
    )
    parser.add_argument(
        "--window-top",
        type=float,
        default=None,
        help="Points below the marker where the grid window starts",
    )
    parser.add_argument(
        "--window-bottom",
        type=float,
        default=None,
        help="Points below the marker where the grid window ends",
    )
    parser.add_argument("--workers", type=int, default=1, help="Per-account worker threads")
    parser.add_argument(
        "--summary", action="store_true", help="Include stage timings in the JSON output"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _config_from_args(args: argparse.Namespace) -> GridConfig:
    overrides = {"max_workers": args.workers}
    if args.window_top is not None:
        overrides["window_top_offset"] = args.window_top
    if args.window_bottom is not None:
        overrides["window_bottom_offset"] = args.window_bottom
    return GridConfig(**overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = _config_from_args(args)
    except ConfigValidationError as exc:
        parser.error(str(exc))

    is_pdf = args.report.suffix.lower() == ".pdf"
    try:
        if is_pdf:
            report: AnalysisReport = analyze_pdf(args.report, cfg=cfg)
        else:
            items, total_pages = load_items_json(args.report)
            report = analyze_items_report(
                items, total_pages, filename=args.report.name, cfg=cfg
            )
    except (IngestError, AnalysisError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        from .export import write_report_json

        write_report_json(report, args.json, summary=args.summary)
        log.info("JSON report: %s", args.json)
    else:
        payload = report.to_summary_dict() if args.summary else report.to_dict()
        print(json.dumps(payload, indent=2))

    if args.csv:
        from .export import export_issues_csv

        export_issues_csv(report.results, args.csv)
        log.info("Issues CSV: %s", args.csv)

    if args.html:
        from .export import write_report_html

        write_report_html(report, args.html)
        log.info("HTML report: %s", args.html)

    if args.overlay_dir:
        if not is_pdf:
            log.warning("--overlay-dir needs a PDF input; skipping overlays")
        else:
            from .tocr import extract_text_items

            layer = extract_text_items(args.report, cfg)
            for path in _write_overlays(
                args.report, layer.items, cfg, args.overlay_dir, args.resolution
            ):
                log.info("Overlay: %s", path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
