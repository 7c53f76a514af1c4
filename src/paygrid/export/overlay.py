"""Debug overlay: draw markers, grid windows, rows, and columns on a page.

The overlay is for recalibrating the layout constants in
:class:`~paygrid.config.GridConfig` against a new report template: it
shows exactly which items fell inside each marker's window and where the
column centres landed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .._geometry import nearest
from ..config import GridConfig
from ..grid import cluster_rows, parse_payment_grid, select_grid_items
from ..models import AccountAnchor, TextItem

COLOR_KEYS = [
    "items",
    "marker",
    "window",
    "rows",
    "columns",
    "account_name",
]

DEFAULT_COLORS: Dict[str, tuple] = {
    "items": (160, 160, 160, 140),
    "marker": (255, 0, 0, 220),
    "window": (0, 0, 255, 50),
    "rows": (0, 180, 0, 180),
    "columns": (255, 165, 0, 200),
    "account_name": (128, 0, 128, 220),
}


def _get_color(color_overrides: Optional[Dict[str, tuple]], key: str) -> tuple | None:
    """Colour for *key*; an override of ``None`` turns that layer off."""
    if color_overrides and key in color_overrides:
        return color_overrides[key]
    return DEFAULT_COLORS.get(key)


def _to_image_y(y: float, page_height: float, scale: float) -> float:
    """PDF user-space y (up) → image y (down), scaled."""
    return (page_height - y) * scale


def _item_rect(
    item: TextItem, page_height: float, scale: float
) -> Tuple[float, float, float, float]:
    """Image-space ``(x0, y0, x1, y1)`` for an item.

    Items without a recorded size get a small square so they stay visible.
    """
    w = item.width if item.width > 0 else 4.0
    h = item.height if item.height > 0 else 4.0
    x0 = item.x * scale
    x1 = (item.x + w) * scale
    y0 = _to_image_y(item.y + h, page_height, scale)
    y1 = _to_image_y(item.y, page_height, scale)
    return (x0, y0, x1, y1)


def draw_grid_overlay(
    items: Sequence[TextItem],
    anchors: Sequence[AccountAnchor],
    page_number: int,
    page_width: float,
    page_height: float,
    out_path: Path,
    cfg: GridConfig | None = None,
    scale: float = 1.0,
    background: Optional[Image.Image] = None,
    color_overrides: Optional[Dict[str, tuple]] = None,
) -> Path:
    """Render the grid-detection overlay for one page and save it as PNG.

    Parameters
    ----------
    items : sequence of TextItem
        The full document stream; only items on *page_number* are drawn.
    anchors : sequence of AccountAnchor
        Located markers; only those on *page_number* are drawn.
    page_number : int
        1-based page to render.
    page_width, page_height : float
        Page size in points.
    out_path : Path
        Destination PNG.
    scale : float
        Pixels per point (``resolution / 72`` when *background* is a render).
    background : PIL.Image.Image, optional
        Rendered page to draw on; a white canvas is used otherwise.
    color_overrides : dict, optional
        Per-layer RGBA colours keyed by :data:`COLOR_KEYS`.
    """
    if cfg is None:
        cfg = GridConfig()

    size = (max(1, int(page_width * scale)), max(1, int(page_height * scale)))
    if background is not None:
        base = background.convert("RGBA").resize(size)
    else:
        base = Image.new("RGBA", size, (255, 255, 255, 255))
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    page_items: List[TextItem] = [it for it in items if it.page == page_number]
    page_anchors = [a for a in anchors if a.marker.page == page_number]

    color = _get_color(color_overrides, "items")
    if color:
        for it in page_items:
            draw.rectangle(_item_rect(it, page_height, scale), outline=color)

    for anchor in page_anchors:
        marker = anchor.marker
        window = select_grid_items(marker, items, cfg)

        color = _get_color(color_overrides, "window")
        if color:
            top = _to_image_y(marker.y - cfg.window_bottom_offset, page_height, scale)
            bottom = _to_image_y(marker.y - cfg.window_top_offset, page_height, scale)
            draw.rectangle((0, top, size[0] - 1, bottom), fill=color)

        color = _get_color(color_overrides, "rows")
        if color:
            for row in cluster_rows(window, cfg.row_quantum):
                x0 = min(it.x for it in row) * scale
                x1 = max(it.x + max(it.width, 4.0) for it in row) * scale
                y = _to_image_y(row[0].y, page_height, scale)
                draw.line((x0, y, x1, y), fill=color, width=1)

        color = _get_color(color_overrides, "columns")
        if color:
            grid = parse_payment_grid(window, cfg)
            top = _to_image_y(marker.y - cfg.window_bottom_offset, page_height, scale)
            bottom = _to_image_y(marker.y - cfg.window_top_offset, page_height, scale)
            for header in grid.headers:
                x = header.x * scale
                draw.line((x, top, x, bottom), fill=color, width=1)

        color = _get_color(color_overrides, "marker")
        if color:
            draw.rectangle(_item_rect(marker, page_height, scale), outline=color, width=2)

        color = _get_color(color_overrides, "account_name")
        if color:
            hit = nearest(
                page_items,
                distance=lambda it: it.y - marker.y,
                eligible=lambda it: it.text == anchor.name and it.y > marker.y,
            )
            if hit is not None:
                draw.rectangle(
                    _item_rect(hit[1], page_height, scale), outline=color, width=2
                )

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    Image.alpha_composite(base, layer).convert("RGB").save(out_path)
    return out_path
