from __future__ import annotations

from typing import List, Mapping, Optional

from .config import GridConfig
from .legend import resolve_status_label
from .models import BUREAUS, Grid, Issue


def extract_issues(
    grid: Grid,
    legend: Optional[Mapping[str, str]] = None,
    cfg: Optional[GridConfig] = None,
) -> List[Issue]:
    """List every non-empty, non-current cell of *grid* as an :class:`Issue`.

    Bureaus are reported TransUnion, Experian, Equifax (those present),
    columns left to right.  Codes missing from *legend* come back as
    ``"Unknown Code: <code>"``.
    """
    if cfg is None:
        cfg = GridConfig()
    if grid.is_empty:
        return []

    na = cfg.missing_header_value
    issues: List[Issue] = []
    for bureau in BUREAUS:
        codes = grid.statuses.get(bureau)
        if codes is None:
            continue
        for idx, raw in enumerate(codes):
            code = raw.strip()
            if not code or code == cfg.ok_code:
                continue
            if idx < len(grid.headers):
                header = grid.headers[idx]
                month, year = header.month, header.year or na
            else:
                month, year = na, na
            issues.append(
                Issue(
                    bureau=bureau,
                    month=month,
                    year=year,
                    status=resolve_status_label(code, legend),
                )
            )
    return issues
