"""Report writers for :class:`~paygrid.pipeline.AnalysisReport`.

* :func:`write_report_json`: the API response body, pretty-printed
* :func:`write_report_html`: a standalone page listing every issue
"""

from __future__ import annotations

import html
import json
from pathlib import Path
from string import Template
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..pipeline import AnalysisReport

_BASE_TEMPLATE = Template(
    """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>$title</title>
<style>
  body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
         margin: 2em; background: #f9f9f9; color: #333; }
  h1 { color: #1a5276; border-bottom: 2px solid #1a5276; padding-bottom: .3em; }
  h2 { color: #2c3e50; margin-top: 1.5em; }
  table { border-collapse: collapse; width: 100%; margin: .5em 0 1.5em; }
  th, td { border: 1px solid #ccc; padding: 6px 10px; text-align: left; }
  th { background: #2c3e50; color: #fff; font-weight: 600; }
  tr:nth-child(even) { background: #f0f0f0; }
</style>
</head>
<body>
<h1>$title</h1>
<p><strong>File:</strong> $filename &nbsp;|&nbsp;
<strong>Pages:</strong> $pages &nbsp;|&nbsp;
<strong>Accounts with issues:</strong> $accounts</p>
$body
</body>
</html>
"""
)


def write_report_json(report: "AnalysisReport", out_path: Path, summary: bool = False) -> Path:
    """Write the report as JSON; *summary* adds stage timings and counts."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.to_summary_dict() if summary else report.to_dict()
    out_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return out_path


def _account_section(name: str, issues) -> str:
    rows = "\n".join(
        "<tr><td>{}</td><td>{}</td><td>{}</td><td>{}</td></tr>".format(
            html.escape(i.bureau),
            html.escape(i.month),
            html.escape(i.year),
            html.escape(i.status),
        )
        for i in issues
    )
    return (
        f"<h2>{html.escape(name)}</h2>\n"
        "<table>\n<tr><th>Bureau</th><th>Month</th><th>Year</th><th>Status</th></tr>\n"
        f"{rows}\n</table>"
    )


def write_report_html(report: "AnalysisReport", out_path: Path) -> Path:
    """Write a standalone HTML page listing every account's issues."""
    if report.results:
        body = "\n".join(_account_section(r.name, r.issues) for r in report.results)
    else:
        body = "<p>No payment-history issues found.</p>"
    page = _BASE_TEMPLATE.substitute(
        title="Payment History Report",
        filename=html.escape(report.filename),
        pages=report.total_pages,
        accounts=report.accounts_with_issues,
        body=body,
    )
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(page, encoding="utf-8")
    return out_path
