"""Tests for paygrid.cli: JSON item dumps in, reports out."""

import csv
import json
from unittest.mock import patch

import pytest
from conftest import make_item

from paygrid.cli import build_parser, load_items_json, main
from paygrid.ingest import IngestError
from paygrid.pipeline import AnalysisReport


@pytest.fixture
def items_file(tmp_path, late_account_items):
    p = tmp_path / "items.json"
    p.write_text(
        json.dumps({"items": [it.to_dict() for it in late_account_items], "totalPages": 2})
    )
    return p


class TestLoadItemsJson:
    def test_wrapped_payload(self, items_file, late_account_items):
        items, total = load_items_json(items_file)
        assert items == late_account_items
        assert total == 2

    def test_bare_list_with_transforms(self, tmp_path):
        p = tmp_path / "raw.json"
        p.write_text(
            json.dumps(
                [
                    {"str": "A", "page": 1, "transform": [1, 0, 0, 1, 10, 20]},
                    {"str": "B", "page": 3, "transform": [1, 0, 0, 1, 30, 40]},
                ]
            )
        )
        items, total = load_items_json(p)
        assert [(i.text, i.x, i.y) for i in items] == [("A", 10, 20), ("B", 30, 40)]
        assert total == 3

    def test_bad_json(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{nope")
        with pytest.raises(IngestError):
            load_items_json(p)

    def test_malformed_item(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text(json.dumps([{"text": "A", "page": 1, "transform": [1, 2]}]))
        with pytest.raises(IngestError, match="Malformed"):
            load_items_json(p)

    def test_non_object_item(self, tmp_path):
        p = tmp_path / "ints.json"
        p.write_text(json.dumps([1]))
        with pytest.raises(IngestError, match="Malformed"):
            load_items_json(p)

    def test_null_text(self, tmp_path):
        p = tmp_path / "null.json"
        p.write_text(json.dumps([{"text": None, "page": 1, "x": 0, "y": 0}]))
        with pytest.raises(IngestError, match="Malformed"):
            load_items_json(p)

    def test_null_total_pages_falls_back_to_items(self, tmp_path):
        p = tmp_path / "pages.json"
        p.write_text(
            json.dumps(
                {"items": [make_item("A", page=4).to_dict()], "totalPages": None}
            )
        )
        _, total = load_items_json(p)
        assert total == 4

    def test_non_numeric_total_pages(self, tmp_path):
        p = tmp_path / "pages.json"
        p.write_text(json.dumps({"items": [], "totalPages": "many"}))
        with pytest.raises(IngestError, match="Malformed"):
            load_items_json(p)


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["report.pdf"])
        assert args.workers == 1
        assert args.resolution == 100
        assert args.json is None
        assert not args.summary


class TestMain:
    def test_prints_report(self, items_file, capsys):
        assert main([str(items_file)]) == 0
        body = json.loads(capsys.readouterr().out)
        assert body["filename"] == "items.json"
        assert body["totalPages"] == 2
        assert body["results"][0]["name"] == "CAPITAL BANK"

    def test_summary_flag(self, items_file, capsys):
        assert main([str(items_file), "--summary"]) == 0
        body = json.loads(capsys.readouterr().out)
        assert "stages" in body

    def test_writes_files(self, items_file, tmp_path):
        out_json = tmp_path / "out" / "r.json"
        out_csv = tmp_path / "out" / "r.csv"
        out_html = tmp_path / "out" / "r.html"
        rc = main(
            [
                str(items_file),
                "--json",
                str(out_json),
                "--csv",
                str(out_csv),
                "--html",
                str(out_html),
            ]
        )
        assert rc == 0
        assert json.loads(out_json.read_text())["accountsWithIssues"] == 1
        with out_csv.open(newline="") as fh:
            rows = list(csv.DictReader(fh))
        assert rows[0]["status"] == "30 Days Late"
        assert "CAPITAL BANK" in out_html.read_text()

    def test_unsupported_document_exit_code(self, tmp_path, capsys):
        p = tmp_path / "plain.json"
        p.write_text(json.dumps([make_item("Nothing here").to_dict()]))
        assert main([str(p)]) == 1
        assert "Could not find any" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_bad_window_rejected(self, items_file):
        with pytest.raises(SystemExit) as exc:
            main([str(items_file), "--window-top", "10", "--window-bottom", "20"])
        assert exc.value.code == 2

    def test_pdf_input_goes_through_analyze_pdf(self, tmp_path, capsys):
        report = AnalysisReport(filename="r.pdf", total_pages=1)
        with patch("paygrid.cli.analyze_pdf", return_value=report) as run:
            assert main([str(tmp_path / "r.pdf"), "--workers", "2"]) == 0
        cfg = run.call_args.kwargs["cfg"]
        assert cfg.max_workers == 2
        assert json.loads(capsys.readouterr().out)["accountsWithIssues"] == 0

    def test_malformed_dump_exit_code(self, tmp_path, capsys):
        p = tmp_path / "ints.json"
        p.write_text(json.dumps([1]))
        assert main([str(p)]) == 1
        assert "Malformed text item" in capsys.readouterr().err
