"""HTTP front end: upload a credit-report PDF, get its payment-history issues."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

from ..config import GridConfig
from ..ingest import IngestError
from ..locate import AnalysisError
from ..pipeline import analyze_pdf

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "pdf"
PDF_MIMETYPE = "application/pdf"
# Room for multipart boundaries and part headers on top of the file itself.
MULTIPART_HEADROOM = 64 * 1024


def _is_pdf_upload(upload) -> bool:
    if upload.mimetype == PDF_MIMETYPE:
        return True
    return (upload.filename or "").lower().endswith(".pdf")


def create_app(
    cfg: Optional[GridConfig] = None,
    legend: Optional[Mapping[str, str]] = None,
) -> Flask:
    if cfg is None:
        cfg = GridConfig()
    limit_mb = cfg.max_upload_bytes // (1024 * 1024)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_upload_bytes + MULTIPART_HEADROOM
    CORS(app)

    @app.route("/")
    def index():
        return jsonify(
            {
                "message": "Credit Report Analyzer API",
                "endpoints": {
                    "POST /analyze": "Upload PDF and get analysis results",
                    "GET /health": "Health check endpoint",
                },
            }
        )

    @app.route("/health")
    def health():
        return jsonify(
            {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    @app.route("/analyze", methods=["GET"])
    def analyze_usage():
        return jsonify(
            {
                "message": "This endpoint requires a POST request with a PDF file",
                "usage": {
                    "method": "POST",
                    "contentType": "multipart/form-data",
                    "field": UPLOAD_FIELD,
                    "example": (
                        "curl -X POST http://localhost:3000/analyze "
                        f'-F "{UPLOAD_FIELD}=@your_credit_report.pdf"'
                    ),
                },
            }
        )

    @app.route("/analyze", methods=["POST"])
    def analyze():
        upload = request.files.get(UPLOAD_FIELD)
        if upload is None:
            return (
                jsonify(
                    {
                        "error": "No PDF file uploaded. Please upload a PDF file "
                        f'using the "{UPLOAD_FIELD}" field.'
                    }
                ),
                400,
            )
        if not _is_pdf_upload(upload):
            return jsonify({"error": "Only PDF files are allowed", "success": False}), 400

        filename = secure_filename(upload.filename or "") or "report.pdf"
        data = upload.read()
        if len(data) > cfg.max_upload_bytes:
            return too_large(None)
        logger.info("Processing PDF: %s, Size: %d bytes", filename, len(data))

        try:
            report = analyze_pdf(data, filename=filename, cfg=cfg, legend=legend)
        except (IngestError, AnalysisError) as exc:
            logger.warning("Analysis of %s failed: %s", filename, exc)
            return jsonify({"error": str(exc), "success": False}), 500
        except Exception:
            logger.exception("Unexpected failure analysing %s", filename)
            return (
                jsonify(
                    {
                        "error": "An error occurred while analyzing the PDF file.",
                        "success": False,
                    }
                ),
                500,
            )

        logger.info(
            "Analysis complete: Found %d accounts with issues",
            report.accounts_with_issues,
        )
        return jsonify(report.to_dict())

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_exc):
        return jsonify({"error": f"File too large. Maximum size is {limit_mb}MB."}), 400

    @app.errorhandler(404)
    def not_found(_exc):
        return jsonify({"error": "Endpoint not found"}), 404

    return app
