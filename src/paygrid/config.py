from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a GridConfig field has an invalid value."""


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


@dataclass
class GridConfig:
    """Tunables for payment-history grid reconstruction.

    The vertical window offsets and the row quantum are calibrated against
    one credit-report template; a template change means recalibrating them
    here rather than touching the algorithm.
    """

    # Phrase that anchors one account's payment-history section.
    sentinel: str = "Two-Year payment history"
    # Name shown when no upper-case label sits above the marker.
    unknown_account_name: str = "Unknown Account"
    # Account-name candidates must be strictly longer than this (trimmed).
    name_min_length: int = 2

    # Grid window, in points below the marker: (y - top, y - bottom), exclusive.
    window_top_offset: float = 100.0
    window_bottom_offset: float = 20.0
    # Row clustering granularity; y is rounded to the nearest multiple.
    row_quantum: float = 1.0

    # Status code that means "current" and never produces an issue.
    ok_code: str = "OK"
    # Placeholder month/year for a status column with no header.
    missing_header_value: str = "N/A"
    # Century prefix joined to two-digit year labels.
    century_prefix: str = "20"

    # Per-marker fan-out; 1 keeps everything on the calling thread.
    max_workers: int = 1

    # ── Text-layer extraction (pdfplumber.extract_words) ───────────────
    tocr_x_tolerance: float = 3.0
    tocr_y_tolerance: float = 3.0
    # Keep spaces inside words so multi-word runs stay a single item.
    tocr_keep_blank_chars: bool = True
    tocr_use_text_flow: bool = False
    tocr_filter_control_chars: bool = True

    # ── Transport ──────────────────────────────────────────────────────
    max_upload_bytes: int = 10 * 1024 * 1024

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        if not self.sentinel:
            raise ConfigValidationError("sentinel must be a non-empty string")
        if not self.ok_code:
            raise ConfigValidationError("ok_code must be a non-empty string")

        _check_non_negative("name_min_length", self.name_min_length)
        _check_non_negative("window_bottom_offset", self.window_bottom_offset)
        _check_positive("window_top_offset", self.window_top_offset)
        _check_positive("row_quantum", self.row_quantum)
        _check_non_negative("tocr_x_tolerance", self.tocr_x_tolerance)
        _check_non_negative("tocr_y_tolerance", self.tocr_y_tolerance)
        _check_positive("max_upload_bytes", self.max_upload_bytes)

        if self.max_workers < 1:
            raise ConfigValidationError(
                f"max_workers={self.max_workers} must be >= 1"
            )

        if self.window_bottom_offset >= self.window_top_offset:
            raise ConfigValidationError(
                f"window_bottom_offset ({self.window_bottom_offset}) must be < "
                f"window_top_offset ({self.window_top_offset})"
            )
