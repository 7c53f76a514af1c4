"""Static payment-status legend used to label grid cells."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

STATUS_LEGEND: Mapping[str, str] = MappingProxyType(
    {
        "OK": "Current",
        "30": "30 Days Late",
        "60": "60 Days Late",
        "90": "90 Days Late",
        "120": "120 Days Late",
        "150": "150 Days Late",
        "180": "180 Days Late",
        "CO": "Chargeoff or Collection",
        "RF": "Repossession or Foreclosure",
        "PP": "Payment Plan",
        "VS": "Voluntary Surrender",
        "NDP": "No Data Provided",
    }
)


def resolve_status_label(code: str, legend: Mapping[str, str] | None = None) -> str:
    """Return the legend label for *code*, or ``"Unknown Code: <code>"``."""
    if legend is None:
        legend = STATUS_LEGEND
    code = code.strip()
    label = legend.get(code)
    if label:
        return label
    return f"Unknown Code: {code}"


def legend_as_dict(legend: Mapping[str, str] | None = None) -> dict:
    """Plain-dict copy of *legend* for JSON responses."""
    return dict(STATUS_LEGEND if legend is None else legend)
