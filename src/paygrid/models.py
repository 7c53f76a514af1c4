from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

BUREAUS: Tuple[str, ...] = ("TransUnion", "Experian", "Equifax")


@dataclass(frozen=True)
class TextItem:
    """Smallest unit: one positioned run of text from the document's text layer.

    ``y`` grows upward (PDF user space), so a larger ``y`` is higher on the
    page.  ``page`` is 1-based.
    """

    text: str
    page: int
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_transform(
        cls,
        text: str,
        page: int,
        transform: Sequence[float],
        width: float = 0.0,
        height: float = 0.0,
    ) -> "TextItem":
        """Build from a 6-element affine placement ``[a, b, c, d, e, f]``.

        The translation components ``e`` and ``f`` are the item's x and y.
        """
        if len(transform) != 6:
            raise ValueError(
                f"transform must have 6 elements, got {len(transform)}"
            )
        return cls(
            text=text.strip(),
            page=int(page),
            x=float(transform[4]),
            y=float(transform[5]),
            width=float(width),
            height=float(height),
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "text": self.text,
            "page": self.page,
            "x": round(self.x, 3),
            "y": round(self.y, 3),
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TextItem":
        """Deserialize from :meth:`to_dict` output or a raw ``transform`` dump."""
        text = d.get("text", d.get("str", ""))
        if "transform" in d:
            return cls.from_transform(
                text,
                d["page"],
                d["transform"],
                width=d.get("width", 0.0),
                height=d.get("height", 0.0),
            )
        return cls(
            text=text.strip(),
            page=int(d["page"]),
            x=float(d["x"]),
            y=float(d["y"]),
            width=float(d.get("width", 0.0)),
            height=float(d.get("height", 0.0)),
        )


@dataclass(frozen=True)
class AccountAnchor:
    """A marker item paired with the account name resolved above it."""

    marker: TextItem
    name: str


@dataclass(frozen=True)
class Header:
    """One column of a payment grid: month label, x position, resolved year."""

    month: str
    x: float
    year: Optional[str] = None

    def to_dict(self) -> dict:
        return {"month": self.month, "x": round(self.x, 3), "year": self.year}


@dataclass(frozen=True)
class Grid:
    """Columns left-to-right plus one status tuple per bureau row found.

    Every status tuple is as long as ``headers``; ``""`` means no cell was
    placed in that column.
    """

    headers: Tuple[Header, ...] = ()
    statuses: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(
            self,
            "statuses",
            MappingProxyType({b: tuple(codes) for b, codes in self.statuses.items()}),
        )

    def __hash__(self) -> int:
        return hash((self.headers, tuple(self.statuses.items())))

    @property
    def is_empty(self) -> bool:
        return not self.headers

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "headers": [h.to_dict() for h in self.headers],
            "statuses": {b: list(codes) for b, codes in self.statuses.items()},
        }


@dataclass(frozen=True)
class Issue:
    """One month on one bureau row whose status is not current."""

    bureau: str
    month: str
    year: str
    status: str

    def to_dict(self) -> dict:
        return {
            "bureau": self.bureau,
            "month": self.month,
            "year": self.year,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Issue":
        return cls(
            bureau=d["bureau"],
            month=d["month"],
            year=d["year"],
            status=d["status"],
        )


@dataclass(frozen=True)
class AccountRecord:
    """An account name and the issues found in its payment-history grid."""

    name: str
    issues: Tuple[Issue, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> dict:
        """Serialize to ``{name, issues: [...]}``."""
        return {"name": self.name, "issues": [i.to_dict() for i in self.issues]}

    @classmethod
    def from_dict(cls, d: dict) -> "AccountRecord":
        return cls(
            name=d["name"],
            issues=tuple(Issue.from_dict(i) for i in d.get("issues", [])),
        )
