from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

"""Sheet / ProductRecord / FieldRoleAssignment models.

A Sheet is one logical table of product rows sharing a header set. Rows have no
fixed shape: each ProductRecord maps header -> scalar, and the engine never
assumes a particular field set.
"""

__all__ = [
    "Scalar",
    "ProductRecord",
    "Sheet",
    "FieldRoleAssignment",
]

Scalar = Union[str, int, float, bool, None]
ProductRecord = Mapping[str, Scalar]


@dataclass(frozen=True)
class Sheet:
    """One parsed worksheet handed over by the ingestion step.

    Header order is meaningful: the first header is the fallback title column.
    Header strings are unique within a sheet.
    """
    name: str  # 展示用标签 (通常是品牌分组)
    headers: list[str]
    rows: list[ProductRecord] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def first_row(self) -> ProductRecord:
        """Representative row for content-based classification ({} when empty)."""
        return self.rows[0] if self.rows else {}


@dataclass(frozen=True)
class FieldRoleAssignment:
    """Role -> header mapping resolved for a sheet (image role resolved per row).

    ``None`` for a role means no confident assignment was made. ``title`` is the
    only role that always resolves (to the first header) when headers exist.
    """
    title: str = ""
    secondary_name: str | None = None
    brand: str | None = None
    image: str | None = None
    price: str | None = None
    cost: str | None = None
    weight: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "title": self.title or None,
            "secondary_name": self.secondary_name,
            "brand": self.brand,
            "image": self.image,
            "price": self.price,
            "cost": self.cost,
            "weight": self.weight,
        }
