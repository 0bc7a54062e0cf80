from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime

from .calculator import CalculatorResult
from .sheet import FieldRoleAssignment, ProductRecord

"""Catalog result models.

CatalogEntry is the display-ready view of one product row (composite title,
resolved image, profit metrics). CatalogResult aggregates the entries of a
catalog build together with per-sheet statistics and timing for the SUMMARY
line.
"""

__all__ = [
    "CatalogEntry",
    "SheetStat",
    "CatalogResult",
    "MarginStatsAccumulator",
]


@dataclass(frozen=True)
class CatalogEntry:
    """Display view of one product row."""
    sheet_name: str  # 来源 sheet (品牌分组)
    row_index: int  # 0-based index inside the sheet
    record: ProductRecord
    roles: FieldRoleAssignment
    title: str
    brand: str | None = None
    image_url: str | None = None
    image_source: str | None = None  # "local" / "remote" / None
    price_text: str | None = None  # 原始价格单元格文本, 用于展示
    calculation: CalculatorResult | None = None


@dataclass(frozen=True)
class SheetStat:
    """Per-sheet statistics."""
    sheet_name: str
    rows: int
    with_image: int
    local_images: int
    priced: int
    title_key: str
    image_key: str | None = None  # image role of the sheet's first row
    avg_margin: float = 0.0


@dataclass(frozen=True)
class CatalogResult:
    """Aggregated output of a catalog build."""
    entries: list[CatalogEntry]
    sheet_stats: list[SheetStat]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    avg_margin: float = 0.0
    p95_margin: float = 0.0
    brands: list[str] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(s.rows for s in self.sheet_stats)

    @property
    def with_image(self) -> int:
        return sum(s.with_image for s in self.sheet_stats)

    @property
    def local_images(self) -> int:
        return sum(s.local_images for s in self.sheet_stats)

    @property
    def priced(self) -> int:
        return sum(s.priced for s in self.sheet_stats)


class MarginStatsAccumulator:
    """Collects post-return margins of priced rows and summarizes them."""

    def __init__(self) -> None:
        self.margins: list[float] = []

    def add(self, margin: float) -> None:
        self.margins.append(margin)

    def __len__(self) -> int:
        return len(self.margins)

    def get_stats(self) -> tuple[int, float, float]:
        """Return ``(count, mean, p95)``; zeros when nothing was collected."""
        if not self.margins:
            return (0, 0.0, 0.0)

        count = len(self.margins)
        mean = statistics.mean(self.margins)
        if count == 1:
            p95 = self.margins[0]
        else:
            # 19th of 20 quantiles == 95th percentile
            p95 = statistics.quantiles(self.margins, n=20, method="inclusive")[18]
        return (count, mean, p95)
