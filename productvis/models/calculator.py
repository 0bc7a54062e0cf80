from __future__ import annotations

from dataclasses import dataclass, field

"""Calculator models for the profitability pipeline.

CalculatorInputs carries the normalized price / cost / weight plus the
configurable rates and fixed costs. CalculatorResult is derived on every
evaluation and never stored.
"""

__all__ = [
    "ShippingBand",
    "ShippingTable",
    "DEFAULT_SHIPPING_TABLE",
    "CalculatorInputs",
    "CalculatorResult",
]


@dataclass(frozen=True)
class ShippingBand:
    """Weights up to and including ``max_grams`` cost ``fee``."""
    max_grams: float
    fee: float


@dataclass(frozen=True)
class ShippingTable:
    """Ordered, non-overlapping weight bands plus the fee above the last band.

    Bands are evaluated least-to-greatest; each weight falls in exactly one band.
    """
    bands: tuple[ShippingBand, ...]
    overflow_fee: float

    def __post_init__(self) -> None:
        limits = [b.max_grams for b in self.bands]
        if any(b <= a for a, b in zip(limits, limits[1:])):
            raise ValueError(f"shipping bands must be strictly increasing: {limits}")


DEFAULT_SHIPPING_TABLE = ShippingTable(
    bands=(
        ShippingBand(500, 1.8),
        ShippingBand(1000, 2.2),
        ShippingBand(1500, 2.6),
        ShippingBand(2000, 2.9),
    ),
    overflow_fee=3.6,
)


@dataclass(frozen=True)
class CalculatorInputs:
    """Normalized inputs for one calculation (money in plain decimals, weight in grams)."""
    price: float = 0.0
    cost: float = 0.0
    weight_grams: float = 0.0
    return_rate_pct: float = 10.0
    tax_rate_pct: float = 5.0
    platform_rate_pct: float = 5.0
    box_cost: float = 0.45
    op_fee: float = 0.7
    other_cost: float = 0.0


@dataclass(frozen=True)
class CalculatorResult:
    """Derived metrics. Margins are fractions (0.25 == 25%)."""
    shipping_fee: float
    platform_fee: float
    tax_fee: float
    comprehensive_cost: float
    profit: float
    margin_pre_return: float
    margin_post_return: float
    investment_efficiency: float
    roi: float
    inputs: CalculatorInputs = field(default_factory=CalculatorInputs, compare=False)

    def as_dict(self) -> dict[str, float]:
        return {
            "shipping_fee": self.shipping_fee,
            "platform_fee": self.platform_fee,
            "tax_fee": self.tax_fee,
            "comprehensive_cost": self.comprehensive_cost,
            "profit": self.profit,
            "margin_pre_return": self.margin_pre_return,
            "margin_post_return": self.margin_post_return,
            "investment_efficiency": self.investment_efficiency,
            "roi": self.roi,
        }
