from __future__ import annotations

import logging
import math
from dataclasses import replace

from ..models.calculator import (
    DEFAULT_SHIPPING_TABLE,
    CalculatorInputs,
    CalculatorResult,
    ShippingTable,
)
from ..models.sheet import FieldRoleAssignment, ProductRecord
from .value_normalizer import parse_currency, parse_weight_to_grams

"""Tiered profitability calculator.

Pipeline (evaluated in this order on every call):

1. shipping fee   - step function of weight (ShippingTable)
2. platform / tax - price x rate
3. comprehensive cost = cost + box + op + shipping + platform + other + tax
4. profit         = price - comprehensive cost
5. margin pre-return  = profit / price            (0 when price == 0)
6. margin post-return = margin pre-return x (1 - return rate)
7. investment efficiency = 1 / margin post-return (0 unless margin > 0)
8. ROI            = profit / comprehensive cost   (0 unless cost > 0)

No step raises; degenerate inputs produce 0.
"""

__all__ = [
    "shipping_fee_for",
    "calculate_profit",
    "inputs_from_record",
]

logger = logging.getLogger(__name__)


def _finite(value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def shipping_fee_for(weight_grams: float, shipping: ShippingTable = DEFAULT_SHIPPING_TABLE) -> float:
    """Fee of the first band whose upper limit covers ``weight_grams``."""
    weight = _finite(weight_grams)
    for band in shipping.bands:
        if weight <= band.max_grams:
            return band.fee
    return shipping.overflow_fee


def calculate_profit(
    inputs: CalculatorInputs,
    shipping: ShippingTable = DEFAULT_SHIPPING_TABLE,
) -> CalculatorResult:
    """Evaluate the full cost / profit / margin chain for ``inputs``."""
    price = _finite(inputs.price)
    cost = _finite(inputs.cost)

    shipping_fee = shipping_fee_for(inputs.weight_grams, shipping)
    platform_fee = price * _finite(inputs.platform_rate_pct) / 100
    tax_fee = price * _finite(inputs.tax_rate_pct) / 100

    comprehensive_cost = (
        cost
        + _finite(inputs.box_cost)
        + _finite(inputs.op_fee)
        + shipping_fee
        + platform_fee
        + _finite(inputs.other_cost)
        + tax_fee
    )
    profit = price - comprehensive_cost

    margin_pre_return = profit / price if price != 0 else 0.0
    margin_post_return = margin_pre_return * (1 - _finite(inputs.return_rate_pct) / 100)
    # 毛利为负或为零时倒数没有意义
    investment_efficiency = 1 / margin_post_return if margin_post_return > 0 else 0.0
    roi = profit / comprehensive_cost if comprehensive_cost > 0 else 0.0

    return CalculatorResult(
        shipping_fee=shipping_fee,
        platform_fee=platform_fee,
        tax_fee=tax_fee,
        comprehensive_cost=comprehensive_cost,
        profit=profit,
        margin_pre_return=margin_pre_return,
        margin_post_return=margin_post_return,
        investment_efficiency=investment_efficiency,
        roi=roi,
        inputs=inputs,
    )


def inputs_from_record(
    row: ProductRecord,
    roles: FieldRoleAssignment,
    defaults: CalculatorInputs | None = None,
) -> CalculatorInputs:
    """Build calculator inputs from the resolved price / cost / weight cells.

    Rates and fixed costs come from ``defaults``; roles that were not resolved
    leave the corresponding default in place.
    """
    base = defaults or CalculatorInputs()
    changes: dict[str, float] = {}
    if roles.price:
        changes["price"] = parse_currency(row.get(roles.price))
    if roles.cost:
        changes["cost"] = parse_currency(row.get(roles.cost))
    if roles.weight:
        changes["weight_grams"] = parse_weight_to_grams(row.get(roles.weight))
    logger.debug("calculator inputs %s", changes)
    return replace(base, **changes)
