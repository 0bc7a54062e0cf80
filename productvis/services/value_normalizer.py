from __future__ import annotations

import math
import re
from typing import Any

import numpy as np

"""Value normalization for free-form currency and weight cells.

Canonical units: plain decimal for money, grams for weight. Every function
here accepts an arbitrary scalar (str / int / float / bool / None) and returns
a finite number; malformed input degrades to 0 instead of raising.
"""

__all__ = [
    "to_text",
    "parse_currency",
    "parse_weight_to_grams",
]

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
# leading number of an already-cleaned string ("1.2.3" -> "1.2")
_NUMBER_PREFIX_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_WEIGHT_TOKEN_RE = re.compile(r"\d+(?:\.\d+)?")

KILOGRAM_MARKERS = ("kg", "公斤")
JIN_MARKER = "斤"  # 市斤 = 500g
GRAM_MARKER = "g"
# 无单位数值 < 10 视为公斤
BARE_KILOGRAM_LIMIT = 10


def to_text(value: Any) -> str:
    """Stringify a cell value the way spreadsheet text is displayed.

    None and NaN become ``""``, integral floats lose their ``.0`` and booleans
    render lowercase. Floats are always written positionally (never ``5e-05``)
    so the text parsers see every digit.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return np.format_float_positional(value, trim="-")
    return str(value)


def _finite_or_zero(number: float) -> float:
    return number if math.isfinite(number) else 0.0


def parse_currency(value: Any) -> float:
    """Parse a currency string into a plain decimal.

    Everything except digits and ``.`` is dropped before parsing, so symbols,
    thousands separators and unit suffixes are ignored::

        >>> parse_currency("¥1,200.50")
        1200.5
        >>> parse_currency("abc")
        0.0
    """
    cleaned = _NON_NUMERIC_RE.sub("", to_text(value))
    if not cleaned:
        return 0.0
    match = _NUMBER_PREFIX_RE.match(cleaned)
    if match is None:
        return 0.0
    return _finite_or_zero(float(match.group(0)))


def parse_weight_to_grams(value: Any) -> float:
    """Parse a weight string into grams.

    Unit priority: ``kg``/``公斤`` (x1000), ``斤`` (x500), explicit ``g`` (as is).
    Without any unit, numbers below 10 are taken as kilograms and larger ones
    as grams::

        >>> parse_weight_to_grams("0.5kg")
        500.0
        >>> parse_weight_to_grams("3")
        3000.0
    """
    text = to_text(value).lower()
    match = _WEIGHT_TOKEN_RE.search(text)
    if match is None:
        return 0.0
    number = float(match.group(0))

    if any(marker in text for marker in KILOGRAM_MARKERS):
        grams = number * 1000
    elif JIN_MARKER in text:
        grams = number * 500
    elif GRAM_MARKER not in text:
        grams = number * 1000 if number < BARE_KILOGRAM_LIMIT else number
    else:
        grams = number
    return _finite_or_zero(grams)
