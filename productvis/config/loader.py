from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.calculator import DEFAULT_SHIPPING_TABLE, CalculatorInputs, ShippingBand, ShippingTable

"""Settings loader for calculator rates, fixed costs and the shipping table.

Responsibilities:
- Load a YAML settings file (all sections optional)
- Validate it against the packaged JSON schema
- Fill gaps with the documented defaults (box 0.45, op 0.7, return 10%,
  tax 5%, platform 5%, default shipping bands)
"""

SCHEMA_PATH = Path(__file__).parent / "settings_schema.json"

_CALCULATOR_KEYS = (
    "box_cost",
    "op_fee",
    "other_cost",
    "return_rate_pct",
    "tax_rate_pct",
    "platform_rate_pct",
)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    calculator: CalculatorInputs = field(default_factory=CalculatorInputs)
    shipping: ShippingTable = DEFAULT_SHIPPING_TABLE
    source: Path | None = None  # None == built-in defaults


def default_config() -> AppConfig:
    return AppConfig()


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate settings data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_shipping(raw: dict[str, Any] | None) -> ShippingTable:
    if not raw:
        return DEFAULT_SHIPPING_TABLE
    bands = tuple(ShippingBand(max_grams=b["max_grams"], fee=b["fee"]) for b in raw["bands"])
    try:
        return ShippingTable(bands=bands, overflow_fee=raw["overflow_fee"])
    except ValueError as e:
        raise ConfigError(f"invalid shipping table: {e}") from e


def config_from_dict(data: dict[str, Any], source: Path | None = None) -> AppConfig:
    _validate_config_schema(data)

    calc_raw = data.get("calculator") or {}
    calculator = CalculatorInputs(**{k: float(calc_raw[k]) for k in _CALCULATOR_KEYS if k in calc_raw})
    return AppConfig(
        calculator=calculator,
        shipping=_build_shipping(data.get("shipping")),
        source=source,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    return config_from_dict(data, source=path)
