"""Domain models for the product sheet engine.

This package contains the value types shared by the classifier, normalizer,
asset matcher and profit calculator.
"""

from .asset_index import LocalAssetIndex, build_local_asset_index
from .calculator import CalculatorInputs, CalculatorResult, ShippingBand, ShippingTable
from .catalog_result import CatalogEntry, CatalogResult, SheetStat
from .sheet import FieldRoleAssignment, ProductRecord, Scalar, Sheet

__all__ = [
    # Sheet models
    "Scalar",
    "ProductRecord",
    "Sheet",
    "FieldRoleAssignment",
    # Local assets
    "LocalAssetIndex",
    "build_local_asset_index",
    # Calculator models
    "CalculatorInputs",
    "CalculatorResult",
    "ShippingBand",
    "ShippingTable",
    # Catalog models
    "CatalogEntry",
    "CatalogResult",
    "SheetStat",
]
