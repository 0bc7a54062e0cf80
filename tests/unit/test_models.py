from __future__ import annotations

import dataclasses
from datetime import UTC, datetime

import pytest

from productvis.models import (
    CalculatorInputs,
    CatalogEntry,
    CatalogResult,
    FieldRoleAssignment,
    Sheet,
    SheetStat,
)
from productvis.models.catalog_result import MarginStatsAccumulator


def test_sheet_defaults_and_first_row():
    empty = Sheet(name="S", headers=["a"])
    assert empty.rows == []
    assert empty.row_count == 0
    assert empty.first_row() == {}

    sheet = Sheet(name="S", headers=["a"], rows=[{"a": 1}, {"a": 2}])
    assert sheet.first_row() == {"a": 1}
    assert sheet.row_count == 2


def test_models_are_immutable():
    sheet = Sheet(name="S", headers=["a"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        sheet.name = "T"  # type: ignore[misc]
    roles = FieldRoleAssignment(title="a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        roles.image = "b"  # type: ignore[misc]


def test_field_role_assignment_as_dict():
    roles = FieldRoleAssignment(title="款号", price="价格")
    assert roles.as_dict() == {
        "title": "款号",
        "secondary_name": None,
        "brand": None,
        "image": None,
        "price": "价格",
        "cost": None,
        "weight": None,
    }
    assert FieldRoleAssignment().as_dict()["title"] is None


def test_calculator_input_defaults():
    inputs = CalculatorInputs()
    assert (inputs.price, inputs.cost, inputs.weight_grams, inputs.other_cost) == (0, 0, 0, 0)
    assert inputs.box_cost == 0.45
    assert inputs.op_fee == 0.7
    assert inputs.return_rate_pct == 10
    assert inputs.tax_rate_pct == 5
    assert inputs.platform_rate_pct == 5


def test_catalog_entry_optional_fields():
    entry = CatalogEntry(sheet_name="S", row_index=0, record={}, roles=FieldRoleAssignment(), title="x")
    assert entry.image_url is None
    assert entry.image_source is None
    assert entry.calculation is None


def test_margin_stats_accumulator():
    acc = MarginStatsAccumulator()
    assert acc.get_stats() == (0, 0.0, 0.0)
    acc.add(0.5)
    assert acc.get_stats() == (1, 0.5, 0.5)
    for m in (0.1, 0.2, 0.3):
        acc.add(m)
    count, mean, p95 = acc.get_stats()
    assert count == 4 == len(acc)
    assert mean == pytest.approx(0.275)
    assert 0.3 <= p95 <= 0.5


def test_catalog_result_totals_come_from_sheet_stats():
    now = datetime.now(UTC)
    result = CatalogResult(
        entries=[],
        sheet_stats=[
            SheetStat(sheet_name="A", rows=3, with_image=2, local_images=1, priced=3, title_key="款号"),
            SheetStat(sheet_name="B", rows=2, with_image=1, local_images=0, priced=1, title_key="name"),
        ],
        start_time=now,
        end_time=now,
        elapsed_seconds=0.0,
        throughput_rows_per_sec=0.0,
    )
    assert (result.total_rows, result.with_image, result.local_images, result.priced) == (5, 3, 1, 4)
