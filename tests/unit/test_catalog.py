from __future__ import annotations

from unittest.mock import Mock

import pytest

from productvis.config.loader import AppConfig
from productvis.models.asset_index import build_local_asset_index
from productvis.models.calculator import CalculatorInputs
from productvis.models.sheet import FieldRoleAssignment, Sheet
from productvis.services.catalog import (
    ALL_BRANDS,
    UNNAMED_TITLE,
    CatalogError,
    build_catalog,
    build_entry,
    display_title,
    filter_entries,
    format_record_text,
    resolve_display_image,
)


class TestDisplayTitle:
    def test_composite_title(self):
        roles = FieldRoleAssignment(title="款号", secondary_name="名称")
        assert display_title({"款号": "A001", "名称": "保温杯"}, roles) == "A001 - 保温杯"

    def test_identical_secondary_is_not_repeated(self):
        roles = FieldRoleAssignment(title="款号", secondary_name="名称")
        assert display_title({"款号": "A001", "名称": "A001"}, roles) == "A001"

    def test_missing_title_value(self):
        roles = FieldRoleAssignment(title="款号")
        assert display_title({"款号": ""}, roles) == UNNAMED_TITLE
        assert display_title({}, FieldRoleAssignment()) == UNNAMED_TITLE


class TestResolveDisplayImage:
    def test_local_asset_beats_sheet_url(self):
        index = build_local_asset_index([("A001.jpg", "file:///imgs/A001.jpg")])
        row = {"款号": "A001", "主图": "http://x.com/a.jpg"}
        roles = FieldRoleAssignment(title="款号", image="主图")
        assert resolve_display_image(row, roles, index) == ("file:///imgs/A001.jpg", "local")

    def test_remote_url_from_image_column(self):
        row = {"款号": "A001", "主图": "a.jpg, b.jpg"}
        roles = FieldRoleAssignment(title="款号", image="主图")
        assert resolve_display_image(row, roles, {}) == ("a.jpg", "remote")

    def test_no_image(self):
        assert resolve_display_image({"x": "y"}, FieldRoleAssignment(title="x")) == (None, None)


def test_build_entry_for_priced_row(product_sheet):
    entry = build_entry(product_sheet, 0)
    assert entry.sheet_name == "Tiger"
    assert entry.title == "A001 - 保温杯"
    assert entry.brand == "Tiger"
    assert entry.image_url == "http://x.com/a001.jpg"
    assert entry.image_source == "remote"
    assert entry.price_text == "¥100"
    assert entry.roles.image == "主图"
    assert entry.calculation is not None
    assert entry.calculation.profit == pytest.approx(67.05)


def test_build_entry_uses_configured_rates(product_sheet):
    config = AppConfig(calculator=CalculatorInputs(tax_rate_pct=0, platform_rate_pct=0))
    entry = build_entry(product_sheet, 0, config=config)
    assert entry.calculation.comprehensive_cost == pytest.approx(20 + 0.45 + 0.7 + 1.8)


def test_build_entry_without_price_column():
    sheet = Sheet(name="S", headers=["名称", "颜色"], rows=[{"名称": "杯子", "颜色": "红色"}])
    entry = build_entry(sheet, 0)
    assert entry.title == "杯子"
    assert entry.calculation is None
    assert entry.price_text is None


def test_build_catalog_stats(product_sheet):
    index = build_local_asset_index([("A002.png", "file:///imgs/A002.png")])
    progress = Mock()
    result = build_catalog([product_sheet], asset_index=index, progress=progress)

    assert result.total_rows == 2
    assert [e.title for e in result.entries] == ["A001 - 保温杯", "A002"]
    assert result.entries[1].image_source == "local"
    stat = result.sheet_stats[0]
    assert (stat.rows, stat.with_image, stat.local_images, stat.priced) == (2, 2, 1, 2)
    assert stat.title_key == "款号"
    assert stat.image_key == "主图"
    assert result.brands == ["Tiger"]
    assert result.elapsed_seconds >= 0
    assert result.end_time >= result.start_time
    margins = [e.calculation.margin_post_return for e in result.entries]
    assert result.avg_margin == pytest.approx(sum(margins) / 2)
    progress.start_sheet.assert_called_once_with("Tiger")
    progress.finish_sheet.assert_called_once_with(2)


def test_build_catalog_empty_input():
    result = build_catalog([])
    assert result.total_rows == 0
    assert result.sheet_stats == []
    assert result.avg_margin == 0.0


def test_build_catalog_rejects_duplicate_headers():
    sheet = Sheet(name="Dup", headers=["a", "b", "a"], rows=[])
    with pytest.raises(CatalogError) as e:
        build_catalog([sheet])
    assert "duplicate headers" in str(e.value)


def test_filter_entries(product_sheet):
    other = Sheet(name="Other", headers=["名称"], rows=[{"名称": "tiger balm"}])
    entries = build_catalog([product_sheet, other]).entries

    assert len(filter_entries(entries)) == 3
    assert len(filter_entries(entries, brand=ALL_BRANDS)) == 3
    assert [e.sheet_name for e in filter_entries(entries, brand="Other")] == ["Other"]
    assert [e.title for e in filter_entries(entries, search="保温")] == ["A001 - 保温杯"]
    assert len(filter_entries(entries, search="TIGER")) == 3
    assert len(filter_entries(entries, brand="Tiger", search="tiger")) == 2
    assert filter_entries(entries, brand="Missing") == []


def test_format_record_text():
    text = format_record_text(["款号", "价格", "备注"], {"款号": "A001", "价格": 99.0, "备注": None})
    assert text == "款号: A001\n价格: 99\n备注: "
