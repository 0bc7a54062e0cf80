from __future__ import annotations

import pytest

from productvis.models import CalculatorInputs
from productvis.services.column_classifier import (
    classify_fields,
    find_brand_key,
    find_image_key,
    find_title_key,
)
from productvis.services.local_asset_matcher import find_local_image_match
from productvis.services.profit_calculator import calculate_profit
from productvis.services.url_extractor import extract_first_image_url
from productvis.services.value_normalizer import parse_currency, parse_weight_to_grams

"""Engine behaviour contract.

Fixed input/output pairs the catalog view relies on. A change here changes
what users see for existing workbooks.
"""


@pytest.mark.parametrize(
    "headers,expected",
    [
        (["款号", "品牌"], "品牌"),
        (["Brand Name", "brand"], "Brand Name"),
        (["品牌名称", "名称"], "品牌名称"),
        (["sub-brand code", "x"], "sub-brand code"),
        (["Supplier Brand", "品牌"], "品牌"),
    ],
)
def test_brand_key_found_exact_first(headers, expected):
    assert find_brand_key(headers) == expected


@pytest.mark.parametrize(
    "value,expected",
    [("¥1,200.50", 1200.5), ("", 0), ("abc", 0), (None, 0), (88, 88)],
)
def test_parse_currency_contract(value, expected):
    assert parse_currency(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [("0.5kg", 500), ("1斤", 500), ("3", 3000), ("500g", 500), ("", 0), ("2公斤", 2000), ("150", 150)],
)
def test_parse_weight_contract(value, expected):
    assert parse_weight_to_grams(value) == pytest.approx(expected)


def test_extract_first_image_url_contract():
    assert extract_first_image_url("desc text, http://x.com/b.jpg") == "http://x.com/b.jpg"
    assert extract_first_image_url("no links here") is None


def test_image_key_prefers_link_column():
    row = {"颜色": "红色", "图片链接": "http://x.com/a.jpg"}
    assert find_image_key(["颜色", "图片链接"], row) == "图片链接"


def test_image_key_boundaries():
    assert find_image_key([], {}) is None
    assert find_image_key(["颜色"], {"颜色": "红色"}) is None


def test_title_key_first_eligible_header_wins():
    # keyword order inside the list has no influence
    assert find_title_key(["颜色", "SKU", "产品名称"]) == "SKU"
    assert find_title_key(["a", "b"]) == "a"
    assert find_title_key([]) == ""


def test_calculator_reference_case():
    r = calculate_profit(CalculatorInputs(price=100, cost=20, weight_grams=300))
    assert r.shipping_fee == pytest.approx(1.8)
    assert r.platform_fee == pytest.approx(5)
    assert r.tax_fee == pytest.approx(5)
    assert r.comprehensive_cost == pytest.approx(32.95)
    assert r.profit == pytest.approx(67.05)
    assert r.margin_pre_return == pytest.approx(0.6705)
    assert r.margin_post_return == pytest.approx(0.60345)
    assert r.investment_efficiency == pytest.approx(1 / 0.60345)
    assert r.roi == pytest.approx(67.05 / 32.95)


def test_calculator_zero_price_has_no_division_error():
    r = calculate_profit(CalculatorInputs(price=0, cost=10, weight_grams=100))
    assert r.margin_pre_return == 0
    assert r.margin_post_return == 0
    assert r.investment_efficiency == 0


def test_repeated_calls_are_stable(product_sheet):
    row = product_sheet.first_row()
    headers = product_sheet.headers
    index = {"A001": "blob:1", "A001.jpg": "blob:1"}
    first = (
        classify_fields(headers, row),
        find_image_key(headers, row),
        find_local_image_match(row, index),
        parse_currency(row["价格"]),
        parse_weight_to_grams(row["商品重量"]),
        extract_first_image_url(row["主图"]),
    )
    second = (
        classify_fields(headers, row),
        find_image_key(headers, row),
        find_local_image_match(row, index),
        parse_currency(row["价格"]),
        parse_weight_to_grams(row["商品重量"]),
        extract_first_image_url(row["主图"]),
    )
    assert first == second
    assert index == {"A001": "blob:1", "A001.jpg": "blob:1"}
