# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

import productvis.logging.init as logging_init
from productvis.models.sheet import Sheet


@pytest.fixture(autouse=True)
def _fresh_logger():
    # handler は setup 時点の sys.stdout を掴むので、テスト毎に作り直す
    logging_init.reset_logging()
    yield
    logging_init.reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "data").mkdir()
        (p / "images").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def product_headers() -> list[str]:
    return ["款号", "产品名称", "品牌", "主图", "价格", "商品成本", "商品重量", "颜色"]


@pytest.fixture()
def product_sheet(product_headers: list[str]) -> Sheet:
    rows = [
        {
            "款号": "A001",
            "产品名称": "保温杯",
            "品牌": "Tiger",
            "主图": "http://x.com/a001.jpg",
            "价格": "¥100",
            "商品成本": "20",
            "商品重量": "300g",
            "颜色": "红色",
        },
        {
            "款号": "A002",
            "产品名称": "A002",
            "品牌": "Tiger",
            "主图": "",
            "价格": "¥59.90",
            "商品成本": "¥12.5",
            "商品重量": "1.2kg",
            "颜色": "黑色",
        },
    ]
    return Sheet(name="Tiger", headers=product_headers, rows=rows)


@pytest.fixture()
def make_workbook():
    """Write ``{sheet: [header_row, *rows]}`` to an .xlsx file."""
    def _make(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                df = pd.DataFrame(rows)
                df.to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _make
