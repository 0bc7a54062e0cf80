#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates synthetic product workbooks in the loose, bilingual shape real
supplier sheets have: one sheet per brand, Chinese and English headers,
currency strings with symbols and separators, weights in mixed units and image
cells holding URLs, bare file names or nothing at all.

Row 1 is the header row, rows 2+ are products (the layout the reader expects).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

HEADERS = ["款号", "产品名称", "品牌", "主图", "价格", "商品成本", "商品重量", "颜色", "备注"]
COLORS = ["红色", "黑色", "白色", "蓝色", "灰色"]
WEIGHT_FORMATS = ("{:.0f}g", "{:.2f}kg", "{:.1f}斤", "{:.0f}")


def generate_product_data(rows: int, brand: str = "BrandA", seed: int = 42) -> pd.DataFrame:
    """Generate a synthetic product DataFrame.

    Args:
        rows: Number of product rows
        brand: Value of the brand column
        seed: Random seed for reproducible data

    Returns:
        DataFrame with HEADERS as columns
    """
    rng = np.random.default_rng(seed)

    codes = [f"{brand[:2].upper()}{i:05d}" for i in range(1, rows + 1)]
    prices = np.round(rng.uniform(9.9, 999.0, rows), 2)
    costs = np.round(prices * rng.uniform(0.2, 0.8, rows), 2)
    grams = rng.uniform(80, 3000, rows)

    images: list[str] = []
    for code, kind in zip(codes, rng.integers(0, 3, rows)):
        if kind == 0:
            images.append(f"https://cdn.example.com/images/{code}.jpg")
        elif kind == 1:
            images.append(f"{code}.png")
        else:
            images.append("")

    weights: list[str] = []
    for g, fmt_idx in zip(grams, rng.integers(0, len(WEIGHT_FORMATS), rows)):
        fmt = WEIGHT_FORMATS[fmt_idx]
        if fmt.endswith("kg"):
            weights.append(fmt.format(g / 1000))
        elif fmt.endswith("斤"):
            weights.append(fmt.format(g / 500))
        else:
            weights.append(fmt.format(g))

    return pd.DataFrame(
        {
            "款号": codes,
            "产品名称": [f"{brand} 产品 {i}" for i in range(1, rows + 1)],
            "品牌": [brand] * rows,
            "主图": images,
            "价格": [f"¥{p:,.2f}" for p in prices],
            "商品成本": costs.tolist(),
            "商品重量": weights,
            "颜色": rng.choice(COLORS, rows).tolist(),
            "备注": ["常规款\n支持七天无理由" if i % 7 == 0 else "" for i in range(rows)],
        },
        columns=HEADERS,
    )


def create_excel_file(
    output_path: Path,
    rows: int,
    brands: list[str] | None = None,
    seed: int = 42,
) -> None:
    """Write one sheet per brand to ``output_path``."""
    if brands is None:
        brands = ["BrandA"]

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for offset, brand in enumerate(brands):
            df = generate_product_data(rows, brand=brand, seed=seed + offset)
            df.to_excel(writer, sheet_name=brand, index=False)

    print(f"Created Excel file: {output_path}")
    print(f"  Sheets: {len(brands)} ({', '.join(brands)})")
    print(f"  Rows per sheet: {rows} (+ 1 header row)")
    print(f"  Total data cells: {len(brands) * rows * len(HEADERS):,}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic product workbooks for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 10k rows, one brand
  %(prog)s output.xlsx

  # three brand sheets
  %(prog)s multi.xlsx --rows 5000 --brands BrandA BrandB BrandC
        """,
    )
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=10_000, help="Rows per sheet (default: 10,000)")
    parser.add_argument("--brands", nargs="+", default=["BrandA"], help="Sheet / brand names")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be generated")

    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    if args.dry_run:
        print(f"Would create: {args.output}")
        print(f"  Sheets: {', '.join(args.brands)}")
        print(f"  Rows per sheet: {args.rows}")
        return 0

    try:
        create_excel_file(args.output, args.rows, brands=args.brands, seed=args.seed)
    except OSError as e:
        print(f"Error creating Excel file: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
