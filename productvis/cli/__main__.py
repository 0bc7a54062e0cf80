from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from productvis.config.loader import AppConfig, ConfigError, default_config, load_config
from productvis.excel.reader import WorkbookReadError, load_sheets
from productvis.logging.init import log_summary, setup_logging
from productvis.models.asset_index import LocalAssetIndex, build_local_asset_index
from productvis.models.catalog_result import CatalogEntry
from productvis.services.catalog import ALL_BRANDS, CatalogError, build_catalog, filter_entries
from productvis.services.column_classifier import classify_fields
from productvis.services.progress import ProgressTracker
from productvis.services.summary import render_summary_line

"""CLI entrypoint: the session layer around the engine.

Flow:
- Load .env, then settings (--config / PRODUCTVIS_CONFIG, defaults otherwise)
- Read the workbook into sheets
- Build the local image index from --images / PRODUCTVIS_IMAGE_DIR
- Build the catalog, print filtered entries and the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NO_ROWS = 2

ENV_CONFIG = "PRODUCTVIS_CONFIG"
ENV_IMAGE_DIR = "PRODUCTVIS_IMAGE_DIR"


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Product sheet viewer: field detection and profit calculation")
    p.add_argument("workbook", type=Path, help="Workbook (.xlsx/.xls/.csv) to inspect")
    p.add_argument("--config", type=Path, default=None, help="Settings YAML (rates, shipping bands)")
    p.add_argument("--images", type=Path, default=None, help="Folder of local product images")
    p.add_argument("--sheet", action="append", default=None, help="Only read this sheet (repeatable)")
    p.add_argument("--brand", default=ALL_BRANDS, help="Only show entries of this sheet/brand tab")
    p.add_argument("--search", default="", help="Case-insensitive search over all cells")
    p.add_argument("--limit", type=int, default=20, help="Max entries to print (0 = all)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, detected roles & first rows then exit")
    return p.parse_args(argv)


def _resolve_config(arg: Path | None) -> AppConfig:
    path = arg or (Path(os.environ[ENV_CONFIG]) if os.getenv(ENV_CONFIG) else None)
    if path is None:
        return default_config()
    return load_config(path)


def _scan_image_dir(directory: Path) -> list[tuple[str, str]]:
    """(file name, file URI) for every file below ``directory``."""
    return [
        (p.name, p.resolve().as_uri())
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    ]


def _build_asset_index(arg: Path | None, logger) -> LocalAssetIndex:
    directory = arg or (Path(os.environ[ENV_IMAGE_DIR]) if os.getenv(ENV_IMAGE_DIR) else None)
    if directory is None:
        return {}
    if not directory.is_dir():
        logger.warning(f"image folder not found: {directory}")
        return {}
    index = build_local_asset_index(_scan_image_dir(directory))
    logger.info(f"local images loaded: keys={len(index)} from {directory}")
    return index


def _inspect_data(sheets, logger) -> int:
    for sheet in sheets:
        roles = classify_fields(sheet.headers, sheet.first_row())
        print(f"SHEET: {sheet.name} rows={sheet.row_count} cols={sheet.headers}")
        print(f"  roles={roles.as_dict()}")
        for row in sheet.rows[:3]:
            print(f"  sample_row={dict(row)}")
    if not sheets:
        logger.info("inspect: no sheets")
    return EXIT_SUCCESS


def _format_entry(entry: CatalogEntry) -> str:
    parts = [f"[{entry.sheet_name}] {entry.title}"]
    if entry.brand:
        parts.append(f"brand={entry.brand}")
    if entry.price_text:
        parts.append(f"price={entry.price_text}")
    if entry.image_url:
        url = entry.image_url if len(entry.image_url) <= 80 else entry.image_url[:77] + "..."
        parts.append(f"image={entry.image_source}:{url}")
    calc = entry.calculation
    if calc is not None:
        parts.append(
            f"cost={calc.comprehensive_cost:.2f} profit={calc.profit:.2f} "
            f"margin={calc.margin_pre_return:.1%}/{calc.margin_post_return:.1%} "
            f"efficiency={calc.investment_efficiency:.2f}"
        )
    return " | ".join(parts)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストから [] を渡せるように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    try:
        config = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        sheets = load_sheets(args.workbook, target_sheets=args.sheet)
    except WorkbookReadError as e:
        logger.error(f"workbook: {e}")
        return EXIT_FATAL

    logger.info(f"Reading products from: {args.workbook} sheets={len(sheets)}")

    if args.inspect_data:
        return _inspect_data(sheets, logger)

    asset_index = _build_asset_index(args.images, logger)

    try:
        with ProgressTracker(len(sheets)) as progress:
            result = build_catalog(sheets, asset_index=asset_index, config=config, progress=progress)
    except CatalogError as e:
        logger.error(f"catalog: {e}")
        return EXIT_FATAL

    shown = filter_entries(result.entries, brand=args.brand, search=args.search)
    limit = args.limit if args.limit > 0 else len(shown)
    for entry in shown[:limit]:
        logger.info(_format_entry(entry))
    if len(shown) > limit:
        logger.info(f"... {len(shown) - limit} more entries")

    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])

    if result.total_rows == 0:
        logger.warning("no product rows found")
        return EXIT_NO_ROWS
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
