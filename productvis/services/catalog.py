from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import UTC, datetime

from ..config.loader import AppConfig, default_config
from ..models.catalog_result import CatalogEntry, CatalogResult, MarginStatsAccumulator, SheetStat
from ..models.sheet import FieldRoleAssignment, ProductRecord, Sheet
from .column_classifier import classify_fields, find_image_key
from .local_asset_matcher import find_local_image_match
from .profit_calculator import calculate_profit, inputs_from_record
from .progress import ProgressTracker
from .url_extractor import extract_first_image_url
from .value_normalizer import to_text

"""Catalog building: sheets -> display-ready product entries.

Coordinates the engine for every row: header roles are resolved once per
sheet, the image role per row (its score depends on cell content), the local
asset index is consulted before the sheet's own image column, and rows with a
price column get a full profit calculation.
"""

__all__ = [
    "ALL_BRANDS",
    "UNNAMED_TITLE",
    "CatalogError",
    "display_title",
    "resolve_display_image",
    "build_entry",
    "build_catalog",
    "filter_entries",
    "format_record_text",
]

logger = logging.getLogger(__name__)

ALL_BRANDS = "ALL"
UNNAMED_TITLE = "未命名产品"
IMAGE_SOURCE_LOCAL = "local"
IMAGE_SOURCE_REMOTE = "remote"


class CatalogError(Exception):
    """Raised for sheets that break the Sheet contract (e.g. duplicate headers)."""


def display_title(row: ProductRecord, roles: FieldRoleAssignment) -> str:
    """Composite title ``"<title> - <name>"``; the name part only when it adds something."""
    main = to_text(row.get(roles.title)).strip() if roles.title else ""
    main = main or UNNAMED_TITLE
    sub = to_text(row.get(roles.secondary_name)).strip() if roles.secondary_name else ""
    if sub and sub != main:
        return f"{main} - {sub}"
    return main


def resolve_display_image(
    row: ProductRecord,
    roles: FieldRoleAssignment,
    asset_index: Mapping[str, str] | None = None,
) -> tuple[str | None, str | None]:
    """Return ``(image_url, source)``; local assets take precedence over sheet URLs."""
    local = find_local_image_match(row, asset_index)
    if local:
        return local, IMAGE_SOURCE_LOCAL
    if roles.image:
        remote = extract_first_image_url(row.get(roles.image))
        if remote:
            return remote, IMAGE_SOURCE_REMOTE
    return None, None


def build_entry(
    sheet: Sheet,
    row_index: int,
    *,
    asset_index: Mapping[str, str] | None = None,
    config: AppConfig | None = None,
    sheet_roles: FieldRoleAssignment | None = None,
) -> CatalogEntry:
    """Build the display entry for ``sheet.rows[row_index]``.

    ``sheet_roles`` lets callers reuse header-only roles across rows of the
    same sheet; the image role is always recomputed for the row.
    """
    config = config or default_config()
    row = sheet.rows[row_index]
    base_roles = sheet_roles or classify_fields(sheet.headers)
    roles = replace(base_roles, image=find_image_key(sheet.headers, row))

    image_url, image_source = resolve_display_image(row, roles, asset_index)

    calculation = None
    price_text = None
    if roles.price:
        price_text = to_text(row.get(roles.price)).strip() or None
        inputs = inputs_from_record(row, roles, config.calculator)
        calculation = calculate_profit(inputs, config.shipping)

    brand = None
    if roles.brand:
        brand = to_text(row.get(roles.brand)).strip() or None

    return CatalogEntry(
        sheet_name=sheet.name,
        row_index=row_index,
        record=row,
        roles=roles,
        title=display_title(row, roles),
        brand=brand,
        image_url=image_url,
        image_source=image_source,
        price_text=price_text,
        calculation=calculation,
    )


def _check_headers(sheet: Sheet) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for header in sheet.headers:
        if header in seen:
            duplicates.add(header)
        seen.add(header)
    if duplicates:
        raise CatalogError(f"sheet '{sheet.name}' has duplicate headers: {sorted(duplicates)}")


def build_catalog(
    sheets: Sequence[Sheet],
    *,
    asset_index: Mapping[str, str] | None = None,
    config: AppConfig | None = None,
    progress: ProgressTracker | None = None,
) -> CatalogResult:
    """Build entries for every row of every sheet, in sheet then row order.

    Raises:
        CatalogError: a sheet has duplicate headers
    """
    config = config or default_config()
    start_time = datetime.now(UTC)
    start_perf = time.perf_counter()

    entries: list[CatalogEntry] = []
    stats: list[SheetStat] = []
    overall = MarginStatsAccumulator()

    for sheet in sheets:
        _check_headers(sheet)
        if progress is not None:
            progress.start_sheet(sheet.name)

        sheet_roles = classify_fields(sheet.headers)
        margins = MarginStatsAccumulator()
        with_image = local_images = 0
        for i in range(sheet.row_count):
            entry = build_entry(
                sheet, i, asset_index=asset_index, config=config, sheet_roles=sheet_roles
            )
            entries.append(entry)
            if entry.image_url:
                with_image += 1
            if entry.image_source == IMAGE_SOURCE_LOCAL:
                local_images += 1
            if entry.calculation is not None:
                margins.add(entry.calculation.margin_post_return)
                overall.add(entry.calculation.margin_post_return)

        _, sheet_avg, _ = margins.get_stats()
        stat = SheetStat(
            sheet_name=sheet.name,
            rows=sheet.row_count,
            with_image=with_image,
            local_images=local_images,
            priced=len(margins),
            title_key=sheet_roles.title,
            image_key=find_image_key(sheet.headers, sheet.first_row()),
            avg_margin=sheet_avg,
        )
        stats.append(stat)
        logger.debug(
            "sheet=%s rows=%d title_key=%s image_key=%s price_key=%s",
            sheet.name, stat.rows, stat.title_key, stat.image_key, sheet_roles.price,
        )
        if progress is not None:
            progress.finish_sheet(sheet.row_count)

    elapsed = time.perf_counter() - start_perf
    end_time = datetime.now(UTC)
    _, avg_margin, p95_margin = overall.get_stats()
    throughput = len(entries) / elapsed if elapsed > 0 else 0.0

    return CatalogResult(
        entries=entries,
        sheet_stats=stats,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=throughput,
        avg_margin=avg_margin,
        p95_margin=p95_margin,
        brands=[s.name for s in sheets],
    )


def filter_entries(
    entries: Iterable[CatalogEntry],
    brand: str | None = ALL_BRANDS,
    search: str | None = "",
) -> list[CatalogEntry]:
    """Filter by brand tab (sheet name) and a case-insensitive search over all cells."""
    selected = [e for e in entries if not brand or brand == ALL_BRANDS or e.sheet_name == brand]
    if not search:
        return selected
    term = search.lower()
    return [
        e for e in selected
        if any(term in to_text(v).lower() for v in e.record.values())
    ]


def format_record_text(headers: Sequence[str], row: ProductRecord) -> str:
    """Plain-text dump of a row, one ``header: value`` line per header."""
    return "\n".join(f"{h}: {to_text(row.get(h))}" for h in headers)
