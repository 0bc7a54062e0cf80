from __future__ import annotations

from ..models.catalog_result import CatalogResult

"""SUMMARY line rendering for catalog builds."""


def _format_number(value: float, digits: int | None = None) -> str:
    """Integers without decimals, tiny numbers without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if digits is not None:
        return f"{value:.{digits}f}".rstrip("0").rstrip(".")
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: CatalogResult) -> str:
    """Render the SUMMARY line of a catalog build.

    Format:
    SUMMARY sheets={n} rows={rows} with_image={n} local_images={n} priced={n}
    avg_margin={fraction} elapsed_sec={sec} throughput_rps={rows/sec}
    """
    return (
        f"SUMMARY sheets={len(result.sheet_stats)} "
        f"rows={result.total_rows} "
        f"with_image={result.with_image} "
        f"local_images={result.local_images} "
        f"priced={result.priced} "
        f"avg_margin={_format_number(result.avg_margin, digits=4)} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
