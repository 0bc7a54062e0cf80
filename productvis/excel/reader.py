from __future__ import annotations

import math
import numbers
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ..models.sheet import Scalar, Sheet

"""Workbook reader: turns a spreadsheet file into Sheets.

This is the ingestion side of the pipeline; the classification engine only
ever sees the resulting Sheet objects.

- Row 1 is the header row, rows 2+ are product rows
- Empty cells become "" and fully blank rows are dropped
- Every sheet of a workbook becomes one Sheet named after the worksheet
  (sheets usually group products by brand); a .csv file yields one Sheet
  named after the file stem
"""

__all__ = [
    "WorkbookReadError",
    "read_workbook",
    "sheet_from_dataframe",
    "load_sheets",
]

CSV_SUFFIXES = {".csv"}


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be located or decoded."""


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: .xlsx / .xls / .csv file
    target_sheets: restrict to these sheet names (None == all sheets)
    """
    if not path.exists():
        raise WorkbookReadError(f"workbook not found: {path}")

    wanted = set(target_sheets) if target_sheets is not None else None
    try:
        if path.suffix.lower() in CSV_SUFFIXES:
            frames = {path.stem: pd.read_csv(path, dtype=object, keep_default_na=False)}
        else:
            frames = {}
            with pd.ExcelFile(path) as xls:
                for name in xls.sheet_names:
                    if wanted is not None and str(name) not in wanted:
                        continue
                    frames[str(name)] = xls.parse(name, header=0)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise WorkbookReadError(f"cannot read workbook {path.name}: {e}") from e

    if wanted is not None:
        frames = {k: v for k, v in frames.items() if k in wanted}
    return frames


def _to_scalar(value: Any) -> Scalar:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # numpy scalars -> plain python
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
        return "" if math.isnan(number) else number
    if pd.isna(value):
        return ""
    # datetimes and other objects are shown as text
    return str(value)


def sheet_from_dataframe(df: pd.DataFrame, name: str) -> Sheet:
    """Convert a header-parsed DataFrame into a Sheet.

    Header order follows the column order; pandas already de-duplicates
    repeated labels (``a``, ``a.1``) so headers stay unique.
    """
    headers = [str(c).strip() for c in df.columns]
    rows: list[dict[str, Scalar]] = []
    for raw in df.itertuples(index=False, name=None):
        record = {h: _to_scalar(v) for h, v in zip(headers, raw)}
        if all(v == "" for v in record.values()):
            continue
        rows.append(record)
    return Sheet(name=name, headers=headers, rows=rows)


def load_sheets(path: Path, target_sheets: Iterable[str] | None = None) -> list[Sheet]:
    """Read a workbook and convert every worksheet; header-less sheets are skipped."""
    sheets: list[Sheet] = []
    for name, df in read_workbook(path, target_sheets).items():
        if len(df.columns) == 0:
            continue
        sheets.append(sheet_from_dataframe(df, name))
    return sheets
