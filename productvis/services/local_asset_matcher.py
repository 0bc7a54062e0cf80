from __future__ import annotations

from collections.abc import Mapping

from ..models.asset_index import strip_extension
from ..models.sheet import ProductRecord
from .value_normalizer import to_text

"""Match product rows against the session's local image index.

Any cell may carry the file name of a product photo (SKU code, barcode,
"A001.jpg", ...). Values are checked one by one in record order and the first
hit wins; there is no scoring.
"""

__all__ = [
    "find_local_image_match",
]


def find_local_image_match(row: ProductRecord, index: Mapping[str, str] | None) -> str | None:
    """Return the asset reference for the first row value found in ``index``.

    Per value, in order: a key equal to the extension-stripped value ignoring
    case, then the trimmed value as an exact key, then the extension-stripped
    value as an exact key.
    """
    if not index:
        return None

    for raw in row.values():
        value = to_text(raw).strip()
        if not value:
            continue
        stem = strip_extension(value)
        stem_lower = stem.lower()

        for key, reference in index.items():
            if key.lower() == stem_lower:
                return reference
        if value in index:
            return index[value]
        if stem in index:
            return index[stem]
    return None
