from __future__ import annotations

import logging
import mimetypes
import re
from collections.abc import Iterable, Mapping

"""LocalAssetIndex model.

Maps a normalized asset key (file name with and without extension) to an asset
reference (URL-like string). The index is owned by the calling session: it is
built once per batch of user-supplied images and only grows through additive
merges. Engine code reads it and never mutates it.
"""

__all__ = [
    "LocalAssetIndex",
    "strip_extension",
    "is_image_file_name",
    "build_local_asset_index",
]

logger = logging.getLogger(__name__)

LocalAssetIndex = dict[str, str]

_EXTENSION_RE = re.compile(r"\.[^/.]+$")
_FALLBACK_IMAGE_SUFFIXES = {"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"}


def strip_extension(name: str) -> str:
    """Remove the trailing ``.ext`` part of a file name (``a.b.jpg`` -> ``a.b``)."""
    return _EXTENSION_RE.sub("", name)


def is_image_file_name(name: str) -> bool:
    mime, _ = mimetypes.guess_type(name)
    if mime:
        return mime.startswith("image/")
    # mime tables differ per platform (webp is missing on some)
    if "." not in name:
        return False
    return name.rsplit(".", 1)[-1].lower() in _FALLBACK_IMAGE_SUFFIXES


def build_local_asset_index(
    assets: Iterable[tuple[str, str]],
    existing: Mapping[str, str] | None = None,
) -> LocalAssetIndex:
    """Merge a batch of ``(file_name, reference)`` pairs into a new index.

    Non-image files are skipped. Each image registers two keys pointing at the
    same reference: the bare stem and the full file name. Later batches win on
    key collisions. ``existing`` is copied, never modified.
    """
    index: LocalAssetIndex = dict(existing) if existing else {}
    added = 0
    for file_name, reference in assets:
        if not is_image_file_name(file_name):
            continue
        index[strip_extension(file_name)] = reference
        index[file_name] = reference
        added += 1
    logger.debug("local asset index merged images=%d keys=%d", added, len(index))
    return index
