from __future__ import annotations

import re
from typing import Any

from .value_normalizer import to_text

"""First-image-URL extraction from free-form cell text.

Cells often hold several references ("a.jpg, b.jpg"), prose with an embedded
link, or quoted URLs. The extractor returns the first plausible image
reference or None.
"""

__all__ = [
    "IMAGE_EXTENSIONS",
    "extract_first_image_url",
    "has_image_extension",
    "is_base64_image",
]

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "bmp", "svg")

_SEPARATOR_RE = re.compile(r"[,;|\s]+")
_HTTP_RE = re.compile(r"^['\"]?https?://\S+", re.IGNORECASE)
_DATA_IMAGE_RE = re.compile(r"^['\"]?data:image/", re.IGNORECASE)
_EXTENSION_SUFFIX_RE = re.compile(
    r"\.(?:%s)$" % "|".join(IMAGE_EXTENSIONS), re.IGNORECASE
)
# extension check for scoring, tolerates query strings (a.jpg?x=1)
_EXTENSION_IN_URL_RE = re.compile(
    r"\.(?:%s)(?:\?.*)?$" % "|".join(IMAGE_EXTENSIONS), re.IGNORECASE
)
_QUOTES = "'\""


def _strip_quotes(token: str) -> str:
    return token.strip(_QUOTES)


def extract_first_image_url(value: Any) -> str | None:
    """Return the first image reference found in ``value``.

    A token qualifies when it is an http(s) URL, a ``data:image/`` URI, or ends
    with a known image extension. Quotes around URL / data URI tokens are
    removed. A cell holding one data URI is returned whole, since base64
    payloads contain ``;`` and ``,``. This goes beyond the separator split on
    purpose: splitting would only ever yield the bare ``data:image/png`` prefix.
    """
    text = to_text(value).strip()
    if not text:
        return None

    unquoted = _strip_quotes(text)
    if _DATA_IMAGE_RE.match(unquoted) and not any(c.isspace() for c in unquoted):
        return unquoted

    for token in _SEPARATOR_RE.split(text):
        if not token:
            continue
        if _HTTP_RE.match(token) or _DATA_IMAGE_RE.match(token):
            return _strip_quotes(token)
        if _EXTENSION_SUFFIX_RE.search(token):
            return token
    return None


def has_image_extension(url: str) -> bool:
    return bool(_EXTENSION_IN_URL_RE.search(url))


def is_base64_image(url: str) -> bool:
    return url.lower().startswith("data:image")
