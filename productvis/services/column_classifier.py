from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.sheet import FieldRoleAssignment, ProductRecord
from .url_extractor import extract_first_image_url, has_image_extension, is_base64_image
from .value_normalizer import to_text

"""Heuristic column classification for schema-less product sheets.

Headers are matched case-insensitively against bilingual (English / Chinese)
keyword lists. The image role additionally inspects one representative row and
ranks headers with an additive score; all weights live in IMAGE_SCORE_WEIGHTS.

Every resolver scans headers in their original order, so ties always go to the
header that appears first in the sheet. Nothing here raises for odd input: a
miss is reported as None (or the documented fallback).
"""

__all__ = [
    "TITLE_KEYWORDS",
    "SECONDARY_NAME_KEYWORDS",
    "BRAND_KEYWORDS",
    "PRICE_KEYWORDS",
    "COST_KEYWORDS",
    "WEIGHT_KEYWORDS",
    "CORE_FIELD_KEYWORDS",
    "ImageScoreWeights",
    "IMAGE_SCORE_WEIGHTS",
    "HeaderScore",
    "find_title_key",
    "find_secondary_name_key",
    "find_brand_key",
    "find_image_key",
    "score_image_headers",
    "find_price_key",
    "find_cost_key",
    "find_weight_key",
    "classify_fields",
    "group_headers",
]

logger = logging.getLogger(__name__)

# Only eligibility matters: the first header (sheet order) matching any keyword wins.
TITLE_KEYWORDS = (
    "name", "title", "product", "brand", "model", "item", "sku",
    "名称", "产品", "标题", "品牌", "型号", "品名", "款式", "商品", "款号", "名字",
)
SECONDARY_NAME_KEYWORDS = ("名称", "name", "title", "品名", "名字", "标题", "product")
BRAND_KEYWORDS = (
    "brand", "品牌", "brand name", "品牌名", "品牌名称", "manufacturer", "maker", "厂商", "厂家",
)
# Priority order: the first keyword that matches any header decides.
PRICE_KEYWORDS = ("商品价格", "价格", "price", "零售价", "1瓶控价")
PRICE_FALLBACK_KEYWORDS = ("价", "金额")
COST_KEYWORDS = ("商品成本", "成本", "cost")
WEIGHT_KEYWORDS = ("商品重量", "重量", "weight")

# Detail view grouping, in display order.
CORE_FIELD_KEYWORDS = (
    "产品简称",
    "国际批准文号",
    "商品成本",
    "商品重量",
    "1瓶控价",
    "2瓶控价",
    "3瓶控价",
)

STRONG_IMAGE_KEYWORDS = (
    "image", "img", "pic", "photo", "picture", "thumbnail",
    "图", "相片", "封面", "展示", "照片", "外观", "预览",
)
COMPOUND_IMAGE_KEYWORDS = ("主图", "产品图", "商品图片", "图片链接", "图片地址")
WEAK_LINK_KEYWORDS = ("url", "link", "链接", "地址", "src", "href")
IMAGE_PATH_MARKERS = ("/images/", "/img/", "photos", "uploads")
CURRENCY_PREFIXES = ("¥", "$", "￥", "€", "£")


@dataclass(frozen=True)
class ImageScoreWeights:
    """Weights of the image-column score; signals are independent and summed."""
    strong_keyword: int = 20
    compound_keyword: int = 30
    weak_keyword: int = 5
    extracted_url: int = 20
    image_extension: int = 30
    base64_image: int = 40
    image_path: int = 10
    prose_penalty: int = -100
    currency_penalty: int = -50
    short_value_penalty: int = -10
    short_value_length: int = 5
    threshold: int = 10


IMAGE_SCORE_WEIGHTS = ImageScoreWeights()


@dataclass(frozen=True)
class HeaderScore:
    header: str
    score: int
    value: str
    extracted_url: str | None


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def _first_header_matching(headers: Sequence[str], keywords: Iterable[str]) -> str | None:
    keywords = tuple(keywords)
    for header in headers:
        if _contains_any(header.lower(), keywords):
            return header
    return None


def find_title_key(headers: Sequence[str]) -> str:
    """Resolve the title column.

    Returns the first header containing a title keyword, else the first header,
    else ``""`` for an empty header list.
    """
    found = _first_header_matching(headers, TITLE_KEYWORDS)
    if found is not None:
        return found
    return headers[0] if headers else ""


def find_secondary_name_key(headers: Sequence[str], title_key: str | None = None) -> str | None:
    """Resolve a name column distinct from the title (title often hits a model/SKU code)."""
    if title_key is None:
        title_key = find_title_key(headers)
    return _first_header_matching([h for h in headers if h != title_key], SECONDARY_NAME_KEYWORDS)


def find_brand_key(headers: Sequence[str]) -> str | None:
    """Resolve the brand column: exact keyword headers first, then substring hits."""
    for header in headers:
        if header.strip().lower() in BRAND_KEYWORDS:
            return header
    return _first_header_matching(headers, BRAND_KEYWORDS)


def _score_header(header: str, row: ProductRecord, weights: ImageScoreWeights) -> HeaderScore:
    lower_key = header.lower()
    value = to_text(row.get(header)).strip()
    extracted = extract_first_image_url(value)
    score = 0

    # header signals
    if _contains_any(lower_key, STRONG_IMAGE_KEYWORDS):
        score += weights.strong_keyword
    if _contains_any(lower_key, COMPOUND_IMAGE_KEYWORDS):
        score += weights.compound_keyword
    if _contains_any(lower_key, WEAK_LINK_KEYWORDS):
        score += weights.weak_keyword

    # content signals
    if extracted:
        score += weights.extracted_url
        if has_image_extension(extracted):
            score += weights.image_extension
        elif is_base64_image(extracted):
            score += weights.base64_image
    if _contains_any(value, IMAGE_PATH_MARKERS):
        score += weights.image_path

    # negative signals
    if not extracted and ("\n" in value or "\r" in value):
        score += weights.prose_penalty
    if value.startswith(CURRENCY_PREFIXES):
        score += weights.currency_penalty
    if len(value) < weights.short_value_length and "." not in value:
        score += weights.short_value_penalty

    return HeaderScore(header=header, score=score, value=value, extracted_url=extracted)


def score_image_headers(
    headers: Sequence[str],
    row: ProductRecord,
    weights: ImageScoreWeights = IMAGE_SCORE_WEIGHTS,
) -> list[HeaderScore]:
    """Score every header, best first. ``sorted`` is stable, so ties keep sheet order."""
    scores = [_score_header(h, row, weights) for h in headers]
    return sorted(scores, key=lambda s: s.score, reverse=True)


def find_image_key(
    headers: Sequence[str],
    row: ProductRecord | None,
    weights: ImageScoreWeights = IMAGE_SCORE_WEIGHTS,
) -> str | None:
    """Resolve the image column for one row.

    The best scoring header wins when its score exceeds the threshold. Otherwise
    the first header (sheet order) whose cell holds any extractable URL is used.
    """
    if not headers:
        return None
    row = row or {}

    ranked = score_image_headers(headers, row, weights)
    best = ranked[0]
    if best.score > weights.threshold:
        logger.debug("image key=%s score=%d", best.header, best.score)
        return best.header

    for header in headers:
        if extract_first_image_url(row.get(header)):
            logger.debug("image key=%s (url fallback, best score=%d)", header, best.score)
            return header
    return None


def find_price_key(headers: Sequence[str]) -> str | None:
    """Resolve the price column by keyword priority, then any ``价``/``金额`` header."""
    for keyword in PRICE_KEYWORDS:
        found = _first_header_matching(headers, (keyword,))
        if found is not None:
            return found
    return _first_header_matching(headers, PRICE_FALLBACK_KEYWORDS)


def find_cost_key(headers: Sequence[str]) -> str | None:
    return _first_header_matching(headers, COST_KEYWORDS)


def find_weight_key(headers: Sequence[str]) -> str | None:
    return _first_header_matching(headers, WEIGHT_KEYWORDS)


def classify_fields(headers: Sequence[str], row: ProductRecord | None = None) -> FieldRoleAssignment:
    """Resolve every role for a header list; the image role needs ``row``."""
    title = find_title_key(headers)
    return FieldRoleAssignment(
        title=title,
        secondary_name=find_secondary_name_key(headers, title),
        brand=find_brand_key(headers),
        image=find_image_key(headers, row) if row is not None else None,
        price=find_price_key(headers),
        cost=find_cost_key(headers),
        weight=find_weight_key(headers),
    )


def _core_rank(header: str) -> int:
    for i, keyword in enumerate(CORE_FIELD_KEYWORDS):
        if keyword in header:
            return i
    return len(CORE_FIELD_KEYWORDS)


def group_headers(headers: Sequence[str], roles: FieldRoleAssignment) -> tuple[list[str], list[str]]:
    """Split headers into (core, others) for a detail view.

    Headers already shown as title, secondary name or image are left out.
    Core headers follow CORE_FIELD_KEYWORDS order; others keep sheet order.
    """
    hidden: set[Any] = {roles.title, roles.secondary_name, roles.image}
    core: list[str] = []
    others: list[str] = []
    for header in headers:
        if header in hidden:
            continue
        if _contains_any(header, CORE_FIELD_KEYWORDS):
            core.append(header)
        else:
            others.append(header)
    core.sort(key=_core_rank)
    return core, others
