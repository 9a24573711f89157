"""
Product Content — descriptions, taglines and feature lists.

One parameterized implementation per content type:
  description       → ScalarText (150–200 word SEO copy)
  shortDescription  → ScalarText (≤ 20 word tagline)
  features          → TextList(5), JSON root array, numbered lines dropped

generate_all_product_content() runs the three concurrently.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Callable

from app.config import settings
from app.services.generators.base import generate_shaped
from app.services.llm import user_message
from app.services.normalizer import ScalarText, Shape, TextList

logger = logging.getLogger(__name__)

DESCRIPTION_ERROR = "Không thể tạo mô tả sản phẩm"
CONTENT_ERROR = "Không thể tạo nội dung sản phẩm"

MAX_FEATURES = 5

# ── Listing description (POST /api/generate-description) ────────────

_LISTING_PROMPT = """Viết mô tả sản phẩm Shopee chuẩn SEO, tone chuyên nghiệp.
Tên sản phẩm: {name}
Tính năng: {features}"""

# ── Product manager prompts ─────────────────────────────────────────

_DESCRIPTION_PROMPT = """Generate a compelling product description for "{name}" in the {category} category.
Include these keywords: {keywords}.
Make it engaging, highlight key benefits, and include a call-to-action.
Keep it between 150-200 words."""

_SHORT_DESCRIPTION_PROMPT = """Create a short, punchy product tagline for "{name}" in the {category} category.
Maximum 20 words, focus on the main benefit."""

_FEATURES_PROMPT = """Generate {count} key features for "{name}" in the {category} category.
Each feature should be one short sentence highlighting a benefit.
Return ONLY a JSON array of strings."""


@dataclass(frozen=True)
class _ContentSpec:
    prompt: str
    shape: Shape
    mock: Callable[[str, str], str]


_CONTENT_SPECS: dict[str, _ContentSpec] = {
    "description": _ContentSpec(
        prompt=_DESCRIPTION_PROMPT,
        shape=ScalarText(fallback=CONTENT_ERROR),
        mock=lambda name, category: (
            f"[MOCK] {name} là lựa chọn nổi bật trong danh mục {category}. "
            "Đặt hàng ngay hôm nay!"
        ),
    ),
    "shortDescription": _ContentSpec(
        prompt=_SHORT_DESCRIPTION_PROMPT,
        shape=ScalarText(fallback=CONTENT_ERROR),
        mock=lambda name, category: f"[MOCK] {name}: chất lượng vượt trội cho {category}.",
    ),
    "features": _ContentSpec(
        prompt=_FEATURES_PROMPT,
        shape=TextList(max_items=MAX_FEATURES, field=None, drop_numbered=True),
        mock=lambda name, category: "```json\n"
        + json.dumps(
            [f"[MOCK] Tính năng {i} của {name}" for i in range(1, MAX_FEATURES + 1)],
            ensure_ascii=False,
        )
        + "\n```",
    ),
}


async def generate_description(name: str, features: list[str]) -> str:
    """SEO listing description for the seller's product page."""
    joined = ", ".join(features)
    prompt = _LISTING_PROMPT.format(name=name, features=joined)

    return await generate_shaped(
        user_message(prompt),
        ScalarText(fallback=DESCRIPTION_ERROR),
        model=settings.text_model,
        error_message=DESCRIPTION_ERROR,
        mock_response=(
            f"[MOCK] Mô tả sản phẩm {name} với các tính năng: {joined}. "
            "Đây là mô tả mẫu được tạo trong môi trường development."
        ),
    )


async def generate_product_content(
    product_name: str,
    category: str,
    keywords: list[str],
    content_type: str,
) -> str | list[str]:
    """Generate one content type. Unknown types raise ValueError."""
    spec = _CONTENT_SPECS.get(content_type)
    if spec is None:
        raise ValueError(f"Invalid content type: {content_type}")

    prompt = spec.prompt.format(
        name=product_name,
        category=category,
        keywords=", ".join(keywords),
        count=MAX_FEATURES,
    )

    return await generate_shaped(
        user_message(prompt),
        spec.shape,
        model=settings.text_model,
        error_message=CONTENT_ERROR,
        mock_response=spec.mock(product_name, category),
    )


async def generate_all_product_content(
    product_name: str,
    category: str,
    keywords: list[str],
) -> dict[str, str | list[str]]:
    """Description, tagline and features, generated concurrently."""
    results = await asyncio.gather(
        generate_product_content(product_name, category, keywords, "description"),
        generate_product_content(product_name, category, keywords, "shortDescription"),
        generate_product_content(product_name, category, keywords, "features"),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    description, short_description, features = results

    return {
        "description": description,
        "shortDescription": short_description,
        "features": features,
    }
