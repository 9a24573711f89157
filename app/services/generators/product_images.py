"""
Product Images — one or several generated shots per product.

Multi-image requests fan out concurrently; failed images are logged and
skipped, so the result can be shorter than requested.
"""

from __future__ import annotations

import asyncio
import logging

from app.errors import UpstreamError
from app.services import images

logger = logging.getLogger(__name__)

IMAGE_ERROR = "Không thể tạo hình ảnh sản phẩm"

_IMAGE_PROMPT = (
    "Professional e-commerce product photo of {name}. {description}. "
    "Clean background, studio lighting, high detail, suitable for a Shopee listing."
    "{style}{variant}"
)


def build_image_prompt(
    name: str,
    description: str,
    style: str | None = None,
    variant: int = 1,
) -> str:
    return _IMAGE_PROMPT.format(
        name=name,
        description=description.rstrip("."),
        style=f" Style: {style}." if style else "",
        variant=f" Variation {variant}, different angle." if variant > 1 else "",
    )


async def generate_product_image(
    name: str,
    description: str,
    style: str | None = None,
    variant: int = 1,
) -> str:
    """Single image URL. Raises UpstreamError on provider failure."""
    prompt = build_image_prompt(name, description, style, variant)
    try:
        return await images.generate_image(prompt, label=name, variant=variant)
    except Exception as e:
        logger.error("Product image generation failed (%s): %s", name, e)
        raise UpstreamError(IMAGE_ERROR) from e


async def generate_product_images(
    name: str,
    description: str,
    count: int,
    style: str | None = None,
) -> list[str]:
    """Up to ``count`` image URLs; individual failures are skipped."""
    results = await asyncio.gather(
        *(
            generate_product_image(name, description, style, variant)
            for variant in range(1, count + 1)
        ),
        return_exceptions=True,
    )

    urls = []
    for variant, result in enumerate(results, start=1):
        if isinstance(result, BaseException):
            logger.warning("Skipping failed image %d/%d for %s", variant, count, name)
            continue
        urls.append(result)

    if not urls:
        raise UpstreamError(IMAGE_ERROR)
    return urls
