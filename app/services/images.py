"""
Images Service — OpenAI image generation for product shots.

Without an OpenAI key the service returns deterministic placeholder URLs
so the frontend can be developed offline.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from openai import AsyncOpenAI

from app.config import settings

logger = logging.getLogger(__name__)

_PLACEHOLDER_URL = "https://placehold.co/{size}/png?text={text}"

_openai_client: AsyncOpenAI | None = None


def get_openai_client() -> AsyncOpenAI:
    """Get or create async OpenAI client."""
    global _openai_client
    if _openai_client is None:
        _openai_client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout_seconds,
        )
    return _openai_client


def placeholder_image(label: str, variant: int = 1) -> str:
    """Deterministic placeholder URL used in mock mode."""
    text = quote(f"{label} #{variant}")
    return _PLACEHOLDER_URL.format(size=settings.image_size, text=text)


async def generate_image(prompt: str, label: str, variant: int = 1) -> str:
    """Generate one image and return its URL (or a data URI)."""
    if not settings.has_credential(settings.image_model):
        logger.info("Image mock mode: no OpenAI credential configured")
        return placeholder_image(label, variant)

    client = get_openai_client()

    try:
        response = await client.images.generate(
            model=settings.image_model,
            prompt=prompt,
            n=1,
            size=settings.image_size,
        )
    except Exception as e:
        logger.error("Image generation failed: %s", e)
        raise

    image = response.data[0]
    if image.url:
        return image.url
    if image.b64_json:
        return f"data:image/png;base64,{image.b64_json}"
    raise ValueError("Image provider returned no image data")
