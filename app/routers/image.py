"""
Image Router — generated product photos.

Endpoints:
  POST /api/image         — 1–5 images (failed ones are skipped)
  POST /api/image/single  — exactly one image
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.models.content import ImageRequest, SingleImageRequest
from app.services.generators.product_images import (
    generate_product_image,
    generate_product_images,
)
from app.services.rate_limiter import generation_rate_limit

router = APIRouter(dependencies=[Depends(generation_rate_limit)])


@router.post("")
async def create_images(body: ImageRequest) -> dict[str, Any]:
    images = await generate_product_images(
        body.name, body.description, body.count, body.style
    )
    return {"images": images, "count": len(images), "productName": body.name}


@router.post("/single")
async def create_single_image(body: SingleImageRequest) -> dict[str, str]:
    image = await generate_product_image(body.name, body.description, body.style)
    return {"image": image, "productName": body.name}
