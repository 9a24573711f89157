"""
AI Product Manager Router.

Endpoints:
  POST /api/ai-product-manager/content — one content type
  POST /api/ai-product-manager/all     — description + tagline + features
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.models.content import ProductAllRequest, ProductContentRequest
from app.services.generators.content import (
    generate_all_product_content,
    generate_product_content,
)
from app.services.rate_limiter import generation_rate_limit

router = APIRouter(dependencies=[Depends(generation_rate_limit)])


@router.post("/content")
async def create_content(body: ProductContentRequest) -> dict[str, Any]:
    content = await generate_product_content(
        body.product_name, body.category, body.keywords, body.type
    )
    return {
        "productName": body.product_name,
        "category": body.category,
        "type": body.type,
        "content": content,
    }


@router.post("/all")
async def create_all_content(body: ProductAllRequest) -> dict[str, Any]:
    all_content = await generate_all_product_content(
        body.product_name, body.category, body.keywords
    )
    return {
        "productName": body.product_name,
        "category": body.category,
        **all_content,
    }
