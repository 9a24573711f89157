"""
Products Router — Shopee catalogue proxy + listing description.

Endpoints:
  GET  /api/products              — Shopee item list passthrough
  POST /api/generate-description  — SEO description for a listing
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from app.errors import ValidationError
from app.models.content import DescriptionRequest
from app.services.auth import auth_optional
from app.services.generators.content import generate_description
from app.services.rate_limiter import generation_rate_limit
from app.services.shopee import get_shop_products


router = APIRouter()


@router.get("/products", dependencies=[Depends(auth_optional)])
async def list_products(
    shop_id: str | None = Query(None, alias="shopId"),
    token: str | None = Query(None),
) -> dict[str, Any]:
    """Proxy a shop's first page of items."""
    try:
        parsed_shop_id = int(shop_id) if shop_id is not None else None
    except ValueError:
        parsed_shop_id = None
    if parsed_shop_id is None:
        raise ValidationError("Missing or invalid 'shopId' query parameter")

    return await get_shop_products(parsed_shop_id, token)


@router.post("/generate-description", dependencies=[Depends(generation_rate_limit)])
async def generate_listing_description(body: DescriptionRequest) -> dict[str, str]:
    description = await generate_description(body.name, body.features)
    return {"description": description}
