"""
Shopee Service — Product-list passthrough to the Shopee Partner API v2.

Development, missing tokens and the ``test_token`` sentinel get a fixed
sample catalogue instead of a network call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)

SHOPEE_ERROR_MESSAGE = "Không thể lấy danh sách sản phẩm từ Shopee"
TEST_TOKEN = "test_token"

_SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "item_id": 1,
        "item_name": "Điện thoại iPhone 15 Pro Max",
        "item_status": "NORMAL",
        "price": 29990000,
        "stock": 50,
    },
    {
        "item_id": 2,
        "item_name": "Laptop Dell XPS 13",
        "item_status": "NORMAL",
        "price": 25990000,
        "stock": 25,
    },
    {
        "item_id": 3,
        "item_name": "Tai nghe AirPods Pro",
        "item_status": "NORMAL",
        "price": 5990000,
        "stock": 100,
    },
]


def _use_sample_catalogue(access_token: str | None) -> bool:
    return settings.is_development or not access_token or access_token == TEST_TOKEN


def sample_product_list() -> dict[str, Any]:
    return {
        "error": None,
        "message": "Success",
        "response": {
            "item": [dict(p) for p in _SAMPLE_PRODUCTS],
            "total_count": len(_SAMPLE_PRODUCTS),
        },
    }


async def get_shop_products(shop_id: int, access_token: str | None) -> dict[str, Any]:
    """Fetch the first page of a shop's items. Raises UpstreamError on failure."""
    if _use_sample_catalogue(access_token):
        logger.debug("Shopee sample catalogue for shop %s", shop_id)
        return sample_product_list()

    try:
        async with httpx.AsyncClient(timeout=settings.shopee_timeout_seconds) as http:
            response = await http.get(
                f"{settings.shopee_api_base}/product/get_item_list",
                params={
                    "shop_id": shop_id,
                    "offset": 0,
                    "page_size": settings.shopee_page_size,
                },
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Shopee product list failed (shop %s): %s", shop_id, e)
        raise UpstreamError(SHOPEE_ERROR_MESSAGE) from e
