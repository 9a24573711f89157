"""
Caption Router.

Endpoints:
  POST /api/caption — up to three marketplace captions
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.models.content import CaptionRequest
from app.services.generators.captions import generate_captions
from app.services.rate_limiter import generation_rate_limit

router = APIRouter()


@router.post("", dependencies=[Depends(generation_rate_limit)])
async def create_captions(body: CaptionRequest) -> dict[str, list[str]]:
    captions = await generate_captions(body)
    return {"captions": captions}
