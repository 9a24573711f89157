"""
Generator Base — the one call path every text capability goes through.

prompt → llm.complete (single call) → normalize(raw, shape)

Provider failures become UpstreamError with the capability's message;
normalization itself never fails.
"""

from __future__ import annotations

import logging
from typing import Any

from app.errors import UpstreamError
from app.services import llm
from app.services.normalizer import Shape, normalize

logger = logging.getLogger(__name__)


async def generate_raw(
    messages: list[dict[str, Any]],
    *,
    error_message: str,
    mock_response: str,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """Single provider call. Raises UpstreamError(error_message) on failure."""
    try:
        return await llm.complete(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            mock_response=mock_response,
        )
    except Exception as e:
        logger.error("%s: %s", error_message, e)
        raise UpstreamError(error_message) from e


async def generate_shaped(
    messages: list[dict[str, Any]],
    shape: Shape,
    *,
    error_message: str,
    mock_response: str,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> Any:
    """Provider call followed by exactly one normalization."""
    raw = await generate_raw(
        messages,
        error_message=error_message,
        mock_response=mock_response,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return normalize(raw, shape)
