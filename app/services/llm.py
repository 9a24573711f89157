"""
LLM Service — Thin wrapper around LiteLLM for text generation.

One call per request: no fallback model, no retry. When the configured
model has no real credential, the caller's ``mock_response`` is served
through LiteLLM's mock path so the rest of the pipeline runs unchanged.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import litellm

from app.config import settings

logger = logging.getLogger(__name__)

# Suppress LiteLLM's noisy logging
litellm.suppress_debug_info = True


def user_message(prompt: str) -> list[dict[str, str]]:
    return [{"role": "user", "content": prompt}]


def is_mock_mode(model: str | None = None) -> bool:
    """True when no usable credential is configured for ``model``."""
    return not settings.has_credential(model or settings.text_model)


async def complete(
    messages: list[dict[str, Any]],
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    mock_response: str | None = None,
    timeout: int | None = None,
) -> str:
    """Get a completion from the LLM. Raises on provider failure."""
    resolved = model or settings.text_model
    start = time.perf_counter()

    kwargs: dict[str, Any] = {
        "model": resolved,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "timeout": timeout or settings.llm_timeout_seconds,
    }
    if is_mock_mode(resolved) and mock_response is not None:
        logger.info("LLM mock mode (%s): no credential configured", resolved)
        kwargs["mock_response"] = mock_response
    else:
        kwargs["api_key"] = settings.api_key_for(resolved)

    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        logger.error("LLM complete failed (%s, %.0fms): %s", resolved, elapsed, e)
        raise

    result = response.choices[0].message.content or ""
    elapsed = (time.perf_counter() - start) * 1000
    logger.debug("LLM complete (%s): %.0fms, %d chars", resolved, elapsed, len(result))
    return result
