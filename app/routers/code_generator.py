"""
Code Generator Router — templates, generation and code-assistant chat.

Endpoints:
  GET  /api/code-generator/templates     — available templates
  POST /api/code-generator/generate      — one template
  POST /api/code-generator/batch         — up to 5 templates, inline failures
  POST /api/code-generator/chat          — general assistant chat
  POST /api/code-generator/code-chat     — code-focused chat + suggestions
  POST /api/code-generator/explain-code  — explanation for a snippet
  POST /api/code-generator/review-code   — review for a snippet
  GET  /api/code-generator/health        — health check
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from app.models.code import (
    BatchCodeRequest,
    ChatRequest,
    CodeChatRequest,
    CodeGenerationRequest,
    ExplainCodeRequest,
    ReviewCodeRequest,
)
from app.services.auth import auth_optional
from app.services.generators import chat as chat_ai
from app.services.generators.code import (
    generate_batch,
    generate_code,
    get_available_templates,
    validate_template,
)
from app.services.rate_limiter import generation_rate_limit

router = APIRouter()

_rate_limited = [Depends(generation_rate_limit)]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _success(payload: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, **payload, "timestamp": _now_iso()}


# =============================================================================
# TEMPLATES + GENERATION
# =============================================================================


@router.get("/templates", dependencies=[Depends(auth_optional)])
async def list_templates() -> dict[str, Any]:
    return {"success": True, "templates": get_available_templates()}


@router.post("/generate", dependencies=_rate_limited)
async def generate(payload: Any = Body(None)) -> dict[str, Any]:
    """Template is checked before the other fields so a bad template always
    answers with the template list."""
    validate_template(payload.get("template") if isinstance(payload, dict) else None)
    try:
        body = CodeGenerationRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e
    result = await generate_code(body)
    return _success(result)


@router.post("/batch", dependencies=_rate_limited)
async def generate_many(body: BatchCodeRequest) -> dict[str, Any]:
    results = await generate_batch(body.requests)
    return _success({"results": results})


# =============================================================================
# CHAT
# =============================================================================


@router.post("/chat", dependencies=_rate_limited)
async def chat(body: ChatRequest) -> dict[str, Any]:
    result = await chat_ai.chat_with_ai(
        body.messages,
        context=body.context,
        max_tokens=body.max_tokens,
        temperature=body.temperature,
    )
    return _success(result)


@router.post("/code-chat", dependencies=_rate_limited)
async def code_chat(body: CodeChatRequest) -> dict[str, Any]:
    result = await chat_ai.chat_with_code_ai(
        body.messages,
        code_context=body.code_context,
        max_tokens=body.max_tokens,
        temperature=body.temperature,
    )
    return _success(result)


@router.post("/explain-code", dependencies=_rate_limited)
async def explain(body: ExplainCodeRequest) -> dict[str, Any]:
    result = await chat_ai.explain_code(body.code, body.language, body.question)
    return _success(result)


@router.post("/review-code", dependencies=_rate_limited)
async def review(body: ReviewCodeRequest) -> dict[str, Any]:
    result = await chat_ai.review_code(body.code, body.language)
    return _success(result)


# =============================================================================
# HEALTH
# =============================================================================


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy", "service": "code-generator", "timestamp": _now_iso()}
