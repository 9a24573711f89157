"""
Code Generator Models — request bodies for /api/code-generator/*.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from app.models.fields import invalid, optional_text, required_text

MAX_BATCH_SIZE = 5
CHAT_ROLES: tuple[str, ...] = ("user", "assistant", "system")


# =============================================================================
# GENERATION
# =============================================================================


class CodeGenerationRequest(BaseModel):
    """One template generation. ``template`` is checked by the service so
    that batch requests can be validated as a whole."""

    template: Any = None
    component_name: str | None = Field(None, alias="componentName")
    props: str | None = None
    additional_params: dict[str, Any] = Field(
        default_factory=dict, alias="additionalParams"
    )

    class Config:
        populate_by_name = True

    @field_validator("component_name", mode="before")
    @classmethod
    def _component_name(cls, value: Any) -> str | None:
        return optional_text(value, "Invalid 'componentName' field. Must be a string")

    @field_validator("props", mode="before")
    @classmethod
    def _props(cls, value: Any) -> str | None:
        return optional_text(value, "Invalid 'props' field. Must be a string")

    @field_validator("additional_params", mode="before")
    @classmethod
    def _additional_params(cls, value: Any) -> Any:
        return value or {}


class BatchCodeRequest(BaseModel):
    """POST /api/code-generator/batch."""

    requests: list[CodeGenerationRequest] = Field(None, validate_default=True)

    @field_validator("requests", mode="before")
    @classmethod
    def _requests(cls, value: Any) -> Any:
        if not isinstance(value, list) or not value:
            raise invalid(
                "Missing or invalid 'requests' field. Must be a non-empty array"
            )
        if len(value) > MAX_BATCH_SIZE:
            raise invalid(
                f"Too many requests. Maximum {MAX_BATCH_SIZE} requests per batch"
            )
        return value


# =============================================================================
# CHAT
# =============================================================================


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: str | None = None


class CodeContext(BaseModel):
    language: str
    framework: str | None = None
    project_type: str | None = Field(None, alias="projectType")

    class Config:
        populate_by_name = True


def _check_messages(value: Any) -> Any:
    if not isinstance(value, list) or not value:
        raise invalid("Missing or invalid 'messages' field. Must be a non-empty array")

    for i, msg in enumerate(value):
        if not isinstance(msg, dict) or not msg.get("role") or not msg.get("content"):
            raise invalid(
                f"Invalid message format at index {i}. "
                "Must have 'role' and 'content' fields"
            )
        if msg["role"] not in CHAT_ROLES:
            raise invalid(
                f"Invalid role at index {i}. Must be 'user', 'assistant', or 'system'"
            )
    return value


class ChatRequest(BaseModel):
    """POST /api/code-generator/chat."""

    messages: list[ChatMessage] = Field(None, validate_default=True)
    context: str | None = None
    max_tokens: int | None = Field(None, alias="maxTokens")
    temperature: float | None = None

    class Config:
        populate_by_name = True

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, value: Any) -> Any:
        return _check_messages(value)


class CodeChatRequest(ChatRequest):
    """POST /api/code-generator/code-chat."""

    code_context: CodeContext | None = Field(None, alias="codeContext")


# =============================================================================
# EXPLAIN / REVIEW
# =============================================================================


class ReviewCodeRequest(BaseModel):
    """POST /api/code-generator/review-code."""

    code: str = Field(None, validate_default=True)
    language: str = Field(None, validate_default=True)

    @field_validator("code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> str:
        return required_text(value, "Missing or invalid 'code' field. Must be a string")

    @field_validator("language", mode="before")
    @classmethod
    def _language(cls, value: Any) -> str:
        return required_text(
            value, "Missing or invalid 'language' field. Must be a string"
        )


class ExplainCodeRequest(ReviewCodeRequest):
    """POST /api/code-generator/explain-code."""

    question: str | None = None
