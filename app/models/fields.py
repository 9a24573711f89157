"""
Field Coercion — shared before-validators for request models.

Errors are raised as PydanticCustomError so the message reaches the client
verbatim (no "Value error, " prefix) through the validation handler.
"""

from __future__ import annotations

from typing import Any

from pydantic_core import PydanticCustomError


def invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_field", message)


def required_text(value: Any, message: str) -> str:
    """Non-empty string or a 400 with ``message``."""
    if not value or not isinstance(value, str):
        raise invalid(message)
    return value


def optional_text(value: Any, message: str) -> str | None:
    """Falsy → None; anything else must be a string."""
    if not value:
        return None
    if not isinstance(value, str):
        raise invalid(message)
    return value


def keyword_list(value: Any) -> list[str]:
    """Array (stringified, blanks dropped) or comma-separated string."""
    if isinstance(value, list):
        items = [str(v).strip() for v in value if v is not None]
    elif isinstance(value, str) and value:
        items = [part.strip() for part in value.split(",")]
    else:
        items = []
    return [item for item in items if item]
