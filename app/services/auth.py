"""
Gateway Auth — optional bearer-token identity for generation endpoints.

Tokens are HS256 JWTs signed with ``settings.jwt_secret``. The public
endpoints stay usable without a token: ``auth_optional`` only attaches an
identity when one verifies. ``require_auth`` is the strict variant.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt
from fastapi import Request

from app.config import settings
from app.errors import AuthError

logger = logging.getLogger(__name__)

_ALGORITHMS = ["HS256"]


def _extract_bearer(request: Request) -> str | None:
    """Token part of ``Authorization: Bearer <token>``, if any."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or not parts[1].strip():
        return ""
    return parts[1].strip()


def decode_token(token: str) -> dict[str, Any]:
    """Verify a gateway JWT. Raises jwt.InvalidTokenError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=_ALGORITHMS)


async def auth_optional(request: Request) -> dict[str, Any] | None:
    """FastAPI dependency: attach the token payload to request.state.user.

    Missing or invalid tokens pass through unauthenticated.
    """
    request.state.user = None
    token = _extract_bearer(request)
    if not token:
        return None

    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError as e:
        logger.debug("Optional auth: ignoring invalid token: %s", e)
        return None

    request.state.user = payload
    return payload


async def require_auth(request: Request) -> dict[str, Any]:
    """FastAPI dependency: 401 unless a valid token is presented."""
    token = _extract_bearer(request)
    if token is None:
        raise AuthError("Missing auth token")

    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError as e:
        logger.warning("Auth: invalid token: %s", e)
        raise AuthError("Invalid token")

    request.state.user = payload
    return payload
