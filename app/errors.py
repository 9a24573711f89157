"""
Gateway Errors — the exception taxonomy rendered by the app's handlers.

ValidationError  → 400, raised before any upstream call
UpstreamError    → 500, provider / marketplace call failed (no retry)
RateLimitExceeded → 429
AuthError        → 401

Batch endpoints never raise for a single failed item; the item is reported
inline instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

INTERNAL_SERVER_ERROR = "Internal Server Error"


@dataclass(eq=False)
class GatewayError(Exception):
    status_code: int
    error: str
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] | None = None

    def __str__(self) -> str:
        return self.message or self.error

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.error}
        if self.message:
            content["message"] = self.message
        content.update(self.details)
        return content


class ValidationError(GatewayError):
    def __init__(self, error: str, **details: Any) -> None:
        super().__init__(status_code=400, error=error, details=details)


class UpstreamError(GatewayError):
    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=500, error=INTERNAL_SERVER_ERROR, message=message
        )


class RateLimitExceeded(GatewayError):
    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(
            status_code=429,
            error=message,
            headers={"Retry-After": str(retry_after)},
        )


class AuthError(GatewayError):
    def __init__(self, error: str) -> None:
        super().__init__(status_code=401, error=error)
