"""
Test configuration — sets required env vars before any imports.
"""

import os

# Placeholder keys force mock mode; no test ever reaches a real provider.
os.environ["ENVIRONMENT"] = "test"
os.environ["GEMINI_API_KEY"] = "test_key_for_development"
os.environ["OPENAI_API_KEY"] = "test_key_for_development"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-the-gateway-suite"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest  # noqa: E402

from app.services.rate_limiter import reset_rate_limiter  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Every test starts with empty rate-limit windows."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()
