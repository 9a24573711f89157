"""Tests for scripts/generate_dev_token.py."""

from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from app.config import settings
from app.services.auth import decode_token

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "generate_dev_token.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("generate_dev_token", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.unit
class TestDevToken:
    def test_secret_is_random(self) -> None:
        script = _load_script()
        first, second = script.generate_secret(), script.generate_secret()
        assert first != second
        assert len(first) >= 48

    def test_minted_token_is_accepted(self) -> None:
        script = _load_script()
        token = script.mint_token("seller_123", settings.jwt_secret, hours=1)
        payload = decode_token(token)
        assert payload["sub"] == "seller_123"
        assert payload["exp"] - payload["iat"] == 3600
