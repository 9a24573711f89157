"""
Tests for the HTTP surface.

Covers: root/health, middleware (CORS, security headers, body limit),
validation → 400, upstream failure → 500, rate limiting → 429, and one
happy path per route. Provider calls are mocked at ``llm.complete``.
"""

from __future__ import annotations

import time
from unittest.mock import AsyncMock, patch

import jwt
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.main import app
from app.routers import caption as caption_router
from app.services import llm as llm_mod

client = TestClient(app)

_CAPTIONS_JSON = '```json\n{"captions": ["Một", "Hai", "Ba", "Bốn"]}\n```'


def _bearer(sub: str) -> dict[str, str]:
    token = jwt.encode(
        {"sub": sub, "exp": int(time.time()) + 3600}, settings.jwt_secret, algorithm="HS256"
    )
    return {"Authorization": f"Bearer {token}"}


# ===========================================================================
# Root / middleware
# ===========================================================================


@pytest.mark.unit
class TestRootAndMiddleware:
    def test_root(self) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "name": "shopee-caption-backend"}

    def test_health(self) -> None:
        assert client.get("/health").json()["status"] == "healthy"

    def test_security_and_cors_headers(self) -> None:
        resp = client.get("/", headers={"Origin": "https://seller.example"})
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight(self) -> None:
        resp = client.options("/api/caption", headers={"Origin": "https://seller.example"})
        assert resp.status_code == 204
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]

    def test_body_too_large(self) -> None:
        resp = client.post(
            "/api/caption",
            content=b"x" * (settings.max_body_bytes + 1),
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 413
        assert resp.json() == {"error": "Payload Too Large"}


# ===========================================================================
# Products
# ===========================================================================


@pytest.mark.unit
class TestProductRoutes:
    @pytest.mark.parametrize("query", ["", "?shopId=abc", "?shopId="])
    def test_products_invalid_shop_id(self, query: str) -> None:
        resp = client.get(f"/api/products{query}")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing or invalid 'shopId' query parameter"}

    def test_products_sample_catalogue(self) -> None:
        resp = client.get("/api/products?shopId=123&token=test_token")
        assert resp.status_code == 200
        assert resp.json()["response"]["total_count"] == 3

    def test_generate_description(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value=" Mô tả ")):
            resp = client.post(
                "/api/generate-description", json={"name": "Áo", "features": ["cotton"]}
            )
        assert resp.status_code == 200
        assert resp.json() == {"description": "Mô tả"}

    def test_generate_description_missing_name(self) -> None:
        complete = AsyncMock()
        with patch.object(llm_mod, "complete", complete):
            resp = client.post("/api/generate-description", json={"features": ["cotton"]})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing product name"}
        complete.assert_not_called()

    def test_upstream_failure(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(side_effect=RuntimeError("down"))):
            resp = client.post("/api/generate-description", json={"name": "Áo"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Internal Server Error",
            "message": "Không thể tạo mô tả sản phẩm",
        }


# ===========================================================================
# Captions / images / product manager
# ===========================================================================


@pytest.mark.unit
class TestContentRoutes:
    def test_caption_fenced_json(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value=_CAPTIONS_JSON)):
            resp = client.post("/api/caption", json={"name": "Áo thun", "keywords": "cotton"})

        assert resp.status_code == 200
        assert resp.json() == {"captions": ["Một", "Hai", "Ba"]}

    def test_caption_social_post(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value="a\nb")):
            resp = client.post("/api/caption", json={"topic": "Tết", "platform": "TikTok"})

        assert resp.status_code == 200
        assert resp.json()["captions"] == ["a", "b"]

    def test_caption_missing_subject(self) -> None:
        resp = client.post("/api/caption", json={"keywords": ["x"]})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing product name"}

    def test_images_mock_mode(self) -> None:
        resp = client.post(
            "/api/image", json={"name": "Áo", "description": "Cotton", "count": 9}
        )
        body = resp.json()
        assert resp.status_code == 200
        assert body["count"] == 5
        assert len(body["images"]) == 5
        assert body["productName"] == "Áo"

    def test_images_overflowing_count_falls_back_to_one(self) -> None:
        resp = client.post(
            "/api/image",
            content='{"name": "Ao", "description": "Cotton", "count": 1e400}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 200
        assert resp.json()["count"] == 1

    def test_single_image(self) -> None:
        resp = client.post("/api/image/single", json={"name": "Áo", "description": "Cotton"})
        assert resp.status_code == 200
        assert resp.json()["image"].startswith("https://placehold.co/")

    def test_product_content(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value='["a", "b"]')):
            resp = client.post(
                "/api/ai-product-manager/content",
                json={"productName": "Bình", "category": "Gia dụng", "type": "features"},
            )

        assert resp.status_code == 200
        assert resp.json() == {
            "productName": "Bình",
            "category": "Gia dụng",
            "type": "features",
            "content": ["a", "b"],
        }

    def test_product_content_invalid_type(self) -> None:
        resp = client.post(
            "/api/ai-product-manager/content",
            json={"productName": "Bình", "category": "Gia dụng", "type": "slogan"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Missing or invalid 'type' field")

    def test_product_all(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value="text")):
            resp = client.post(
                "/api/ai-product-manager/all",
                json={"productName": "Bình", "category": "Gia dụng"},
            )

        body = resp.json()
        assert resp.status_code == 200
        assert set(body) == {"productName", "category", "description", "shortDescription", "features"}
        assert body["features"] == ["text"]


# ===========================================================================
# Code generator
# ===========================================================================


@pytest.mark.unit
class TestCodeGeneratorRoutes:
    def test_templates(self) -> None:
        body = client.get("/api/code-generator/templates").json()
        assert body["success"] is True
        assert len(body["templates"]) == 6

    def test_health(self) -> None:
        body = client.get("/api/code-generator/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "code-generator"
        assert "timestamp" in body

    def test_generate(self) -> None:
        raw = "```tsx\nexport default Card;\n```"
        with patch.object(llm_mod, "complete", AsyncMock(return_value=raw)):
            resp = client.post(
                "/api/code-generator/generate",
                json={"template": "react-component", "componentName": "Card"},
            )

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["code"] == "export default Card;"
        assert body["language"] == "tsx"
        assert "timestamp" in body

    def test_generate_invalid_template(self) -> None:
        resp = client.post("/api/code-generator/generate", json={"template": "vue"})
        body = resp.json()
        assert resp.status_code == 400
        assert body["error"].startswith("Missing or invalid 'template' field")
        assert "react-component" in body["availableTemplates"]

    def test_generate_checks_template_before_other_fields(self) -> None:
        resp = client.post(
            "/api/code-generator/generate",
            json={"template": "bad", "componentName": 5},
        )
        body = resp.json()
        assert resp.status_code == 400
        assert body["error"].startswith("Missing or invalid 'template' field")
        assert "availableTemplates" in body

    def test_generate_rejects_non_string_component_name(self) -> None:
        resp = client.post(
            "/api/code-generator/generate",
            json={"template": "react-hook", "componentName": 5},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid 'componentName' field. Must be a string"}

    def test_batch_invalid_template_generates_nothing(self) -> None:
        complete = AsyncMock(return_value="```ts\nx\n```")
        with patch.object(llm_mod, "complete", complete):
            resp = client.post(
                "/api/code-generator/batch",
                json={"requests": [{"template": "react-hook"}, {"template": "bogus"}]},
            )

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Invalid template in request 2.")
        complete.assert_not_called()

    def test_batch(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value="```ts\nx\n```")):
            resp = client.post(
                "/api/code-generator/batch",
                json={"requests": [{"template": "react-hook"}, {"template": "utility-function"}]},
            )

        results = resp.json()["results"]
        assert resp.status_code == 200
        assert [r["index"] for r in results] == [0, 1]
        assert all(r["success"] for r in results)

    def test_batch_too_many(self) -> None:
        resp = client.post(
            "/api/code-generator/batch",
            json={"requests": [{"template": "react-hook"}] * 6},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Too many requests. Maximum 5 requests per batch"}

    def test_chat(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value="Chào")):
            resp = client.post(
                "/api/code-generator/chat",
                json={"messages": [{"role": "user", "content": "Hi"}]},
            )

        body = resp.json()
        assert resp.status_code == 200
        assert body["message"]["content"] == "Chào"
        assert body["conversationId"].startswith("conv_")

    def test_chat_invalid_role(self) -> None:
        resp = client.post(
            "/api/code-generator/chat",
            json={"messages": [{"role": "bot", "content": "Hi"}]},
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Invalid role at index 0. Must be 'user', 'assistant', or 'system'"
        }

    def test_code_chat_suggestions(self) -> None:
        raw = "Dùng map:\n```ts\nitems.map(f)\n```"
        with patch.object(llm_mod, "complete", AsyncMock(return_value=raw)):
            resp = client.post(
                "/api/code-generator/code-chat",
                json={
                    "messages": [{"role": "user", "content": "Loop?"}],
                    "codeContext": {"language": "ts"},
                },
            )

        assert resp.json()["suggestions"] == {"code": "items.map(f)", "explanation": "Dùng map:"}

    def test_explain_and_review(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(return_value="Giải thích")):
            explain = client.post(
                "/api/code-generator/explain-code", json={"code": "x=1", "language": "python"}
            )
            review = client.post(
                "/api/code-generator/review-code", json={"code": "x=1", "language": "python"}
            )

        assert explain.json()["message"]["content"] == "Giải thích"
        assert review.json()["success"] is True

    def test_review_missing_code(self) -> None:
        resp = client.post("/api/code-generator/review-code", json={"language": "python"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing or invalid 'code' field. Must be a string"}


# ===========================================================================
# Rate limiting / errors
# ===========================================================================


@pytest.mark.unit
class TestRateLimitAndErrors:
    def test_blocks_after_quota(self) -> None:
        with patch.object(settings, "rate_limit_max_free", 2), \
             patch.object(llm_mod, "complete", AsyncMock(return_value="ok")):
            for _ in range(2):
                assert client.post("/api/generate-description", json={"name": "Áo"}).status_code == 200
            resp = client.post("/api/generate-description", json={"name": "Áo"})

        assert resp.status_code == 429
        assert resp.json() == {
            "error": "Too many requests, please upgrade to Pro or try again later."
        }
        assert int(resp.headers["Retry-After"]) > 0

    def test_authenticated_users_have_own_quota(self) -> None:
        with patch.object(settings, "rate_limit_max_free", 1), \
             patch.object(llm_mod, "complete", AsyncMock(return_value="ok")):
            assert client.post("/api/generate-description", json={"name": "Áo"}).status_code == 200
            anonymous = client.post("/api/generate-description", json={"name": "Áo"})
            seller = client.post(
                "/api/generate-description", json={"name": "Áo"}, headers=_bearer("seller-1")
            )

        assert anonymous.status_code == 429
        assert seller.status_code == 200

    def test_templates_are_not_rate_limited(self) -> None:
        with patch.object(settings, "rate_limit_max_free", 1):
            statuses = [client.get("/api/code-generator/templates").status_code for _ in range(3)]
        assert statuses == [200, 200, 200]

    def test_unhandled_exception(self) -> None:
        lenient = TestClient(app, raise_server_exceptions=False)
        with patch.object(
            caption_router, "generate_captions", AsyncMock(side_effect=KeyError("boom"))
        ):
            resp = lenient.post("/api/caption", json={"name": "Áo"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Server Error"}
