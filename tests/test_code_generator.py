"""
Tests for the Code Generator and the code-assistant chat.

Covers: templates, prompt defaults, code extraction, batch validation and
inline failures, chat prompts, suggestions, conversation ids.
"""

from __future__ import annotations

import re
from unittest.mock import AsyncMock, patch

import pytest

from app.errors import UpstreamError, ValidationError
from app.models.code import ChatMessage, CodeContext, CodeGenerationRequest
from app.services import llm as llm_mod
from app.services.generators import chat as chat_mod
from app.services.generators import code as code_mod

# ===========================================================================
# Helpers
# ===========================================================================


def _request(template: str, **fields) -> CodeGenerationRequest:
    return CodeGenerationRequest(template=template, **fields)


def _messages(*pairs: tuple[str, str]) -> list[ChatMessage]:
    return [ChatMessage(role=role, content=content) for role, content in pairs]


# ===========================================================================
# TestTemplates
# ===========================================================================


@pytest.mark.unit
class TestTemplates:
    def test_available_templates(self) -> None:
        templates = code_mod.get_available_templates()
        ids = [t["id"] for t in templates]

        assert ids == [
            "react-component",
            "react-hook",
            "api-endpoint",
            "database-model",
            "component-test",
            "utility-function",
        ]
        assert templates[0]["language"] == "tsx"
        assert templates[3]["language"] == "prisma"

    @pytest.mark.parametrize("template", [None, "", "vue-component", 42])
    def test_invalid_template(self, template) -> None:
        with pytest.raises(ValidationError) as exc_info:
            code_mod.validate_template(template)

        content = exc_info.value.to_content()
        assert content["error"].startswith("Missing or invalid 'template' field. Must be one of: react-component")
        assert content["availableTemplates"] == list(code_mod.TEMPLATE_CONFIGS)

    def test_prompt_uses_defaults(self) -> None:
        prompt = code_mod.build_prompt(_request("react-hook"))
        assert "Tên hook: useCustomHook" in prompt
        assert "Chức năng: Hook tùy chỉnh" in prompt

    def test_prompt_uses_fields(self) -> None:
        prompt = code_mod.build_prompt(
            _request(
                "api-endpoint",
                componentName="/api/orders",
                props="Tạo đơn hàng",
                additionalParams={"method": "POST"},
            )
        )
        assert "Endpoint: /api/orders" in prompt
        assert "Method: POST" in prompt
        assert "Chức năng: Tạo đơn hàng" in prompt


# ===========================================================================
# TestGenerateCode
# ===========================================================================


@pytest.mark.unit
class TestGenerateCode:
    @pytest.mark.asyncio
    async def test_extracts_block_in_template_language(self) -> None:
        raw = "Sure!\n```bash\nnpm i\n```\n```tsx\nexport default function Card() {}\n```"
        with patch.object(llm_mod, "complete", AsyncMock(return_value=raw)):
            result = await code_mod.generate_code(_request("react-component"))

        assert result == {
            "code": "export default function Card() {}",
            "template": "react-component",
            "language": "tsx",
            "description": "React functional component with TypeScript",
        }

    @pytest.mark.asyncio
    async def test_mock_response_is_fenced(self) -> None:
        complete = AsyncMock(return_value="x")
        with patch.object(llm_mod, "complete", complete):
            await code_mod.generate_code(_request("database-model", componentName="Order"))

        mock = complete.call_args.kwargs["mock_response"]
        assert "```prisma\n" in mock
        assert "Order" in mock

    @pytest.mark.asyncio
    async def test_provider_failure(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(side_effect=RuntimeError("x"))):
            with pytest.raises(UpstreamError) as exc_info:
                await code_mod.generate_code(_request("react-hook"))

        assert exc_info.value.message == "Không thể tạo code"


# ===========================================================================
# TestBatch
# ===========================================================================


@pytest.mark.unit
class TestBatch:
    @pytest.mark.asyncio
    async def test_invalid_template_rejects_whole_batch(self) -> None:
        complete = AsyncMock(return_value="```ts\nx\n```")
        requests = [_request("react-hook"), _request("nope"), _request("utility-function")]

        with patch.object(llm_mod, "complete", complete):
            with pytest.raises(ValidationError) as exc_info:
                await code_mod.generate_batch(requests)

        assert exc_info.value.error.startswith("Invalid template in request 2. Must be one of:")
        complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_item_failure_is_inline(self) -> None:
        async def fake_complete(messages, **kwargs):
            if "Tên hook" in messages[0]["content"]:
                raise RuntimeError("quota")
            return "```ts\nexport const x = 1;\n```"

        requests = [_request("utility-function"), _request("react-hook")]
        with patch.object(llm_mod, "complete", AsyncMock(side_effect=fake_complete)):
            results = await code_mod.generate_batch(requests)

        assert results[0]["index"] == 0
        assert results[0]["success"] is True
        assert results[0]["code"] == "export const x = 1;"
        assert results[1] == {
            "index": 1,
            "success": False,
            "error": "Không thể tạo code",
            "template": "react-hook",
        }


# ===========================================================================
# TestChatPrompts
# ===========================================================================


@pytest.mark.unit
class TestChatPrompts:
    def test_chat_transcript(self) -> None:
        prompt = chat_mod.build_chat_prompt(
            _messages(("system", "ngắn gọn"), ("user", "Xin chào"), ("assistant", "Chào bạn")),
            context="Shopee seller",
        )
        assert "Context: Shopee seller" in prompt
        assert "System: ngắn gọn\nNgười dùng: Xin chào\nAssistant: Chào bạn\n" in prompt
        assert prompt.endswith("Assistant: ")

    def test_code_chat_specialization_skips_system_turns(self) -> None:
        prompt = chat_mod.build_code_chat_prompt(
            _messages(("system", "hidden"), ("user", "Fix bug")),
            CodeContext(language="TypeScript", framework="Next.js", projectType="e-commerce"),
        )
        assert "Bạn chuyên về TypeScript và Next.js cho e-commerce." in prompt
        assert "hidden" not in prompt
        assert "Người dùng: Fix bug" in prompt

    def test_conversation_id_format(self) -> None:
        conversation_id = chat_mod.generate_conversation_id()
        assert re.fullmatch(r"conv_\d{13}_[a-z0-9]{9}", conversation_id)

    def test_suggestions(self) -> None:
        text = "Dùng useMemo:\n```tsx\nconst v = useMemo(() => 1, []);\n```"
        assert chat_mod.extract_code_suggestions(text, "tsx") == {
            "code": "const v = useMemo(() => 1, []);",
            "explanation": "Dùng useMemo:",
        }

    def test_no_suggestions_for_empty_text(self) -> None:
        assert chat_mod.extract_code_suggestions("", "ts") is None


# ===========================================================================
# TestChat
# ===========================================================================


@pytest.mark.unit
class TestChat:
    @pytest.mark.asyncio
    async def test_chat_defaults(self) -> None:
        complete = AsyncMock(return_value="  Trả lời  ")
        with patch.object(llm_mod, "complete", complete):
            result = await chat_mod.chat_with_ai(_messages(("user", "Hỏi")))

        assert result["message"]["role"] == "assistant"
        assert result["message"]["content"] == "Trả lời"
        assert result["conversationId"].startswith("conv_")
        kwargs = complete.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_code_chat_keeps_reply_and_adds_suggestions(self) -> None:
        raw = "Thử cách này:\n```ts\nlet a = 1;\n```"
        complete = AsyncMock(return_value=raw)
        with patch.object(llm_mod, "complete", complete):
            result = await chat_mod.chat_with_code_ai(
                _messages(("user", "Help")), CodeContext(language="ts"), max_tokens=500
            )

        assert result["message"]["content"] == raw
        assert result["suggestions"] == {"code": "let a = 1;", "explanation": "Thử cách này:"}
        kwargs = complete.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 500

    @pytest.mark.asyncio
    async def test_explain_and_review_defaults(self) -> None:
        complete = AsyncMock(return_value="ok")
        with patch.object(llm_mod, "complete", complete):
            await chat_mod.explain_code("x = 1", "python", question="Tại sao?")
            explain_kwargs = complete.call_args.kwargs
            await chat_mod.review_code("x = 1", "python")
            review_kwargs = complete.call_args.kwargs

        assert (explain_kwargs["temperature"], explain_kwargs["max_tokens"]) == (0.3, 1000)
        assert "Câu hỏi cụ thể: Tại sao?" in explain_kwargs["messages"][0]["content"]
        assert (review_kwargs["temperature"], review_kwargs["max_tokens"]) == (0.2, 1200)
        assert "```python\nx = 1\n```" in review_kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_review_failure(self) -> None:
        with patch.object(llm_mod, "complete", AsyncMock(side_effect=RuntimeError("x"))):
            with pytest.raises(UpstreamError) as exc_info:
                await chat_mod.review_code("x", "python")

        assert exc_info.value.message == "Không thể review code"
