"""
Chat AI — general and code-focused assistant conversations.

Stateless: the client sends the whole transcript each time and receives
one assistant message plus a fresh conversation id.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any

from app.config import settings
from app.models.code import ChatMessage, CodeContext
from app.services.generators.base import generate_raw
from app.services.llm import user_message
from app.services.normalizer import (
    ScalarText,
    find_code_block,
    normalize,
    text_before_fence,
)

logger = logging.getLogger(__name__)

CHAT_ERROR = "Không thể xử lý tin nhắn chat"
CODE_CHAT_ERROR = "Không thể xử lý tin nhắn code chat"
EXPLAIN_ERROR = "Không thể giải thích code"
REVIEW_ERROR = "Không thể review code"

_ID_ALPHABET = string.ascii_lowercase + string.digits

_SPEAKERS = {"user": "Người dùng", "assistant": "Assistant", "system": "System"}

_EXPLAIN_PROMPT = """Bạn là một chuyên gia lập trình viên. Hãy giải thích đoạn code {language} sau:

```{language}
{code}
```

{question}

Yêu cầu:
- Giải thích từng phần của code
- Nêu ra các điểm quan trọng
- Đưa ra các gợi ý cải thiện nếu có
- Sử dụng tiếng Việt"""

_REVIEW_PROMPT = """Bạn là một senior developer. Hãy review đoạn code {language} sau:

```{language}
{code}
```

Hãy đánh giá theo các tiêu chí:
1. **Cú pháp và logic**: Code có chạy đúng không?
2. **Best practices**: Có tuân thủ coding standards không?
3. **Performance**: Có vấn đề về hiệu suất không?
4. **Security**: Có lỗ hổng bảo mật nào không?
5. **Maintainability**: Code có dễ bảo trì không?
6. **Gợi ý cải thiện**: Đưa ra các đề xuất cụ thể

Sử dụng tiếng Việt và format rõ ràng."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_conversation_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"conv_{int(time.time() * 1000)}_{suffix}"


def _transcript(messages: list[ChatMessage], roles: tuple[str, ...]) -> str:
    lines = [
        f"{_SPEAKERS[msg.role]}: {msg.content}\n" for msg in messages if msg.role in roles
    ]
    return "".join(lines)


def build_chat_prompt(messages: list[ChatMessage], context: str | None = None) -> str:
    prompt = "Bạn là một AI assistant thông minh và hữu ích. "
    if context:
        prompt += f"Context: {context}\n\n"
    prompt += (
        "Hãy trả lời câu hỏi của người dùng một cách chính xác và hữu ích. "
        "Sử dụng tiếng Việt.\n\n"
    )
    prompt += _transcript(messages, ("user", "assistant", "system"))
    return prompt + "Assistant: "


def build_code_chat_prompt(
    messages: list[ChatMessage],
    code_context: CodeContext | None = None,
) -> str:
    prompt = "Bạn là một chuyên gia lập trình viên với nhiều năm kinh nghiệm. "
    if code_context:
        prompt += f"Bạn chuyên về {code_context.language}"
        if code_context.framework:
            prompt += f" và {code_context.framework}"
        if code_context.project_type:
            prompt += f" cho {code_context.project_type}"
        prompt += ".\n\n"
    prompt += (
        "Hãy giúp người dùng với các vấn đề lập trình. "
        "Trả lời chính xác, đưa ra code examples khi cần thiết.\n\n"
    )
    # System turns are folded into the persona above
    prompt += _transcript(messages, ("user", "assistant"))
    return prompt + "Assistant: "


def extract_code_suggestions(text: str, language: str | None = None) -> dict[str, str] | None:
    """Code block (preferring ``language``) plus the prose before it."""
    suggestions: dict[str, str] = {}

    code = find_code_block(text, language)
    if code:
        suggestions["code"] = code

    explanation = text_before_fence(text)
    if explanation:
        suggestions["explanation"] = explanation

    return suggestions or None


async def _reply(
    prompt: str,
    *,
    error_message: str,
    temperature: float,
    max_tokens: int,
    mock_response: str,
) -> tuple[dict[str, Any], str]:
    """Assistant message payload plus the raw model text."""
    raw = await generate_raw(
        user_message(prompt),
        model=settings.text_model,
        temperature=temperature,
        max_tokens=max_tokens,
        error_message=error_message,
        mock_response=mock_response,
    )
    content = normalize(raw, ScalarText(fallback=error_message))
    payload = {
        "message": {"role": "assistant", "content": content, "timestamp": _now_iso()},
        "conversationId": generate_conversation_id(),
    }
    return payload, raw


def _last_user_text(messages: list[ChatMessage]) -> str:
    for msg in reversed(messages):
        if msg.role == "user":
            return msg.content
    return messages[-1].content


async def chat_with_ai(
    messages: list[ChatMessage],
    context: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> dict[str, Any]:
    payload, _ = await _reply(
        build_chat_prompt(messages, context),
        error_message=CHAT_ERROR,
        temperature=temperature or 0.7,
        max_tokens=max_tokens or 1000,
        mock_response=f"[MOCK] Bạn vừa hỏi: {_last_user_text(messages)}",
    )
    return payload


async def chat_with_code_ai(
    messages: list[ChatMessage],
    code_context: CodeContext | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Code-focused chat; adds ``suggestions`` when the reply has code or prose."""
    language = code_context.language if code_context else None
    mock_language = language or "ts"

    payload, raw = await _reply(
        build_code_chat_prompt(messages, code_context),
        error_message=CODE_CHAT_ERROR,
        temperature=temperature or 0.3,
        max_tokens=max_tokens or 1500,
        mock_response=(
            f"[MOCK] Gợi ý cho: {_last_user_text(messages)}\n\n"
            f"```{mock_language}\n// [MOCK] example\n```"
        ),
    )

    suggestions = extract_code_suggestions(raw, language)
    if suggestions:
        payload["suggestions"] = suggestions
    return payload


async def explain_code(code: str, language: str, question: str | None = None) -> dict[str, Any]:
    prompt = _EXPLAIN_PROMPT.format(
        language=language,
        code=code,
        question=(
            f"Câu hỏi cụ thể: {question}"
            if question
            else "Hãy giải thích chi tiết cách hoạt động của code này."
        ),
    )
    payload, _ = await _reply(
        prompt,
        error_message=EXPLAIN_ERROR,
        temperature=0.3,
        max_tokens=1000,
        mock_response=f"[MOCK] Giải thích đoạn code {language} ({len(code)} ký tự).",
    )
    return payload


async def review_code(code: str, language: str) -> dict[str, Any]:
    prompt = _REVIEW_PROMPT.format(language=language, code=code)
    payload, _ = await _reply(
        prompt,
        error_message=REVIEW_ERROR,
        temperature=0.2,
        max_tokens=1200,
        mock_response=f"[MOCK] Review đoạn code {language}: không phát hiện vấn đề.",
    )
    return payload
