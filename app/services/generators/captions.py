"""
Captions — three short marketplace captions per request.

Providers are asked for {"captions": [...]}; the normalizer recovers
from fenced JSON, bare lines or plain prose.
"""

from __future__ import annotations

import json
import logging

from app.config import settings
from app.models.content import CaptionRequest
from app.services.generators.base import generate_shaped
from app.services.normalizer import TextList

logger = logging.getLogger(__name__)

CAPTION_ERROR = "Không thể tạo caption sản phẩm"
CAPTION_COUNT = 3

CAPTION_SHAPE = TextList(max_items=CAPTION_COUNT, field="captions")

_SYSTEM_PROMPT = "Bạn là trợ lý tạo nội dung ngắn cho seller Việt Nam."

_JSON_INSTRUCTION = 'Trả về output ở định dạng JSON: { "captions": ["...", "...", "..."] }'

_PRODUCT_PROMPT = """Bạn là chuyên gia marketing cho sàn thương mại điện tử Việt Nam.
Viết {count} biến thể caption ngắn (mỗi caption < 140 ký tự) cho sản phẩm, phù hợp để đăng trên Shopee hoặc Lazada.
Yêu cầu: chèn tự nhiên các từ khóa: {keywords} (nếu có). {style}
Tên sản phẩm: {name}
{json_instruction}"""

_SOCIAL_PROMPT = """Bạn là chuyên gia marketing cho sàn thương mại điện tử Việt Nam.
Viết {count} biến thể caption {type} về chủ đề: {topic}.
Giọng điệu: {tone}. Độ dài: {length}. Nền tảng đăng: {platform}.
Thông tin thêm: {description}
{json_instruction}"""


def build_caption_prompt(request: CaptionRequest) -> str:
    if request.is_social_post:
        return _SOCIAL_PROMPT.format(
            count=CAPTION_COUNT,
            type=request.type or "quảng bá",
            topic=request.topic,
            tone=request.tone or "thân thiện",
            length=request.length or "ngắn",
            platform=request.platform or "Shopee",
            description=request.description or "không có",
            json_instruction=_JSON_INSTRUCTION,
        )

    return _PRODUCT_PROMPT.format(
        count=CAPTION_COUNT,
        keywords=", ".join(request.keywords),
        style=f"Phong cách: {request.style}." if request.style else "",
        name=request.name,
        json_instruction=_JSON_INSTRUCTION,
    )


def _mock_captions(subject: str) -> str:
    captions = [f"[MOCK] Caption {i} cho {subject}" for i in range(1, CAPTION_COUNT + 1)]
    return "```json\n" + json.dumps({"captions": captions}, ensure_ascii=False) + "\n```"


async def generate_captions(request: CaptionRequest) -> list[str]:
    """Up to three captions for a product or a social post topic."""
    subject = request.name or request.topic or ""
    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_caption_prompt(request)},
    ]

    return await generate_shaped(
        messages,
        CAPTION_SHAPE,
        model=settings.caption_model,
        temperature=0.2,
        max_tokens=300,
        error_message=CAPTION_ERROR,
        mock_response=_mock_captions(subject),
    )
