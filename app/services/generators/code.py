"""
Code Generator — template-driven code generation.

Templates map to a fence language; the model's answer is reduced to the
first block in that language (any block, then bare text, as fallbacks).

Batch requests are validated as a whole before any generation call, then
run concurrently; one item's failure is reported inline.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from app.config import settings
from app.errors import GatewayError, ValidationError
from app.models.code import CodeGenerationRequest
from app.services.generators.base import generate_shaped
from app.services.llm import user_message
from app.services.normalizer import CodeBlock

logger = logging.getLogger(__name__)

CODE_ERROR = "Không thể tạo code"


@dataclass(frozen=True)
class TemplateConfig:
    language: str
    description: str
    instructions: str


TEMPLATE_CONFIGS: dict[str, TemplateConfig] = {
    "react-component": TemplateConfig(
        language="tsx",
        description="React functional component with TypeScript",
        instructions="""Tạo một React functional component với TypeScript:
- Tên component: {name}
- Props: {props}
- Yêu cầu: Sử dụng TypeScript, có interface cho props, có JSDoc comments
- Styling: Sử dụng CSS modules hoặc styled-components
- Export default component

Chỉ trả về code, không giải thích thêm.""",
    ),
    "react-hook": TemplateConfig(
        language="ts",
        description="Custom React hook with TypeScript",
        instructions="""Tạo một custom React hook với TypeScript:
- Tên hook: {name}
- Chức năng: {props}
- Yêu cầu: Sử dụng TypeScript, có return type rõ ràng, có JSDoc comments
- State management: Sử dụng useState, useEffect phù hợp

Chỉ trả về code, không giải thích thêm.""",
    ),
    "api-endpoint": TemplateConfig(
        language="ts",
        description="Next.js API route handler",
        instructions="""Tạo một Next.js API route handler với TypeScript:
- Endpoint: {name}
- Method: {method}
- Chức năng: {props}
- Yêu cầu: Sử dụng TypeScript, có error handling, có response types
- Validation: Validate input data

Chỉ trả về code, không giải thích thêm.""",
    ),
    "database-model": TemplateConfig(
        language="prisma",
        description="Prisma database model schema",
        instructions="""Tạo một Prisma database model:
- Model name: {name}
- Fields: {props}
- Yêu cầu: Có các field cơ bản (id, timestamps), có relationships nếu cần
- Constraints: Primary key, indexes phù hợp

Chỉ trả về Prisma schema, không giải thích thêm.""",
    ),
    "component-test": TemplateConfig(
        language="ts",
        description="Jest test for React components",
        instructions="""Tạo một Jest test cho React component:
- Component: {name}
- Test cases: {props}
- Yêu cầu: Sử dụng React Testing Library, có test cases cơ bản
- Coverage: Test rendering, props, events

Chỉ trả về test code, không giải thích thêm.""",
    ),
    "utility-function": TemplateConfig(
        language="ts",
        description="TypeScript utility function",
        instructions="""Tạo một TypeScript utility function:
- Function name: {name}
- Chức năng: {props}
- Yêu cầu: Sử dụng TypeScript, có type definitions, có JSDoc comments
- Error handling: Có xử lý lỗi phù hợp

Chỉ trả về code, không giải thích thêm.""",
    ),
}

# Per-template defaults when componentName / props are omitted
_DEFAULT_NAMES = {
    "react-component": ("MyComponent", "Không có props cụ thể"),
    "react-hook": ("useCustomHook", "Hook tùy chỉnh"),
    "api-endpoint": ("/api/example", "API endpoint cơ bản"),
    "database-model": ("Example", "id, name, createdAt"),
    "component-test": ("MyComponent", "Render, props handling, user interactions"),
    "utility-function": ("utilityFunction", "Utility function cơ bản"),
}

_TEMPLATE_IDS = ", ".join(TEMPLATE_CONFIGS)


def get_available_templates() -> list[dict[str, str]]:
    return [
        {"id": key, "language": cfg.language, "description": cfg.description}
        for key, cfg in TEMPLATE_CONFIGS.items()
    ]


def is_valid_template(template: Any) -> bool:
    return isinstance(template, str) and template in TEMPLATE_CONFIGS


def validate_template(template: Any) -> None:
    if not is_valid_template(template):
        raise ValidationError(
            f"Missing or invalid 'template' field. Must be one of: {_TEMPLATE_IDS}",
            availableTemplates=list(TEMPLATE_CONFIGS),
        )


def validate_batch(requests: list[CodeGenerationRequest]) -> None:
    """Reject the whole batch if any template is unknown."""
    for i, request in enumerate(requests):
        if not is_valid_template(request.template):
            raise ValidationError(
                f"Invalid template in request {i + 1}. Must be one of: {_TEMPLATE_IDS}"
            )


def build_prompt(request: CodeGenerationRequest) -> str:
    config = TEMPLATE_CONFIGS[request.template]
    default_name, default_props = _DEFAULT_NAMES[request.template]

    prompt = f"Bạn là một chuyên gia lập trình viên. Hãy tạo code {config.description}.\n\n"
    prompt += config.instructions.format(
        name=request.component_name or default_name,
        props=request.props or default_props,
        method=request.additional_params.get("method") or "GET",
    )
    return prompt


def _mock_code(request: CodeGenerationRequest, config: TemplateConfig) -> str:
    default_name, _ = _DEFAULT_NAMES[request.template]
    name = request.component_name or default_name
    return (
        f"Here is the code:\n\n```{config.language}\n"
        f"// [MOCK] {config.description}: {name}\n"
        "export {};\n```\n"
    )


async def generate_code(request: CodeGenerationRequest) -> dict[str, str]:
    """Generate code for one valid template."""
    config = TEMPLATE_CONFIGS[request.template]

    code = await generate_shaped(
        user_message(build_prompt(request)),
        CodeBlock(language=config.language),
        model=settings.code_model,
        error_message=CODE_ERROR,
        mock_response=_mock_code(request, config),
    )

    return {
        "code": code,
        "template": request.template,
        "language": config.language,
        "description": config.description,
    }


async def _generate_item(index: int, request: CodeGenerationRequest) -> dict[str, Any]:
    try:
        result = await generate_code(request)
    except GatewayError as e:
        logger.warning("Batch item %d (%s) failed: %s", index, request.template, e)
        return {
            "index": index,
            "success": False,
            "error": e.message or "Generation failed",
            "template": request.template,
        }
    return {"index": index, "success": True, **result}


async def generate_batch(requests: list[CodeGenerationRequest]) -> list[dict[str, Any]]:
    """Validate every template, then generate all items concurrently."""
    validate_batch(requests)
    return list(
        await asyncio.gather(
            *(_generate_item(i, request) for i, request in enumerate(requests))
        )
    )
