"""
Response Normalizer — Turn free-form LLM text into a declared shape.

Pure functions, no LLM calls, no I/O. Never raises on malformed text:
every shape has an ordered chain of extractors and the last one in each
chain always produces a value.

Shapes:
  ScalarText(fallback)                        → str
  TextList(max_items, field, drop_numbered)   → list[str] (≤ max_items)
  CodeBlock(language)                         → str

TextList chain: JSON → line-splitting → whole text.
CodeBlock chain: fence in language → any fence → unclosed fence → whole text.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Union


# =============================================================================
# SHAPES
# =============================================================================


@dataclass(frozen=True)
class ScalarText:
    """Plain text. ``fallback`` is returned when nothing usable remains."""

    fallback: str = "Không thể tạo nội dung"


@dataclass(frozen=True)
class TextList:
    """Bounded list of strings.

    field: JSON object key holding the list, or None when the JSON root
        itself must be an array.
    drop_numbered: discard "1." style lines during line-splitting.
    """

    max_items: int
    field: str | None = None
    drop_numbered: bool = False


@dataclass(frozen=True)
class CodeBlock:
    """Code fragment written in ``language`` (the fence tag)."""

    language: str


Shape = Union[ScalarText, TextList, CodeBlock]


# =============================================================================
# PATTERNS
# =============================================================================

_FENCE = "```"
_TAG = r"[\w+#.\-]*"

# Whole text is exactly one fenced block
_WRAPPED_RE = re.compile(rf"^```{_TAG}[ \t]*\r?\n?(?P<body>[\s\S]*?)\s*```$")
_ANY_BLOCK_RE = re.compile(rf"```{_TAG}[ \t]*\r?\n?(?P<body>[\s\S]*?)\s*```")
_OPENING_FENCE_RE = re.compile(rf"```{_TAG}[ \t]*\r?\n?")

_JSON_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_JSON_CLOSE_RE = re.compile(r"\s*```$")

_NUMBERED_RE = re.compile(r"^\d+\.")
_QUOTED_KEY_RE = re.compile(r'^"[^"]*"\s*:')
_BRACKETS_ONLY_RE = re.compile(r"^[\[\]{},]+$")


def _language_block_re(language: str) -> re.Pattern[str]:
    # Tag must end at the language name: "ts" does not match "```tsx".
    return re.compile(
        rf"```{re.escape(language)}(?![\w+#.\-])[ \t]*\r?\n?(?P<body>[\s\S]*?)\s*```",
        re.IGNORECASE,
    )


# =============================================================================
# FENCE HELPERS
# =============================================================================


def find_code_block(raw: str, language: str | None = None) -> str | None:
    """Interior of the first fenced block, preferring ``language``.

    Returns None when the text holds no closed fenced block.
    """
    if not raw:
        return None

    if language:
        match = _language_block_re(language).search(raw)
        if match:
            return match.group("body").strip()

    match = _ANY_BLOCK_RE.search(raw)
    if match:
        return match.group("body").strip()
    return None


def text_before_fence(raw: str) -> str:
    """Prose preceding the first fence (the whole text when there is none)."""
    return raw.split(_FENCE, 1)[0].strip()


def _unwrap_single_fence(text: str) -> str | None:
    """Interior when ``text`` is exactly one fenced block, else None."""
    match = _WRAPPED_RE.match(text)
    if match is None:
        return None
    body = match.group("body")
    if _FENCE in body:
        return None
    return body.strip()


def _strip_json_fence(raw: str) -> str:
    text = _JSON_OPEN_RE.sub("", raw.strip(), count=1)
    return _JSON_CLOSE_RE.sub("", text, count=1).strip()


# =============================================================================
# SCALAR TEXT
# =============================================================================


def _normalize_scalar(raw: str, shape: ScalarText) -> str:
    text = (raw or "").strip()
    unwrapped = _unwrap_single_fence(text)
    if unwrapped is not None:
        text = unwrapped
    return text or shape.fallback


# =============================================================================
# TEXT LIST
# =============================================================================

ListExtractor = Callable[[str, TextList], list[str] | None]


def _clean_items(items: list[object]) -> list[str]:
    cleaned = []
    for item in items:
        if item is None:
            continue
        text = item if isinstance(item, str) else str(item)
        text = text.strip()
        if text:
            cleaned.append(text)
    return cleaned


def _parse_json(raw: str) -> object | None:
    candidates = [_strip_json_fence(raw)]
    # Prose around the fence: fall back to the fenced interior
    fenced = find_code_block(raw, "json")
    if fenced is not None and fenced not in candidates:
        candidates.append(fenced)

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return None


def _list_from_json(raw: str, shape: TextList) -> list[str] | None:
    parsed = _parse_json(raw)

    if shape.field is None:
        candidate = parsed
    elif isinstance(parsed, dict):
        candidate = parsed.get(shape.field)
    else:
        candidate = None

    if not isinstance(candidate, list):
        return None

    items = _clean_items(candidate)
    return items[: shape.max_items] or None


def _is_json_punctuation(line: str) -> bool:
    return (
        line.startswith(("{", "}"))
        or bool(_BRACKETS_ONLY_RE.match(line))
        or bool(_QUOTED_KEY_RE.match(line))
    )


def _list_from_lines(raw: str, shape: TextList) -> list[str] | None:
    lines = []
    for line in raw.split("\n"):
        line = line.strip()
        if not line or _is_json_punctuation(line) or line.startswith(_FENCE):
            continue
        if shape.drop_numbered and _NUMBERED_RE.match(line):
            continue
        lines.append(line)
    return lines[: shape.max_items] or None


def _list_from_whole_text(raw: str, shape: TextList) -> list[str] | None:
    return [raw.strip() or raw]


_LIST_CHAIN: tuple[ListExtractor, ...] = (
    _list_from_json,
    _list_from_lines,
    _list_from_whole_text,
)


def _normalize_list(raw: str, shape: TextList) -> list[str]:
    if not raw or shape.max_items <= 0:
        return []
    for extractor in _LIST_CHAIN:
        result = extractor(raw, shape)
        if result is not None:
            return result[: shape.max_items]
    return []


# =============================================================================
# CODE BLOCK
# =============================================================================

CodeExtractor = Callable[[str, CodeBlock], str | None]


def _code_in_language(raw: str, shape: CodeBlock) -> str | None:
    match = _language_block_re(shape.language).search(raw)
    return match.group("body").strip() if match else None


def _code_in_any_block(raw: str, shape: CodeBlock) -> str | None:
    match = _ANY_BLOCK_RE.search(raw)
    return match.group("body").strip() if match else None


def _code_after_unclosed_fence(raw: str, shape: CodeBlock) -> str | None:
    match = _OPENING_FENCE_RE.search(raw)
    if match is None:
        return None
    return raw[match.end():].strip()


def _code_whole_text(raw: str, shape: CodeBlock) -> str | None:
    return raw.strip()


_CODE_CHAIN: tuple[CodeExtractor, ...] = (
    _code_in_language,
    _code_in_any_block,
    _code_after_unclosed_fence,
    _code_whole_text,
)


def _normalize_code(raw: str, shape: CodeBlock) -> str:
    raw = raw or ""
    for extractor in _CODE_CHAIN:
        result = extractor(raw, shape)
        if result is not None:
            return result
    return raw.strip()


# =============================================================================
# ENTRY POINT
# =============================================================================


def normalize(raw: str, shape: Shape) -> str | list[str]:
    """Normalize raw model output into ``shape``. Never raises on bad text."""
    if isinstance(shape, TextList):
        return _normalize_list(raw, shape)
    if isinstance(shape, CodeBlock):
        return _normalize_code(raw, shape)
    if isinstance(shape, ScalarText):
        return _normalize_scalar(raw, shape)
    raise TypeError(f"Unknown shape: {shape!r}")
