"""
Content Models — request bodies for product copy, captions and images.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.fields import invalid, keyword_list, optional_text, required_text

ContentType = Literal["description", "shortDescription", "features"]
CONTENT_TYPES: tuple[str, ...] = ("description", "shortDescription", "features")

MAX_IMAGES = 5


# =============================================================================
# PRODUCT DESCRIPTION
# =============================================================================


class DescriptionRequest(BaseModel):
    """POST /api/generate-description."""

    name: str = Field(None, validate_default=True)
    features: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return required_text(value, "Missing product name")

    @field_validator("features", mode="before")
    @classmethod
    def _features(cls, value: Any) -> list[str]:
        return keyword_list(value)


# =============================================================================
# CAPTIONS
# =============================================================================


class CaptionRequest(BaseModel):
    """POST /api/caption.

    Two accepted shapes:
      product: {name, keywords?, style?}
      social:  {type, topic, tone, length, platform, description}
    """

    name: str | None = None
    keywords: list[str] = Field(default_factory=list)
    style: str | None = None

    type: str | None = None
    topic: str | None = None
    tone: str | None = None
    length: str | None = None
    platform: str | None = None
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str | None:
        return optional_text(value, "Missing product name")

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, value: Any) -> list[str]:
        return keyword_list(value)

    @field_validator(
        "style", "type", "topic", "tone", "length", "platform", "description",
        mode="before",
    )
    @classmethod
    def _loose_text(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @model_validator(mode="after")
    def _subject_present(self) -> "CaptionRequest":
        if not self.name and not self.topic:
            raise invalid("Missing product name")
        return self

    @property
    def is_social_post(self) -> bool:
        return not self.name and bool(self.topic)


# =============================================================================
# IMAGES
# =============================================================================


class SingleImageRequest(BaseModel):
    """POST /api/image/single."""

    name: str = Field(None, validate_default=True)
    description: str = Field(None, validate_default=True)
    style: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return required_text(value, "Missing product name")

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return required_text(value, "Missing product description")

    @field_validator("style", mode="before")
    @classmethod
    def _style(cls, value: Any) -> str | None:
        return str(value) if value else None


class ImageRequest(SingleImageRequest):
    """POST /api/image. ``count`` is clamped to 1..5."""

    count: int = 1

    @field_validator("count", mode="before")
    @classmethod
    def _count(cls, value: Any) -> int:
        try:
            count = int(value)
        except (TypeError, ValueError, OverflowError):
            count = 1
        return min(max(count or 1, 1), MAX_IMAGES)


# =============================================================================
# AI PRODUCT MANAGER
# =============================================================================


class ProductAllRequest(BaseModel):
    """POST /api/ai-product-manager/all."""

    product_name: str = Field(None, alias="productName", validate_default=True)
    category: str = Field(None, validate_default=True)
    keywords: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("product_name", mode="before")
    @classmethod
    def _product_name(cls, value: Any) -> str:
        return required_text(value, "Missing or invalid 'productName' field")

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        return required_text(value, "Missing or invalid 'category' field")

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, value: Any) -> list[str]:
        return keyword_list(value)


class ProductContentRequest(ProductAllRequest):
    """POST /api/ai-product-manager/content."""

    type: ContentType = Field(None, validate_default=True)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> str:
        if value not in CONTENT_TYPES:
            raise invalid(
                "Missing or invalid 'type' field. Must be one of: "
                + ", ".join(CONTENT_TYPES)
            )
        return value
