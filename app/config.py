"""
Seller AI Gateway Configuration

All environment variables and settings for the gateway.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

# Placeholder key shipped in .env examples; treated as "no credential".
DEV_PLACEHOLDER_KEY = "test_key_for_development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # APP
    # ==========================================================================
    app_name: str = "Seller AI Gateway"
    service_name: str = "shopee-caption-backend"
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # LLM
    # ==========================================================================
    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    # Model identifiers (LiteLLM format)
    text_model: str = "gemini/gemini-1.5-flash"
    caption_model: str = "gemini/gemini-1.5-flash"
    code_model: str = "gemini/gemini-1.5-flash"
    llm_timeout_seconds: int = 60

    # ==========================================================================
    # IMAGES (OpenAI)
    # ==========================================================================
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"

    # ==========================================================================
    # SHOPEE
    # ==========================================================================
    shopee_api_base: str = "https://partner.shopeemobile.com/api/v2"
    shopee_page_size: int = 50
    shopee_timeout_seconds: float = 30.0

    # ==========================================================================
    # AUTH + RATE LIMIT
    # ==========================================================================
    jwt_secret: str = "dev_jwt_secret"
    rate_limit_window_min: int = 60
    rate_limit_max_free: int = 20

    # ==========================================================================
    # HTTP
    # ==========================================================================
    cors_origins: str = "*"
    max_body_bytes: int = 1024 * 1024

    # ==========================================================================
    # SERVER
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 4000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def api_key_for(self, model: str) -> str | None:
        """Resolve the provider API key for a LiteLLM model identifier."""
        if model.startswith("gemini/"):
            return self.gemini_api_key
        if model.startswith(("openai/", "gpt-", "dall-e", "gpt-image")):
            return self.openai_api_key
        return None

    def has_credential(self, model: str) -> bool:
        """True when a real (non-placeholder) key is configured for the model."""
        key = self.api_key_for(model)
        return bool(key) and key != DEV_PLACEHOLDER_KEY


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
