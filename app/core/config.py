"""
Unified Configuration
All environment variables and settings in one place

Every integration is optional at import time: routes that need a missing
credential answer with a 500 and log the misconfiguration instead of
crashing the process at startup.
"""
from typing import Optional
import logging
from pydantic_settings import BaseSettings
from pydantic import Field

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Unified application settings.
    Validates all environment variables at startup.
    """

    # ============================================================================
    # SERVER
    # ============================================================================

    environment: str = Field(default="production", description="Environment: dev/staging/production")
    port: int = Field(default=8080, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # ============================================================================
    # DATABASE (Supabase PostgreSQL)
    # ============================================================================

    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_anon_key: Optional[str] = Field(default=None, description="Supabase anonymous key (row-level policies apply)")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key (bypasses row-level policies)")

    # ============================================================================
    # LLM (Groq, OpenAI-compatible chat completions)
    # ============================================================================

    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", description="Groq OpenAI-compatible base URL")
    llm_model: str = Field(default="llama-3.3-70b-versatile", description="Default chat completion model")

    # ============================================================================
    # SPEECH (Deepgram)
    # ============================================================================

    deepgram_api_key: Optional[str] = Field(default=None, description="Deepgram API key")
    deepgram_base_url: str = Field(default="https://api.deepgram.com/v1", description="Deepgram REST base URL")
    deepgram_stt_model: str = Field(default="nova-2", description="Speech-to-text model")
    deepgram_tts_model: str = Field(default="aura-2-andromeda-en", description="Text-to-speech voice model")
    tts_sample_rate: int = Field(default=24000, description="PCM sample rate for synthesized speech (Hz)")

    # ============================================================================
    # SITE
    # ============================================================================

    site_url: str = Field(default="https://sheriffsecurity.pk", description="Public marketing site URL")

    # ============================================================================
    # RATE LIMITING
    # ============================================================================

    rate_limit_enabled: bool = Field(default=True, description="Enable the in-memory request rate limiter")

    # ============================================================================
    # PRODUCTION INFRASTRUCTURE
    # ============================================================================

    # Error tracking (Sentry)
    sentry_dsn: Optional[str] = Field(default=None, description="Sentry DSN for error tracking")

    @property
    def llm_configured(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def speech_configured(self) -> bool:
        return bool(self.deepgram_api_key)

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
