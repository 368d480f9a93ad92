"""
LLM Client
Chat completions against Groq's OpenAI-compatible endpoint

- generate_text: one request, free-form text
- generate_json: JSON mode with bounded retries (3 attempts); rate-limit
  errors back off linearly (2s, 4s, ...) before the next attempt

The parsed JSON is returned as-is. Callers that need shape guarantees
validate it themselves.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import openai
from openai import AsyncOpenAI

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"
MAX_JSON_ATTEMPTS = 3
RATE_LIMIT_BACKOFF_SECONDS = 2.0


class LLMError(Exception):
    """Raised when the model does not produce a usable response."""


@dataclass
class GenerateOptions:
    """Per-call overrides. None falls back to the call-site default."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    model: Optional[str] = None


def is_rate_limit_error(error: Exception) -> bool:
    """True when the provider rejected the call for rate limiting."""
    if isinstance(error, openai.RateLimitError):
        return True
    return "rate_limit_exceeded" in str(error)


class LLMClient:
    """Thin wrapper around the OpenAI SDK pointed at Groq."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        default_model: Optional[str] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if client is None:
            client = AsyncOpenAI(
                api_key=settings.groq_api_key,
                base_url=settings.groq_base_url,
                max_retries=0,  # retries are handled in generate_json
            )
        self._client = client
        self._default_model = default_model or settings.llm_model or DEFAULT_MODEL
        self._sleep = sleep

    async def _complete(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        model: str,
        json_mode: bool = False,
    ) -> Optional[str]:
        kwargs = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**kwargs)

        if not response.choices:
            return None
        message = response.choices[0].message
        return message.content if message else None

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[GenerateOptions] = None,
    ) -> str:
        """Generate a free-form text response. Does not retry."""
        options = options or GenerateOptions()
        content = await self._complete(
            prompt,
            system_prompt,
            temperature=0.6 if options.temperature is None else options.temperature,
            max_tokens=options.max_tokens or 1024,
            model=options.model or self._default_model,
        )
        return content or ""

    async def generate_json(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[GenerateOptions] = None,
    ) -> Any:
        """
        Generate a structured JSON response with retry logic.

        Returns:
            The parsed JSON document

        Raises:
            The last error seen once every attempt has failed
        """
        options = options or GenerateOptions()
        temperature = 0.6 if options.temperature is None else options.temperature
        max_tokens = options.max_tokens or 2048
        model = options.model or self._default_model

        last_error: Optional[Exception] = None

        for attempt in range(1, MAX_JSON_ATTEMPTS + 1):
            try:
                content = await self._complete(
                    prompt,
                    system_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    model=model,
                    json_mode=True,
                )
                if not content:
                    raise LLMError("Empty response from LLM")

                return json.loads(content)

            except Exception as e:
                last_error = e
                logger.error(f"LLM JSON attempt {attempt}/{MAX_JSON_ATTEMPTS} failed: {e}")

                if is_rate_limit_error(e) and attempt < MAX_JSON_ATTEMPTS:
                    delay = RATE_LIMIT_BACKOFF_SECONDS * attempt
                    logger.warning(f"⏳ LLM rate limited, backing off {delay:.0f}s")
                    await self._sleep(delay)

        raise last_error or LLMError("Failed to generate JSON response")

    async def close(self) -> None:
        await self._client.close()


# ============================================================================
# LAZY SINGLETON
# ============================================================================

_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """
    Get the shared LLM client (created on first use).

    Raises:
        LLMError: if GROQ_API_KEY is not configured
    """
    global _llm_client
    if _llm_client is None:
        if not settings.groq_api_key:
            raise LLMError("GROQ_API_KEY not configured")
        _llm_client = LLMClient()
        logger.info(f"✅ LLM client initialized (model: {settings.llm_model})")
    return _llm_client


async def close_llm_client() -> None:
    global _llm_client
    if _llm_client is not None:
        await _llm_client.close()
        _llm_client = None


def get_optional_llm_client() -> Optional[LLMClient]:
    """FastAPI dependency: the shared client, or None when not configured."""
    try:
        return get_llm_client()
    except LLMError as e:
        logger.warning(f"⚠️  LLM unavailable: {e}")
        return None
