"""
LLM Services
Chat-completion wrapper and assistant prompts
"""
from app.services.llm.client import (
    GenerateOptions,
    LLMClient,
    LLMError,
    get_llm_client,
    get_optional_llm_client,
)

__all__ = [
    "GenerateOptions",
    "LLMClient",
    "LLMError",
    "get_llm_client",
    "get_optional_llm_client",
]
