from __future__ import annotations

from functools import lru_cache

from app.core.config import settings
from app.services.llm.openai_provider import OpenAIProvider
from app.services.llm.provider import CompletionProvider


@lru_cache
def get_completion_provider() -> CompletionProvider:
    if settings.llm_provider == "openai":
        return OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            timeout=settings.external_timeout_secs,
        )
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
