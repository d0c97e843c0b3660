from __future__ import annotations

from typing import Any

from openai import AsyncOpenAI, OpenAIError

from app.core.errors import AdapterError
from app.services.llm.provider import ResponseFormat


class OpenAIProvider:
    """Chat completions through the OpenAI SDK (or any compatible base URL)."""

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        response_format: ResponseFormat = "json",
    ) -> str:
        if not self.api_key:
            raise AdapterError("Completion service is not configured")

        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens
        if response_format == "json":
            kwargs["response_format"] = {"type": "json_object"}

        # A client per call: run_async gives every call its own event loop.
        client = AsyncOpenAI(
            api_key=self.api_key, base_url=self.base_url, timeout=self.timeout
        )
        try:
            completion = await client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            raise AdapterError("Completion request failed") from exc
        finally:
            await client.close()

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise AdapterError("No content in completion response")
        return content
