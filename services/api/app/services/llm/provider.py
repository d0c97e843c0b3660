from __future__ import annotations

from typing import Literal, Protocol

ResponseFormat = Literal["json", "text"]


class CompletionProvider(Protocol):
    name: str

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        response_format: ResponseFormat = "json",
    ) -> str: ...
