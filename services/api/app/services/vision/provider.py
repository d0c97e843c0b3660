from __future__ import annotations

from typing import Protocol


class OcrProvider(Protocol):
    name: str

    async def detect_text(self, image_bytes: bytes) -> str | None: ...
