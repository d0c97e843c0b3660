from __future__ import annotations

from typing import Protocol


class CoverProvider(Protocol):
    name: str

    async def find_cover(self, *, title: str, author: str | None) -> str | None: ...
