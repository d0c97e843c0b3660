from __future__ import annotations

from pydantic import BaseModel


class CoverOut(BaseModel):
    cover_url: str | None
    cached: bool = False
