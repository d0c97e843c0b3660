from __future__ import annotations

from pydantic import BaseModel


class RecommendationOut(BaseModel):
    id: str
    title: str
    author: str
    cover: str
