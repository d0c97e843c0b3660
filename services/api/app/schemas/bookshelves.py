from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BookshelfIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)


class BookshelfOut(BaseModel):
    id: str
    name: str
    description: str | None

    model_config = ConfigDict(from_attributes=True)
