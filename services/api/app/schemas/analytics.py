from __future__ import annotations

from pydantic import BaseModel


class GenreCount(BaseModel):
    name: str
    value: int


class AuthorCount(BaseModel):
    name: str
    books: int


class MonthCount(BaseModel):
    month: str
    books: int
