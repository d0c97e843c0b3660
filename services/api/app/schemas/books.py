from __future__ import annotations

from typing import Literal

from app.schemas.ingestion import IngestionStage
from pydantic import BaseModel, ConfigDict, Field, field_validator

SearchField = Literal["title", "author", "genre"]


class BookIn(BaseModel):
    title: str = Field(min_length=1, max_length=600)
    author: str = Field(default="Unknown", max_length=400)
    genre: str = Field(default="Unknown", max_length=200)
    bookshelf_id: str | None = None
    cover_url: str | None = None

    @field_validator("title", "author", "genre", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("author", "genre")
    @classmethod
    def default_blank_to_unknown(cls, v: str) -> str:
        return v or "Unknown"


class BatchSaveIn(BaseModel):
    books: list[BookIn] = Field(min_length=1)
    bookshelf_id: str | None = None


class SavedBookOut(BaseModel):
    stage: IngestionStage = IngestionStage.saved
    book_id: str
    bookshelf_id: str
    author_id: str
    genre_id: str


class BatchItemOut(BaseModel):
    index: int
    title: str
    success: bool
    book_id: str | None = None
    error: str | None = None


class BatchSaveSummaryOut(BaseModel):
    stage: IngestionStage = IngestionStage.saved
    saved: int
    failed: int
    items: list[BatchItemOut]


class NameOut(BaseModel):
    name: str


class BookOut(BaseModel):
    id: str
    title: str
    authors: list[NameOut] = Field(default_factory=list)
    genres: list[NameOut] = Field(default_factory=list)
    bookshelves: list[NameOut] = Field(default_factory=list)
    cover_image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)
