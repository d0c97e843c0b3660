from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class IngestionStage(str, Enum):
    uploading = "uploading"
    ocr_processing = "ocr_processing"
    llm_extracting = "llm_extracting"
    cover_fetching = "cover_fetching"
    preview = "preview"
    persisting = "persisting"
    saved = "saved"
    save_failed = "save_failed"


class DetectedBook(BaseModel):
    title: str = Field(min_length=1)
    author: str = "Unknown"
    genre: str = "Unknown"


class PreviewBook(DetectedBook):
    index: int
    cover_url: str


class TextIn(BaseModel):
    text: str


class OcrOut(BaseModel):
    text: str


class ExtractionOut(BaseModel):
    books: list[DetectedBook]


class IngestionPreview(BaseModel):
    stage: IngestionStage
    text: str
    books: list[PreviewBook]
