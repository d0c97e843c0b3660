"""Image -> OCR text -> LLM book extraction -> cover lookup.

Stages run in order and do not roll back: a failure in one stage leaves the
side effects of earlier stages (cached covers, logs) in place. OCR and LLM
failures are fatal for the image; cover failures fall back to a placeholder.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.core.async_utils import run_async
from app.core.config import settings
from app.core.errors import AdapterError, BookTrackError, MalformedExtraction, NoTextDetected
from app.core.otel import stage_span
from app.domain.identity import CurrentUser, require_user
from app.schemas.ingestion import (
    DetectedBook,
    ExtractionOut,
    IngestionPreview,
    IngestionStage,
    OcrOut,
    PreviewBook,
)
from app.services.covers.cache import CoverQuery, get_covers_cached
from app.services.covers.provider import CoverProvider
from app.services.ingestion.prompts import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt
from app.services.llm.factory import get_completion_provider
from app.services.llm.provider import CompletionProvider
from app.services.results import operation
from app.services.vision.factory import get_ocr_provider
from app.services.vision.provider import OcrProvider
from pydantic import ValidationError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def parse_json_object(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedExtraction("Completion response was not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise MalformedExtraction("Completion response was not a JSON object")
    return parsed


def extract_text(image_bytes: bytes, *, ocr: OcrProvider | None = None) -> str:
    if not image_bytes:
        raise NoTextDetected("No image data provided")

    ocr = ocr or get_ocr_provider()
    try:
        text = run_async(ocr.detect_text(image_bytes))
    except BookTrackError:
        raise
    except Exception as exc:
        raise AdapterError("Failed to process image") from exc

    if text is None or not text.strip():
        raise NoTextDetected()
    return text


def parse_detected_books(payload: dict[str, Any]) -> list[DetectedBook]:
    raw_books = payload.get("books")
    if not isinstance(raw_books, list):
        raise MalformedExtraction()

    books: list[DetectedBook] = []
    for i, raw in enumerate(raw_books):
        if not isinstance(raw, dict):
            logger.warning("dropping non-object book entry", extra={"index": i})
            continue
        fields = {
            k: v.strip()
            for k, v in raw.items()
            if k in ("title", "author", "genre") and isinstance(v, str) and v.strip()
        }
        try:
            books.append(DetectedBook(**fields))
        except ValidationError:
            logger.warning("dropping book entry without a title", extra={"index": i})
    return books


def extract_books(text: str, *, llm: CompletionProvider | None = None) -> list[DetectedBook]:
    llm = llm or get_completion_provider()
    try:
        raw = run_async(
            llm.complete(
                build_extraction_prompt(text),
                system=EXTRACTION_SYSTEM_PROMPT,
                response_format="json",
            )
        )
    except BookTrackError:
        raise
    except Exception as exc:
        raise AdapterError("Failed to analyze text") from exc

    # Single shot: a response that does not parse aborts the image.
    return parse_detected_books(parse_json_object(raw))


def attach_covers(
    db: Session,
    books: list[DetectedBook],
    *,
    covers: CoverProvider | None = None,
) -> list[PreviewBook]:
    placeholder = settings.placeholder_cover_url
    queries = [CoverQuery(title=b.title, author=b.author) for b in books]
    lookups = get_covers_cached(db, queries, provider=covers) if queries else {}

    out: list[PreviewBook] = []
    for index, (book, query) in enumerate(zip(books, queries)):
        lookup = lookups.get(query)
        cover_url = lookup.cover_url if lookup is not None else None
        out.append(
            PreviewBook(
                index=index,
                title=book.title,
                author=book.author,
                genre=book.genre,
                cover_url=cover_url or placeholder,
            )
        )
    return out


@operation("detect_text")
def detect_text(
    user: CurrentUser | None, image_bytes: bytes, *, ocr: OcrProvider | None = None
) -> OcrOut:
    require_user(user)
    return OcrOut(text=extract_text(image_bytes, ocr=ocr))


@operation("extract_books")
def analyze_text(
    user: CurrentUser | None, text: str, *, llm: CompletionProvider | None = None
) -> ExtractionOut:
    require_user(user)
    if not text or not text.strip():
        raise NoTextDetected("No text provided")
    return ExtractionOut(books=extract_books(text, llm=llm))


@operation("analyze_image")
def analyze_image(
    db: Session,
    user: CurrentUser | None,
    image_bytes: bytes,
    *,
    ocr: OcrProvider | None = None,
    llm: CompletionProvider | None = None,
    covers: CoverProvider | None = None,
) -> IngestionPreview:
    user = require_user(user)
    stage = IngestionStage.uploading
    log_extra = {"user_id": user.id, "image_bytes": len(image_bytes)}

    try:
        if not image_bytes:
            raise NoTextDetected("No image data provided")

        stage = IngestionStage.ocr_processing
        with stage_span(stage.value, image_bytes=len(image_bytes)):
            text = extract_text(image_bytes, ocr=ocr)

        stage = IngestionStage.llm_extracting
        with stage_span(stage.value, text_chars=len(text)):
            detected = extract_books(text, llm=llm)

        stage = IngestionStage.cover_fetching
        with stage_span(stage.value, books=len(detected)):
            books = attach_covers(db, detected, covers=covers)
    except BookTrackError:
        logger.info("ingestion stopped", extra={**log_extra, "stage": stage.value})
        raise

    logger.info("ingestion preview ready", extra={**log_extra, "books": len(books)})
    return IngestionPreview(stage=IngestionStage.preview, text=text, books=books)
