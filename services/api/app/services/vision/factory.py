from __future__ import annotations

from functools import lru_cache

from app.core.config import settings
from app.services.vision.google_vision import GoogleVisionProvider
from app.services.vision.provider import OcrProvider


@lru_cache
def get_ocr_provider() -> OcrProvider:
    if settings.ocr_provider == "google_vision":
        return GoogleVisionProvider(
            api_key=settings.google_vision_api_key,
            endpoint=settings.google_vision_endpoint,
            timeout=settings.external_timeout_secs,
        )
    raise ValueError(f"Unknown OCR provider: {settings.ocr_provider}")
