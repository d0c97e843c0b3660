from __future__ import annotations

from functools import lru_cache

from app.core.config import settings
from app.services.covers.fixture_provider import FixtureCoverProvider
from app.services.covers.google_books import GoogleBooksCoverProvider
from app.services.covers.provider import CoverProvider


@lru_cache
def get_cover_provider() -> CoverProvider:
    if settings.cover_provider == "google_books":
        return GoogleBooksCoverProvider(
            api_key=settings.google_books_api_key,
            timeout=settings.external_timeout_secs,
        )
    if settings.cover_provider == "fixture":
        return FixtureCoverProvider(fixture_path=settings.fixture_covers_path)
    raise ValueError(f"Unknown cover provider: {settings.cover_provider}")
