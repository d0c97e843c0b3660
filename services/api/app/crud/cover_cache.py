from __future__ import annotations

from datetime import datetime, timezone

from app.models.cover_cache import CoverCache
from sqlalchemy import select
from sqlalchemy.orm import Session


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_cover_entries(db: Session, *, keys: list[str]) -> dict[str, CoverCache]:
    if not keys:
        return {}
    rows = (
        db.execute(select(CoverCache).where(CoverCache.cache_key.in_(keys)))
        .scalars()
        .all()
    )
    return {row.cache_key: row for row in rows}


def upsert_cover_entry(db: Session, *, key: str, cover_url: str) -> CoverCache:
    existing = db.get(CoverCache, key)
    now = utcnow()

    if existing:
        existing.cover_url = cover_url
        existing.updated_at = now
        return existing

    row = CoverCache(cache_key=key, cover_url=cover_url, updated_at=now)
    db.add(row)
    return row
