from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from app.core.async_utils import gather_settled, run_async
from app.core.config import settings
from app.core.errors import CoverLookupFailed, InvalidInput
from app.crud.cover_cache import get_cover_entries, upsert_cover_entry
from app.domain.normalize import cover_cache_key
from app.schemas.covers import CoverOut
from app.services.covers.factory import get_cover_provider
from app.services.covers.provider import CoverProvider
from app.services.results import operation
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverQuery:
    title: str
    author: str | None = None

    @property
    def key(self) -> str:
        return cover_cache_key(self.title, self.author)


@dataclass(frozen=True)
class CoverLookup:
    cover_url: str | None
    cached: bool = False
    # Set when the provider call failed; callers pick their own fallback.
    error: BaseException | None = None


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def is_fresh(updated_at: datetime, *, ttl_secs: int, now: datetime | None = None) -> bool:
    now = now or _now_utc()
    return now - _as_utc(updated_at) < timedelta(seconds=ttl_secs)


async def _fetch_all(
    provider: CoverProvider, queries: list[CoverQuery]
) -> list[str | None | BaseException]:
    return await gather_settled(
        provider.find_cover(title=q.title, author=q.author) for q in queries
    )


def get_covers_cached(
    db: Session,
    queries: list[CoverQuery],
    *,
    provider: CoverProvider | None = None,
) -> dict[CoverQuery, CoverLookup]:
    """Return a cover lookup per query.

    Behavior:
    - Reads the cover cache first; entries younger than the TTL are served as-is.
    - Calls the provider concurrently for misses and stale entries only.
    - Writes found URLs back; misses and failures are not cached.
    - A provider that cannot be built fails every uncached query instead of raising.
    """

    ttl = int(settings.cover_cache_ttl_secs)
    wanted = list(dict.fromkeys(queries))

    out: dict[CoverQuery, CoverLookup] = {}
    missing: list[CoverQuery] = []

    # 1) Try cache
    try:
        entries = get_cover_entries(db, keys=[q.key for q in wanted])
    except SQLAlchemyError:
        logger.warning("cover cache read failed; falling back to provider", exc_info=True)
        entries = {}

    now = _now_utc()
    for q in wanted:
        entry = entries.get(q.key)
        if entry is not None and is_fresh(entry.updated_at, ttl_secs=ttl, now=now):
            out[q] = CoverLookup(cover_url=entry.cover_url, cached=True)
        else:
            missing.append(q)

    if not missing:
        return out

    # 2) Fetch misses
    try:
        provider = provider or get_cover_provider()
    except (OSError, ValueError) as exc:
        logger.warning("cover provider unavailable: %s", exc, extra={"queries": len(missing)})
        for q in missing:
            out[q] = CoverLookup(cover_url=None, error=exc)
        return out

    fetched = run_async(_fetch_all(provider, missing))

    # 3) Write back
    for q, result in zip(missing, fetched):
        if isinstance(result, BaseException):
            logger.warning(
                "cover lookup failed",
                extra={"title": q.title, "author": q.author, "error": repr(result)},
            )
            out[q] = CoverLookup(cover_url=None, error=result)
            continue

        out[q] = CoverLookup(cover_url=result)
        if result:
            upsert_cover_entry(db, key=q.key, cover_url=result)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("cover cache write failed", exc_info=True)

    return out


@operation("lookup_cover")
def lookup_cover(
    db: Session,
    title: str,
    author: str | None = None,
    *,
    provider: CoverProvider | None = None,
) -> CoverOut:
    query = CoverQuery(title=(title or "").strip(), author=(author or "").strip() or None)
    if not query.title:
        raise InvalidInput("Title is required")
    lookup = get_covers_cached(db, [query], provider=provider)[query]
    if lookup.error is not None:
        raise CoverLookupFailed() from lookup.error
    return CoverOut(cover_url=lookup.cover_url, cached=lookup.cached)
