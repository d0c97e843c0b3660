from __future__ import annotations

import logging

from app.core.async_utils import run_async
from app.core.config import settings
from app.core.errors import AdapterError, BookTrackError, MalformedExtraction, StorageError
from app.domain.identity import CurrentUser, require_user
from app.domain.normalize import slugify
from app.models.author import Author
from app.models.book import Book
from app.models.bookshelf import BookshelfBook
from app.models.genre import Genre
from app.schemas.recommendations import RecommendationOut
from app.services.analytics import load_bookshelf_ids
from app.services.covers.cache import CoverQuery, get_covers_cached
from app.services.covers.provider import CoverProvider
from app.services.ingestion.pipeline import parse_json_object
from app.services.ingestion.prompts import build_recommendation_prompt
from app.services.llm.factory import get_completion_provider
from app.services.llm.provider import CompletionProvider
from app.services.results import operation
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

RECOMMENDATION_COUNT = 3


def load_library(db: Session, shelf_ids: list[str]) -> list[tuple[str, str, str]]:
    rows = db.execute(
        select(Book.title, Author.name, Genre.name)
        .select_from(BookshelfBook)
        .join(Book, Book.id == BookshelfBook.book_id)
        .outerjoin(Author, Author.id == Book.author_id)
        .outerjoin(Genre, Genre.id == Book.genre_id)
        .where(BookshelfBook.bookshelf_id.in_(shelf_ids))
    ).all()
    # Books without an author give the model nothing to work with.
    return [(title, author, genre or "") for title, author, genre in rows if title and author]


def parse_recommendations(raw: str) -> list[tuple[str, str]]:
    payload = parse_json_object(raw)
    recs = payload.get("recommendations")
    if not isinstance(recs, list):
        raise MalformedExtraction("Invalid recommendations format")

    out: list[tuple[str, str]] = []
    for rec in recs:
        if not isinstance(rec, dict):
            continue
        title = str(rec.get("title") or "").strip()
        author = str(rec.get("author") or "").strip()
        if title:
            out.append((title, author))
    return out


@operation("get_recommendations")
def get_recommendations(
    db: Session,
    user: CurrentUser | None,
    *,
    llm: CompletionProvider | None = None,
    covers: CoverProvider | None = None,
) -> list[RecommendationOut]:
    user = require_user(user)

    try:
        shelf_ids = load_bookshelf_ids(db, user.id)
        library = load_library(db, shelf_ids) if shelf_ids else []
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load library") from exc
    if not library:
        return []

    llm = llm or get_completion_provider()
    try:
        raw = run_async(
            llm.complete(
                build_recommendation_prompt(library, count=RECOMMENDATION_COUNT),
                response_format="json",
            )
        )
    except BookTrackError:
        raise
    except Exception as exc:
        raise AdapterError("Failed to get recommendations") from exc

    recs = parse_recommendations(raw)
    queries = [CoverQuery(title=t, author=a or None) for t, a in recs]
    lookups = get_covers_cached(db, queries, provider=covers) if queries else {}

    logger.info("recommendations ready", extra={"user_id": user.id, "count": len(recs)})
    return [
        RecommendationOut(
            id=slugify(title, author),
            title=title,
            author=author,
            cover=(lookups[q].cover_url if q in lookups else None)
            or settings.placeholder_cover_url,
        )
        for (title, author), q in zip(recs, queries)
    ]
