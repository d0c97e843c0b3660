from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Sequence

from app.core.errors import StorageError
from app.domain.identity import CurrentUser, require_user
from app.models.author import Author
from app.models.book import Book
from app.models.bookshelf import Bookshelf, BookshelfBook
from app.models.genre import Genre
from app.schemas.analytics import AuthorCount, GenreCount, MonthCount
from app.services.results import operation
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
TOP_AUTHORS = 5
TIMELINE_MONTHS = 6


def load_bookshelf_ids(db: Session, user_id: str) -> list[str]:
    return list(
        db.execute(select(Bookshelf.id).where(Bookshelf.user_id == user_id)).scalars().all()
    )


def load_genre_names(db: Session, shelf_ids: Sequence[str]) -> list[str | None]:
    # One row per shelf link, so a book on two shelves counts twice.
    return list(
        db.execute(
            select(Genre.name)
            .select_from(BookshelfBook)
            .join(Book, Book.id == BookshelfBook.book_id)
            .outerjoin(Genre, Genre.id == Book.genre_id)
            .where(BookshelfBook.bookshelf_id.in_(shelf_ids))
        )
        .scalars()
        .all()
    )


def load_author_names(db: Session, shelf_ids: Sequence[str]) -> list[str | None]:
    return list(
        db.execute(
            select(Author.name)
            .select_from(BookshelfBook)
            .join(Book, Book.id == BookshelfBook.book_id)
            .outerjoin(Author, Author.id == Book.author_id)
            .where(BookshelfBook.bookshelf_id.in_(shelf_ids))
        )
        .scalars()
        .all()
    )


def load_added_at(db: Session, shelf_ids: Sequence[str]) -> list[datetime]:
    return list(
        db.execute(
            select(BookshelfBook.added_at)
            .where(BookshelfBook.bookshelf_id.in_(shelf_ids))
            .order_by(BookshelfBook.added_at)
        )
        .scalars()
        .all()
    )


def count_names(names: Iterable[str | None]) -> list[tuple[str, int]]:
    """Count non-empty names; most frequent first, ties broken by name."""
    counts = Counter(n for n in names if n)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0].lower(), kv[0]))


def month_key(dt: datetime) -> tuple[int, int]:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.year, dt.month


def count_by_month(
    timestamps: Iterable[datetime | None], *, keep_last: int = TIMELINE_MONTHS
) -> list[MonthCount]:
    counts = Counter(month_key(ts) for ts in timestamps if ts is not None)
    ordered = sorted(counts.items())[-keep_last:] if keep_last else []
    return [
        MonthCount(month=f"{MONTH_NAMES[month - 1]} {year}", books=n)
        for (year, month), n in ordered
    ]


def _user_shelves(db: Session, user: CurrentUser | None) -> list[str]:
    user = require_user(user)
    try:
        return load_bookshelf_ids(db, user.id)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load bookshelves") from exc


@operation("genre_report")
def genre_report(db: Session, user: CurrentUser | None) -> list[GenreCount]:
    shelf_ids = _user_shelves(db, user)
    if not shelf_ids:
        return []
    try:
        names = load_genre_names(db, shelf_ids)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load genre analytics") from exc
    return [GenreCount(name=name, value=n) for name, n in count_names(names)]


@operation("author_report")
def author_report(db: Session, user: CurrentUser | None) -> list[AuthorCount]:
    shelf_ids = _user_shelves(db, user)
    if not shelf_ids:
        return []
    try:
        names = load_author_names(db, shelf_ids)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load author analytics") from exc
    return [AuthorCount(name=name, books=n) for name, n in count_names(names)[:TOP_AUTHORS]]


@operation("timeline_report")
def timeline_report(db: Session, user: CurrentUser | None) -> list[MonthCount]:
    shelf_ids = _user_shelves(db, user)
    if not shelf_ids:
        return []
    try:
        timestamps = load_added_at(db, shelf_ids)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load books timeline") from exc
    return count_by_month(timestamps)
