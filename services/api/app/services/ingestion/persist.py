from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from app.core.config import settings
from app.core.errors import BookTrackError, NotAuthenticated, StorageError
from app.db.session import SessionLocal
from app.domain.identity import CurrentUser, require_user
from app.models.author import Author
from app.models.book import Book
from app.models.bookshelf import BookshelfBook
from app.models.genre import Genre
from app.schemas.books import BatchItemOut, BatchSaveSummaryOut, BookIn, SavedBookOut
from app.schemas.ingestion import IngestionStage
from app.schemas.results import OperationResult
from app.services.library.resolvers import resolve_or_create, resolve_target_shelf
from app.services.results import operation
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _insert_book(
    db: Session, book: BookIn, author_id: str, genre_id: str, bookshelf_id: str
) -> str:
    try:
        row = Book(
            title=book.title,
            author_id=author_id,
            genre_id=genre_id,
            cover_image_url=book.cover_url,
        )
        db.add(row)
        db.flush()
        book_id = row.id
        db.add(BookshelfBook(book_id=book_id, bookshelf_id=bookshelf_id))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to save book") from exc
    return book_id


@operation("save_book")
def save_book(db: Session, user: CurrentUser | None, book: BookIn) -> SavedBookOut:
    """Persist one detected book onto one of the user's shelves.

    The shelf is checked first so a foreign or unknown shelf id fails before any
    author/genre rows are created. Author and genre commit on their own; the
    book row and its shelf link commit together.
    """
    user = require_user(user)

    try:
        bookshelf_id = resolve_target_shelf(db, user.id, book.bookshelf_id)
        author_id = resolve_or_create(db, Author, book.author)
        genre_id = resolve_or_create(db, Genre, book.genre)
        book_id = _insert_book(db, book, author_id, genre_id, bookshelf_id)
    except BookTrackError:
        logger.info(
            "book save stopped",
            extra={
                "user_id": user.id,
                "title": book.title,
                "stage": IngestionStage.persisting.value,
            },
        )
        raise

    logger.info(
        "saved book",
        extra={"user_id": user.id, "book_id": book_id, "bookshelf_id": bookshelf_id},
    )
    return SavedBookOut(
        book_id=book_id,
        bookshelf_id=bookshelf_id,
        author_id=author_id,
        genre_id=genre_id,
    )


def _save_in_own_session(
    session_factory: Callable[[], Session], user: CurrentUser, book: BookIn
) -> OperationResult[SavedBookOut]:
    db = session_factory()
    try:
        return save_book(db, user, book)
    finally:
        db.close()


def save_books(
    user: CurrentUser | None,
    books: list[BookIn],
    *,
    bookshelf_id: str | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
    max_workers: int | None = None,
) -> OperationResult[BatchSaveSummaryOut]:
    """Save every book concurrently; succeed only if all of them do.

    Books that were saved stay saved when others fail. The summary lists each
    book's outcome so the caller can retry the failures one by one.
    """
    if user is None:
        return OperationResult.fail(NotAuthenticated())

    if not books:
        return OperationResult.ok(BatchSaveSummaryOut(saved=0, failed=0, items=[]))

    if bookshelf_id is None and any(not b.bookshelf_id for b in books):
        # Resolve the default shelf once so parallel saves do not each create one.
        db = session_factory()
        try:
            bookshelf_id = resolve_target_shelf(db, user.id)
        except BookTrackError as exc:
            return OperationResult.fail(exc)
        finally:
            db.close()

    to_save = [
        b if b.bookshelf_id else b.model_copy(update={"bookshelf_id": bookshelf_id})
        for b in books
    ]

    workers = min(max_workers or settings.ingestion_save_concurrency, len(to_save))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(
            pool.map(lambda b: _save_in_own_session(session_factory, user, b), to_save)
        )

    items: list[BatchItemOut] = []
    failures: list[OperationResult[SavedBookOut]] = []
    for index, (book, result) in enumerate(zip(to_save, results)):
        if not result.success:
            failures.append(result)
        items.append(
            BatchItemOut(
                index=index,
                title=book.title,
                success=result.success,
                book_id=result.data.book_id if result.data else None,
                error=result.error,
            )
        )

    summary = BatchSaveSummaryOut(
        stage=IngestionStage.save_failed if failures else IngestionStage.saved,
        saved=len(to_save) - len(failures),
        failed=len(failures),
        items=items,
    )
    if not failures:
        return OperationResult.ok(summary)

    logger.warning(
        "batch save partially failed",
        extra={"user_id": user.id, "saved": summary.saved, "failed": summary.failed},
    )
    statuses = {f.status_code for f in failures}
    return OperationResult(
        success=False,
        data=summary,
        error=f"Failed to save {summary.failed} of {len(to_save)} books",
        code=failures[0].code if len(statuses) == 1 else "partial_failure",
        status_code=statuses.pop() if len(statuses) == 1 else 500,
    )
