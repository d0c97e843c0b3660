from __future__ import annotations

import logging

from app.core.errors import InvalidSelection, StorageError
from app.domain.identity import CurrentUser, require_user
from app.domain.normalize import escape_like
from app.models.author import Author
from app.models.book import Book
from app.models.bookshelf import Bookshelf, BookshelfBook
from app.models.genre import Genre
from app.schemas.books import BookOut, NameOut, SearchField
from app.schemas.bookshelves import BookshelfOut
from app.services.results import operation
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

logger = logging.getLogger(__name__)

_SEARCH_COLUMNS = {
    "title": Book.title,
    "author": Author.name,
    "genre": Genre.name,
}


@operation("list_bookshelves")
def list_bookshelves(db: Session, user: CurrentUser | None) -> list[BookshelfOut]:
    user = require_user(user)
    try:
        rows = (
            db.execute(
                select(Bookshelf).where(Bookshelf.user_id == user.id).order_by(Bookshelf.name)
            )
            .scalars()
            .all()
        )
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load bookshelves") from exc
    return [BookshelfOut.model_validate(r) for r in rows]


@operation("create_bookshelf")
def create_bookshelf(
    db: Session, user: CurrentUser | None, *, name: str, description: str = ""
) -> BookshelfOut:
    user = require_user(user)
    shelf = Bookshelf(user_id=user.id, name=name.strip(), description=description)
    try:
        db.add(shelf)
        db.commit()
        db.refresh(shelf)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to create bookshelf") from exc
    return BookshelfOut.model_validate(shelf)


def _to_book_out(book: Book, user_id: str) -> BookOut:
    return BookOut(
        id=book.id,
        title=book.title,
        authors=[NameOut(name=book.author.name)] if book.author else [],
        genres=[NameOut(name=book.genre.name)] if book.genre else [],
        bookshelves=[
            NameOut(name=link.bookshelf.name)
            for link in book.shelf_links
            if link.bookshelf is not None and link.bookshelf.user_id == user_id
        ],
        cover_image_url=book.cover_image_url,
    )


@operation("search_books")
def search_books(
    db: Session,
    user: CurrentUser | None,
    term: str = "",
    filter_by: SearchField = "title",
) -> list[BookOut]:
    """Books on the caller's shelves whose title/author/genre contains ``term``."""
    user = require_user(user)
    column = _SEARCH_COLUMNS[filter_by]

    owned_ids = (
        select(BookshelfBook.book_id)
        .join(Bookshelf, Bookshelf.id == BookshelfBook.bookshelf_id)
        .where(Bookshelf.user_id == user.id)
    )
    stmt = (
        select(Book)
        .outerjoin(Author, Author.id == Book.author_id)
        .outerjoin(Genre, Genre.id == Book.genre_id)
        .where(Book.id.in_(owned_ids))
        .options(
            selectinload(Book.author),
            selectinload(Book.genre),
            selectinload(Book.shelf_links).selectinload(BookshelfBook.bookshelf),
        )
        .order_by(Book.title)
    )
    term = (term or "").strip()
    if term:
        stmt = stmt.where(column.ilike(f"%{escape_like(term)}%", escape="\\"))

    try:
        books = db.execute(stmt).scalars().all()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to search books") from exc
    return [_to_book_out(b, user.id) for b in books]


@operation("delete_book")
def delete_book(db: Session, user: CurrentUser | None, book_id: str) -> dict:
    """Delete a book from the library; its shelf links go with it."""
    user = require_user(user)
    try:
        owned = db.execute(
            select(BookshelfBook.book_id)
            .join(Bookshelf, Bookshelf.id == BookshelfBook.bookshelf_id)
            .where(BookshelfBook.book_id == book_id)
            .where(Bookshelf.user_id == user.id)
            .limit(1)
        ).scalar_one_or_none()
        if owned is None:
            raise InvalidSelection("Book not found")

        book = db.get(Book, book_id)
        if book is not None:
            db.delete(book)
            db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to delete book") from exc

    logger.info("deleted book", extra={"user_id": user.id, "book_id": book_id})
    return {"book_id": book_id}
