from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.responses import result_response
from app.db.session import get_db, get_session_factory
from app.schemas.books import BatchSaveIn, BookIn, SearchField
from app.services.ingestion.persist import save_book, save_books
from app.services.library.books import delete_book, search_books
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1/books", tags=["books"])


@router.get("/search")
def get_search_books(
    q: str = Query(default="", max_length=200),
    filter_by: SearchField = Query(default="title"),
    db: Session = Depends(get_db),
    user=Depends(get_current_user_optional),
):
    return result_response(search_books(db, user, q, filter_by))


@router.post("")
def post_book(
    payload: BookIn,
    db: Session = Depends(get_db),
    user=Depends(get_current_user_optional),
):
    return result_response(save_book(db, user, payload))


@router.post("/batch")
def post_books_batch(
    payload: BatchSaveIn,
    session_factory=Depends(get_session_factory),
    user=Depends(get_current_user_optional),
):
    return result_response(
        save_books(
            user,
            payload.books,
            bookshelf_id=payload.bookshelf_id,
            session_factory=session_factory,
        )
    )


@router.delete("/{book_id}")
def remove_book(
    book_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user_optional),
):
    return result_response(delete_book(db, user, book_id))
