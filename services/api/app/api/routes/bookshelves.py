from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.responses import result_response
from app.db.session import get_db
from app.schemas.bookshelves import BookshelfIn
from app.services.library.books import create_bookshelf, list_bookshelves
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1/bookshelves", tags=["bookshelves"])


@router.get("")
def get_bookshelves(
    db: Session = Depends(get_db), user=Depends(get_current_user_optional)
):
    return result_response(list_bookshelves(db, user))


@router.post("")
def post_bookshelf(
    payload: BookshelfIn,
    db: Session = Depends(get_db),
    user=Depends(get_current_user_optional),
):
    return result_response(
        create_bookshelf(db, user, name=payload.name, description=payload.description)
    )
