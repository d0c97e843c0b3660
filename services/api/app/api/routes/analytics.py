from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.responses import result_response
from app.db.session import get_db
from app.services.analytics import author_report, genre_report, timeline_report
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


@router.get("/genres")
def get_genres(db: Session = Depends(get_db), user=Depends(get_current_user_optional)):
    return result_response(genre_report(db, user))


@router.get("/authors")
def get_authors(db: Session = Depends(get_db), user=Depends(get_current_user_optional)):
    return result_response(author_report(db, user))


@router.get("/timeline")
def get_timeline(db: Session = Depends(get_db), user=Depends(get_current_user_optional)):
    return result_response(timeline_report(db, user))
