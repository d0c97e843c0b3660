from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.responses import result_response
from app.db.session import get_db
from app.services.identity_sync import sync_current_user
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1/users", tags=["users"])


@router.post("/sync")
def post_user_sync(db: Session = Depends(get_db), user=Depends(get_current_user_optional)):
    return result_response(sync_current_user(db, user))
