from __future__ import annotations

import hmac

from app.core.config import settings
from app.db.session import get_db
from app.schemas.identity import IdentityEventIn, IdentityEventOut
from app.services.identity_sync import apply_identity_event
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1/webhooks", tags=["webhooks"])


@router.post("/identity", response_model=IdentityEventOut)
def identity_webhook(
    payload: IdentityEventIn,
    db: Session = Depends(get_db),
    x_webhook_token: str | None = Header(default=None),
):
    expected = settings.identity_webhook_token
    if expected and not hmac.compare_digest(x_webhook_token or "", expected):
        raise HTTPException(status_code=401, detail="Invalid webhook token")

    try:
        return apply_identity_event(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=500, detail="Error syncing user") from exc
