from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.rate_limit import rate_limiter
from app.api.responses import result_response
from app.core.config import settings
from app.db.session import get_db
from app.services.recommendations import get_recommendations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

router = APIRouter(prefix="/v1", tags=["recommendations"])


@router.get(
    "/recommendations",
    dependencies=[
        Depends(
            rate_limiter(
                "recommendations",
                limit=settings.rate_limit_recommendations_per_window,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    ],
)
def get_recs(db: Session = Depends(get_db), user=Depends(get_current_user_optional)):
    return result_response(get_recommendations(db, user))
