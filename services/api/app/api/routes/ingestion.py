from __future__ import annotations

from app.api.deps import get_current_user_optional
from app.api.rate_limit import rate_limiter
from app.api.responses import result_response
from app.core.config import settings
from app.db.session import get_db
from app.schemas.ingestion import TextIn
from app.services.ingestion.pipeline import analyze_image, analyze_text, detect_text
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

router = APIRouter(
    prefix="/v1/ingestion",
    tags=["ingestion"],
    dependencies=[
        Depends(
            rate_limiter(
                "ingestion",
                limit=settings.rate_limit_ingestion_per_window,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    ],
)


def _read_upload(file: UploadFile) -> bytes:
    raw = file.file.read(settings.max_upload_bytes + 1)
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image is too large")
    return raw


@router.post("/ocr")
def post_ocr(
    file: UploadFile = File(...),
    user=Depends(get_current_user_optional),
):
    return result_response(detect_text(user, _read_upload(file)))


@router.post("/extract")
def post_extract(payload: TextIn, user=Depends(get_current_user_optional)):
    return result_response(analyze_text(user, payload.text))


@router.post("/analyze")
def post_analyze(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user=Depends(get_current_user_optional),
):
    return result_response(analyze_image(db, user, _read_upload(file)))
