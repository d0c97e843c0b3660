from __future__ import annotations

import logging

import httpx
from app.api.responses import result_response
from app.db.session import get_db
from app.services.covers.cache import lookup_cover
from app.services.covers.fetch import fetch_image, is_proxyable
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["covers"])


@router.get("/covers")
def get_cover(
    title: str = Query(..., min_length=1, max_length=600),
    author: str | None = Query(default=None, max_length=400),
    db: Session = Depends(get_db),
):
    return result_response(lookup_cover(db, title, author))


@router.get("/proxy-image")
async def proxy_image(url: str = Query(..., min_length=1, max_length=4000)) -> Response:
    if not is_proxyable(url):
        raise HTTPException(status_code=400, detail="Image URL must be http(s)")

    try:
        image = await fetch_image(url)
    except httpx.HTTPError as exc:
        logger.warning("image proxy failed", extra={"url": url, "error": repr(exc)})
        raise HTTPException(status_code=502, detail="Failed to fetch image") from exc

    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={"Cache-Control": "public, max-age=31536000"},
    )
