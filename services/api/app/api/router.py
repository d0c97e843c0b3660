from __future__ import annotations

from app.api.routes import (
    analytics,
    books,
    bookshelves,
    covers,
    health,
    ingestion,
    recommendations,
    users,
    webhooks,
)
from fastapi import APIRouter

api_router = APIRouter()

# Keep this list in the order you want routes registered.
for _mod in (
    health,
    bookshelves,
    books,
    ingestion,
    analytics,
    recommendations,
    covers,
    users,
    webhooks,
):
    api_router.include_router(_mod.router)
