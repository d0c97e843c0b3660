from __future__ import annotations

from datetime import datetime, timezone

from app.models.base import Base
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CoverCache(Base):
    __tablename__ = "cover_cache"

    # "cover:<title>:<author>"
    cache_key: Mapped[str] = mapped_column(String(1200), primary_key=True)
    cover_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
