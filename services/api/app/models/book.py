from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from app.models.base import Base
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Book(Base):
    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title: Mapped[str] = mapped_column(String(600), nullable=False)

    author_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("authors.id", ondelete="SET NULL"), index=True, nullable=True
    )
    genre_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("genres.id", ondelete="SET NULL"), index=True, nullable=True
    )

    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("Author", back_populates="books")
    genre = relationship("Genre", back_populates="books")
    # ORM cascade mirrors ON DELETE CASCADE for engines that do not enforce FKs (SQLite).
    shelf_links = relationship(
        "BookshelfBook", back_populates="book", cascade="all, delete-orphan"
    )
