from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from app.models.base import Base
from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

DEFAULT_BOOKSHELF_NAME = "Default"
DEFAULT_BOOKSHELF_DESCRIPTION = "Default bookshelf"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bookshelf(Base):
    __tablename__ = "bookshelves"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="bookshelves")
    book_links = relationship(
        "BookshelfBook", back_populates="bookshelf", cascade="all, delete-orphan"
    )


class BookshelfBook(Base):
    __tablename__ = "bookshelf_books"

    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    bookshelf_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bookshelves.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    # Drives the timeline report.
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    book = relationship("Book", back_populates="shelf_links")
    bookshelf = relationship("Bookshelf", back_populates="book_links")
