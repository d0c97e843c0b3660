from __future__ import annotations

from uuid import uuid4

from app.models.base import Base
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(400), nullable=False)

    books = relationship("Book", back_populates="author")

    __table_args__ = (UniqueConstraint("name", name="uq_authors_name"),)
