from __future__ import annotations

import logging
from typing import Type, Union

from app.core.errors import InvalidSelection, StorageError
from app.domain.normalize import clean_name
from app.models.author import Author
from app.models.bookshelf import (
    DEFAULT_BOOKSHELF_DESCRIPTION,
    DEFAULT_BOOKSHELF_NAME,
    Bookshelf,
)
from app.models.genre import Genre
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

NamedEntity = Union[Type[Author], Type[Genre]]


def _find_id_by_name(db: Session, model: NamedEntity, name: str) -> str | None:
    return db.execute(select(model.id).where(model.name == name)).scalars().first()


def resolve_or_create(db: Session, model: NamedEntity, name: str) -> str:
    """Return the id of the Author/Genre called ``name``, creating it on first sight.

    The name column is unique, so when a concurrent request inserts the same
    name first our insert fails and we return the row that won.
    """
    name = clean_name(name)
    if not name:
        raise ValueError(f"{model.__name__} name must not be empty")

    try:
        existing_id = _find_id_by_name(db, model, name)
        if existing_id is not None:
            return existing_id

        row = model(name=name)
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            winner_id = _find_id_by_name(db, model, name)
            if winner_id is None:
                raise
            logger.info(
                "lost create race; reusing existing row",
                extra={"entity": model.__tablename__, "entity_name": name},
            )
            return winner_id

        logger.info(
            "created %s", model.__tablename__[:-1], extra={"entity_name": name, "id": row.id}
        )
        return row.id
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Failed to resolve {model.__name__.lower()} '{name}'") from exc


def resolve_target_shelf(
    db: Session, user_id: str, requested_shelf_id: str | None = None
) -> str:
    """Return a bookshelf id owned by ``user_id``.

    An explicit shelf must belong to the user; a missing or foreign id is an
    InvalidSelection. Without one, the user's "Default" shelf is used and
    created on first use.
    """
    try:
        if requested_shelf_id:
            shelf_id = db.execute(
                select(Bookshelf.id)
                .where(Bookshelf.id == requested_shelf_id)
                .where(Bookshelf.user_id == user_id)
            ).scalar_one_or_none()
            if shelf_id is None:
                raise InvalidSelection()
            return shelf_id

        default_id = (
            db.execute(
                select(Bookshelf.id)
                .where(Bookshelf.user_id == user_id)
                .where(Bookshelf.name == DEFAULT_BOOKSHELF_NAME)
                .order_by(Bookshelf.created_at)
            )
            .scalars()
            .first()
        )
        if default_id is not None:
            return default_id

        shelf = Bookshelf(
            user_id=user_id,
            name=DEFAULT_BOOKSHELF_NAME,
            description=DEFAULT_BOOKSHELF_DESCRIPTION,
        )
        db.add(shelf)
        db.commit()
        logger.info("created default bookshelf", extra={"user_id": user_id, "id": shelf.id})
        return shelf.id
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to resolve bookshelf") from exc
