from __future__ import annotations

import logging

from app.core.errors import StorageError
from app.domain.identity import CurrentUser, require_user
from app.models.user import User
from app.schemas.identity import (
    IdentityEventIn,
    IdentityEventOut,
    IdentityUserData,
    UserSyncOut,
)
from app.services.results import operation
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

UPSERT_EVENTS = {"user.created", "user.updated"}
DELETE_EVENT = "user.deleted"


def _full_name(data: IdentityUserData) -> str:
    return " ".join(p for p in (data.first_name, data.last_name) if p)


def upsert_user(db: Session, data: IdentityUserData) -> User:
    email = next((e.email_address for e in data.email_addresses if e.email_address), None)
    if not email:
        raise ValueError("No email address found")

    existing = db.get(User, data.id)
    if existing:
        existing.email = email
        existing.full_name = _full_name(data) or None
        existing.avatar_url = data.image_url
        return existing

    u = User(
        id=data.id,
        email=email,
        full_name=_full_name(data) or None,
        avatar_url=data.image_url,
    )
    db.add(u)
    return u


def apply_identity_event(db: Session, event: IdentityEventIn) -> IdentityEventOut:
    """Mirror an identity-provider user event into the users table.

    Users are only ever written here; the rest of the app reads them.
    """
    if event.type in UPSERT_EVENTS:
        data = IdentityUserData.model_validate(event.data)
        upsert_user(db, data)
        db.commit()
        logger.info("synced user", extra={"user_id": data.id, "event": event.type})
        return IdentityEventOut(type=event.type, user_id=data.id, action="upserted")

    if event.type == DELETE_EVENT:
        user_id = event.data.get("id")
        if not user_id:
            raise ValueError("No user id provided")
        u = db.get(User, user_id)
        if u is not None:
            db.delete(u)
            db.commit()
        logger.info("deleted user", extra={"user_id": user_id})
        return IdentityEventOut(type=event.type, user_id=user_id, action="deleted")

    return IdentityEventOut(type=event.type, action="ignored")


@operation("sync_user")
def sync_current_user(db: Session, user: CurrentUser | None) -> UserSyncOut:
    """Upsert the caller's users row from their session claims.

    Lets a signed-in user save books before the provider's webhook arrives.
    A session without an email is skipped, as the webhook would reject it.
    """
    user = require_user(user)
    if not user.email:
        logger.info("skipped user sync without email", extra={"user_id": user.id})
        return UserSyncOut(user_id=user.id, status="skipped")

    full_name = user.display_name if user.display_name != user.email else None
    try:
        existing = db.get(User, user.id)
        if existing:
            existing.email = user.email
            existing.full_name = full_name or existing.full_name
        else:
            db.add(User(id=user.id, email=user.email, full_name=full_name))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to sync user") from exc

    logger.info("synced user from session", extra={"user_id": user.id})
    return UserSyncOut(user_id=user.id, status="success")
