from __future__ import annotations

from dataclasses import dataclass

from app.core.errors import NotAuthenticated


@dataclass(frozen=True)
class CurrentUser:
    id: str
    display_name: str | None = None
    email: str | None = None


def require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise NotAuthenticated()
    return user
