from __future__ import annotations

from typing import Optional

from app.core.config import settings
from app.core.security import decode_access_token
from app.domain.identity import CurrentUser
from fastapi import Request
from jose import JWTError  # type: ignore[import-untyped]


def _extract_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization")
    if not auth:
        return None
    parts = auth.split(" ", 1)
    if len(parts) != 2:
        return None
    scheme, token = parts
    if scheme.lower() != "bearer":
        return None
    return token


def get_current_user_optional(request: Request) -> CurrentUser | None:
    """Identity lookup: the caller's session as issued by the identity provider.

    Returns None when no valid session is present; operations answer that
    with a NotAuthenticated result.
    """
    # Allow either Authorization: Bearer <token> OR cookie-based auth
    token = _extract_bearer_token(request) or request.cookies.get(settings.auth_cookie_name)
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except JWTError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    email = payload.get("email")
    return CurrentUser(
        id=str(user_id),
        display_name=payload.get("name") or email,
        email=email,
    )
