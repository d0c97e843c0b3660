from __future__ import annotations

import logging
import time
from typing import Callable

from app.api.deps import get_current_user_optional
from app.core.redis_client import get_redis
from app.domain.identity import CurrentUser
from fastapi import Depends, HTTPException, Request
from redis import RedisError

logger = logging.getLogger(__name__)


def _caller_key(request: Request, user: CurrentUser | None) -> str:
    if user is not None:
        return f"user:{user.id}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def rate_limiter(
    scope: str,
    *,
    limit: int,
    window_seconds: int,
) -> Callable[..., None]:
    """Fixed-window limiter (Redis INCR + EXPIRE) for the expensive routes.

    OCR and completion calls are billed per request, so each caller gets
    ``limit`` calls per window on ``scope``. Without Redis every call passes.
    """

    def _dep(
        request: Request,
        user: CurrentUser | None = Depends(get_current_user_optional),
    ) -> None:
        r = get_redis()
        if r is None:
            return

        now = int(time.time())
        window = now // window_seconds
        key = f"rl:{scope}:{_caller_key(request, user)}:{window}"

        try:
            count = int(r.incr(key))
            if count == 1:
                r.expire(key, window_seconds)
        except RedisError as exc:
            logger.warning("rate limiter skipped: %s", exc, extra={"scope": scope})
            return

        if count > limit:
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded",
                headers={"Retry-After": str(max(1, window_seconds - now % window_seconds))},
            )

    return _dep
