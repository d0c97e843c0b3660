from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from app.core.errors import BookTrackError
from app.schemas.results import OperationResult

logger = logging.getLogger(__name__)


def operation(name: str) -> Callable[[Callable[..., Any]], Callable[..., OperationResult]]:
    """Turn a function that returns data or raises into one returning an OperationResult.

    Domain errors become a failed result carrying their message. Anything else is
    logged with its traceback and reported with a generic message.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., OperationResult]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> OperationResult:
            try:
                return OperationResult.ok(fn(*args, **kwargs))
            except BookTrackError as exc:
                logger.warning("%s failed: %s", name, exc.message, extra={"code": exc.code})
                return OperationResult.fail(exc)
            except Exception:
                logger.exception("%s failed", name)
                return OperationResult.fail(BookTrackError())

        return wrapper

    return decorator
