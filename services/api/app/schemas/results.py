from __future__ import annotations

from typing import Generic, TypeVar

from app.core.errors import BookTrackError
from pydantic import BaseModel, Field

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None

    # Error category; kept off the wire and used by the HTTP layer for status codes.
    code: str | None = Field(default=None, exclude=True)
    status_code: int = Field(default=200, exclude=True)

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: BookTrackError) -> "OperationResult[T]":
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            status_code=exc.status_code,
        )
