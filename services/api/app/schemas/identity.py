from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EmailAddressIn(BaseModel):
    email_address: str | None = None


class IdentityUserData(BaseModel):
    id: str
    email_addresses: list[EmailAddressIn] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None


class IdentityEventIn(BaseModel):
    type: str
    data: dict[str, Any] = Field(default_factory=dict)


class IdentityEventOut(BaseModel):
    success: bool = True
    type: str
    user_id: str | None = None
    action: str


class UserSyncOut(BaseModel):
    user_id: str
    # "success" | "skipped" (no email on the session)
    status: str
