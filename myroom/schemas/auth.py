"""Identity schemas."""

from __future__ import annotations

from myroom.schemas.base import BaseSchema

__all__ = ["TokenResponse", "AdminLoginRequest"]


class TokenResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    is_admin: bool = False


class AdminLoginRequest(BaseSchema):
    password: str
