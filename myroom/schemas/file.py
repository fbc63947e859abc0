"""Photo upload schemas."""

from __future__ import annotations

from myroom.schemas.base import BaseSchema

__all__ = ["PhotoUploadResponse"]


class PhotoUploadResponse(BaseSchema):
    key: str
    url: str
