# --- File: myroom/schemas/listing.py ---
"""
Listing schemas for owner submissions and student/admin views.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import Field, field_validator

from myroom.models.enums import ListingStatus
from myroom.schemas.base import BaseSchema

__all__ = [
    "ListingCreate",
    "ListingUpdate",
    "ListingRead",
    "ListingDetail",
    "ContactLink",
    "StatusChange",
    "ModerationStats",
]


def _rent_to_text(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ListingCreate(BaseSchema):
    """
    Owner submission for a new listing.

    Required fields default to empty so a missing value reaches the service
    layer's validation instead of failing schema parsing.
    """

    title: str = ""
    rent: str = Field(default="", description="Monthly rent in ₹, as entered")
    amenities: str = ""
    contact_info: str = Field(default="", description="Comma separated WhatsApp/phone contacts")
    location: str = ""
    photo_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("rent", mode="before")
    @classmethod
    def coerce_rent(cls, v: Union[str, int, float, None]):
        if v is None:
            return ""
        return _rent_to_text(v)


class ListingUpdate(BaseSchema):
    """Partial edit of a listing's owner-editable fields."""

    title: Optional[str] = None
    rent: Optional[str] = None
    amenities: Optional[str] = None
    contact_info: Optional[str] = None
    location: Optional[str] = None
    photo_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("rent", mode="before")
    @classmethod
    def coerce_rent(cls, v):
        return _rent_to_text(v)


class ListingRead(BaseSchema):
    id: str
    title: str
    rent: str
    amenities: str
    contact_info: str
    location: str
    photo_url: Optional[str] = None
    description: Optional[str] = None
    owner_id: str
    is_booked: bool = False
    status: ListingStatus = ListingStatus.PENDING
    timestamp: Optional[int] = None
    is_new: bool = False


class ContactLink(BaseSchema):
    contact: str
    whatsapp_url: str


class ListingDetail(ListingRead):
    average_rating: float = 0
    review_count: int = 0
    contact_links: List[ContactLink] = Field(default_factory=list)


class StatusChange(BaseSchema):
    status: ListingStatus


class ModerationStats(BaseSchema):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
