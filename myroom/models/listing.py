# --- File: myroom/models/listing.py ---
"""
Listing models.

A listing is stored twice under the same identifier: once in the owner's
private collection and once in the public collection. Both tables share
the same columns.
"""

from typing import Any, Dict

from sqlalchemy import BigInteger, Boolean, Column, Index, String, Text

from myroom.db.base import Base
from myroom.models.enums import ListingStatus

__all__ = [
    "LISTING_FIELDS",
    "ListingColumnsMixin",
    "OwnerListing",
    "PublicListing",
]

LISTING_FIELDS = (
    "id",
    "title",
    "rent",
    "amenities",
    "contact_info",
    "location",
    "photo_url",
    "description",
    "owner_id",
    "is_booked",
    "status",
    "timestamp",
)


class ListingColumnsMixin:
    """Columns shared by both copies of a listing."""

    id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    # Kept as entered; parsed numerically when filtering
    rent = Column(String(50), nullable=False)
    amenities = Column(Text, nullable=False)
    contact_info = Column(String(500), nullable=False)
    location = Column(String(500), nullable=False)
    photo_url = Column(String(1000), nullable=True)
    description = Column(Text, nullable=True)
    owner_id = Column(String(128), nullable=False, index=True)
    is_booked = Column(Boolean, nullable=False, default=False)
    status = Column(String(16), nullable=False, default=ListingStatus.PENDING.value, index=True)
    timestamp = Column(BigInteger, nullable=False)

    def to_record(self) -> Dict[str, Any]:
        """Field values keyed by attribute name."""
        return {field: getattr(self, field) for field in LISTING_FIELDS}

    def apply(self, values: Dict[str, Any]) -> None:
        for field, value in values.items():
            if field in LISTING_FIELDS and field != "id":
                setattr(self, field, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id} status={self.status} booked={self.is_booked}>"


class OwnerListing(ListingColumnsMixin, Base):
    """Owner's private copy of a listing."""

    __tablename__ = "owner_listings"


class PublicListing(ListingColumnsMixin, Base):
    """Public copy of a listing, the source for student and admin views."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listings_status_booked", "status", "is_booked"),
    )
