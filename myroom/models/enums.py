"""
Database enums mirroring schema enums.
"""

import enum


class ListingStatus(str, enum.Enum):
    """Moderation state of a listing."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Collection(str, enum.Enum):
    """Names of the stored collections, used for live queries."""
    OWNER_LISTINGS = "owner_listings"
    LISTINGS = "listings"
    REVIEWS = "reviews"
