# models/__init__.py
from .enums import Collection, ListingStatus
from .listing import LISTING_FIELDS, OwnerListing, PublicListing
from .review import Review

__all__ = [
    "Collection",
    "ListingStatus",
    "LISTING_FIELDS",
    "OwnerListing",
    "PublicListing",
    "Review",
]
