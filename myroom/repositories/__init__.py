from myroom.repositories.base_repository import BaseRepository
from myroom.repositories.listing_repository import OwnerListingRepository, PublicListingRepository
from myroom.repositories.review_repository import ReviewRepository

__all__ = [
    "BaseRepository",
    "OwnerListingRepository",
    "PublicListingRepository",
    "ReviewRepository",
]
