# Pure filters only; import services from their modules to avoid import cycles
from .filters import (
    SearchCriteria,
    average_rating,
    is_new_listing,
    is_visible_to_students,
    search_listings,
    visible_listings,
)

__all__ = [
    "SearchCriteria",
    "average_rating",
    "is_new_listing",
    "is_visible_to_students",
    "search_listings",
    "visible_listings",
]
