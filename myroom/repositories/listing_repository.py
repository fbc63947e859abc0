"""
Repositories for the two copies of a listing.

Both expose the document-store contract (put / update / delete / get_once)
plus the equality queries used by owner, student and admin views.
"""

from typing import Any, Dict, List, Optional, Type

from myroom.models.listing import ListingColumnsMixin, OwnerListing, PublicListing
from myroom.repositories.base_repository import BaseRepository


class _ListingCopyRepository(BaseRepository):
    model: Type[ListingColumnsMixin]

    def get_once(self, listing_id: str) -> Optional[ListingColumnsMixin]:
        return self.get_by_id(listing_id)

    def put(self, record: Dict[str, Any]) -> ListingColumnsMixin:
        """Create or fully overwrite the record stored under ``record['id']``."""
        entity = self.get_by_id(record["id"])
        if entity is None:
            entity = self.model(id=record["id"])
            entity.apply(record)
            return self.add(entity)

        entity.apply(record)
        self.db.flush()
        return entity

    def update(self, listing_id: str, values: Dict[str, Any]) -> Optional[ListingColumnsMixin]:
        """Apply a partial record. Returns None when the listing is absent."""
        entity = self.get_by_id(listing_id)
        if entity is None:
            return None
        entity.apply(values)
        self.db.flush()
        return entity

    def delete(self, listing_id: str) -> bool:
        entity = self.get_by_id(listing_id)
        if entity is None:
            return False
        self.remove(entity)
        return True

    def find_by_owner(self, owner_id: str) -> List[ListingColumnsMixin]:
        return self.find_by("owner_id", owner_id)

    def find_by_status(self, status: str) -> List[ListingColumnsMixin]:
        return self.find_by("status", status)


class OwnerListingRepository(_ListingCopyRepository):
    """Owner's private namespace."""

    model = OwnerListing

    def get_owned(self, owner_id: str, listing_id: str) -> Optional[OwnerListing]:
        """Fetch a listing only if it lives under this owner's namespace."""
        entity = self.get_by_id(listing_id)
        if entity is None or entity.owner_id != owner_id:
            return None
        return entity


class PublicListingRepository(_ListingCopyRepository):
    """Shared public collection."""

    model = PublicListing

    def status_counts(self) -> Dict[str, int]:
        return self.count_by("status")
