# myroom/services/listing/snapshots.py
"""
Store-backed loader for the live query hub.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from myroom.core.utils import current_millis
from myroom.models.enums import Collection
from myroom.repositories import OwnerListingRepository, PublicListingRepository, ReviewRepository
from myroom.services.common import UnitOfWork
from myroom.services.common.mapping import to_listing_reads, to_review_read
from myroom.services.listing.filters import NEW_LISTING_DAYS

_LISTING_REPOSITORIES = {
    Collection.OWNER_LISTINGS.value: OwnerListingRepository,
    Collection.LISTINGS.value: PublicListingRepository,
}


class StoreSnapshotLoader:
    """
    Answers (collection, where) queries for SnapshotHub.

    Listings come back as ListingRead (with ``is_new`` evaluated at load
    time), reviews as ReviewRead, newest first.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Callable[[], int] = current_millis,
        new_listing_days: int = NEW_LISTING_DAYS,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._new_listing_days = new_listing_days

    def __call__(self, collection: str, where: Optional[Tuple[str, Any]]) -> List[Any]:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            if collection == Collection.REVIEWS.value:
                repo = uow.get_repo(ReviewRepository)
                rows = repo.find_by(*where) if where else repo.list_all()
                records = [to_review_read(row) for row in rows]
            elif collection in _LISTING_REPOSITORIES:
                repo = uow.get_repo(_LISTING_REPOSITORIES[collection])
                rows = repo.find_by(*where) if where else repo.list_all()
                records = to_listing_reads(rows, self._clock(), self._new_listing_days)
            else:
                raise ValueError(f"Unknown collection: {collection}")

        records.sort(key=lambda record: record.timestamp or 0, reverse=True)
        return records
