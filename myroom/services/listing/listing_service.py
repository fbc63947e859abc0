# myroom/services/listing/listing_service.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from myroom.core.events import SnapshotHub
from myroom.core.exceptions import NotFoundError, ValidationError
from myroom.core.logging import get_audit_logger, get_logger
from myroom.core.security import Principal
from myroom.core.utils import current_millis, new_id
from myroom.models.enums import Collection, ListingStatus
from myroom.repositories import (
    OwnerListingRepository,
    PublicListingRepository,
    ReviewRepository,
)
from myroom.schemas.listing import ListingCreate, ListingDetail, ListingRead, ListingUpdate
from myroom.services.common import UnitOfWork
from myroom.services.common.mapping import contact_links, to_listing_read, to_listing_reads
from myroom.services.listing.filters import (
    NEW_LISTING_DAYS,
    SearchCriteria,
    average_rating,
    is_visible_to_students,
    search_listings,
    visible_listings,
)

logger = get_logger(__name__)
audit = get_audit_logger("myroom.audit.listings")

REQUIRED_FIELDS = ("title", "rent", "amenities", "contact_info", "location")


def validate_required_fields(values: Dict[str, Any]) -> None:
    """Reject a listing with any required field blank, before any write."""
    missing = [field for field in REQUIRED_FIELDS if not str(values.get(field) or "").strip()]
    if missing:
        raise ValidationError(
            "Please fill in all required fields.",
            field_errors={field: ["This field is required."] for field in missing},
        )


class ListingService:
    """
    Owner writes and student reads over the two listing collections.

    Owner mutations write the private copy and the public copy inside one
    unit of work; the hub is told about both collections once the commit
    has gone through.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        hub: Optional[SnapshotHub] = None,
        clock: Callable[[], int] = current_millis,
        new_listing_days: int = NEW_LISTING_DAYS,
    ) -> None:
        self._session_factory = session_factory
        self._hub = hub
        self._clock = clock
        self._new_listing_days = new_listing_days

    # ------------------------------------------------------------------ #
    # Owner operations
    # ------------------------------------------------------------------ #

    def create_listing(self, principal: Principal, data: ListingCreate) -> ListingRead:
        owner_id = principal.require_user()
        values = data.model_dump()
        validate_required_fields(values)

        record = {
            **values,
            "id": new_id(),
            "owner_id": owner_id,
            "is_booked": False,
            "status": ListingStatus.PENDING.value,
            "timestamp": self._clock(),
        }

        with UnitOfWork(self._session_factory) as uow:
            uow.get_repo(OwnerListingRepository).put(record)
            public_copy = uow.get_repo(PublicListingRepository).put(record)
            listing = self._to_read(public_copy)

        audit.info("listing_created", listing_id=listing.id, owner_id=owner_id)
        self._publish()
        return listing

    def update_listing(
        self,
        principal: Principal,
        listing_id: str,
        data: ListingUpdate,
    ) -> ListingRead:
        """Edit owner-editable fields. Status, booking and ownership are untouched."""
        owner_id = principal.require_user()
        changes = data.model_dump(exclude_unset=True)

        with UnitOfWork(self._session_factory) as uow:
            owner_repo = uow.get_repo(OwnerListingRepository)
            owner_copy = owner_repo.get_owned(owner_id, listing_id)
            if owner_copy is None:
                raise NotFoundError("Listing", listing_id)

            validate_required_fields({**owner_copy.to_record(), **changes})
            listing = self._write_both(uow, listing_id, changes)

        audit.info("listing_updated", listing_id=listing_id, owner_id=owner_id, fields=sorted(changes))
        self._publish()
        return listing

    def mark_booked(self, principal: Principal, listing_id: str) -> ListingRead:
        owner_id = principal.require_user()
        with UnitOfWork(self._session_factory) as uow:
            if uow.get_repo(OwnerListingRepository).get_owned(owner_id, listing_id) is None:
                raise NotFoundError("Listing", listing_id)
            listing = self._write_both(uow, listing_id, {"is_booked": True})

        audit.info("listing_booked", listing_id=listing_id, owner_id=owner_id)
        self._publish()
        return listing

    def delete_listing(self, principal: Principal, listing_id: str) -> None:
        """Remove both copies and the listing's reviews."""
        owner_id = principal.require_user()
        with UnitOfWork(self._session_factory) as uow:
            owner_repo = uow.get_repo(OwnerListingRepository)
            if owner_repo.get_owned(owner_id, listing_id) is None:
                raise NotFoundError("Listing", listing_id)

            owner_repo.delete(listing_id)
            uow.get_repo(PublicListingRepository).delete(listing_id)
            removed_reviews = uow.get_repo(ReviewRepository).delete_for_listing(listing_id)

        audit.info(
            "listing_deleted",
            listing_id=listing_id,
            owner_id=owner_id,
            removed_reviews=removed_reviews,
        )
        self._publish(include_reviews=removed_reviews > 0)

    def get_owner_listings(self, principal: Principal) -> List[ListingRead]:
        owner_id = principal.require_user()
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            rows = uow.get_repo(OwnerListingRepository).find_by_owner(owner_id)
            listings = to_listing_reads(rows, self._clock(), self._new_listing_days)
        listings.sort(key=lambda listing: listing.timestamp or 0, reverse=True)
        return listings

    # ------------------------------------------------------------------ #
    # Student operations
    # ------------------------------------------------------------------ #

    def browse(self, criteria: Optional[SearchCriteria] = None) -> List[ListingRead]:
        """Approved, unbooked listings matching the search box, newest first."""
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            rows = uow.get_repo(PublicListingRepository).find_by_status(ListingStatus.APPROVED.value)
            listings = to_listing_reads(rows, self._clock(), self._new_listing_days)

        listings = visible_listings(listings)
        if criteria is not None:
            listings = search_listings(listings, criteria)
        listings.sort(key=lambda listing: listing.timestamp or 0, reverse=True)
        return listings

    def get_listing_detail(self, listing_id: str) -> ListingDetail:
        """A visible listing with its rating summary and contact links."""
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            row = uow.get_repo(PublicListingRepository).get_once(listing_id)
            if row is None or not is_visible_to_students(row):
                raise NotFoundError("Listing", listing_id)
            listing = self._to_read(row)
            ratings = uow.get_repo(ReviewRepository).ratings_for_listing(listing_id)

        return ListingDetail(
            **listing.model_dump(),
            average_rating=average_rating(ratings),
            review_count=len(ratings),
            contact_links=contact_links(listing.title, listing.contact_info),
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _write_both(self, uow: UnitOfWork, listing_id: str, changes: Dict[str, Any]) -> ListingRead:
        uow.get_repo(OwnerListingRepository).update(listing_id, changes)
        public_copy = uow.get_repo(PublicListingRepository).update(listing_id, changes)
        if public_copy is None:
            # Public copy lost: restore it from the owner's record
            owner_copy = uow.get_repo(OwnerListingRepository).get_once(listing_id)
            logger.warning(f"Public copy of listing {listing_id} missing, restoring it")
            public_copy = uow.get_repo(PublicListingRepository).put(owner_copy.to_record())
        return self._to_read(public_copy)

    def _to_read(self, row) -> ListingRead:
        return to_listing_read(row, self._clock(), self._new_listing_days)

    def _publish(self, include_reviews: bool = False) -> None:
        if self._hub is None:
            return
        collections = [Collection.OWNER_LISTINGS.value, Collection.LISTINGS.value]
        if include_reviews:
            collections.append(Collection.REVIEWS.value)
        self._hub.publish(collections)


__all__ = ["REQUIRED_FIELDS", "validate_required_fields", "ListingService"]
