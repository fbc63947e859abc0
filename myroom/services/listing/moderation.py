# myroom/services/listing/moderation.py
"""
Listing moderation.

``pending`` is only ever set at creation. An admin may move a listing
between ``approved`` and ``rejected`` in either direction, any number of
times. Every decision rewrites ``status`` on both copies of the listing.
"""
from __future__ import annotations

from typing import Callable, Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from myroom.core.events import SnapshotHub
from myroom.core.exceptions import InvalidTransitionError, NotFoundError
from myroom.core.logging import get_audit_logger, get_logger
from myroom.core.security import Principal
from myroom.core.utils import current_millis
from myroom.models.enums import Collection, ListingStatus
from myroom.repositories import OwnerListingRepository, PublicListingRepository
from myroom.schemas.listing import ListingRead, ModerationStats
from myroom.services.common import UnitOfWork
from myroom.services.common.mapping import to_listing_read, to_listing_reads
from myroom.services.listing.filters import NEW_LISTING_DAYS

logger = get_logger(__name__)
audit = get_audit_logger("myroom.audit.moderation")

ALLOWED_TRANSITIONS: Dict[ListingStatus, FrozenSet[ListingStatus]] = {
    ListingStatus.PENDING: frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED}),
    ListingStatus.APPROVED: frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED}),
    ListingStatus.REJECTED: frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED}),
}


def can_transition(current: ListingStatus, target: ListingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(ListingStatus(current), frozenset())


def ensure_transition(current: ListingStatus, target: ListingStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(ListingStatus(current).value, ListingStatus(target).value)


class ModerationService:
    """
    Admin view of the public collection and the status state machine.

    Every method takes the caller's Principal; the admin capability is an
    opaque flag on it.
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

    def list_listings(
        self,
        principal: Principal,
        status: Optional[ListingStatus] = None,
    ) -> List[ListingRead]:
        """Every public listing, optionally narrowed to one status."""
        principal.require_admin()
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            repo = uow.get_repo(PublicListingRepository)
            rows = repo.find_by_status(status.value) if status else repo.list_all()
            listings = to_listing_reads(rows, self._clock(), self._new_listing_days)
        listings.sort(key=lambda listing: listing.timestamp or 0, reverse=True)
        return listings

    def stats(self, principal: Principal) -> ModerationStats:
        principal.require_admin()
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            counts = uow.get_repo(PublicListingRepository).status_counts()

        return ModerationStats(
            total=sum(counts.values()),
            pending=counts.get(ListingStatus.PENDING.value, 0),
            approved=counts.get(ListingStatus.APPROVED.value, 0),
            rejected=counts.get(ListingStatus.REJECTED.value, 0),
        )

    def change_status(
        self,
        principal: Principal,
        listing_id: str,
        new_status: ListingStatus,
    ) -> ListingRead:
        """
        Move a listing to ``new_status`` on both copies.

        Raises:
            AuthUnavailableError / PermissionDeniedError: caller is not admin
            NotFoundError: no public copy under ``listing_id``
            InvalidTransitionError: ``new_status`` is ``pending``
            WriteFailureError: either write failed; neither is kept
        """
        admin_id = principal.require_admin()
        new_status = ListingStatus(new_status)

        with UnitOfWork(self._session_factory) as uow:
            public_repo = uow.get_repo(PublicListingRepository)
            owner_repo = uow.get_repo(OwnerListingRepository)

            public_copy = public_repo.get_once(listing_id)
            if public_copy is None:
                raise NotFoundError("Listing", listing_id)

            previous = ListingStatus(public_copy.status)
            ensure_transition(previous, new_status)

            public_repo.update(listing_id, {"status": new_status.value})
            if owner_repo.update(listing_id, {"status": new_status.value}) is None:
                # Owner copy missing: recreate it from the public one
                logger.warning(f"Owner copy of listing {listing_id} missing, restoring it")
                owner_repo.put(public_copy.to_record())

            listing = to_listing_read(public_copy, self._clock(), self._new_listing_days)

        audit.info(
            "listing_status_changed",
            listing_id=listing_id,
            owner_id=listing.owner_id,
            admin_id=admin_id,
            previous_status=previous.value,
            new_status=new_status.value,
        )
        self._publish()
        return listing

    def resync(self, principal: Principal, listing_id: str) -> ListingRead:
        """
        Copy the owner's record over the public one.

        Idempotent; used to reconcile a pair that diverged outside this
        service.
        """
        admin_id = principal.require_admin()
        with UnitOfWork(self._session_factory) as uow:
            owner_repo = uow.get_repo(OwnerListingRepository)
            public_repo = uow.get_repo(PublicListingRepository)

            owner_copy = owner_repo.get_once(listing_id)
            if owner_copy is None:
                raise NotFoundError("Listing", listing_id)

            public_copy = public_repo.put(owner_copy.to_record())
            listing = to_listing_read(public_copy, self._clock(), self._new_listing_days)

        audit.info("listing_resynced", listing_id=listing_id, admin_id=admin_id)
        self._publish()
        return listing

    def _publish(self) -> None:
        if self._hub is not None:
            self._hub.publish([Collection.LISTINGS.value, Collection.OWNER_LISTINGS.value])


__all__ = ["ALLOWED_TRANSITIONS", "can_transition", "ensure_transition", "ModerationService"]
