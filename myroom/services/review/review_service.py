# myroom/services/review/review_service.py
from __future__ import annotations

from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from myroom.core.events import SnapshotHub
from myroom.core.exceptions import NotFoundError, ValidationError
from myroom.core.logging import get_audit_logger
from myroom.core.security import Principal
from myroom.core.utils import current_millis, new_id
from myroom.models.enums import Collection
from myroom.models.review import Review
from myroom.repositories import OwnerListingRepository, PublicListingRepository, ReviewRepository
from myroom.schemas.review import ReviewCreate, ReviewRead, ReviewSummary
from myroom.services.common import UnitOfWork
from myroom.services.common.mapping import to_review_read
from myroom.services.listing.filters import average_rating, is_visible_to_students

audit = get_audit_logger("myroom.audit.reviews")

MIN_RATING = 1
MAX_RATING = 5


def validate_review(data: ReviewCreate) -> None:
    if data.rating == 0 or not data.comment.strip():
        raise ValidationError("Please provide a rating and a review comment.")
    if not MIN_RATING <= data.rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}.",
            field_errors={"rating": [f"Expected {MIN_RATING}..{MAX_RATING}, got {data.rating}."]},
        )


def summarize_reviews(listing_id: str, reviews: List[ReviewRead]) -> ReviewSummary:
    return ReviewSummary(
        listing_id=listing_id,
        average_rating=average_rating([review.rating for review in reviews]),
        review_count=len(reviews),
        reviews=reviews,
    )


class ReviewService:
    """Per-listing reviews: students append, everyone reads, nobody edits."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        hub: Optional[SnapshotHub] = None,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        self._session_factory = session_factory
        self._hub = hub
        self._clock = clock

    def add_review(self, principal: Principal, listing_id: str, data: ReviewCreate) -> ReviewRead:
        reviewer_id = principal.require_user()
        validate_review(data)

        with UnitOfWork(self._session_factory) as uow:
            self._ensure_visible(uow, listing_id)

            review = uow.get_repo(ReviewRepository).add(
                Review(
                    id=new_id(),
                    listing_id=listing_id,
                    reviewer_id=reviewer_id,
                    rating=data.rating,
                    comment=data.comment.strip(),
                    timestamp=self._clock(),
                )
            )
            result = to_review_read(review)

        audit.info("review_added", listing_id=listing_id, review_id=result.id, rating=result.rating)
        if self._hub is not None:
            self._hub.publish([Collection.REVIEWS.value])
        return result

    def list_reviews(self, listing_id: str) -> ReviewSummary:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            self._ensure_visible(uow, listing_id)
            reviews = self._load(uow, listing_id)
        return summarize_reviews(listing_id, reviews)

    def ensure_reviewable(self, listing_id: str) -> None:
        """Raise NotFoundError unless students can see the listing."""
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            self._ensure_visible(uow, listing_id)

    def list_owner_reviews(self, principal: Principal, listing_id: str) -> ReviewSummary:
        """Reviews of one of the caller's own listings, whatever its status."""
        owner_id = principal.require_user()
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            if uow.get_repo(OwnerListingRepository).get_owned(owner_id, listing_id) is None:
                raise NotFoundError("Listing", listing_id)
            reviews = self._load(uow, listing_id)
        return summarize_reviews(listing_id, reviews)

    @staticmethod
    def _load(uow: UnitOfWork, listing_id: str) -> List[ReviewRead]:
        rows = uow.get_repo(ReviewRepository).list_for_listing(listing_id)
        return [to_review_read(row) for row in rows]

    @staticmethod
    def _ensure_visible(uow: UnitOfWork, listing_id: str) -> None:
        # Students only reach listings through the approved, unbooked view
        row = uow.get_repo(PublicListingRepository).get_once(listing_id)
        if row is None or not is_visible_to_students(row):
            raise NotFoundError("Listing", listing_id)


__all__ = ["validate_review", "summarize_reviews", "ReviewService"]
