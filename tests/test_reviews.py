import pytest

from myroom.core.exceptions import AuthUnavailableError, NotFoundError, ValidationError
from myroom.core.security import ANONYMOUS
from myroom.models import ListingStatus
from myroom.schemas.listing import ListingCreate
from myroom.schemas.review import ReviewCreate


@pytest.fixture
def listing(listing_service, moderation_service, owner, admin, listing_data):
    created = listing_service.create_listing(owner, ListingCreate(**listing_data))
    return moderation_service.change_status(admin, created.id, ListingStatus.APPROVED)


def test_add_and_list(review_service, student, listing, clock):
    review = review_service.add_review(student, listing.id, ReviewCreate(rating=4, comment="  Quiet street "))
    clock.advance()
    review_service.add_review(student, listing.id, ReviewCreate(rating=5, comment="Great owner"))

    assert review.reviewer_id == "student-1"
    assert review.comment == "Quiet street"
    assert review.timestamp == clock.now - 1000

    summary = review_service.list_reviews(listing.id)
    assert summary.review_count == 2
    assert summary.average_rating == 4.5
    assert [r.rating for r in summary.reviews] == [5, 4]


@pytest.mark.parametrize("rating,comment", [(0, "Nice"), (4, ""), (4, "   ")])
def test_rating_and_comment_are_required(review_service, student, listing, rating, comment):
    with pytest.raises(ValidationError) as exc_info:
        review_service.add_review(student, listing.id, ReviewCreate(rating=rating, comment=comment))
    assert exc_info.value.message == "Please provide a rating and a review comment."


@pytest.mark.parametrize("rating", [6, -1])
def test_rating_range(review_service, student, listing, rating):
    with pytest.raises(ValidationError):
        review_service.add_review(student, listing.id, ReviewCreate(rating=rating, comment="ok"))


def test_requires_identity(review_service, listing):
    with pytest.raises(AuthUnavailableError):
        review_service.add_review(ANONYMOUS, listing.id, ReviewCreate(rating=3, comment="ok"))


def test_unknown_listing(review_service, student):
    with pytest.raises(NotFoundError):
        review_service.add_review(student, "missing", ReviewCreate(rating=3, comment="ok"))
    with pytest.raises(NotFoundError):
        review_service.list_reviews("missing")


def test_empty_summary(review_service, listing):
    summary = review_service.list_reviews(listing.id)
    assert summary.review_count == 0
    assert summary.average_rating == 0
    assert summary.reviews == []


def test_owner_reads_reviews_of_own_listing_only(review_service, owner, other_owner, student, listing):
    review_service.add_review(student, listing.id, ReviewCreate(rating=2, comment="Noisy"))

    assert review_service.list_owner_reviews(owner, listing.id).review_count == 1
    with pytest.raises(NotFoundError):
        review_service.list_owner_reviews(other_owner, listing.id)


def test_pending_listing_cannot_be_reviewed_or_read(review_service, listing_service, owner, student, listing_data):
    pending = listing_service.create_listing(owner, ListingCreate(**listing_data))

    with pytest.raises(NotFoundError):
        review_service.add_review(student, pending.id, ReviewCreate(rating=4, comment="Nice"))
    with pytest.raises(NotFoundError):
        review_service.list_reviews(pending.id)
    with pytest.raises(NotFoundError):
        review_service.ensure_reviewable(pending.id)


def test_booked_listing_leaves_the_review_view(review_service, listing_service, owner, student, listing):
    review_service.add_review(student, listing.id, ReviewCreate(rating=4, comment="Nice"))
    listing_service.mark_booked(owner, listing.id)

    with pytest.raises(NotFoundError):
        review_service.list_reviews(listing.id)
    assert review_service.list_owner_reviews(owner, listing.id).review_count == 1
