import pytest

from myroom.core.exceptions import (
    AuthUnavailableError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from myroom.core.security import ANONYMOUS
from myroom.models import ListingStatus, OwnerListing, PublicListing
from myroom.schemas.listing import ListingCreate
from myroom.services.listing.moderation import can_transition
from tests.test_listing_service import load_record

PENDING = ListingStatus.PENDING
APPROVED = ListingStatus.APPROVED
REJECTED = ListingStatus.REJECTED


@pytest.fixture
def listing(listing_service, owner, listing_data):
    return listing_service.create_listing(owner, ListingCreate(**listing_data))


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (PENDING, APPROVED, True),
        (PENDING, REJECTED, True),
        (APPROVED, REJECTED, True),
        (REJECTED, APPROVED, True),
        (APPROVED, APPROVED, True),
        (PENDING, PENDING, False),
        (APPROVED, PENDING, False),
        (REJECTED, PENDING, False),
    ],
)
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_approve_updates_both_copies(moderation_service, session_factory, admin, listing):
    result = moderation_service.change_status(admin, listing.id, APPROVED)

    assert result.status == APPROVED
    assert load_record(session_factory, PublicListing, listing.id)["status"] == "approved"
    assert load_record(session_factory, OwnerListing, listing.id)["status"] == "approved"


def test_decision_can_be_reversed(moderation_service, session_factory, admin, listing):
    moderation_service.change_status(admin, listing.id, APPROVED)
    moderation_service.change_status(admin, listing.id, REJECTED)
    moderation_service.change_status(admin, listing.id, APPROVED)

    assert load_record(session_factory, OwnerListing, listing.id)["status"] == "approved"


def test_back_to_pending_is_refused(moderation_service, session_factory, admin, listing):
    moderation_service.change_status(admin, listing.id, APPROVED)

    with pytest.raises(InvalidTransitionError) as exc_info:
        moderation_service.change_status(admin, listing.id, PENDING)

    assert exc_info.value.status_code == 409
    assert load_record(session_factory, PublicListing, listing.id)["status"] == "approved"
    assert load_record(session_factory, OwnerListing, listing.id)["status"] == "approved"


def test_only_admins_moderate(moderation_service, owner, listing):
    with pytest.raises(PermissionDeniedError):
        moderation_service.change_status(owner, listing.id, APPROVED)
    with pytest.raises(AuthUnavailableError):
        moderation_service.change_status(ANONYMOUS, listing.id, APPROVED)
    with pytest.raises(PermissionDeniedError):
        moderation_service.list_listings(owner)


def test_unknown_listing(moderation_service, admin):
    with pytest.raises(NotFoundError):
        moderation_service.change_status(admin, "missing", APPROVED)


def test_missing_owner_copy_is_restored(moderation_service, session_factory, admin, listing):
    session = session_factory()
    session.delete(session.get(OwnerListing, listing.id))
    session.commit()
    session.close()

    moderation_service.change_status(admin, listing.id, REJECTED)

    owner_copy = load_record(session_factory, OwnerListing, listing.id)
    assert owner_copy == load_record(session_factory, PublicListing, listing.id)
    assert owner_copy["status"] == "rejected"


def test_list_and_stats(listing_service, moderation_service, admin, owner, listing_data, clock):
    ids = []
    for _ in range(3):
        ids.append(listing_service.create_listing(owner, ListingCreate(**listing_data)).id)
        clock.advance()
    moderation_service.change_status(admin, ids[0], APPROVED)
    moderation_service.change_status(admin, ids[1], REJECTED)

    everything = moderation_service.list_listings(admin)
    assert [listing.id for listing in everything] == list(reversed(ids))
    assert [listing.id for listing in moderation_service.list_listings(admin, PENDING)] == [ids[2]]

    stats = moderation_service.stats(admin)
    assert (stats.total, stats.pending, stats.approved, stats.rejected) == (3, 1, 1, 1)


def test_resync_overwrites_public_copy(moderation_service, session_factory, admin, listing):
    session = session_factory()
    session.get(PublicListing, listing.id).title = "Tampered"
    session.commit()
    session.close()

    first = moderation_service.resync(admin, listing.id)
    second = moderation_service.resync(admin, listing.id)

    assert first == second
    assert load_record(session_factory, PublicListing, listing.id) == load_record(
        session_factory, OwnerListing, listing.id
    )
    assert first.title == "Sunny room near VIT"
