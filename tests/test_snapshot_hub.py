import threading
import time

import pytest

from myroom.core.events import SnapshotHub
from myroom.models import ListingStatus
from myroom.schemas.listing import ListingCreate


class DictLoader:
    """Loader over plain dicts, keyed by collection."""

    def __init__(self):
        self.data = {"listings": [], "reviews": []}
        self.calls = 0

    def __call__(self, collection, where):
        self.calls += 1
        records = self.data[collection]
        if where is not None:
            field, value = where
            records = [record for record in records if record[field] == value]
        return list(records)


@pytest.fixture
def loader():
    return DictLoader()


@pytest.fixture
def dict_hub(loader):
    return SnapshotHub(loader)


def test_initial_snapshot_is_delivered(dict_hub, loader):
    loader.data["listings"] = [{"id": "a", "status": "approved"}]
    received = []

    dict_hub.subscribe("listings", received.append)

    assert received == [[{"id": "a", "status": "approved"}]]
    assert dict_hub.subscriber_count("listings") == 1


def test_publish_delivers_changes_only(dict_hub, loader):
    received = []
    dict_hub.subscribe("listings", received.append, where=("status", "approved"))

    loader.data["listings"] = [{"id": "a", "status": "pending"}]
    dict_hub.publish(["listings"])
    loader.data["listings"] = [{"id": "a", "status": "approved"}]
    dict_hub.publish(["listings"])
    dict_hub.publish(["listings"])

    assert received == [[], [{"id": "a", "status": "approved"}]]


def test_other_collections_are_left_alone(dict_hub, loader):
    received = []
    dict_hub.subscribe("listings", received.append)
    calls = loader.calls

    loader.data["reviews"] = [{"id": "r"}]
    dict_hub.publish(["reviews"])

    assert loader.calls == calls
    assert received == [[]]


def test_unsubscribe_stops_delivery(dict_hub, loader):
    received = []
    subscription = dict_hub.subscribe("listings", received.append)
    subscription.unsubscribe()

    loader.data["listings"] = [{"id": "a", "status": "approved"}]
    dict_hub.publish(["listings"])

    assert received == [[]]
    assert dict_hub.subscriber_count() == 0


def test_failing_subscriber_does_not_affect_others(dict_hub, loader):
    received = []

    def broken(records):
        if records:
            raise RuntimeError("subscriber went away")

    dict_hub.subscribe("listings", broken)
    dict_hub.subscribe("listings", received.append)

    loader.data["listings"] = [{"id": "a", "status": "approved"}]
    dict_hub.publish(["listings"])

    assert received == [[], [{"id": "a", "status": "approved"}]]


def test_store_backed_subscription_follows_moderation(hub, listing_service, moderation_service, owner, admin, listing_data):
    received = []
    hub.subscribe("listings", received.append, where=("status", ListingStatus.APPROVED.value))

    listing = listing_service.create_listing(owner, ListingCreate(**listing_data))
    assert received == [[]]

    moderation_service.change_status(admin, listing.id, ListingStatus.APPROVED)
    assert [[record.id for record in snapshot] for snapshot in received] == [[], [listing.id]]

    listing_service.mark_booked(owner, listing.id)
    assert received[-1][0].is_booked


def test_owner_collection_is_live_too(hub, listing_service, owner, listing_data):
    received = []
    hub.subscribe("owner_listings", received.append, where=("owner_id", owner.user_id))

    listing = listing_service.create_listing(owner, ListingCreate(**listing_data))

    assert [record.id for record in received[-1]] == [listing.id]
    assert received[-1][0].status == ListingStatus.PENDING


class StallingLoader(DictLoader):
    """Reads the store, then holds the result until released (one chosen call only)."""

    def __init__(self, stall_on_call):
        super().__init__()
        self.stall_on_call = stall_on_call
        self.entered = threading.Event()
        self.release = threading.Event()

    def __call__(self, collection, where):
        records = super().__call__(collection, where)
        if self.calls == self.stall_on_call:
            self.entered.set()
            self.release.wait(timeout=5)
        return records


def _run_stalled(loader, first, second):
    """Start ``first`` in a thread, let it read, run ``second`` concurrently, then release."""
    first_thread = threading.Thread(target=first)
    first_thread.start()
    assert loader.entered.wait(timeout=5)

    second_thread = threading.Thread(target=second)
    second_thread.start()
    # Give the second writer time to overtake if it is not held back
    time.sleep(0.1)
    loader.release.set()

    first_thread.join(timeout=5)
    second_thread.join(timeout=5)


def test_concurrent_publishes_end_on_newest_snapshot():
    loader = StallingLoader(stall_on_call=2)
    hub = SnapshotHub(loader)
    received = []
    loader.data["listings"] = [{"id": "v0"}]
    hub.subscribe("listings", lambda records: received.append([r["id"] for r in records]))

    loader.data["listings"] = [{"id": "v1"}]

    def second():
        loader.data["listings"] = [{"id": "v2"}]
        hub.publish(["listings"])

    _run_stalled(loader, lambda: hub.publish(["listings"]), second)

    assert received == [["v0"], ["v1"], ["v2"]]


def test_subscribe_racing_a_publish_ends_on_newest_snapshot():
    loader = StallingLoader(stall_on_call=1)
    hub = SnapshotHub(loader)
    received = []
    loader.data["listings"] = [{"id": "v1"}]

    def second():
        loader.data["listings"] = [{"id": "v2"}]
        hub.publish(["listings"])

    _run_stalled(
        loader,
        lambda: hub.subscribe("listings", lambda records: received.append([r["id"] for r in records])),
        second,
    )

    assert received[-1] == ["v2"]
    assert received == [["v1"], ["v2"]]
