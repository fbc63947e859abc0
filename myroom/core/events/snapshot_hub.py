"""
Live query hub.

Subscribers register a collection name plus an optional equality filter and
receive the full matching record set right away and again after every
committed write to that collection. A snapshot equal to the previous one
delivered to the same subscriber is skipped.

Loading and delivering are serialized per collection, so a subscriber never
receives an older read after a newer one.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

logger = logging.getLogger(__name__)

Where = Optional[Tuple[str, Any]]
SnapshotLoader = Callable[[str, Where], List[Any]]
SnapshotCallback = Callable[[List[Any]], None]


class Subscription:
    """Handle returned by SnapshotHub.subscribe."""

    def __init__(self, hub: "SnapshotHub", collection: str, callback: SnapshotCallback, where: Where):
        self.subscription_id = str(uuid4())
        self.collection = collection
        self.callback = callback
        self.where = where
        self.last_snapshot: Optional[List[Any]] = None
        self._hub = hub

    def unsubscribe(self) -> None:
        self._hub.unsubscribe(self)

    def __repr__(self) -> str:
        return f"Subscription({self.collection}, where={self.where})"


class SnapshotHub:
    """
    In-process registry of live queries.

    The loader is called with (collection, where) and must return the
    records currently matching; it is the only part of the hub that talks
    to the store.
    """

    def __init__(self, loader: SnapshotLoader):
        self._loader = loader
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.RLock()
        self._collection_locks: Dict[str, threading.RLock] = {}

    def subscribe(
        self,
        collection: str,
        callback: SnapshotCallback,
        where: Where = None,
    ) -> Subscription:
        """
        Register a live query and deliver its initial snapshot.

        Args:
            collection: Collection name to watch
            callback: Called with the list of matching records
            where: Optional (field, value) equality filter

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, collection, callback, where)
        with self._collection_lock(collection):
            with self._lock:
                self._subscriptions.setdefault(collection, []).append(subscription)
            logger.debug(f"Registered live query {subscription}")

            self._deliver(subscription, self._loader(collection, where))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.collection, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)
                logger.debug(f"Removed live query {subscription}")

    def subscriber_count(self, collection: Optional[str] = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._subscriptions.get(collection, []))
            return sum(len(subs) for subs in self._subscriptions.values())

    def publish(self, collections: Sequence[str]) -> None:
        """
        Re-run every live query on the given collections.

        Called after a write has been committed. Loader or callback failures
        are logged per subscription and never propagate to the writer.
        """
        for collection in collections:
            with self._collection_lock(collection):
                self._publish_one(collection)

    def _publish_one(self, collection: str) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions.get(collection, []))

        snapshots: Dict[Where, List[Any]] = {}
        for subscription in subscriptions:
            try:
                if subscription.where not in snapshots:
                    snapshots[subscription.where] = self._loader(collection, subscription.where)
                self._deliver(subscription, snapshots[subscription.where])
            except Exception as e:
                logger.error(
                    f"Live query {subscription} failed: {e}",
                    exc_info=True,
                )

    def _collection_lock(self, collection: str) -> threading.RLock:
        with self._lock:
            return self._collection_locks.setdefault(collection, threading.RLock())

    def _deliver(self, subscription: Subscription, snapshot: List[Any]) -> None:
        if subscription.last_snapshot is not None and subscription.last_snapshot == snapshot:
            return
        subscription.last_snapshot = list(snapshot)
        subscription.callback(list(snapshot))
