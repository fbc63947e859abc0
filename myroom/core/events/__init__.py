from .snapshot_hub import SnapshotHub, Subscription

__all__ = ["SnapshotHub", "Subscription"]
