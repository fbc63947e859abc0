from typing import List

from sqlalchemy import delete, select

from myroom.models.review import Review
from myroom.repositories.base_repository import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """Append-only per-listing review subcollection."""

    model = Review

    def list_for_listing(self, listing_id: str) -> List[Review]:
        stmt = (
            select(Review)
            .where(Review.listing_id == listing_id)
            .order_by(Review.timestamp.desc())
        )
        return list(self.db.scalars(stmt))

    def ratings_for_listing(self, listing_id: str) -> List[int]:
        stmt = select(Review.rating).where(Review.listing_id == listing_id)
        return list(self.db.scalars(stmt))

    def delete_for_listing(self, listing_id: str) -> int:
        result = self.db.execute(delete(Review).where(Review.listing_id == listing_id))
        return result.rowcount or 0
