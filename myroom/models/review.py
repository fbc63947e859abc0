"""
Review model.

Reviews live in a per-listing subcollection and are never updated once
written.
"""

from sqlalchemy import BigInteger, CheckConstraint, Column, Integer, String, Text

from myroom.db.base import Base

__all__ = ["Review"]


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    id = Column(String(64), primary_key=True)
    listing_id = Column(String(64), nullable=False, index=True)
    reviewer_id = Column(String(128), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    timestamp = Column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<Review {self.id} listing={self.listing_id} rating={self.rating}>"
