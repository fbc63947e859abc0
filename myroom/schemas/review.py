# --- File: myroom/schemas/review.py ---
"""
Review schemas.
"""

from __future__ import annotations

from typing import List

from myroom.schemas.base import BaseSchema

__all__ = ["ReviewCreate", "ReviewRead", "ReviewSummary"]


class ReviewCreate(BaseSchema):
    # Zero means "no star selected"; rejected by the service
    rating: int = 0
    comment: str = ""


class ReviewRead(BaseSchema):
    id: str
    listing_id: str
    reviewer_id: str
    rating: int
    comment: str
    timestamp: int


class ReviewSummary(BaseSchema):
    listing_id: str
    average_rating: float = 0
    review_count: int = 0
    reviews: List[ReviewRead] = []
