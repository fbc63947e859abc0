from .review_service import ReviewService, summarize_reviews

__all__ = ["ReviewService", "summarize_reviews"]
