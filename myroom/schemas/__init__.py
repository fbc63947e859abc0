from myroom.schemas.auth import AdminLoginRequest, TokenResponse
from myroom.schemas.base import MessageResponse
from myroom.schemas.file import PhotoUploadResponse
from myroom.schemas.listing import (
    ContactLink,
    ListingCreate,
    ListingDetail,
    ListingRead,
    ListingUpdate,
    ModerationStats,
    StatusChange,
)
from myroom.schemas.review import ReviewCreate, ReviewRead, ReviewSummary

__all__ = [
    "AdminLoginRequest",
    "MessageResponse",
    "PhotoUploadResponse",
    "TokenResponse",
    "ContactLink",
    "ListingCreate",
    "ListingDetail",
    "ListingRead",
    "ListingUpdate",
    "ModerationStats",
    "StatusChange",
    "ReviewCreate",
    "ReviewRead",
    "ReviewSummary",
]
