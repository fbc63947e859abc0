"""
House owner endpoints. Every route acts on the caller's own namespace.
"""
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, WebSocket, status

from myroom.api import deps
from myroom.api.live import refuse, stream_snapshots
from myroom.core.events import SnapshotHub
from myroom.core.exceptions import BaseAppException
from myroom.core.security import Principal
from myroom.models.enums import Collection
from myroom.schemas.base import MessageResponse
from myroom.schemas.file import PhotoUploadResponse
from myroom.schemas.listing import ListingCreate, ListingRead, ListingUpdate
from myroom.schemas.review import ReviewSummary
from myroom.services.file import LocalPhotoStorage
from myroom.services.listing.listing_service import ListingService
from myroom.services.review import ReviewService

router = APIRouter(prefix="/owner", tags=["Owner Listings"])


@router.get("/listings", response_model=List[ListingRead])
def my_listings(
    principal: Principal = Depends(deps.get_principal),
    service: ListingService = Depends(deps.get_listing_service),
):
    return service.get_owner_listings(principal)


@router.websocket("/listings/live")
async def live_my_listings(websocket: WebSocket, hub: SnapshotHub = Depends(deps.get_snapshot_hub)):
    """Push the caller's own listings, in every moderation state, as they change."""
    try:
        owner_id = deps.get_websocket_principal(websocket).require_user()
    except BaseAppException as exc:
        await refuse(websocket, exc)
        return

    await stream_snapshots(websocket, hub, Collection.OWNER_LISTINGS.value, ("owner_id", owner_id))


@router.post("/listings", response_model=ListingRead, status_code=status.HTTP_201_CREATED)
def create_listing(
    body: ListingCreate,
    principal: Principal = Depends(deps.get_principal),
    service: ListingService = Depends(deps.get_listing_service),
):
    return service.create_listing(principal, body)


@router.put("/listings/{listing_id}", response_model=ListingRead)
def update_listing(
    listing_id: str,
    body: ListingUpdate,
    principal: Principal = Depends(deps.get_principal),
    service: ListingService = Depends(deps.get_listing_service),
):
    return service.update_listing(principal, listing_id, body)


@router.post("/listings/{listing_id}/booked", response_model=ListingRead)
def mark_booked(
    listing_id: str,
    principal: Principal = Depends(deps.get_principal),
    service: ListingService = Depends(deps.get_listing_service),
):
    return service.mark_booked(principal, listing_id)


@router.delete("/listings/{listing_id}", response_model=MessageResponse)
def delete_listing(
    listing_id: str,
    principal: Principal = Depends(deps.get_principal),
    service: ListingService = Depends(deps.get_listing_service),
):
    service.delete_listing(principal, listing_id)
    return MessageResponse(message="Listing deleted successfully!")


@router.get("/listings/{listing_id}/reviews", response_model=ReviewSummary)
def listing_reviews(
    listing_id: str,
    principal: Principal = Depends(deps.get_principal),
    service: ReviewService = Depends(deps.get_review_service),
):
    return service.list_owner_reviews(principal, listing_id)


@router.post("/photos", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    file: UploadFile = File(...),
    principal: Principal = Depends(deps.get_principal),
    storage: LocalPhotoStorage = Depends(deps.get_photo_storage),
):
    # One byte past the limit is enough for validation to refuse it
    data = await file.read(storage.max_size + 1)
    key, url = await storage.upload_listing_photo(principal, file.filename, data)
    return PhotoUploadResponse(key=key, url=url)
