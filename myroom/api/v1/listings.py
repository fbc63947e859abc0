"""
Student-facing listing endpoints: browse, detail, reviews and the live feed.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, WebSocket, status
from starlette.concurrency import run_in_threadpool

from myroom.api import deps
from myroom.api.live import dump_records, refuse, stream_snapshots
from myroom.core.events import SnapshotHub
from myroom.core.exceptions import NotFoundError
from myroom.core.security import Principal
from myroom.models.enums import Collection, ListingStatus
from myroom.schemas.listing import ListingDetail, ListingRead
from myroom.schemas.review import ReviewCreate, ReviewRead, ReviewSummary
from myroom.services.listing.filters import SearchCriteria, search_listings, visible_listings
from myroom.services.listing.listing_service import ListingService
from myroom.services.review import ReviewService, summarize_reviews

router = APIRouter(prefix="/listings", tags=["Listings"])


def _criteria(college: str, budget: str, safety: str) -> SearchCriteria:
    return SearchCriteria(college=college.strip(), budget=budget.strip(), safety=safety.strip())


@router.get("", response_model=List[ListingRead])
def browse_listings(
    college: str = Query("", description="College name, matched against location"),
    budget: str = Query("", description="Budget such as 3000-5000 or 3000"),
    safety: str = Query("", description="Safety feature or amenity"),
    service: ListingService = Depends(deps.get_listing_service),
):
    return service.browse(_criteria(college, budget, safety))


@router.websocket("/live")
async def live_listings(
    websocket: WebSocket,
    college: str = "",
    budget: str = "",
    safety: str = "",
    hub: SnapshotHub = Depends(deps.get_snapshot_hub),
):
    """
    Push the filtered student view every time it changes.

    Each message is the full list of matching listings.
    """
    criteria = _criteria(college, budget, safety)

    def render(records):
        return dump_records(search_listings(visible_listings(records), criteria))

    await stream_snapshots(
        websocket,
        hub,
        Collection.LISTINGS.value,
        ("status", ListingStatus.APPROVED.value),
        render,
    )


@router.get("/{listing_id}", response_model=ListingDetail)
def get_listing(listing_id: str, service: ListingService = Depends(deps.get_listing_service)):
    return service.get_listing_detail(listing_id)


@router.get("/{listing_id}/reviews", response_model=ReviewSummary)
def get_reviews(listing_id: str, service: ReviewService = Depends(deps.get_review_service)):
    return service.list_reviews(listing_id)


@router.post("/{listing_id}/reviews", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def submit_review(
    listing_id: str,
    body: ReviewCreate,
    principal: Principal = Depends(deps.get_principal),
    service: ReviewService = Depends(deps.get_review_service),
):
    return service.add_review(principal, listing_id, body)


@router.websocket("/{listing_id}/reviews/live")
async def live_reviews(
    websocket: WebSocket,
    listing_id: str,
    hub: SnapshotHub = Depends(deps.get_snapshot_hub),
    service: ReviewService = Depends(deps.get_review_service),
):
    """Push the review summary of a visible listing whenever a review lands."""
    try:
        await run_in_threadpool(service.ensure_reviewable, listing_id)
    except NotFoundError as exc:
        await refuse(websocket, exc)
        return

    await stream_snapshots(
        websocket,
        hub,
        Collection.REVIEWS.value,
        ("listing_id", listing_id),
        lambda reviews: summarize_reviews(listing_id, reviews).model_dump(mode="json", by_alias=True),
    )
