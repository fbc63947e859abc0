"""
Admin moderation endpoints. The admin capability comes from the caller's
token; the service refuses everyone else.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket

from myroom.api import deps
from myroom.api.live import refuse, stream_snapshots
from myroom.core.events import SnapshotHub
from myroom.core.exceptions import BaseAppException
from myroom.core.security import Principal
from myroom.models.enums import Collection, ListingStatus
from myroom.schemas.listing import ListingRead, ModerationStats, StatusChange
from myroom.services.listing.moderation import ModerationService

router = APIRouter(prefix="/admin", tags=["Admin Moderation"])


@router.get("/listings", response_model=List[ListingRead])
def all_listings(
    status: Optional[ListingStatus] = Query(None, description="Only listings in this state"),
    principal: Principal = Depends(deps.get_principal),
    service: ModerationService = Depends(deps.get_moderation_service),
):
    return service.list_listings(principal, status)


@router.websocket("/listings/live")
async def live_all_listings(
    websocket: WebSocket,
    status: Optional[ListingStatus] = None,
    hub: SnapshotHub = Depends(deps.get_snapshot_hub),
):
    """Push every public listing, or one status bucket, as moderation happens."""
    try:
        deps.get_websocket_principal(websocket).require_admin()
    except BaseAppException as exc:
        await refuse(websocket, exc)
        return

    where = ("status", status.value) if status else None
    await stream_snapshots(websocket, hub, Collection.LISTINGS.value, where)


@router.get("/stats", response_model=ModerationStats)
def moderation_stats(
    principal: Principal = Depends(deps.get_principal),
    service: ModerationService = Depends(deps.get_moderation_service),
):
    return service.stats(principal)


@router.post("/listings/{listing_id}/status", response_model=ListingRead)
def change_status(
    listing_id: str,
    body: StatusChange,
    principal: Principal = Depends(deps.get_principal),
    service: ModerationService = Depends(deps.get_moderation_service),
):
    return service.change_status(principal, listing_id, body.status)


@router.post("/listings/{listing_id}/resync", response_model=ListingRead)
def resync_listing(
    listing_id: str,
    principal: Principal = Depends(deps.get_principal),
    service: ModerationService = Depends(deps.get_moderation_service),
):
    return service.resync(principal, listing_id)
