"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the room listing service
"""
from fastapi import APIRouter, Request

from myroom.api.v1 import admin, auth, listings, owner
from myroom.core.logging import get_logger
from myroom.models.enums import Collection

logger = get_logger(__name__)

router = APIRouter(
    responses={
        401: {"description": "Authentication required"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        422: {"description": "Validation Error"},
        500: {"description": "Write Failure"},
    }
)

router.include_router(auth.router)
router.include_router(listings.router)
router.include_router(owner.router)
router.include_router(admin.router)


@router.get("/health", tags=["System Health"])
async def api_health_check(request: Request):
    hub = request.app.state.snapshot_hub
    return {
        "status": "healthy",
        "api_version": "v1",
        "live_queries": {
            collection.value: hub.subscriber_count(collection.value) for collection in Collection
        },
    }


logger.info(f"API v1 router initialized with {len(router.routes)} routes")
