# myroom/api/deps.py
"""
FastAPI dependencies.

Shared collaborators (session factory, snapshot hub, JWT manager, photo
storage) live on ``app.state`` and are built once in ``create_app``; tests
swap them through ``app.dependency_overrides``.

Example usage in a router:
    @router.get("/me")
    def read_me(principal: Principal = Depends(deps.get_principal)):
        return principal
"""

from typing import Callable, Optional

from fastapi import Depends, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection
from sqlalchemy.orm import Session

from myroom.config.settings import settings
from myroom.core.events import SnapshotHub
from myroom.core.logging import user_id as user_id_var
from myroom.core.security import ANONYMOUS, JWTManager, Principal
from myroom.services.file import LocalPhotoStorage
from myroom.services.listing.listing_service import ListingService
from myroom.services.listing.moderation import ModerationService
from myroom.services.review import ReviewService

bearer_scheme = HTTPBearer(auto_error=False)


# --- Shared collaborators -----------------------------------------------------

def get_session_factory(connection: HTTPConnection) -> Callable[[], Session]:
    return connection.app.state.session_factory


def get_snapshot_hub(connection: HTTPConnection) -> SnapshotHub:
    return connection.app.state.snapshot_hub


def get_jwt_manager(connection: HTTPConnection) -> JWTManager:
    return connection.app.state.jwt_manager


def get_photo_storage(connection: HTTPConnection) -> LocalPhotoStorage:
    return connection.app.state.photo_storage


# --- Identity -----------------------------------------------------------------

async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_manager: JWTManager = Depends(get_jwt_manager),
) -> Principal:
    """
    Caller identity from the bearer token.

    No token means an anonymous caller; operations that need an identifier
    refuse it themselves. A token that fails verification is rejected here.
    """
    if credentials is None:
        return ANONYMOUS
    principal = jwt_manager.principal_from_token(credentials.credentials)
    user_id_var.set(principal.user_id)
    return principal


def get_websocket_principal(websocket: WebSocket) -> Principal:
    """
    Caller identity for a live feed.

    Browsers cannot set headers on a WebSocket handshake, so the token may
    also arrive as the ``token`` query parameter. Raises the same errors as
    ``get_principal``; the endpoint turns them into a close frame.
    """
    token = websocket.query_params.get("token")
    scheme, _, credentials = websocket.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        token = credentials
    if not token:
        return ANONYMOUS
    principal = websocket.app.state.jwt_manager.principal_from_token(token)
    user_id_var.set(principal.user_id)
    return principal


# --- Services -----------------------------------------------------------------

def get_listing_service(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    hub: SnapshotHub = Depends(get_snapshot_hub),
) -> ListingService:
    return ListingService(session_factory, hub, new_listing_days=settings.NEW_LISTING_DAYS)


def get_moderation_service(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    hub: SnapshotHub = Depends(get_snapshot_hub),
) -> ModerationService:
    return ModerationService(session_factory, hub, new_listing_days=settings.NEW_LISTING_DAYS)


def get_review_service(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    hub: SnapshotHub = Depends(get_snapshot_hub),
) -> ReviewService:
    return ReviewService(session_factory, hub)


__all__ = [
    "bearer_scheme",
    "get_session_factory",
    "get_snapshot_hub",
    "get_jwt_manager",
    "get_photo_storage",
    "get_principal",
    "get_websocket_principal",
    "get_listing_service",
    "get_moderation_service",
    "get_review_service",
]
