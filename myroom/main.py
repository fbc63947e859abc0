from __future__ import annotations

import os
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from myroom.api.v1.router import router as api_v1_router
from myroom.config.settings import settings
from myroom.core.events import SnapshotHub
from myroom.core.logging import get_logger, setup_logging
from myroom.core.middleware import register_middlewares
from myroom.core.security import JWTManager
from myroom.db.init_db import init_db
from myroom.services.file import LocalPhotoStorage
from myroom.services.listing.snapshots import StoreSnapshotLoader

logger = get_logger(__name__)


def create_app(
    session_factory: Optional[Callable[[], Session]] = None,
    engine: Optional[Engine] = None,
    upload_dir: Optional[str] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Builds the shared session factory, snapshot hub, JWT manager and photo storage.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging()

    if session_factory is None:
        from myroom.db.session import SessionLocal, engine as default_engine

        session_factory = SessionLocal
        engine = engine or default_engine

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Browsers send credentials only to explicit origins
    allow_origins = settings.CORS_ORIGINS or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)

    app.state.session_factory = session_factory
    app.state.snapshot_hub = SnapshotHub(
        StoreSnapshotLoader(session_factory, new_listing_days=settings.NEW_LISTING_DAYS)
    )
    app.state.jwt_manager = JWTManager(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )

    photo_dir = upload_dir or settings.UPLOAD_DIR
    os.makedirs(photo_dir, exist_ok=True)
    app.state.photo_storage = LocalPhotoStorage(
        upload_dir=photo_dir,
        base_url=settings.UPLOAD_BASE_URL,
        allowed_extensions=settings.ALLOWED_EXTENSIONS,
        max_size=settings.MAX_UPLOAD_SIZE,
    )

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)
    app.mount(settings.UPLOAD_BASE_URL, StaticFiles(directory=photo_dir), name="uploads")

    @app.on_event("startup")
    async def on_startup() -> None:
        # Schema creation for dev and tests; production schemas are managed separately
        if engine is not None and not settings.is_production():
            init_db(engine)
        logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

    return app


app = create_app()
