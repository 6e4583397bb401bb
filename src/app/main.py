"""MyPlaces - place hierarchy service.

Main FastAPI application.  Run with:
    uvicorn app.main:app --port 8000
"""

from __future__ import annotations

import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import Settings, settings as default_settings
from app.routers.places import router as places_router
from myplaces.location import LatestLocation
from myplaces.projection import ListProjection
from myplaces.repository import PlaceRepository

VERSION = "0.1.0"


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level.upper())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own repository and location cell."""
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Google Earth place hierarchy - import, browse, search",
        version=VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repository = PlaceRepository()
    location = LatestLocation()
    app.state.settings = settings
    app.state.repository = repository
    app.state.location = location
    app.state.projection = ListProjection(repository, location, nearby_limit=settings.nearby_limit)

    app.include_router(places_router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        root = repository.root_folder()
        return {
            "status": "operational",
            "version": VERSION,
            "system": settings.app_name,
            "document": root.name if root is not None else None,
        }

    logger.info(f"{settings.app_name} v{VERSION} ready")
    return app


app = create_app()
