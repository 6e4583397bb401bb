"""API routers for MyPlaces."""

from app.routers.places import router as places_router

__all__ = ["places_router"]
