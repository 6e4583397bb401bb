"""Places API: KML import, folder/place browsing, proximity and text search,
current location, and marker colours.

All state lives on ``app.state`` (see app.main.create_app); endpoints reach it
through the dependencies below.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from pydantic import BaseModel, Field

from app.config import Settings
from myplaces.errors import MalformedDocument, NotFound, UnrecognizedFormat
from myplaces.geo import Coordinate
from myplaces.location import LatestLocation
from myplaces.models import Folder, color_components, format_color
from myplaces.projection import (
    AllPlacesMode,
    FolderMode,
    ListProjection,
    NearbyMode,
    TextMode,
)
from myplaces.repository import PlaceRepository

router = APIRouter(prefix="/api/places", tags=["places"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_repository(request: Request) -> PlaceRepository:
    return request.app.state.repository


def get_location(request: Request) -> LatestLocation:
    return request.app.state.location


def get_projection(request: Request) -> ListProjection:
    return request.app.state.projection


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class LocationRequest(BaseModel):
    """Current device location."""
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class ColorRequest(BaseModel):
    """Marker colour as "#RRGGBB", a packed 0xRRGGBB int, or null to reset."""
    color: Optional[Union[int, str]] = None


def _folder_summary(folder: Folder) -> dict:
    data = folder.to_dict()
    data["is_root"] = folder.is_root
    return data


def _color_payload(color: int | None) -> dict:
    if color is None:
        return {"color": None, "rgb": None}
    return {"color": format_color(color), "rgb": list(color_components(color))}


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

@router.post("/import")
async def import_document(
    request: Request,
    repository: PlaceRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    """Replace the whole place tree with the KML document in the request body."""
    body = await request.body()
    if len(body) > settings.max_document_bytes:
        raise HTTPException(status_code=413, detail="Document too large")
    try:
        root = repository.ingest(body)
    except MalformedDocument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnrecognizedFormat as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"Imported document via API ({len(body)} bytes)")
    return {
        "root": _folder_summary(root),
        "place_count": len(repository.all_places()),
    }


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------

@router.get("/root")
async def get_root(repository: PlaceRepository = Depends(get_repository)):
    root = repository.root_folder()
    if root is None:
        raise HTTPException(status_code=404, detail="No document has been imported")
    return _folder_summary(root)


@router.get("/folders/{folder_id}")
async def get_folder(folder_id: int, repository: PlaceRepository = Depends(get_repository)):
    try:
        folder = repository.folder(folder_id)
        parent = repository.parent_folder(folder_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    data = _folder_summary(folder)
    data["parent_name"] = parent.name if parent is not None else None
    return data


@router.get("/folders/{folder_id}/subfolders")
async def get_subfolders(folder_id: int, repository: PlaceRepository = Depends(get_repository)):
    try:
        folders = repository.subfolders(folder_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [_folder_summary(f) for f in folders]


@router.get("/folders/{folder_id}/places")
async def get_folder_places(
    folder_id: int,
    recursive: bool = Query(False),
    repository: PlaceRepository = Depends(get_repository),
):
    try:
        places = repository.places_in_folder(folder_id, recursive=recursive)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [p.to_dict() for p in places]


@router.get("/folders/{folder_id}/color")
async def get_folder_color(folder_id: int, repository: PlaceRepository = Depends(get_repository)):
    """Colour shared by every place under the folder (null when mixed)."""
    try:
        color = repository.folder_color(folder_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _color_payload(color)


@router.put("/folders/{folder_id}/color")
async def set_folder_color(
    folder_id: int,
    body: ColorRequest,
    repository: PlaceRepository = Depends(get_repository),
):
    try:
        updated = repository.set_folder_color(folder_id, body.color)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"updated": updated, **_color_payload(repository.folder_color(folder_id))}


# ---------------------------------------------------------------------------
# Places
# ---------------------------------------------------------------------------

@router.get("/items/{place_id}")
async def get_place(place_id: int, repository: PlaceRepository = Depends(get_repository)):
    try:
        return repository.place(place_id).to_dict()
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/items/{place_id}/color")
async def set_place_color(
    place_id: int,
    body: ColorRequest,
    repository: PlaceRepository = Depends(get_repository),
):
    try:
        place = repository.set_place_color(place_id, body.color)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return place.to_dict()


@router.get("/near")
async def get_places_near(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    limit: Optional[int] = Query(None, ge=1),
    repository: PlaceRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    """Places ordered by great-circle distance from (lat, lng)."""
    here = Coordinate(latitude=lat, longitude=lng)
    places = repository.places_near(here, limit=limit or settings.nearby_limit)
    results = []
    for place in places:
        data = place.to_dict()
        data["distance_m"] = round(here.distance_to(place.coordinate), 1)
        results.append(data)
    return results


@router.get("/search")
async def search_places(
    q: str = Query(..., min_length=1),
    repository: PlaceRepository = Depends(get_repository),
):
    places = sorted(repository.places_matching(q), key=lambda p: p.name)
    return [p.to_dict() for p in places]


# ---------------------------------------------------------------------------
# List projection
# ---------------------------------------------------------------------------

@router.get("/list")
async def get_list(
    mode: Literal["all", "folder", "nearby", "text"] = Query("folder"),
    folder_id: Optional[int] = Query(None),
    q: str = Query(""),
    projection: ListProjection = Depends(get_projection),
):
    """Display-ready rows for one of the list modes."""
    if mode == "all":
        list_mode = AllPlacesMode()
    elif mode == "folder":
        list_mode = FolderMode(folder_id)
    elif mode == "nearby":
        list_mode = NearbyMode()
    else:
        list_mode = TextMode(q)

    try:
        items = projection.project(list_mode)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    if items is None:
        raise HTTPException(status_code=409, detail="Current location is unknown")
    return {"mode": mode, "items": [item.to_dict() for item in items]}


# ---------------------------------------------------------------------------
# Current location
# ---------------------------------------------------------------------------

@router.get("/location")
async def get_location_value(location: LatestLocation = Depends(get_location)):
    here = location.current_location()
    return {"location": here.to_dict() if here is not None else None}


@router.put("/location")
async def set_location(body: LocationRequest, location: LatestLocation = Depends(get_location)):
    here = Coordinate(latitude=body.lat, longitude=body.lng)
    location.update(here)
    return {"location": here.to_dict()}


@router.delete("/location")
async def clear_location(location: LatestLocation = Depends(get_location)):
    location.clear()
    return {"location": None}
