"""Place hierarchy core: KML ingestion, queryable folder/place tree, list projection.

Reads Google Earth KML (Folder/Placemark hierarchy) with xml.etree.ElementTree
and keeps the result in memory; no storage backend is involved.
"""

from myplaces.browser import ListBrowser
from myplaces.errors import MalformedDocument, NotFound, PlacesError, UnrecognizedFormat
from myplaces.geo import Coordinate, haversine_m
from myplaces.location import LatestLocation, LocationProvider
from myplaces.models import Folder, Place, PlaceTree
from myplaces.parser import parse_document
from myplaces.projection import (
    AllPlacesMode,
    FolderMode,
    ItemKind,
    ListItem,
    ListProjection,
    NearbyMode,
    TextMode,
    format_distance,
)
from myplaces.repository import PlaceRepository

__all__ = [
    "AllPlacesMode",
    "Coordinate",
    "Folder",
    "FolderMode",
    "ItemKind",
    "LatestLocation",
    "ListBrowser",
    "ListItem",
    "ListProjection",
    "LocationProvider",
    "MalformedDocument",
    "NearbyMode",
    "NotFound",
    "Place",
    "PlaceRepository",
    "PlaceTree",
    "PlacesError",
    "TextMode",
    "UnrecognizedFormat",
    "format_distance",
    "haversine_m",
    "parse_document",
]
