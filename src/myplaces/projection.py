"""List projection: turn a query mode into a flat, display-ready item list.

Modes:
    AllPlacesMode  every place in the tree, alphabetical
    FolderMode     subfolders (alphabetical) then places (alphabetical);
                   the root folder also gets an "All Places" shortcut first
    NearbyMode     the nearest places to the current location, nearest first,
                   each with a distance label
    TextMode       places whose name contains the text, alphabetical
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from myplaces.geo import FEET_PER_METER, Coordinate
from myplaces.location import LocationProvider
from myplaces.models import Folder, Place
from myplaces.repository import PlaceRepository

ALL_PLACES_LABEL = "All Places"
DEFAULT_NEARBY_LIMIT = 10

_FEET_ROUNDING = 50
_FEET_DISPLAY_LIMIT = 1000
# Tenths of a mile per meter
_TENTH_MILES_PER_METER = 0.00621371


class ItemKind(str, Enum):
    """Types of item that can appear in a list."""
    FOLDER = "folder"
    PLACE = "place"
    ALL_PLACES = "all_places"  # Shortcut row, not backed by a record


@dataclass(frozen=True)
class ListItem:
    """One displayable row."""

    kind: ItemKind
    item_id: int | None
    name: str
    detail: str | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "item_id": self.item_id,
            "name": self.name,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class AllPlacesMode:
    pass


@dataclass(frozen=True)
class FolderMode:
    folder_id: int | None = None  # None = the current root folder


@dataclass(frozen=True)
class NearbyMode:
    pass


@dataclass(frozen=True)
class TextMode:
    text: str


ListMode = Union[AllPlacesMode, FolderMode, NearbyMode, TextMode]


def format_distance(meters: float) -> str:
    """Human-readable distance: nearest 50 feet under 1000 ft, else tenths of a mile."""
    feet = int(_round_half_up(meters * FEET_PER_METER / _FEET_ROUNDING) * _FEET_ROUNDING)
    if feet < _FEET_DISPLAY_LIMIT:
        return f"{feet} feet"
    miles = _round_half_up(meters * _TENTH_MILES_PER_METER) / 10
    return f"{miles} miles"


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


class ListProjection:
    """Produces list items for a mode from a repository and a location source."""

    def __init__(
        self,
        repository: PlaceRepository,
        location: LocationProvider,
        nearby_limit: int = DEFAULT_NEARBY_LIMIT,
    ) -> None:
        self.repository = repository
        self.location = location
        self.nearby_limit = nearby_limit

    def project(self, mode: ListMode) -> list[ListItem] | None:
        """Build the item list for *mode*.

        Returns:
            The items, or None when the mode cannot be served right now
            (Nearby with no known location).  Callers keep their prior list.

        Raises:
            NotFound: FolderMode names a folder that does not exist.
        """
        if isinstance(mode, AllPlacesMode):
            return _alphabetical(_place_item(p) for p in self.repository.all_places())
        if isinstance(mode, FolderMode):
            return self._folder_items(mode.folder_id)
        if isinstance(mode, NearbyMode):
            return self._nearby_items()
        if isinstance(mode, TextMode):
            matches = self.repository.places_matching(mode.text)
            return _alphabetical(_place_item(p) for p in matches)
        raise TypeError(f"Unsupported list mode: {mode!r}")

    def _folder_items(self, folder_id: int | None) -> list[ListItem]:
        if folder_id is None:
            folder = self.repository.root_folder()
            if folder is None:
                return []
        else:
            folder = self.repository.folder(folder_id)

        items = _alphabetical(_folder_item(f) for f in self.repository.subfolders(folder.folder_id))
        items += _alphabetical(_place_item(p) for p in self.repository.places_in_folder(folder.folder_id))
        if folder.is_root:
            items.insert(0, ListItem(ItemKind.ALL_PLACES, None, ALL_PLACES_LABEL))
        return items

    def _nearby_items(self) -> list[ListItem] | None:
        here = self.location.current_location()
        if here is None:
            return None
        places = self.repository.places_near(here, limit=self.nearby_limit)
        return [_place_item(p, here) for p in places]


def _alphabetical(items) -> list[ListItem]:
    return sorted(items, key=lambda item: item.name)


def _folder_item(folder: Folder) -> ListItem:
    return ListItem(ItemKind.FOLDER, folder.folder_id, folder.name)


def _place_item(place: Place, here: Coordinate | None = None) -> ListItem:
    detail = None
    if here is not None:
        detail = format_distance(here.distance_to(place.coordinate))
    return ListItem(ItemKind.PLACE, place.place_id, place.name, detail)
