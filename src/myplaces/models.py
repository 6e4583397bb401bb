"""Place, Folder and PlaceTree records.

A PlaceTree is the unit the repository publishes: one root folder plus the
identity maps for every folder and place under it.  Trees are built by the
parser and are never reshaped after publication; the only field that
changes afterwards is ``Place.color``.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Iterator

from myplaces.errors import NotFound
from myplaces.geo import Coordinate

DEFAULT_PLACE_NAME = "Untitled Place"
DEFAULT_PLACE_DETAILS = "No Description"
DEFAULT_FOLDER_NAME = "Untitled Folder"
DEFAULT_ROOT_NAME = "My Places"

MAX_COLOR = 0xFFFFFF


@dataclass
class Place:
    """A named, located point of interest.

    Attributes:
        place_id: Identity, unique among places.
        name: Display name ("Untitled Place" when the source had none).
        details: Description text ("No Description" when the source had none).
        coordinate: Location; (0, 0) when the source had none or it was unreadable.
        folder_id: Identity of the owning folder.
        color: Packed 0xRRGGBB display colour, or None when never set.
    """

    place_id: int
    name: str
    details: str
    coordinate: Coordinate
    folder_id: int
    color: int | None = None

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def to_dict(self) -> dict:
        return {
            "place_id": self.place_id,
            "name": self.name,
            "details": self.details,
            "lat": self.coordinate.latitude,
            "lng": self.coordinate.longitude,
            "folder_id": self.folder_id,
            "color": format_color(self.color),
        }


@dataclass
class Folder:
    """A named node in the place hierarchy.

    ``subfolder_ids`` and ``place_ids`` keep source document order.
    """

    folder_id: int
    name: str
    parent_id: int | None = None
    subfolder_ids: list[int] = field(default_factory=list)
    place_ids: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> dict:
        return {
            "folder_id": self.folder_id,
            "name": self.name,
            "parent_id": self.parent_id,
            "subfolder_ids": list(self.subfolder_ids),
            "place_ids": list(self.place_ids),
        }


@dataclass
class PlaceTree:
    """A complete, self-consistent folder/place hierarchy."""

    root_id: int
    folders: dict[int, Folder]
    places: dict[int, Place]

    @property
    def root(self) -> Folder:
        return self.folders[self.root_id]

    def folder(self, folder_id: int) -> Folder:
        try:
            return self.folders[folder_id]
        except KeyError:
            raise NotFound("folder", folder_id) from None

    def place(self, place_id: int) -> Place:
        try:
            return self.places[place_id]
        except KeyError:
            raise NotFound("place", place_id) from None

    def subfolders(self, folder_id: int) -> list[Folder]:
        return [self.folders[fid] for fid in self.folder(folder_id).subfolder_ids]

    def places_in(self, folder_id: int, recursive: bool = False) -> list[Place]:
        if not recursive:
            return [self.places[pid] for pid in self.folder(folder_id).place_ids]
        return list(self.iter_flattened(folder_id))

    def iter_flattened(self, folder_id: int) -> Iterator[Place]:
        """Yield a folder's own places, then each subfolder's, depth-first pre-order."""
        stack = [self.folder(folder_id)]
        while stack:
            folder = stack.pop()
            for pid in folder.place_ids:
                yield self.places[pid]
            stack.extend(self.folders[fid] for fid in reversed(folder.subfolder_ids))

    def all_places(self) -> list[Place]:
        """Every place in identity order."""
        return [self.places[pid] for pid in sorted(self.places)]


# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

def parse_color(value: int | str | None) -> int | None:
    """Normalize a colour to a packed 0xRRGGBB int.

    Accepts an int, ``"#RRGGBB"``, ``"RRGGBB"`` or None.

    Raises:
        ValueError: If the value is not a valid 24-bit RGB colour.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid colour: {value!r}")
    if isinstance(value, int):
        color = value
    else:
        text = value.strip().removeprefix("#")
        if len(text) != 6 or any(c not in string.hexdigits for c in text):
            raise ValueError(f"Invalid colour: {value!r}")
        color = int(text, 16)
    if not 0 <= color <= MAX_COLOR:
        raise ValueError(f"Colour out of range: {value!r}")
    return color


def format_color(color: int | None) -> str | None:
    """Format a packed colour as ``"#RRGGBB"``."""
    if color is None:
        return None
    return f"#{color:06X}"


def color_components(color: int) -> tuple[int, int, int]:
    """Split a packed colour into (red, green, blue) bytes."""
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
