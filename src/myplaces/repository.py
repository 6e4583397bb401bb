"""PlaceRepository: owns the current PlaceTree and answers read queries.

Ingestion is build-then-swap: the new tree is parsed off to the side and
published with one reference assignment, so readers always see either the
old tree or the new one.  Every query grabs the current tree once and
answers from that snapshot.
"""

from __future__ import annotations

import threading
import unicodedata

from loguru import logger

from myplaces.errors import NotFound, PlacesError
from myplaces.geo import Coordinate
from myplaces.models import Folder, Place, PlaceTree, format_color, parse_color
from myplaces.parser import IdSequence, parse_document


class PlaceRepository:
    """Single owner of every Folder and Place record."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tree: PlaceTree | None = None
        # Shared across ingestions so identities from a discarded tree never resolve
        self._folder_ids = IdSequence()
        self._place_ids = IdSequence()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, data: bytes | str) -> Folder:
        """Parse a KML document and replace the whole tree with it.

        Args:
            data: Raw KML content.

        Returns:
            The new root folder.

        Raises:
            MalformedDocument: The input is not well-formed XML.
            UnrecognizedFormat: The XML is not a kml > Document.

        On failure the previous tree is left exactly as it was.
        """
        try:
            with self._lock:
                tree = parse_document(data, self._folder_ids, self._place_ids)
        except PlacesError as err:
            logger.warning(f"Rejected document, keeping current tree: {err}")
            raise
        self._publish(tree)
        logger.info(
            f"Installed place tree '{tree.root.name}' "
            f"(root folder {tree.root_id}, {len(tree.places)} places)"
        )
        return tree.root

    def clear(self) -> None:
        self._publish(None)
        logger.info("Place tree cleared")

    def snapshot(self) -> PlaceTree | None:
        """The currently published tree (None when nothing is ingested)."""
        return self._tree

    def _publish(self, tree: PlaceTree | None) -> None:
        with self._lock:
            self._tree = tree

    def _require(self, kind: str, identity: int) -> PlaceTree:
        tree = self._tree
        if tree is None:
            raise NotFound(kind, identity)
        return tree

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def root_folder(self) -> Folder | None:
        tree = self._tree
        return tree.root if tree is not None else None

    def folder(self, folder_id: int) -> Folder:
        """Look up a folder.  Raises NotFound for unknown ids."""
        return self._require("folder", folder_id).folder(folder_id)

    def place(self, place_id: int) -> Place:
        """Look up a place.  Raises NotFound for unknown ids."""
        return self._require("place", place_id).place(place_id)

    def parent_folder(self, folder_id: int) -> Folder | None:
        tree = self._require("folder", folder_id)
        parent_id = tree.folder(folder_id).parent_id
        return tree.folders[parent_id] if parent_id is not None else None

    def subfolders(self, folder_id: int) -> list[Folder]:
        return self._require("folder", folder_id).subfolders(folder_id)

    def places_in_folder(self, folder_id: int, recursive: bool = False) -> list[Place]:
        """Places directly in a folder, or its whole subtree when *recursive*.

        Recursive order is the folder's own places first, then each
        subfolder's flattened places in child order.
        """
        return self._require("folder", folder_id).places_in(folder_id, recursive=recursive)

    def flattened_places(self, folder_id: int) -> list[Place]:
        return self.places_in_folder(folder_id, recursive=True)

    def all_places(self) -> list[Place]:
        tree = self._tree
        return tree.all_places() if tree is not None else []

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def places_near(self, coordinate: Coordinate, limit: int | None = None) -> list[Place]:
        """Places sorted nearest-first; equal distances keep identity order."""
        ranked = sorted(self.all_places(), key=lambda p: coordinate.distance_to(p.coordinate))
        return ranked if limit is None else ranked[:limit]

    def places_matching(self, text: str) -> list[Place]:
        """Places whose name contains *text*, ignoring case and diacritics."""
        needle = _fold(text)
        return [p for p in self.all_places() if needle in _fold(p.name)]

    # ------------------------------------------------------------------
    # Colour
    # ------------------------------------------------------------------

    def set_place_color(self, place_id: int, color: int | str | None) -> Place:
        place = self.place(place_id)
        place.color = parse_color(color)
        return place

    def set_folder_color(self, folder_id: int, color: int | str | None) -> int:
        """Colour every place under a folder.  Returns how many were updated."""
        value = parse_color(color)
        places = self.flattened_places(folder_id)
        for place in places:
            place.color = value
        logger.info(f"Folder {folder_id}: set colour {format_color(value)} on {len(places)} places")
        return len(places)

    def folder_color(self, folder_id: int) -> int | None:
        """The colour shared by every place under a folder, else None."""
        colors = {p.color for p in self.flattened_places(folder_id)}
        return colors.pop() if len(colors) == 1 else None


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
