"""Parse a Google Earth KML document into a PlaceTree.

Only the Folder/Placemark hierarchy is read: every Folder becomes a Folder
record, every Placemark with its name, description and Point becomes a
Place.  All other elements (styles, overlays, LineStrings...) are skipped.

Root selection:
    - Document has exactly one Folder and no direct Placemarks:
      that Folder is the root.
    - Anything else: a root is synthesized from the Document's <name>
      (a trailing ".kml" is dropped), falling back to "My Places".

KML writes coordinates as "lng,lat[,alt]" (longitude first).
"""

from __future__ import annotations

import itertools
import math
import xml.etree.ElementTree as ET

from loguru import logger

from myplaces.errors import MalformedDocument, UnrecognizedFormat
from myplaces.geo import ORIGIN, Coordinate
from myplaces.models import (
    DEFAULT_FOLDER_NAME,
    DEFAULT_PLACE_DETAILS,
    DEFAULT_PLACE_NAME,
    DEFAULT_ROOT_NAME,
    Folder,
    Place,
    PlaceTree,
)

_KML_SUFFIX = ".kml"


class IdSequence:
    """Monotonic identity source.  One per record kind."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next(self) -> int:
        return next(self._counter)


def parse_document(
    data: bytes | str,
    folder_ids: IdSequence | None = None,
    place_ids: IdSequence | None = None,
) -> PlaceTree:
    """Parse raw KML into a new PlaceTree.

    Args:
        data: Raw KML XML content.
        folder_ids: Identity source for folders (fresh sequence from 1 if omitted).
        place_ids: Identity source for places (fresh sequence from 1 if omitted).

    Returns:
        The parsed tree.  Nothing outside the returned object is touched.

    Raises:
        MalformedDocument: The input is not well-formed XML.
        UnrecognizedFormat: The XML has no kml > Document structure.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as err:
        raise MalformedDocument(f"Document is not well-formed XML: {err}") from err

    if _local_name(root.tag) != "kml":
        raise UnrecognizedFormat(f"Expected <kml> root element, found <{_local_name(root.tag)}>")
    document = _first_child(root, "Document")
    if document is None:
        raise UnrecognizedFormat("No <Document> element under <kml>")

    builder = _TreeBuilder(folder_ids or IdSequence(), place_ids or IdSequence())
    tree = builder.build(document)
    logger.info(
        f"Parsed KML document '{tree.root.name}': "
        f"{len(tree.folders)} folders, {len(tree.places)} places"
    )
    return tree


class _TreeBuilder:
    """Walks the Document element and accumulates folder/place records."""

    def __init__(self, folder_ids: IdSequence, place_ids: IdSequence) -> None:
        self._folder_ids = folder_ids
        self._place_ids = place_ids
        self._folders: dict[int, Folder] = {}
        self._places: dict[int, Place] = {}

    def build(self, document: ET.Element) -> PlaceTree:
        folders = _children(document, "Folder")
        placemarks = _children(document, "Placemark")

        if len(folders) == 1 and not placemarks:
            root = self._walk(folders[0], parent=None)
        else:
            name = _child_text(document, "name")
            if name is None:
                name = DEFAULT_ROOT_NAME
            if name.endswith(_KML_SUFFIX):
                name = name[: -len(_KML_SUFFIX)]
            root = self._new_folder(name, parent=None)
            self._walk_children(document, root)

        return PlaceTree(root_id=root.folder_id, folders=self._folders, places=self._places)

    def _walk(self, element: ET.Element, parent: Folder | None) -> Folder:
        """Build the folder for *element* and everything below it."""
        folder = self._new_folder(_folder_name(element), parent)
        self._walk_children(element, folder)
        return folder

    def _walk_children(self, element: ET.Element, folder: Folder) -> None:
        # Explicit stack of (element, owning folder), popped in document order
        stack = [(child, folder) for child in reversed(list(element))]
        while stack:
            child, owner = stack.pop()
            tag = _local_name(child.tag)
            if tag == "Folder":
                subfolder = self._new_folder(_folder_name(child), owner)
                stack.extend((grandchild, subfolder) for grandchild in reversed(list(child)))
            elif tag == "Placemark":
                self._new_place(child, owner)

    def _new_folder(self, name: str, parent: Folder | None) -> Folder:
        folder = Folder(
            folder_id=self._folder_ids.next(),
            name=name,
            parent_id=parent.folder_id if parent is not None else None,
        )
        self._folders[folder.folder_id] = folder
        if parent is not None:
            parent.subfolder_ids.append(folder.folder_id)
        return folder

    def _new_place(self, element: ET.Element, folder: Folder) -> Place:
        name = _child_text(element, "name")
        details = _child_text(element, "description")
        point = _first_child(element, "Point")
        place = Place(
            place_id=self._place_ids.next(),
            name=DEFAULT_PLACE_NAME if name is None else name,
            details=DEFAULT_PLACE_DETAILS if details is None else details,
            coordinate=_parse_point(point) if point is not None else ORIGIN,
            folder_id=folder.folder_id,
        )
        self._places[place.place_id] = place
        folder.place_ids.append(place.place_id)
        return place


def _folder_name(element: ET.Element) -> str:
    name = _child_text(element, "name")
    return DEFAULT_FOLDER_NAME if name is None else name


def _parse_point(point: ET.Element) -> Coordinate:
    """Parse the <coordinates> of a <Point>, falling back to (0, 0)."""
    text = _child_text(point, "coordinates")
    if text is None:
        return ORIGIN
    parts = text.split(",")
    try:
        longitude = float(parts[0])
        latitude = float(parts[1])
    except (ValueError, IndexError):
        logger.debug(f"Unreadable coordinates {text!r}, using (0, 0)")
        return ORIGIN
    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        logger.debug(f"Non-finite coordinates {text!r}, using (0, 0)")
        return ORIGIN
    return Coordinate(latitude=latitude, longitude=longitude)


# ---------------------------------------------------------------------------
# Element helpers
# ---------------------------------------------------------------------------

def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix from a tag."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _children(parent: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in parent if _local_name(child.tag) == name]


def _first_child(parent: ET.Element, name: str) -> ET.Element | None:
    for child in parent:
        if _local_name(child.tag) == name:
            return child
    return None


def _child_text(parent: ET.Element, name: str) -> str | None:
    """Stripped text of the first direct child called *name*.

    Returns None only when no such child exists; a present but empty
    element gives "".
    """
    child = _first_child(parent, name)
    if child is None:
        return None
    return (child.text or "").strip()
