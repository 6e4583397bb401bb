"""Command-line import/inspect tool.

Run:
    python -m myplaces "My Places.kml" --tree
    python -m myplaces trip.kml --near 37.77,-122.42 --limit 5
    python -m myplaces trip.kml --search cafe
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from myplaces.errors import PlacesError
from myplaces.geo import Coordinate
from myplaces.location import LatestLocation
from myplaces.projection import (
    DEFAULT_NEARBY_LIMIT,
    AllPlacesMode,
    FolderMode,
    ItemKind,
    ListItem,
    ListProjection,
    NearbyMode,
    TextMode,
)
from myplaces.repository import PlaceRepository


def _parse_latlng(text: str) -> Coordinate:
    try:
        lat, lng = (float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got {text!r}") from None
    return Coordinate(latitude=lat, longitude=lng)


def _format_item(item: ListItem) -> str:
    if item.kind is ItemKind.FOLDER:
        return f"[folder] {item.name}"
    if item.kind is ItemKind.ALL_PLACES:
        return f"[*] {item.name}"
    if item.detail:
        return f"{item.name}  ({item.detail})"
    return item.name


def _print_tree(repository: PlaceRepository, folder_id: int, depth: int = 0) -> None:
    indent = "  " * depth
    print(f"{indent}{repository.folder(folder_id).name}/")
    for place in repository.places_in_folder(folder_id):
        print(f"{indent}  {place.name}  ({place.latitude:.6f}, {place.longitude:.6f})")
    for sub in repository.subfolders(folder_id):
        _print_tree(repository, sub.folder_id, depth + 1)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="myplaces", description="Import a KML places file and list its contents"
    )
    parser.add_argument("file", type=Path, help="KML document to import")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--tree", action="store_true", help="Print the full folder tree")
    group.add_argument("--all", action="store_true", help="List every place alphabetically")
    group.add_argument("--near", type=_parse_latlng, metavar="LAT,LNG",
                       help="List the places nearest to a coordinate")
    group.add_argument("--search", metavar="TEXT", help="List places whose name contains TEXT")
    parser.add_argument("--limit", type=int, default=DEFAULT_NEARBY_LIMIT,
                        help="Number of places for --near (default: %(default)s)")
    args = parser.parse_args(argv)

    repository = PlaceRepository()
    location = LatestLocation(args.near)
    try:
        root = repository.ingest(args.file.read_bytes())
    except (PlacesError, OSError) as e:
        print(f"myplaces: {args.file}: {e}", file=sys.stderr)
        return 1

    if args.tree:
        _print_tree(repository, root.folder_id)
        return 0

    if args.all:
        mode = AllPlacesMode()
    elif args.near is not None:
        mode = NearbyMode()
    elif args.search is not None:
        mode = TextMode(args.search)
    else:
        mode = FolderMode()

    projection = ListProjection(repository, location, nearby_limit=args.limit)
    for item in projection.project(mode) or []:
        print(_format_item(item))
    return 0
