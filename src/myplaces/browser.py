"""ListBrowser: navigation state behind a folder/place list screen.

Holds the current mode and the items last produced for it, and implements
the moves a list UI offers: open a folder, go back, toggle Nearby, search,
import a new document.  Rendering is left to whoever owns the screen.
"""

from __future__ import annotations

from loguru import logger

from myplaces.errors import NotFound
from myplaces.models import DEFAULT_ROOT_NAME, Folder, Place
from myplaces.projection import (
    ALL_PLACES_LABEL,
    AllPlacesMode,
    FolderMode,
    ItemKind,
    ListItem,
    ListMode,
    ListProjection,
    NearbyMode,
    TextMode,
)


class ListBrowser:
    """Current list mode plus the items shown for it."""

    def __init__(self, projection: ListProjection, mode: ListMode | None = None) -> None:
        self.projection = projection
        self.mode: ListMode = mode if mode is not None else FolderMode()
        self.items: list[ListItem] = []
        self.refresh()

    @property
    def repository(self):
        return self.projection.repository

    def refresh(self) -> list[ListItem]:
        """Re-project the current mode.  An unservable mode keeps the old items."""
        try:
            items = self.projection.project(self.mode)
        except NotFound as err:
            logger.warning(f"{err}; returning to root folder")
            self.mode = FolderMode()
            items = self.projection.project(self.mode)
        if items is not None:
            self.items = items
        return self.items

    def show(self, mode: ListMode) -> list[ListItem]:
        self.mode = mode
        return self.refresh()

    def show_root(self) -> list[ListItem]:
        return self.show(FolderMode())

    def select(self, item: ListItem) -> Place | None:
        """Act on a tapped row.  Returns the Place when a place was chosen."""
        if item.kind is ItemKind.FOLDER:
            self.show(FolderMode(item.item_id))
            return None
        if item.kind is ItemKind.ALL_PLACES:
            self.show(AllPlacesMode())
            return None
        return self.repository.place(item.item_id)

    def back(self) -> list[ListItem]:
        if isinstance(self.mode, FolderMode):
            folder = self._current_folder()
            if folder is None:
                return self.show_root()
            if folder.parent_id is None:
                return self.items
            return self.show(FolderMode(folder.parent_id))
        return self.show_root()

    def toggle_nearby(self) -> list[ListItem]:
        if isinstance(self.mode, NearbyMode):
            return self.show_root()
        return self.show(NearbyMode())

    def search(self, text: str) -> list[ListItem]:
        if text:
            return self.show(TextMode(text))
        return self.show_root()

    def import_document(self, data: bytes | str) -> list[ListItem]:
        """Ingest a document and jump to its root.  Failures leave the browser as is."""
        self.repository.ingest(data)
        return self.show_root()

    @property
    def title(self) -> str:
        if isinstance(self.mode, AllPlacesMode):
            return ALL_PLACES_LABEL
        if isinstance(self.mode, NearbyMode):
            return "Nearby"
        if isinstance(self.mode, TextMode):
            return "Search"
        folder = self._current_folder()
        return folder.name if folder is not None else DEFAULT_ROOT_NAME

    @property
    def can_go_back(self) -> bool:
        if isinstance(self.mode, AllPlacesMode):
            return True
        if isinstance(self.mode, FolderMode):
            folder = self._current_folder()
            return folder is not None and not folder.is_root
        return False

    def _current_folder(self) -> Folder | None:
        """Folder shown in FolderMode; None when there is no tree or the id went stale."""
        if self.mode.folder_id is None:
            return self.repository.root_folder()
        try:
            return self.repository.folder(self.mode.folder_id)
        except NotFound:
            return None
