"""Current-location boundary.

The core never asks for permission or starts tracking; it only reads the
latest coordinate some outside collaborator published.
"""

from __future__ import annotations

import threading
from typing import Protocol

from myplaces.geo import Coordinate


class LocationProvider(Protocol):
    """Anything that can report the device's current coordinate."""

    def current_location(self) -> Coordinate | None: ...


class LatestLocation:
    """Thread-safe "latest value" cell implementing LocationProvider."""

    def __init__(self, initial: Coordinate | None = None) -> None:
        self._lock = threading.Lock()
        self._current = initial

    def update(self, coordinate: Coordinate) -> None:
        with self._lock:
            self._current = coordinate

    def clear(self) -> None:
        with self._lock:
            self._current = None

    def current_location(self) -> Coordinate | None:
        with self._lock:
            return self._current
