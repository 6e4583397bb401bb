"""Geographic value types and great-circle distance.

Coordinates are plain decimal degrees (WGS84).  KML writes them
longitude-first; the parser swaps them into a Coordinate, so nothing past
the parser ever sees the wire order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6_371_000.0
FEET_PER_METER = 3.28084


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float = 0.0
    longitude: float = 0.0

    def distance_to(self, other: Coordinate) -> float:
        """Great-circle distance to *other* in meters."""
        return haversine_m(self.latitude, self.longitude, other.latitude, other.longitude)

    def to_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude}


ORIGIN = Coordinate(0.0, 0.0)


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute great-circle distance in meters between two lat/lng points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lng2 - lng1)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # h can round to just above 1.0 for antipodal points
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))
