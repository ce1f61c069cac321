"""Geographic primitives -- GeoPoint, Bounds and great-circle distance.

Coordinates are (lat, lng) in decimal degrees, latitude first, matching
the coordinate file format and the map engine boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

# Mean earth radius used by the map engine for surface distances
EARTH_RADIUS_M = 6_371_000.0

METERS_PER_NAUTICAL_MILE = 1852.0


@dataclass(frozen=True)
class GeoPoint:
    """An immutable latitude/longitude pair.

    Raises:
        ValueError: If either value is not finite or out of range.
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise ValueError(f"Non-finite coordinate: ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class Bounds:
    """A southwest/northeast rectangle in geographic coordinates."""

    southwest: GeoPoint
    northeast: GeoPoint

    @property
    def center(self) -> GeoPoint:
        return midpoint(self.southwest, self.northeast)

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.southwest.lat <= point.lat <= self.northeast.lat
            and self.southwest.lng <= point.lng <= self.northeast.lng
        )

    @classmethod
    def from_points(cls, points: Iterable[GeoPoint]) -> Bounds | None:
        """Smallest Bounds enclosing every point, or None if there are none."""
        points = list(points)
        if not points:
            return None
        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        return cls(
            southwest=GeoPoint(min(lats), min(lngs)),
            northeast=GeoPoint(max(lats), max(lngs)),
        )


def midpoint(a: GeoPoint, b: GeoPoint) -> GeoPoint:
    """Arithmetic midpoint of latitude and longitude (not the geodesic one)."""
    return GeoPoint((a.lat + b.lat) / 2, (a.lng + b.lng) / 2)


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle surface distance in meters on a spherical earth."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))
