"""Drawable map primitives handed to the map engine.

Elements are plain records; the engine decides how to render them. They
compare by identity so the same marker can be added and removed exactly.
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass, field

from nautichart.geo import Bounds, GeoPoint


@dataclass(eq=False)
class TileLayer:
    """Base imagery tile source."""

    url: str
    attribution: str = ""
    class_name: str = ""
    min_zoom: int = 0


@dataclass(eq=False)
class Marker:
    """A point marker. ``icon_class`` selects a styled div icon."""

    point: GeoPoint
    icon_class: str | None = None


@dataclass(eq=False)
class Polyline:
    """An open line through ``points`` in order.

    Attributes:
        points: Vertices in drawing order.
        style: Rendering hints (color, weight, dashArray).
    """

    points: list[GeoPoint]
    style: dict = field(default_factory=dict)


@dataclass(eq=False)
class Polygon:
    """A closed area; the last vertex joins back to the first."""

    points: list[GeoPoint]
    style: dict = field(default_factory=dict)


@dataclass(eq=False)
class DistanceLabel:
    """Text label anchored at a segment midpoint."""

    point: GeoPoint
    distance_nm: float
    text: str
    class_name: str = "distance-label"


@dataclass(eq=False)
class ImageOverlay:
    """A georeferenced image stretched over ``bounds``.

    Attributes:
        bounds: Southwest/northeast corners the image is pinned to.
        image: Raw image bytes as uploaded.
        filename: Original filename, used to guess the image type.
        opacity: Rendering opacity (0.0 to 1.0).
        error_url: Image shown by the engine if ``image`` fails to load.
        alt: Alternative text.
    """

    bounds: Bounds
    image: bytes
    filename: str = ""
    opacity: float = 1.0
    error_url: str = ""
    alt: str = ""

    @property
    def url(self) -> str:
        """The image as a ``data:`` URL the engine can load directly."""
        mime, _ = mimetypes.guess_type(self.filename)
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{mime or 'application/octet-stream'};base64,{encoded}"
