"""nautichart -- map layers and interactive route drawing for nautical charts.

Layers (markers, lines, areas, georeferenced image overlays) are built
from API calls or uploaded coordinate files; routes are drawn click by
click and annotated with per-segment distances in nautical miles.
"""

from nautichart.geo import Bounds, GeoPoint
from nautichart.map.controller import MapController

__all__ = ["Bounds", "GeoPoint", "MapController"]
