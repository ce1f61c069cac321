"""Per-segment distance labels for routes, in nautical miles."""

from __future__ import annotations

from nautichart.geo import METERS_PER_NAUTICAL_MILE, GeoPoint, haversine_m, midpoint
from nautichart.layers.elements import DistanceLabel


def format_distance_nm(distance_nm: float) -> str:
    return f"{distance_nm:.2f} NM"


def segment_distances_nm(points: list[GeoPoint]) -> list[float]:
    """Great-circle length of each consecutive segment, in nautical miles."""
    return [
        haversine_m(a, b) / METERS_PER_NAUTICAL_MILE
        for a, b in zip(points, points[1:])
    ]


def annotate_distances(points: list[GeoPoint]) -> list[DistanceLabel]:
    """Build one label per segment, anchored at the segment midpoint.

    Args:
        points: Route vertices in order.

    Returns:
        ``len(points) - 1`` labels, or none for fewer than two points.
    """
    labels = []
    for (a, b), nm in zip(zip(points, points[1:]), segment_distances_nm(points)):
        labels.append(
            DistanceLabel(
                point=midpoint(a, b),
                distance_nm=nm,
                text=format_distance_nm(nm),
            )
        )
    return labels
