"""Layer dataclass and LayerKind tag for the map layer system.

A layer is a named group of drawable elements that is shown, hidden and
removed as a unit. Whether it is on the map is tracked by the
LayerRegistry, never by the layer itself.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from nautichart.geo import Bounds
from nautichart.layers.elements import DistanceLabel


class LayerKind(Enum):
    """What a layer was built from."""
    MARKERS = "markers"
    POLYLINE = "polyline"
    POLYGON = "polygon"
    OVERLAY = "overlay"
    ROUTE_PREVIEW = "route_preview"


def new_layer_id() -> str:
    return f"layer-{uuid.uuid4().hex[:8]}"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(eq=False)
class Layer:
    """A named collection of drawable map elements.

    Attributes:
        kind: Which builder produced the layer.
        elements: Drawable primitives (markers, lines, labels, overlays).
        bounds: Spatial extent used to fit the viewport, None when empty.
        layer_id: Opaque unique identifier.
        name: Human-readable display name.
        created_at: ISO8601 creation timestamp.
    """

    kind: LayerKind
    elements: list = field(default_factory=list)
    bounds: Bounds | None = None
    layer_id: str = field(default_factory=new_layer_id)
    name: str = ""
    created_at: str = field(default_factory=_utc_now)

    @property
    def labels(self) -> list[DistanceLabel]:
        return [e for e in self.elements if isinstance(e, DistanceLabel)]
