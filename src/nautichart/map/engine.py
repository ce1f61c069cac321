"""Map engine boundary -- what the controller needs from a renderer.

The renderer (tile loading, pan/zoom, drawing) lives outside this
package. Anything implementing MapEngine can be driven by MapController.
HeadlessMapEngine is an in-memory implementation that records every call,
for server-side use and tests.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Protocol

from loguru import logger

from nautichart.geo import Bounds, GeoPoint
from nautichart.layers.elements import TileLayer

ClickCallback = Callable[[GeoPoint], None]


@dataclass(frozen=True)
class ClickSubscription:
    """Handle returned by MapEngine.on_click, passed back to off_click."""
    subscription_id: int


class MapEngine(Protocol):
    """Operations a map renderer exposes to the controller."""

    def mount(self, container: str, center: GeoPoint, zoom: int) -> None: ...

    def destroy(self) -> None: ...

    def add_tile_layer(self, tile: TileLayer) -> None: ...

    def add_element(self, element: object) -> None: ...

    def remove_element(self, element: object) -> None: ...

    def on_click(self, callback: ClickCallback) -> ClickSubscription: ...

    def off_click(self, subscription: ClickSubscription) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...

    def set_cursor(self, style: str) -> None: ...


class HeadlessMapEngine:
    """MapEngine that keeps the map state in memory instead of rendering.

    Attributes:
        container: Container the map was mounted on, None before mount.
        center: Current view center.
        zoom: Current zoom level.
        tile_layers: Base layers added so far.
        elements: Elements currently on the map, in insertion order.
        cursor: Current cursor style ("" is the default cursor).
        fitted: Every Bounds the viewport was fitted to, oldest first.
        destroyed: True once destroy() was called.
    """

    def __init__(self) -> None:
        self.container: str | None = None
        self.center: GeoPoint | None = None
        self.zoom: int | None = None
        self.tile_layers: list[TileLayer] = []
        self.elements: list = []
        self.cursor = ""
        self.fitted: list[Bounds] = []
        self.destroyed = False
        self._listeners: dict[int, ClickCallback] = {}
        self._ids = itertools.count(1)

    def mount(self, container: str, center: GeoPoint, zoom: int) -> None:
        self.container = container
        self.center = center
        self.zoom = zoom

    def destroy(self) -> None:
        if self.destroyed:
            raise RuntimeError("Map already destroyed")
        self.destroyed = True
        self.elements.clear()
        self._listeners.clear()

    def add_tile_layer(self, tile: TileLayer) -> None:
        self.tile_layers.append(tile)

    def add_element(self, element: object) -> None:
        if not self.has_element(element):
            self.elements.append(element)

    def remove_element(self, element: object) -> None:
        self.elements = [e for e in self.elements if e is not element]

    def has_element(self, element: object) -> bool:
        return any(e is element for e in self.elements)

    def on_click(self, callback: ClickCallback) -> ClickSubscription:
        sub = ClickSubscription(next(self._ids))
        self._listeners[sub.subscription_id] = callback
        return sub

    def off_click(self, subscription: ClickSubscription) -> None:
        self._listeners.pop(subscription.subscription_id, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def fit_bounds(self, bounds: Bounds) -> None:
        self.fitted.append(bounds)
        self.center = bounds.center

    def set_cursor(self, style: str) -> None:
        self.cursor = style

    def click(self, point: GeoPoint) -> None:
        """Dispatch a click at ``point`` to every subscribed listener."""
        logger.debug(f"Map click at {point.lat:.5f}, {point.lng:.5f}")
        for callback in list(self._listeners.values()):
            callback(point)
