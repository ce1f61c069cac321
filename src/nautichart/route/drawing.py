"""Interactive route drawing -- click-by-click polyline capture.

States:
  idle -> drawing -> idle

  start()   idle/drawing -> drawing   subscribe clicks, crosshair cursor
  click     drawing -> drawing        append point, rebuild preview
  finish()  drawing -> idle           permanent polyline layer (>= 2 points)
  cancel()  any -> idle               drop points and preview

While drawing, the collected points are shown as a temporary preview
layer: a marker per point and, from the second point on, a dashed line
through them. The preview is rebuilt from scratch on every click.

The preview lives in the LayerRegistry like any other layer, so it can be
hidden from outside (e.g. a toggle from the layer list). That unwinds the
session exactly as cancel() does.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from nautichart.config import MapSettings, settings as default_settings
from nautichart.geo import Bounds, GeoPoint
from nautichart.layers.elements import Marker, Polyline
from nautichart.layers.layer import Layer, LayerKind
from nautichart.layers.registry import LayerRegistry

if TYPE_CHECKING:
    from nautichart.map.engine import ClickSubscription


class DrawingState(Enum):
    """Whether a route is being drawn."""
    IDLE = "idle"
    DRAWING = "drawing"


class RouteDrawingStateMachine:
    """Owns the one route drawing session of a map.

    Args:
        registry: Layer registry bound to the map; its engine is used for
            click subscription and the cursor.
        build_route: Builds (and registers) the permanent layer from the
            finished point list; normally MapController.add_polyline.
        settings: Preview styling and draw cursor.
    """

    def __init__(
        self,
        registry: LayerRegistry,
        build_route: Callable[[list[GeoPoint]], Layer],
        settings: MapSettings | None = None,
    ) -> None:
        self._registry = registry
        self._build_route = build_route
        self._settings = settings or default_settings
        self.state = DrawingState.IDLE
        self._points: list[GeoPoint] = []
        self._preview: Layer | None = None
        self._subscription: ClickSubscription | None = None
        registry.add_hide_listener(self._on_layer_hidden)

    @property
    def points(self) -> list[GeoPoint]:
        return list(self._points)

    @property
    def preview(self) -> Layer | None:
        return self._preview

    @property
    def is_drawing(self) -> bool:
        return self.state is DrawingState.DRAWING

    # -- transitions -----------------------------------------------------

    def start(self) -> bool:
        """Begin a new session, discarding any session in progress.

        Returns:
            True if drawing started, False if there is no map.
        """
        engine = self._registry.engine
        if engine is None:
            logger.debug("No map; route drawing not started")
            return False
        if self.is_drawing:
            logger.info(f"Restarting route drawing, discarding {len(self._points)} points")
        self._unwind()

        self.state = DrawingState.DRAWING
        engine.set_cursor(self._settings.draw_cursor)
        self._subscription = engine.on_click(self.on_map_click)
        logger.info("Route drawing started")
        return True

    def on_map_click(self, point: GeoPoint) -> None:
        """Accept a clicked point while drawing; ignored otherwise."""
        if not self.is_drawing:
            return
        self._points.append(point)
        self._rebuild_preview()

    def finish(self) -> Layer | None:
        """Turn the collected points into a permanent, shown route layer.

        Returns:
            The new layer, or None (state unchanged) if not drawing or
            fewer than two points were collected.
        """
        if not self.is_drawing or len(self._points) < 2:
            return None
        points = list(self._points)
        self._unwind()

        layer = self._build_route(points)
        self._registry.show(layer)
        logger.info(f"Route finished: {len(points)} points, layer {layer.layer_id}")
        return layer

    def cancel(self) -> None:
        """Abandon the session. Safe in any state and when repeated."""
        was_drawing = self.is_drawing
        self._unwind()
        if was_drawing:
            logger.info("Route drawing cancelled")

    def status_text(self) -> str | None:
        """Hint for the operator banner, None when not drawing."""
        if not self.is_drawing:
            return None
        count = len(self._points)
        if count >= 2:
            return f"{count} points • Finish the route to save it"
        if count == 1:
            return "1 point • Keep clicking on the map"
        return "Click on the map to add points"

    # -- internals -------------------------------------------------------

    def _unwind(self) -> None:
        """Release the listener, cursor and preview, then reset to idle."""
        engine = self._registry.engine
        subscription, self._subscription = self._subscription, None
        if engine is not None:
            if subscription is not None:
                engine.off_click(subscription)
            engine.set_cursor("")
        self._drop_preview()
        self.state = DrawingState.IDLE
        self._points = []

    def _drop_preview(self) -> None:
        preview, self._preview = self._preview, None
        if preview is None:
            return
        try:
            self._registry.remove(preview)
        except Exception as e:
            logger.warning(f"Could not remove route preview {preview.layer_id}: {e}")

    def _rebuild_preview(self) -> None:
        self._drop_preview()
        elements: list = [Marker(p, icon_class="route-point-marker") for p in self._points]
        if len(self._points) >= 2:
            elements.append(
                Polyline(
                    list(self._points),
                    style={
                        "color": self._settings.route_color,
                        "weight": self._settings.route_weight,
                        "dashArray": self._settings.route_dash_array,
                    },
                )
            )
        preview = Layer(
            kind=LayerKind.ROUTE_PREVIEW,
            elements=elements,
            bounds=Bounds.from_points(self._points),
            name="Route (drawing)",
        )
        self._preview = preview
        self._registry.show(preview, fit=False)

    def _on_layer_hidden(self, layer: Layer) -> None:
        if self._preview is not None and layer is self._preview:
            logger.info("Route preview hidden; cancelling route drawing")
            self._preview = None
            self._unwind()
