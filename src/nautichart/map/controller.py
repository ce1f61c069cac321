"""MapController -- owner of the map, its layers and route drawing.

The host application creates one controller per map view, calls
initialize() when the view is mounted and teardown() when it goes away.
Everything else (layers, route drawing) is scoped to that lifetime.

Layer helpers only build and register layers; toggle_from_map() is the
one way to put a layer on the map or take it off.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from loguru import logger

from nautichart.config import MapSettings, settings as default_settings
from nautichart.geo import Bounds, GeoPoint
from nautichart.layers.annotations import annotate_distances
from nautichart.layers.elements import ImageOverlay, Marker, Polygon, Polyline, TileLayer
from nautichart.layers.layer import Layer, LayerKind
from nautichart.layers.parsers.coordinates import (
    CoordinateFile,
    parse_coordinate_file,
    read_coordinate_file,
    read_coordinate_file_async,
)
from nautichart.layers.registry import LayerRegistry
from nautichart.map.engine import HeadlessMapEngine, MapEngine
from nautichart.route.drawing import RouteDrawingStateMachine


class MapController:
    """Layer and route management for one map view.

    Args:
        engine_factory: Creates the map engine on initialize().
        settings: Map settings; the environment-backed defaults if None.
    """

    def __init__(
        self,
        engine_factory: Callable[[], MapEngine] = HeadlessMapEngine,
        settings: MapSettings | None = None,
    ) -> None:
        self._engine_factory = engine_factory
        self.settings = settings or default_settings
        self._engine: MapEngine | None = None
        self.registry = LayerRegistry()
        self.route = RouteDrawingStateMachine(
            self.registry, self.add_polyline, self.settings,
        )

    # -- lifecycle -------------------------------------------------------

    @property
    def engine(self) -> MapEngine | None:
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def initialize(self) -> MapEngine:
        """Create and mount the map. A second call returns the same map."""
        if self._engine is not None:
            return self._engine

        s = self.settings
        engine = self._engine_factory()
        engine.mount(s.container, GeoPoint(s.center_lat, s.center_lng), s.zoom)
        engine.add_tile_layer(
            TileLayer(
                url=s.tile_url,
                attribution=s.tile_attribution,
                class_name=s.tile_class_name,
                min_zoom=s.tile_min_zoom,
            )
        )
        self._engine = engine
        self.registry.attach(engine)
        logger.info(f"Map initialized on '{s.container}' at ({s.center_lat}, {s.center_lng}) zoom {s.zoom}")
        return engine

    def teardown(self) -> None:
        """Destroy the map and release every layer and the drawing session."""
        self.route.cancel()
        engine, self._engine = self._engine, None
        self.registry.detach()
        if engine is not None:
            engine.destroy()
            logger.info("Map destroyed")

    # -- layers ----------------------------------------------------------

    @property
    def layers(self) -> list[Layer]:
        return self.registry.list_layers()

    def create_layer(
        self,
        kind: LayerKind,
        elements: list,
        bounds: Bounds | None = None,
        name: str = "",
    ) -> Layer:
        """Register a new layer built from ``elements``; it is not shown."""
        layer = Layer(kind=kind, elements=list(elements), bounds=bounds, name=name)
        self.registry.register(layer)
        return layer

    def add_markers(self, points: list[GeoPoint]) -> Layer:
        return self.create_layer(
            LayerKind.MARKERS,
            [Marker(p) for p in points],
            Bounds.from_points(points),
            name="Markers",
        )

    def add_polygon(self, points: list[GeoPoint]) -> Layer:
        return self.create_layer(
            LayerKind.POLYGON,
            [Polygon(list(points))],
            Bounds.from_points(points),
            name="Polygon",
        )

    def add_polyline(self, points: list[GeoPoint]) -> Layer:
        """Polyline layer with a distance label on every segment."""
        elements: list = [Polyline(list(points))]
        elements.extend(annotate_distances(points))
        return self.create_layer(
            LayerKind.POLYLINE,
            elements,
            Bounds.from_points(points),
            name="Route",
        )

    def add_overlay(self, bounds: Bounds, image: bytes, filename: str = "") -> Layer:
        s = self.settings
        overlay = ImageOverlay(
            bounds=bounds,
            image=image,
            filename=filename,
            opacity=s.overlay_opacity,
            error_url=s.overlay_error_url,
            alt=s.overlay_alt,
        )
        return self.create_layer(LayerKind.OVERLAY, [overlay], bounds, name=filename or "Overlay")

    def toggle_from_map(self, layer: Layer) -> bool | None:
        """Show a hidden layer or hide a shown one.

        Hiding also drops the layer from the active set; hiding the route
        preview cancels route drawing. Showing fits the view to the
        layer's bounds.

        Returns:
            The new visibility, or None if the map is not initialized.
        """
        if self._engine is None:
            logger.debug(f"No map; toggle of {layer.layer_id} ignored")
            return None
        return self.registry.toggle(layer)

    # -- file import -----------------------------------------------------

    def import_file(
        self,
        filename: str,
        data: bytes,
        *,
        markers: bool = False,
        polygon: bool = False,
        polyline: bool = False,
        overlay: bool = False,
    ) -> list[GeoPoint]:
        """Parse an upload and put the requested layers on the map.

        Every requested builder that applies is used: an overlay when the
        filename carries bounds, and each point builder on the body's
        coordinates. Each new layer is toggled onto the map.

        Returns:
            The coordinates read from the body, in file order.
        """
        return self._apply_upload(
            parse_coordinate_file(filename, data),
            markers=markers, polygon=polygon, polyline=polyline, overlay=overlay,
        )

    def import_path(self, path: str | Path, **builders: bool) -> list[GeoPoint]:
        """import_file() for a file on disk; unreadable files give []."""
        return self._apply_upload(read_coordinate_file(path), **builders)

    async def import_path_async(self, path: str | Path, **builders: bool) -> list[GeoPoint]:
        """import_path() with the read off the event loop.

        If the map is torn down while the file is read, the result is
        still returned but no layers are built.
        """
        upload = await read_coordinate_file_async(path)
        return self._apply_upload(upload, **builders)

    def _apply_upload(
        self,
        upload: CoordinateFile,
        *,
        markers: bool = False,
        polygon: bool = False,
        polyline: bool = False,
        overlay: bool = False,
    ) -> list[GeoPoint]:
        if self._engine is None:
            logger.debug(f"No map; layers from {upload.filename} not built")
            return upload.points

        if overlay and upload.bounds is not None:
            self.toggle_from_map(self.add_overlay(upload.bounds, upload.data, upload.filename))
        if markers:
            self.toggle_from_map(self.add_markers(upload.points))
        if polygon:
            self.toggle_from_map(self.add_polygon(upload.points))
        if polyline:
            self.toggle_from_map(self.add_polyline(upload.points))

        logger.info(
            f"Imported {upload.filename}: {len(upload.points)} points"
            f"{', overlay bounds' if upload.bounds else ''}"
        )
        return upload.points

    # -- route drawing ---------------------------------------------------

    @property
    def is_drawing_route(self) -> bool:
        return self.route.is_drawing

    @property
    def route_points(self) -> list[GeoPoint]:
        return self.route.points

    @property
    def route_status(self) -> str | None:
        return self.route.status_text()

    def start_drawing_route(self) -> bool:
        return self.route.start()

    def finish_drawing_route(self) -> Layer | None:
        return self.route.finish()

    def cancel_drawing_route(self) -> None:
        self.route.cancel()
