"""Tests for MapController -- lifecycle, layer helpers, toggle and file import."""

import asyncio
from unittest.mock import MagicMock

import pytest

from nautichart.config import MapSettings
from nautichart.geo import Bounds, GeoPoint
from nautichart.layers.elements import DistanceLabel, ImageOverlay, Marker, Polygon, Polyline
from nautichart.layers.layer import LayerKind
from nautichart.map.controller import MapController
from nautichart.map.engine import HeadlessMapEngine

POINTS = [GeoPoint(-22.8, -43.0), GeoPoint(-22.9, -43.1), GeoPoint(-23.0, -43.05)]
OVERLAY_NAME = "-23.0_-43.5_-22.5_-43.0.txt"
OVERLAY_BOUNDS = Bounds(GeoPoint(-23.0, -43.5), GeoPoint(-22.5, -43.0))


@pytest.fixture
def controller():
    c = MapController()
    c.initialize()
    return c


@pytest.fixture
def engine(controller):
    return controller.engine


class TestLifecycle:
    """initialize/teardown own the single map instance."""

    def test_initialize_mounts_map(self):
        c = MapController()
        assert not c.is_initialized
        engine = c.initialize()
        assert c.is_initialized
        assert engine.container == "map"
        assert engine.center == GeoPoint(-22.8, -43.0)
        assert engine.zoom == 11

    def test_initialize_adds_base_imagery(self, engine):
        (tile,) = engine.tile_layers
        assert "World_Imagery" in tile.url
        assert tile.min_zoom == 2
        assert tile.class_name == "map-tiles"

    def test_initialize_is_idempotent(self):
        factory = MagicMock(side_effect=HeadlessMapEngine)
        c = MapController(engine_factory=factory)
        first = c.initialize()
        second = c.initialize()
        assert first is second
        assert factory.call_count == 1
        assert len(first.tile_layers) == 1

    def test_custom_settings(self):
        s = MapSettings(container="chart", center_lat=10.0, center_lng=20.0, zoom=5)
        engine = MapController(settings=s).initialize()
        assert engine.container == "chart"
        assert engine.center == GeoPoint(10.0, 20.0)
        assert engine.zoom == 5

    def test_teardown_without_initialize(self):
        c = MapController()
        c.teardown()
        c.teardown()
        assert not c.is_initialized

    def test_teardown_destroys_once(self):
        engine = MagicMock()
        c = MapController(engine_factory=lambda: engine)
        c.initialize()
        c.teardown()
        c.teardown()
        engine.destroy.assert_called_once_with()

    def test_teardown_releases_layers_and_drawing(self, controller, engine):
        controller.toggle_from_map(controller.add_markers(POINTS))
        controller.start_drawing_route()
        engine.click(POINTS[0])
        controller.teardown()
        assert controller.layers == []
        assert not controller.is_drawing_route
        assert controller.engine is None
        assert engine.destroyed

    def test_reinitialize_after_teardown(self, controller):
        old = controller.engine
        controller.teardown()
        new = controller.initialize()
        assert new is not old
        assert controller.registry.engine is new


class TestLayerHelpers:
    """add_* build and register layers without showing them."""

    def test_add_markers(self, controller, engine):
        layer = controller.add_markers(POINTS)
        assert layer.kind is LayerKind.MARKERS
        assert [m.point for m in layer.elements] == POINTS
        assert all(isinstance(m, Marker) for m in layer.elements)
        assert layer.bounds == Bounds.from_points(POINTS)
        assert controller.layers == [layer]
        assert engine.elements == []

    def test_add_polygon(self, controller):
        layer = controller.add_polygon(POINTS)
        (polygon,) = layer.elements
        assert isinstance(polygon, Polygon)
        assert polygon.points == POINTS
        assert layer.kind is LayerKind.POLYGON

    def test_add_polyline_has_labels(self, controller):
        layer = controller.add_polyline(POINTS)
        assert layer.kind is LayerKind.POLYLINE
        assert isinstance(layer.elements[0], Polyline)
        assert len(layer.labels) == 2
        assert all(isinstance(e, DistanceLabel) for e in layer.elements[1:])

    def test_add_polyline_single_point_has_no_labels(self, controller):
        assert controller.add_polyline(POINTS[:1]).labels == []

    def test_add_overlay(self, controller):
        layer = controller.add_overlay(OVERLAY_BOUNDS, b"jpeg-bytes", "chart.jpg")
        (overlay,) = layer.elements
        assert isinstance(overlay, ImageOverlay)
        assert overlay.opacity == pytest.approx(0.6)
        assert overlay.alt == "Overlay image"
        assert overlay.url.startswith("data:image/jpeg;base64,")
        assert layer.bounds == OVERLAY_BOUNDS
        assert layer.kind is LayerKind.OVERLAY

    def test_helpers_work_before_initialize(self):
        c = MapController()
        layer = c.add_markers(POINTS)
        assert c.layers == [layer]

    def test_empty_points(self, controller):
        layer = controller.add_markers([])
        assert layer.elements == []
        assert layer.bounds is None


class TestToggleFromMap:
    """The single entry point for showing and hiding."""

    def test_show_fits_viewport(self, controller, engine):
        layer = controller.add_polyline(POINTS)
        assert controller.toggle_from_map(layer) is True
        assert engine.elements == layer.elements
        assert engine.fitted == [layer.bounds]

    def test_hide_removes_from_active_set(self, controller, engine):
        layer = controller.add_markers(POINTS)
        controller.toggle_from_map(layer)
        assert controller.toggle_from_map(layer) is False
        assert engine.elements == []
        assert layer not in controller.layers

    def test_two_toggles_restore_visibility(self, controller):
        layer = controller.add_polygon(POINTS)
        controller.toggle_from_map(layer)
        before = controller.registry.is_shown(layer)
        controller.toggle_from_map(layer)
        controller.toggle_from_map(layer)
        assert controller.registry.is_shown(layer) == before

    def test_toggle_before_initialize_is_noop(self):
        c = MapController()
        layer = c.add_markers(POINTS)
        assert c.toggle_from_map(layer) is None
        assert c.layers == [layer]

    def test_toggle_after_teardown_is_noop(self, controller):
        layer = controller.add_markers(POINTS)
        controller.teardown()
        assert controller.toggle_from_map(layer) is None


class TestImportFile:
    """Uploads feed whichever builders were requested."""

    def test_markers_from_upload(self, controller, engine):
        points = controller.import_file("r.txt", b"-22.8 -43.0\nbad\n-22.9 -43.1\n", markers=True)
        assert points == POINTS[:2]
        (layer,) = controller.layers
        assert layer.kind is LayerKind.MARKERS
        assert controller.registry.is_shown(layer)
        assert len(engine.elements) == 2

    def test_all_builders(self, controller):
        data = b"-22.8 -43.0\n-22.9 -43.1\n"
        controller.import_file(
            OVERLAY_NAME, data, markers=True, polygon=True, polyline=True, overlay=True,
        )
        kinds = [layer.kind for layer in controller.layers]
        assert kinds == [LayerKind.OVERLAY, LayerKind.MARKERS, LayerKind.POLYGON, LayerKind.POLYLINE]
        assert all(controller.registry.is_shown(layer) for layer in controller.layers)

    def test_overlay_needs_bounds(self, controller):
        controller.import_file("chart.png", b"\x89PNG\x00", overlay=True)
        assert controller.layers == []

    def test_overlay_keeps_image_bytes(self, controller):
        data = b"\xff\xd8\xff\xe0"
        controller.import_file("-23.0_-43.5_-22.5_-43.0.jpg", data, overlay=True)
        (layer,) = controller.layers
        assert layer.elements[0].image == data
        assert layer.bounds == OVERLAY_BOUNDS

    def test_no_builders_only_parses(self, controller):
        points = controller.import_file("r.txt", b"1 2\n")
        assert points == [GeoPoint(1.0, 2.0)]
        assert controller.layers == []

    def test_import_without_map_returns_points(self):
        c = MapController()
        points = c.import_file("r.txt", b"1 2\n", markers=True)
        assert points == [GeoPoint(1.0, 2.0)]
        assert c.layers == []

    def test_import_path(self, controller, tmp_path):
        path = tmp_path / "route.txt"
        path.write_text("-22.8 -43.0\r\n-22.9 -43.1\r\n")
        points = controller.import_path(path, polyline=True)
        assert points == POINTS[:2]
        assert len(controller.layers[0].labels) == 1

    def test_import_unreadable_path(self, controller, tmp_path):
        assert controller.import_path(tmp_path / "missing.txt", markers=True) == []

    def test_import_path_async(self, controller, tmp_path):
        path = tmp_path / "route.txt"
        path.write_text("-22.8 -43.0\n")
        points = asyncio.run(controller.import_path_async(path, markers=True))
        assert points == POINTS[:1]
        assert len(controller.layers) == 1

    def test_async_result_after_teardown_is_noop(self, controller, tmp_path):
        path = tmp_path / "route.txt"
        path.write_text("-22.8 -43.0\n")

        async def run():
            task = asyncio.ensure_future(controller.import_path_async(path, markers=True))
            controller.teardown()
            return await task

        assert asyncio.run(run()) == POINTS[:1]
        assert controller.layers == []


class TestRouteApi:
    """Route drawing exposed on the controller."""

    def test_draw_route(self, controller, engine):
        assert controller.start_drawing_route() is True
        assert controller.is_drawing_route
        engine.click(POINTS[0])
        engine.click(POINTS[1])
        assert controller.route_points == POINTS[:2]
        assert controller.route_status.startswith("2 points")
        layer = controller.finish_drawing_route()
        assert layer in controller.layers
        assert not controller.is_drawing_route
        assert controller.route_status is None

    def test_cancel_route(self, controller, engine):
        controller.start_drawing_route()
        engine.click(POINTS[0])
        controller.cancel_drawing_route()
        assert controller.route_points == []
        assert controller.finish_drawing_route() is None
