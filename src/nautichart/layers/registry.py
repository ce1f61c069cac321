"""LayerRegistry -- the set of active map layers.

Tracks which layers exist (the active set, in creation order) and which
of them are on the map (the shown set). Showing and hiding add and remove
a layer's elements through the map engine; visibility is derived only
from shown-set membership.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from nautichart.layers.layer import Layer

if TYPE_CHECKING:
    from nautichart.map.engine import MapEngine

HideListener = Callable[[Layer], None]


class LayerRegistry:
    """Registry of active map layers."""

    def __init__(self, engine: MapEngine | None = None) -> None:
        self._engine = engine
        self._layers: dict[str, Layer] = {}
        self._shown: set[str] = set()
        self._hide_listeners: list[HideListener] = []

    # -- engine ----------------------------------------------------------

    @property
    def engine(self) -> MapEngine | None:
        return self._engine

    def attach(self, engine: MapEngine) -> None:
        """Bind the registry to a live map."""
        self._engine = engine

    def detach(self) -> None:
        """Forget every layer and drop the map reference.

        Elements are not removed one by one; the map is about to be
        destroyed along with them.
        """
        self._layers.clear()
        self._shown.clear()
        self._engine = None

    # -- active set ------------------------------------------------------

    def register(self, layer: Layer) -> str:
        """Add a layer to the active set without showing it.

        Returns:
            The layer_id of the added layer.
        """
        self._layers[layer.layer_id] = layer
        return layer.layer_id

    def get_layer(self, layer_id: str) -> Layer | None:
        return self._layers.get(layer_id)

    def list_layers(self) -> list[Layer]:
        """All active layers, oldest first."""
        return list(self._layers.values())

    def __contains__(self, layer: Layer) -> bool:
        return self._layers.get(layer.layer_id) is layer

    def __len__(self) -> int:
        return len(self._layers)

    # -- visibility ------------------------------------------------------

    def is_shown(self, layer: Layer) -> bool:
        return layer.layer_id in self._shown

    def add_hide_listener(self, listener: HideListener) -> None:
        """Call ``listener(layer)`` after any layer is taken off the map."""
        self._hide_listeners.append(listener)

    def show(self, layer: Layer, fit: bool = True) -> bool:
        """Put a layer on the map and make sure it is in the active set.

        Args:
            layer: The layer to show.
            fit: Fit the viewport to the layer's bounds, if it has any.

        Returns:
            True if the layer is now shown, False if there is no map.
        """
        engine = self._engine
        if engine is None:
            logger.debug(f"No map; cannot show {layer.layer_id}")
            return False
        if layer.layer_id in self._shown:
            return True

        for element in layer.elements:
            engine.add_element(element)
        self._shown.add(layer.layer_id)
        self._layers[layer.layer_id] = layer

        if fit and layer.bounds is not None:
            engine.fit_bounds(layer.bounds)
        logger.debug(f"Showing {layer.kind.value} layer {layer.layer_id}")
        return True

    def hide(self, layer: Layer) -> bool:
        """Take a layer off the map and out of the active set.

        Returns:
            True if the layer was shown and is now hidden, False otherwise.
        """
        engine = self._engine
        if engine is None or layer.layer_id not in self._shown:
            return False

        for element in layer.elements:
            engine.remove_element(element)
        self._shown.discard(layer.layer_id)
        self._layers.pop(layer.layer_id, None)
        logger.debug(f"Hid {layer.kind.value} layer {layer.layer_id}")

        for listener in list(self._hide_listeners):
            listener(layer)
        return True

    def toggle(self, layer: Layer) -> bool | None:
        """Hide the layer if it is shown, otherwise show it.

        Returns:
            The new visibility, or None if there is no map.
        """
        if self._engine is None:
            return None
        if self.is_shown(layer):
            self.hide(layer)
            return False
        return self.show(layer)

    def remove(self, layer: Layer) -> bool:
        """Drop a layer from the registry, taking it off the map if shown.

        Returns:
            True if the layer was in the active set or on the map.
        """
        hidden = self.hide(layer)
        return self._layers.pop(layer.layer_id, None) is not None or hidden
