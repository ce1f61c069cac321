"""Map layer system -- layers, drawable elements, registry, file parsing."""

from nautichart.layers.layer import Layer, LayerKind
from nautichart.layers.registry import LayerRegistry

__all__ = ["Layer", "LayerKind", "LayerRegistry"]
