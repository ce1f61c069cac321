"""Map engine boundary and the controller that owns it."""

from nautichart.map.engine import ClickSubscription, HeadlessMapEngine, MapEngine

__all__ = ["ClickSubscription", "HeadlessMapEngine", "MapEngine"]
