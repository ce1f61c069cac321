"""Interactive route drawing."""

from nautichart.route.drawing import DrawingState, RouteDrawingStateMachine

__all__ = ["DrawingState", "RouteDrawingStateMachine"]
