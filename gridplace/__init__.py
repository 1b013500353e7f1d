"""Deterministic placement of widgets on a fixed-size cell grid."""

from .types import Vector2, Rect2, Widget, Placement, rects_overlap
from .occupancy import OccupancyGrid
from .oplog import PlacementLog, PlacementEvent
from .resolver import (
    DEFAULT_WIDGET_SIZE,
    PlacementResolver,
    Resolution,
    resolve_all,
    PlacementError,
    OversizedWidgetError,
    InvalidWidgetSizeError,
    MissingSizeError,
    NoSpaceAvailableError,
)

__all__ = [
    "Vector2",
    "Rect2",
    "Widget",
    "Placement",
    "rects_overlap",
    "OccupancyGrid",
    "PlacementLog",
    "PlacementEvent",
    "DEFAULT_WIDGET_SIZE",
    "PlacementResolver",
    "Resolution",
    "resolve_all",
    "PlacementError",
    "OversizedWidgetError",
    "InvalidWidgetSizeError",
    "MissingSizeError",
    "NoSpaceAvailableError",
]
