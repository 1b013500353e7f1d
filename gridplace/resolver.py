"""
Three-phase placement resolver.

A pass takes the full, ordered widget list and returns a confirmed position
for every widget such that no two widgets overlap and all lie on the grid:

1. Validate existing placements in input order. A widget whose position is
   on the grid and free is confirmed where it is. Positioned widgets that
   are out of bounds or collide with an earlier confirmation are queued for
   repositioning; widgets without a position are queued as new.
2. Re-place the repositioned queue with the first-fit scan.
3. Place the new queue with the first-fit scan.

Widgets that already had some position get first pick of free space before
widgets that never had one, and within each tier earlier entries win. This
keeps layout changes small for widgets the user has already arranged.

The resolver is pure: widgets are never mutated, and the occupancy grid is
rebuilt from scratch on every call so no state survives between passes.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple
import logging

from .occupancy import OccupancyGrid
from .oplog import PlacementLog
from .types import Placement, PlacementStatus, Vector2, Widget

logger = logging.getLogger("gridplace.resolver")

# Size used by the stock feed and comic widgets
DEFAULT_WIDGET_SIZE = Vector2(5, 4)


# =============================================================================
# Errors
# =============================================================================


class PlacementError(Exception):
    """Base class for failures that abort a resolution pass."""

    def __init__(self, message: str, widget: Optional[Widget] = None):
        super().__init__(message)
        self.widget = widget


class OversizedWidgetError(PlacementError):
    """A widget is larger than the grid on at least one axis."""


class InvalidWidgetSizeError(PlacementError):
    """A widget has a zero or negative size component."""


class MissingSizeError(PlacementError):
    """A widget has no size and no default is configured for its type."""


class NoSpaceAvailableError(PlacementError):
    """The free-space scan found no room for a widget.

    placed holds every placement committed before the failure, in the order
    they were committed, so the caller can decide what to drop.
    """

    def __init__(self, message: str, widget: Widget, placed: Tuple[Placement, ...]):
        super().__init__(message, widget)
        self.placed = placed


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class Resolution:
    """Outcome of one pass: one Placement per input widget, in input order."""

    grid_size: Vector2
    placements: Tuple[Placement, ...]

    def _with_status(self, status: PlacementStatus) -> List[Placement]:
        return [p for p in self.placements if p.status == status]

    @property
    def confirmed(self) -> List[Placement]:
        return self._with_status("CONFIRMED")

    @property
    def repositioned(self) -> List[Placement]:
        return self._with_status("REPOSITIONED")

    @property
    def placed(self) -> List[Placement]:
        return self._with_status("PLACED")

    def positions(self) -> Dict[Hashable, Vector2]:
        """Map widget_id -> resolved position.

        Widget ids are expected to be unique within a pass. With duplicates
        the first placement in input order wins, matching position_of.
        """
        result: Dict[Hashable, Vector2] = {}
        for p in self.placements:
            result.setdefault(p.widget_id, p.position)
        return result

    def position_of(self, widget_id: Hashable) -> Vector2:
        """Position of the first placement with widget_id."""
        for p in self.placements:
            if p.widget_id == widget_id:
                return p.position
        raise KeyError(widget_id)

    def apply(self, widgets: Sequence[Widget]) -> List[Widget]:
        """Write resolved positions and sizes onto copies of the input widgets."""
        if len(widgets) != len(self.placements):
            raise ValueError(
                f"Expected {len(self.placements)} widgets, got {len(widgets)}"
            )
        return [
            w.with_size(p.size).with_position(p.position)
            for w, p in zip(widgets, self.placements)
        ]


# =============================================================================
# Resolver
# =============================================================================


class PlacementResolver:
    """Resolves widget positions on a fixed-size grid.

    Args:
        grid_size: Grid dimensions in cells. Fixed for the resolver's lifetime.
        default_sizes: Size per widget_type for widgets that carry no size
        default_size: Fallback size when widget_type has no entry
    """

    def __init__(
        self,
        grid_size: Vector2,
        default_sizes: Optional[Mapping[str, Vector2]] = None,
        default_size: Optional[Vector2] = None,
    ):
        if grid_size.x <= 0 or grid_size.y <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {grid_size}")
        self.grid_size = grid_size
        self.default_sizes: Dict[str, Vector2] = dict(default_sizes or {})
        self.default_size = default_size

    def new_grid(self) -> OccupancyGrid:
        return OccupancyGrid(self.grid_size)

    def _normalize(self, widget: Widget) -> Vector2:
        """Return the widget's size, filling in defaults and validating it."""
        size = widget.size
        if size is None:
            size = self.default_sizes.get(widget.widget_type, self.default_size)
        if size is None:
            raise MissingSizeError(
                f"Widget {widget.widget_id!r} has no size and no default "
                f"for type {widget.widget_type!r}",
                widget,
            )
        if size.x < 1 or size.y < 1:
            raise InvalidWidgetSizeError(
                f"Widget {widget.widget_id!r} has non-positive size {size}",
                widget,
            )
        if not size.fits_within(self.grid_size):
            raise OversizedWidgetError(
                f"Widget {widget.widget_id!r} of size {size} does not fit "
                f"grid {self.grid_size}",
                widget,
            )
        return size

    def resolve_all(
        self,
        widgets: Sequence[Widget],
        oplog: Optional[PlacementLog] = None,
    ) -> Resolution:
        """Run one resolution pass over widgets.

        Raises:
            OversizedWidgetError, InvalidWidgetSizeError, MissingSizeError:
                before anything is placed; the whole pass is rejected.
            NoSpaceAvailableError: when a widget cannot be fitted.
        """
        try:
            sizes = [self._normalize(w) for w in widgets]
        except PlacementError as e:
            logger.warning(f"Rejected resolution pass: {e}")
            raise

        grid = self.new_grid()
        results: Dict[int, Placement] = {}
        committed: List[Placement] = []
        repositioned: List[int] = []
        new: List[int] = []

        def commit(index: int, placement: Placement) -> None:
            grid.add_widget_rect(placement.rect)
            results[index] = placement
            committed.append(placement)

        # Phase 1: keep every existing position that is still valid
        for i, widget in enumerate(widgets):
            if widget.position is None:
                new.append(i)
                continue
            placement = Placement(
                widget_id=widget.widget_id,
                position=widget.position,
                size=sizes[i],
                status="CONFIRMED",
                previous=widget.position,
            )
            if grid.is_free(placement.rect):
                commit(i, placement)
                logger.debug(f"Confirmed {widget.widget_id!r} at {widget.position}")
                if oplog is not None:
                    oplog.confirm(widget.widget_id, widget.position, sizes[i])
            else:
                repositioned.append(i)

        # Phases 2 and 3: previously positioned widgets pick before new ones
        for indices, status in ((repositioned, "REPOSITIONED"), (new, "PLACED")):
            for i in indices:
                widget = widgets[i]
                rect = grid.find_free(sizes[i])
                if rect is None:
                    logger.warning(
                        f"No space for {widget.widget_id!r} of size {sizes[i]} "
                        f"({grid.occupied_count}/{self.grid_size.area} cells used)"
                    )
                    logger.debug(f"Grid at failure:\n{grid.render()}")
                    raise NoSpaceAvailableError(
                        f"No free {sizes[i]} area for widget {widget.widget_id!r}",
                        widget,
                        tuple(committed),
                    )
                commit(i, Placement(
                    widget_id=widget.widget_id,
                    position=rect.position,
                    size=sizes[i],
                    status=status,
                    previous=widget.position,
                ))
                if status == "REPOSITIONED":
                    logger.debug(
                        f"Repositioned {widget.widget_id!r} "
                        f"{widget.position} -> {rect.position}"
                    )
                    if oplog is not None:
                        oplog.reposition(
                            widget.widget_id, rect.position, sizes[i], widget.position
                        )
                else:
                    logger.debug(f"Placed {widget.widget_id!r} at {rect.position}")
                    if oplog is not None:
                        oplog.place(widget.widget_id, rect.position, sizes[i])

        resolution = Resolution(
            grid_size=self.grid_size,
            placements=tuple(results[i] for i in range(len(widgets))),
        )
        logger.info(
            f"Resolved {len(widgets)} widgets: "
            f"{len(widgets) - len(repositioned) - len(new)} confirmed, "
            f"{len(repositioned)} repositioned, {len(new)} placed"
        )
        return resolution

    # =========================================================================
    # Pre-flight checks
    # =========================================================================

    def occupancy(
        self,
        widgets: Sequence[Widget],
        exclude: Optional[Hashable] = None,
    ) -> OccupancyGrid:
        """Occupancy of the widgets' current positions, without resolving.

        Widgets without a position, without a size, or off the grid are
        left out. Overlapping widgets are all committed.
        """
        grid = self.new_grid()
        for widget in widgets:
            if exclude is not None and widget.widget_id == exclude:
                continue
            rect = widget.rect
            if rect is not None and rect.in_bounds(self.grid_size):
                grid.add_widget_rect(rect)
        return grid

    def can_move(
        self,
        widgets: Sequence[Widget],
        widget_id: Hashable,
        position: Vector2,
    ) -> bool:
        """Check whether widget_id fits at position among the other widgets.

        Used for live drag previews. Raises KeyError for an unknown id.
        """
        widget = next((w for w in widgets if w.widget_id == widget_id), None)
        if widget is None:
            raise KeyError(widget_id)
        size = self._normalize(widget)
        grid = self.occupancy(widgets, exclude=widget_id)
        return grid.is_free(widget.with_size(size).with_position(position).rect)


def resolve_all(
    grid_size: Vector2,
    widgets: Sequence[Widget],
    oplog: Optional[PlacementLog] = None,
    **kwargs,
) -> Resolution:
    """Resolve widgets on a grid of grid_size in a single pass."""
    return PlacementResolver(grid_size, **kwargs).resolve_all(widgets, oplog=oplog)
