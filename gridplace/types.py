"""
Core data types for grid placement.

All types are immutable. A resolution pass never mutates the widgets it is
given; it returns Placement records that the caller writes back.
"""

from dataclasses import dataclass
from typing import Hashable, Iterator, Literal, Optional


@dataclass(frozen=True)
class Vector2:
    """Integer 2D vector: a cell coordinate or a cell-count size."""

    x: int
    y: int

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(x=self.x + other.x, y=self.y + other.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    @property
    def area(self) -> int:
        return self.x * self.y

    def fits_within(self, other: "Vector2") -> bool:
        return self.x <= other.x and self.y <= other.y


@dataclass(frozen=True)
class Rect2:
    """Axis-aligned rectangle of grid cells.

    Covers the half-open cell ranges [x, x + w) on the x axis and
    [y, y + h) on the y axis.
    """

    position: Vector2
    size: Vector2

    @classmethod
    def from_xywh(cls, x: int, y: int, w: int, h: int) -> "Rect2":
        return cls(position=Vector2(x, y), size=Vector2(w, h))

    @property
    def left(self) -> int:
        return self.position.x

    @property
    def top(self) -> int:
        return self.position.y

    @property
    def right(self) -> int:
        return self.position.x + self.size.x

    @property
    def bottom(self) -> int:
        return self.position.y + self.size.y

    @property
    def area(self) -> int:
        return self.size.area

    def __str__(self) -> str:
        return f"{self.position}+{self.size}"

    def moved_to(self, position: Vector2) -> "Rect2":
        return Rect2(position=position, size=self.size)

    def overlaps(self, other: "Rect2") -> bool:
        """Check whether the two cell sets share at least one cell.

        Rectangles that only touch along an edge do not overlap.
        """
        return _spans_overlap(
            self.left, self.size.x, other.left, other.size.x
        ) and _spans_overlap(self.top, self.size.y, other.top, other.size.y)

    def in_bounds(self, grid: Vector2) -> bool:
        """Check whether every cell lies inside a grid of the given size."""
        return (
            self.left >= 0
            and self.top >= 0
            and self.right <= grid.x
            and self.bottom <= grid.y
        )

    def cells(self) -> Iterator[Vector2]:
        """Iterate covered cells row by row."""
        for y in range(self.top, self.bottom):
            for x in range(self.left, self.right):
                yield Vector2(x, y)


def _spans_overlap(a_pos: int, a_len: int, b_pos: int, b_len: int) -> bool:
    return a_pos <= b_pos < a_pos + a_len or b_pos <= a_pos < b_pos + b_len


def rects_overlap(a: Rect2, b: Rect2) -> bool:
    """Check if two rectangles share a cell."""
    return a.overlaps(b)


@dataclass(frozen=True)
class Widget:
    """A widget as supplied by the UI layer.

    widget_id is opaque to the resolver; it is only carried through to the
    resulting Placement so the caller can match results to its own records.
    A position of None means the widget has never been placed. A size of
    None is filled in from the resolver's defaults for widget_type.
    """

    widget_id: Hashable
    size: Optional[Vector2]
    position: Optional[Vector2] = None
    widget_type: str = ""

    @property
    def rect(self) -> Optional[Rect2]:
        if self.position is None or self.size is None:
            return None
        return Rect2(position=self.position, size=self.size)

    def with_position(self, position: Optional[Vector2]) -> "Widget":
        return Widget(
            widget_id=self.widget_id,
            size=self.size,
            position=position,
            widget_type=self.widget_type,
        )

    def with_size(self, size: Optional[Vector2]) -> "Widget":
        return Widget(
            widget_id=self.widget_id,
            size=size,
            position=self.position,
            widget_type=self.widget_type,
        )


# CONFIRMED: kept at its existing position
# REPOSITIONED: had a position that was out of bounds or conflicting
# PLACED: had no position
PlacementStatus = Literal["CONFIRMED", "REPOSITIONED", "PLACED"]


@dataclass(frozen=True)
class Placement:
    """Resolved position of one widget after a pass."""

    widget_id: Hashable
    position: Vector2
    size: Vector2
    status: PlacementStatus
    previous: Optional[Vector2] = None

    @property
    def rect(self) -> Rect2:
        return Rect2(position=self.position, size=self.size)

    @property
    def moved(self) -> bool:
        return self.position != self.previous
