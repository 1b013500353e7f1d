"""
Per-cell occupancy cache for one resolution pass.

Collision checks against the cache cost O(cells in rect) instead of a
pairwise test against every placed widget, which matters because the
free-space scan issues one query per candidate cell.
"""

from typing import Iterable, List, Optional, Tuple

from .types import Rect2, Vector2


class OccupancyGrid:
    """Boolean occupancy over a fixed-size grid, indexed [y][x].

    A cell is occupied iff it lies inside a rect committed with
    add_widget_rect. Cells outside the grid are never occupied.
    """

    def __init__(self, size: Vector2):
        if size.x <= 0 or size.y <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {size}")
        self.size = size
        self._cells: List[List[bool]] = [
            [False] * size.x for _ in range(size.y)
        ]
        self._occupied = 0

    @classmethod
    def from_rects(cls, size: Vector2, rects: Iterable[Rect2]) -> "OccupancyGrid":
        grid = cls(size)
        for rect in rects:
            grid.add_widget_rect(rect)
        return grid

    @property
    def occupied_count(self) -> int:
        return self._occupied

    def _clip(self, rect: Rect2) -> Tuple[int, int, int, int]:
        """Return the in-bounds (x0, y0, x1, y1) span of rect."""
        return (
            max(rect.left, 0),
            max(rect.top, 0),
            min(rect.right, self.size.x),
            min(rect.bottom, self.size.y),
        )

    def has_widget(self, rect: Rect2) -> bool:
        """Check whether any cell covered by rect is occupied."""
        x0, y0, x1, y1 = self._clip(rect)
        for y in range(y0, y1):
            row = self._cells[y]
            for x in range(x0, x1):
                if row[x]:
                    return True
        return False

    def add_widget_rect(self, rect: Rect2) -> None:
        """Mark every in-bounds cell covered by rect as occupied."""
        x0, y0, x1, y1 = self._clip(rect)
        for y in range(y0, y1):
            row = self._cells[y]
            for x in range(x0, x1):
                if not row[x]:
                    row[x] = True
                    self._occupied += 1

    def is_free(self, rect: Rect2) -> bool:
        """Check whether a widget could be committed at rect."""
        return rect.in_bounds(self.size) and not self.has_widget(rect)

    def find_free(self, size: Vector2) -> Optional[Rect2]:
        """First-fit scan for a free rect of the given size.

        Candidates are visited top to bottom, then left to right. Returns
        None when no candidate is free or the size exceeds the grid.
        """
        origin = Rect2(position=Vector2(0, 0), size=size)
        for y in range(self.size.y - size.y + 1):
            for x in range(self.size.x - size.x + 1):
                candidate = origin.moved_to(Vector2(x, y))
                if not self.has_widget(candidate):
                    return candidate
        return None

    def render(self) -> str:
        """Text picture of the grid: '#' occupied, '.' free."""
        return "\n".join(
            "".join("#" if cell else "." for cell in row) for row in self._cells
        )

    def __repr__(self) -> str:
        return (
            f"OccupancyGrid(size={self.size}, "
            f"occupied={self._occupied}/{self.size.area})"
        )
