"""
Hypothesis strategies for generating grids and widget lists.

Widgets are kept small relative to the grid so that most generated lists can
be fully placed; tests that need a complete pass discard the rare list the
first-fit scan cannot pack.
"""

from hypothesis import strategies as st
from hypothesis.strategies import composite

from ..types import Rect2, Vector2, Widget


# ═══════════════════════════════════════════════════════════════════════════════
# Primitive Strategies
# ═══════════════════════════════════════════════════════════════════════════════


@composite
def vector_strategy(draw, min_val: int = 0, max_val: int = 15):
    x = draw(st.integers(min_value=min_val, max_value=max_val))
    y = draw(st.integers(min_value=min_val, max_value=max_val))
    return Vector2(x, y)


@composite
def grid_size_strategy(draw, min_val: int = 8, max_val: int = 16):
    return draw(vector_strategy(min_val=min_val, max_val=max_val))


@composite
def rect_strategy(draw, min_pos: int = -4, max_pos: int = 16, max_size: int = 6):
    """Generate a Rect2 that may partly or fully leave a 16x16 grid."""
    position = draw(vector_strategy(min_val=min_pos, max_val=max_pos))
    size = draw(vector_strategy(min_val=1, max_val=max_size))
    return Rect2(position=position, size=size)


# ═══════════════════════════════════════════════════════════════════════════════
# Widget Strategies
# ═══════════════════════════════════════════════════════════════════════════════


@composite
def widget_strategy(draw, widget_id, grid: Vector2, max_size: int = 3):
    """Generate a widget with an optional, possibly off-grid, position."""
    size = draw(vector_strategy(min_val=1, max_val=max_size))
    position = draw(
        st.one_of(
            st.none(),
            vector_strategy(min_val=-2, max_val=max(grid.x, grid.y)),
        )
    )
    return Widget(widget_id=widget_id, size=size, position=position)


@composite
def layout_strategy(draw, min_widgets: int = 0, max_widgets: int = 8):
    """Generate (grid_size, widgets) with unique widget ids."""
    grid = draw(grid_size_strategy())
    n = draw(st.integers(min_value=min_widgets, max_value=max_widgets))
    widgets = [draw(widget_strategy(f"w{i}", grid)) for i in range(n)]
    return grid, widgets
