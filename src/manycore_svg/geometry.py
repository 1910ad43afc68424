"""
Geometry constants and the coordinate engine.

Every core/router box in the grid is placed from its (row, column) position
using the constants below. A grid cell ("block") is a core box with its
router box attached to the top-right corner:

           ┌──────┐
           │router│
    ┌──────┼──────┘
    │ core │
    └──────┘

All arithmetic saturates in [0, COORDINATE_MAX] so positions never wrap or
go negative, whatever the grid size.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

SIDE_LENGTH = 100
HALF_SIDE_LENGTH = SIDE_LENGTH // 2
ROUTER_OFFSET = SIDE_LENGTH * 3 // 4
BLOCK_LENGTH = SIDE_LENGTH + ROUTER_OFFSET
BLOCK_DISTANCE = 100
CORE_ROUTER_STROKE_WIDTH = 1

# Text placement inside boxes
OFFSET_FROM_BORDER = 1
FONT_SIZE_WITH_OFFSET = 18
DEFAULT_FONT_SIZE = "16px"
DEFAULT_FONT_FAMILY = "Roboto Mono"

COORDINATE_MAX = 2**31 - 1


def _clamp(value: int) -> int:
    return max(0, min(value, COORDINATE_MAX))


def saturating_add(a: int, b: int) -> int:
    """Add two coordinates, clamping instead of overflowing."""
    return _clamp(a + b)


def saturating_sub(a: int, b: int) -> int:
    """Subtract two coordinates, clamping at zero."""
    return _clamp(a - b)


def saturating_mul(a: int, b: int) -> int:
    """Multiply two coordinates, clamping instead of overflowing."""
    return _clamp(a * b)


class ElementKind(Enum):
    """Kind of box in a grid cell."""

    CORE = "core"
    ROUTER = "router"

    @property
    def text_anchor(self) -> str:
        """SVG text-anchor used for overlay text on this kind of box."""
        return "start" if self is ElementKind.CORE else "end"


@dataclass(frozen=True)
class GridPosition:
    """
    Position of a core in the grid.

    Attributes:
        row: Row index (0-based from top).
        column: Column index (0-based from left).
    """

    row: int
    column: int

    @classmethod
    def from_index(cls, index: int, columns: int) -> "GridPosition":
        """Derive the position of the core at a linear index."""
        row, column = divmod(index, columns)
        return cls(row=row, column=column)

    def to_index(self, columns: int) -> int:
        """Linear index of this position in a grid with `columns` columns."""
        return self.row * columns + self.column


def core_coordinates(row: int, column: int) -> Tuple[int, int]:
    """
    Top-left coordinate of the core box at (row, column).

    The core sits ROUTER_OFFSET below the block's top edge to leave room for
    its router.
    """
    step = BLOCK_LENGTH + BLOCK_DISTANCE
    x = saturating_add(saturating_mul(column, step), CORE_ROUTER_STROKE_WIDTH)
    y = saturating_add(
        saturating_add(saturating_mul(row, step), ROUTER_OFFSET),
        CORE_ROUTER_STROKE_WIDTH,
    )
    return x, y


def router_coordinates(row: int, column: int) -> Tuple[int, int]:
    """Top-left coordinate of the router box at (row, column)."""
    core_x, core_y = core_coordinates(row, column)
    return (
        saturating_add(core_x, SIDE_LENGTH),
        saturating_sub(core_y, ROUTER_OFFSET),
    )


def element_coordinates(position: GridPosition, kind: ElementKind) -> Tuple[int, int]:
    """Top-left coordinate of a core or router box."""
    if kind is ElementKind.CORE:
        return core_coordinates(position.row, position.column)
    return router_coordinates(position.row, position.column)


def grid_dimensions(rows: int, columns: int) -> Tuple[int, int]:
    """
    Width and height of the drawn grid, strokes included.

    Args:
        rows: Number of rows in the grid.
        columns: Number of columns in the grid.

    Returns:
        Tuple of (width, height) in pixels.
    """
    width = saturating_add(
        saturating_add(
            saturating_mul(columns, BLOCK_LENGTH),
            saturating_mul(saturating_sub(columns, 1), BLOCK_DISTANCE),
        ),
        saturating_mul(CORE_ROUTER_STROKE_WIDTH, 2),
    )
    height = saturating_add(
        saturating_add(
            saturating_mul(rows, BLOCK_LENGTH),
            saturating_mul(saturating_sub(rows, 1), BLOCK_DISTANCE),
        ),
        saturating_mul(CORE_ROUTER_STROKE_WIDTH, 2),
    )
    return width, height
