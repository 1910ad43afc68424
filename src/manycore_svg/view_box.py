"""
Viewport of the rendered canvas.
"""

from .geometry import BLOCK_DISTANCE

# Room around the grid for sinks/sources decorations
EDGE_EXTENSION = BLOCK_DISTANCE


class ViewBox:
    """
    The SVG viewBox: top-left corner plus extent.

    Attributes:
        x: Minimum x.
        y: Minimum y.
        width: Visible width.
        height: Visible height.
    """

    def __init__(self, width: int, height: int):
        self.reset(width, height)

    def reset(self, width: int, height: int) -> None:
        """Return to the grid's base extent."""
        self.x = 0
        self.y = 0
        self.width = width
        self.height = height

    def insert_edges(self) -> None:
        """Grow on every side to make room for border decorations."""
        self.x -= EDGE_EXTENSION
        self.y -= EDGE_EXTENSION
        self.width += 2 * EDGE_EXTENSION
        self.height += 2 * EDGE_EXTENSION

    def __str__(self) -> str:
        return f"{self.x} {self.y} {self.width} {self.height}"
