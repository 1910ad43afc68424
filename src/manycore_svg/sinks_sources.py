"""
Sinks and sources drawn around the grid border.

Border routers can connect to a sink (data leaves the system) or a source
(data enters the system). Each border link is drawn as a short arrow between
the router and a small box beyond the grid edge. The whole group is hidden by
the minimal stylesheet and shown by the extended one.
"""

import xml.etree.ElementTree as ET
from typing import List

from .connections import (
    CONNECTION_STROKE_WIDTH,
    MARKER_REFERENCE,
    border_endpoints,
    connection_id,
)
from .geometry import GridPosition
from .models import BorderType, Direction
from .style import SINK_SOURCE_CLASS_NAME, SINKS_SOURCES_GROUP_ID

SINK_SOURCE_SIDE = 50


def edge_directions(position: GridPosition, rows: int, columns: int) -> List[Direction]:
    """Directions in which a cell sits on the grid border."""
    directions = []
    if position.row == 0:
        directions.append(Direction.NORTH)
    if position.column == columns - 1:
        directions.append(Direction.EAST)
    if position.row == rows - 1:
        directions.append(Direction.SOUTH)
    if position.column == 0:
        directions.append(Direction.WEST)
    return directions


class SinksSourcesGroup:
    """Border link arrows and sink/source boxes."""

    def __init__(self, rows: int, columns: int):
        self.rows = rows
        self.columns = columns
        self._elements: List[ET.Element] = []

    def __len__(self) -> int:
        return len(self._elements) // 2

    def insert(
        self,
        core_id: int,
        position: GridPosition,
        direction: Direction,
        border_type: BorderType,
    ) -> None:
        """Add the decoration for one border link of a router."""
        start, end = border_endpoints(position, direction, border_type)
        box_x, box_y = end if border_type is BorderType.SINK else start
        box_half = SINK_SOURCE_SIDE // 2

        # Box sits beyond the link, centred on it
        if direction is Direction.NORTH:
            box_origin = (box_x - box_half, box_y - SINK_SOURCE_SIDE)
        elif direction is Direction.SOUTH:
            box_origin = (box_x - box_half, box_y)
        elif direction is Direction.EAST:
            box_origin = (box_x, box_y - box_half)
        else:
            box_origin = (box_x - SINK_SOURCE_SIDE, box_y - box_half)

        self._elements.append(
            ET.Element(
                "path",
                {
                    "id": connection_id(core_id, direction),
                    "d": f"M{start[0]},{start[1]} L{end[0]},{end[1]}",
                    "stroke": "black",
                    "stroke-width": str(CONNECTION_STROKE_WIDTH),
                    "marker-end": MARKER_REFERENCE,
                },
            )
        )
        self._elements.append(
            ET.Element(
                "rect",
                {
                    "id": f"{border_type.value.lower()}{core_id}{direction.value}",
                    "class": SINK_SOURCE_CLASS_NAME,
                    "x": str(box_origin[0]),
                    "y": str(box_origin[1]),
                    "width": str(SINK_SOURCE_SIDE),
                    "height": str(SINK_SOURCE_SIDE),
                },
            )
        )

    def to_element(self) -> ET.Element:
        group = ET.Element("g", {"id": SINKS_SOURCES_GROUP_ID})
        group.extend(self._elements)
        return group
