"""
Connection topology between cores.

Uses networkx for:
- Directed link graph (core -> neighbour, core -> sink, source -> core)
- Hop validation when routing

Every core gets one output link per in-grid neighbour. The per-core map of
(direction, input/output) -> ConnectionType is kept so overlay generation can
find the SVG path drawn for a link.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

import networkx as nx

from .errors import ConnectionNotFoundError
from .geometry import ROUTER_OFFSET, GridPosition, router_coordinates
from .models import BorderType, Direction

Point = Tuple[int, int]

# Distance of a link from the router centre line, so that the two links
# between a pair of routers do not overlap
CHANNEL_SEPARATION = 10
# Length of a link between a border router and its sink or source box
BORDER_LINK_LENGTH = 40
MARKER_REFERENCE = "url(#arrowHead)"
CONNECTION_STROKE_WIDTH = 1
CONNECTIONS_GROUP_ID = "connectionsGroup"


class ConnectionKind(Enum):
    """Whether a link leaves or enters a core."""

    OUTPUT = "Output"
    INPUT = "Input"


@dataclass(frozen=True)
class DirectionType:
    """A link on a core, identified by its direction and kind."""

    direction: Direction
    kind: ConnectionKind

    def __str__(self) -> str:
        return f"{self.kind.value} {self.direction.value}"


@dataclass(frozen=True)
class ConnectionType:
    """
    A drawn link.

    Attributes:
        path_id: Id of the SVG path element for this link.
        start: Point the arrow leaves.
        end: Point the arrow enters.
        is_edge: True for links to sinks or from sources.
    """

    path_id: str
    start: Point
    end: Point
    is_edge: bool = False


def connection_id(core_id: int, direction: Direction) -> str:
    """Id of the path leaving core_id in direction."""
    return f"connection{core_id}{direction.value}"


def border_node(core_id: int, direction: Direction) -> Tuple[str, int, Direction]:
    """Graph node for the sink or source beyond a border router."""
    return ("border", core_id, direction)


def channel_endpoints(
    position: GridPosition, direction: Direction
) -> Tuple[Point, Point]:
    """
    Start and end point of the link leaving a router in direction.

    The link starts at the router's border and ends at the facing border of
    the neighbouring router.
    """
    x, y = router_coordinates(position.row, position.column)
    row_delta, column_delta = direction.delta
    next_x, next_y = router_coordinates(
        position.row + row_delta, position.column + column_delta
    )
    half = ROUTER_OFFSET // 2

    if direction is Direction.EAST:
        line_y = y + half - CHANNEL_SEPARATION
        return (x + ROUTER_OFFSET, line_y), (next_x, line_y)
    if direction is Direction.WEST:
        line_y = y + half + CHANNEL_SEPARATION
        return (x, line_y), (next_x + ROUTER_OFFSET, line_y)
    if direction is Direction.SOUTH:
        line_x = x + half + CHANNEL_SEPARATION
        return (line_x, y + ROUTER_OFFSET), (line_x, next_y)
    line_x = x + half - CHANNEL_SEPARATION
    return (line_x, y), (line_x, next_y + ROUTER_OFFSET)


def border_endpoints(
    position: GridPosition, direction: Direction, border_type: BorderType
) -> Tuple[Point, Point]:
    """
    Start and end point of the link between a border router and its box.

    Sink links leave the router, source links enter it. Points beyond the
    grid edge can be negative.
    """
    x, y = router_coordinates(position.row, position.column)
    half = ROUTER_OFFSET // 2

    if direction is Direction.NORTH:
        router_point = (x + half, y)
    elif direction is Direction.SOUTH:
        router_point = (x + half, y + ROUTER_OFFSET)
    elif direction is Direction.EAST:
        router_point = (x + ROUTER_OFFSET, y + half)
    else:
        router_point = (x, y + half)

    row_delta, column_delta = direction.delta
    box_point = (
        router_point[0] + column_delta * BORDER_LINK_LENGTH,
        router_point[1] + row_delta * BORDER_LINK_LENGTH,
    )

    if border_type is BorderType.SINK:
        return router_point, box_point
    return box_point, router_point


class ConnectionsGroup:
    """
    Links between cores and the SVG paths that draw them.

    Attributes:
        graph: Directed link graph. Nodes are core ids and border nodes.
        core_connections_map: Core id -> {DirectionType: ConnectionType}.
        paths: Every core-to-core link, in insertion order.
    """

    def __init__(self):
        self.graph: nx.DiGraph = nx.DiGraph()
        self.core_connections_map: Dict[int, Dict[DirectionType, ConnectionType]] = {}
        self.paths: List[ConnectionType] = []

    def add_connections(
        self, core_id: int, position: GridPosition, rows: int, columns: int
    ) -> None:
        """
        Add the output links of a core to every in-grid neighbour.

        The matching input entries are registered on the neighbour so both
        ends of a link can look it up.
        """
        self.graph.add_node(core_id)

        for direction in Direction:
            row_delta, column_delta = direction.delta
            row = position.row + row_delta
            column = position.column + column_delta
            if not (0 <= row < rows and 0 <= column < columns):
                continue

            neighbour_id = GridPosition(row, column).to_index(columns)
            path_id = connection_id(core_id, direction)
            start, end = channel_endpoints(position, direction)
            connection = ConnectionType(path_id, start, end)

            self.graph.add_edge(core_id, neighbour_id, direction=direction, id=path_id)
            self._register(
                core_id, DirectionType(direction, ConnectionKind.OUTPUT), connection
            )
            self._register(
                neighbour_id,
                DirectionType(direction.opposite, ConnectionKind.INPUT),
                connection,
            )
            self.paths.append(connection)

    def add_border_connection(
        self,
        core_id: int,
        position: GridPosition,
        direction: Direction,
        border_type: BorderType,
    ) -> ConnectionType:
        """
        Register the link between a border router and its sink or source.

        The path itself is drawn with the sinks/sources decorations.
        """
        node = border_node(core_id, direction)
        path_id = connection_id(core_id, direction)
        connection = ConnectionType(
            path_id, *border_endpoints(position, direction, border_type), is_edge=True
        )

        if border_type is BorderType.SINK:
            kind = ConnectionKind.OUTPUT
            self.graph.add_edge(core_id, node, direction=direction, id=path_id)
        else:
            kind = ConnectionKind.INPUT
            self.graph.add_edge(node, core_id, direction=direction, id=path_id)

        self._register(core_id, DirectionType(direction, kind), connection)
        return connection

    def _register(
        self, core_id: int, direction_type: DirectionType, connection: ConnectionType
    ) -> None:
        self.core_connections_map.setdefault(core_id, {})[direction_type] = connection

    def connections_of(self, core_id: int) -> Dict[DirectionType, ConnectionType]:
        """Every link registered on a core, empty for an isolated core."""
        return self.core_connections_map.get(core_id, {})

    def get_connection_type(
        self, core_id: int, direction_type: DirectionType
    ) -> ConnectionType:
        """
        Look up a link on a core.

        Raises:
            ConnectionNotFoundError: If the core or the link does not exist.
        """
        connections = self.core_connections_map.get(core_id)
        if connections is None:
            raise ConnectionNotFoundError(
                f"Could not get connections for Core {core_id}"
            )

        connection = connections.get(direction_type)
        if connection is None:
            raise ConnectionNotFoundError(
                f"Could not get connection {direction_type} for Core {core_id}"
            )
        return connection

    def to_element(self) -> ET.Element:
        """Build the connections group element."""
        group = ET.Element("g", {"id": CONNECTIONS_GROUP_ID})
        for connection in self.paths:
            (x1, y1), (x2, y2) = connection.start, connection.end
            ET.SubElement(
                group,
                "path",
                {
                    "id": connection.path_id,
                    "d": f"M{x1},{y1} L{x2},{y2}",
                    "stroke": "black",
                    "stroke-width": str(CONNECTION_STROKE_WIDTH),
                    "marker-end": MARKER_REFERENCE,
                },
            )
        return group
