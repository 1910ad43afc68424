"""
Architecture records consumed by the renderer.

These dataclasses describe an already-parsed many-core system: the grid
dimensions, the ordered list of cores (each with its router), which border
routers connect to sinks or sources, and the task graph used for routing.

Classes:
    Direction: Cardinal direction of a link between neighbouring cores.
    BorderType: Whether a border link leads to a sink or comes from a source.
    Router: A core's router and its extra attributes.
    Channel: An output link of a core, with its load and extra attributes.
    Core: A processing core with its router and extra attributes.
    Borders: Border membership map keyed by linear core index.
    ManycoreSystem: The complete architecture description.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .configuration import ALLOCATED_TASK_KEY, LOAD_KEY


class Direction(Enum):
    """Direction of a link leaving a core."""

    NORTH = "North"
    EAST = "East"
    SOUTH = "South"
    WEST = "West"

    @property
    def delta(self) -> Tuple[int, int]:
        """(row, column) offset to the neighbour in this direction."""
        return _DIRECTION_DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_DIRECTION_DELTAS = {
    Direction.NORTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.SOUTH: (1, 0),
    Direction.WEST: (0, -1),
}

_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.EAST: Direction.WEST,
    Direction.SOUTH: Direction.NORTH,
    Direction.WEST: Direction.EAST,
}


class BorderType(Enum):
    """Kind of border link."""

    SINK = "Sink"
    SOURCE = "Source"


@dataclass
class Router:
    """A router attached to a core."""

    id: int
    attributes: Dict[str, str] = field(default_factory=dict)

    variant = "router"

    def lookup(self, key: str) -> Optional[str]:
        """Raw value of an attribute, or None when the router lacks it."""
        return self.attributes.get(key)


@dataclass
class Channel:
    """
    An output link of a core.

    Attributes:
        direction: Direction the link leaves the core in.
        current_load: Load carried by the link, if known.
        attributes: Extra named attributes (string values).
    """

    direction: Direction
    current_load: Optional[int] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def lookup(self, key: str) -> Optional[str]:
        """Raw value of an attribute, or None when the channel lacks it."""
        if key == LOAD_KEY:
            if self.current_load is None:
                return None
            return str(self.current_load)
        return self.attributes.get(key)


@dataclass
class Core:
    """
    A processing core.

    Attributes:
        id: Core identity, equal to its linear index in the grid.
        router: The core's router.
        allocated_task: Id of the task running on this core, if any.
        attributes: Extra named attributes (string values).
        channels: Output links keyed by direction.
    """

    id: int
    router: Optional[Router] = None
    allocated_task: Optional[int] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    channels: Dict[Direction, Channel] = field(default_factory=dict)

    variant = "core"

    def __post_init__(self):
        if self.router is None:
            self.router = Router(id=self.id)

    def lookup(self, key: str) -> Optional[str]:
        """Raw value of an attribute, or None when the core lacks it."""
        if key == ALLOCATED_TASK_KEY:
            if self.allocated_task is None:
                return None
            return str(self.allocated_task)
        return self.attributes.get(key)


@dataclass
class Borders:
    """
    Border routers of the system.

    Attributes:
        core_border_map: Linear core index -> {direction: border type} for
            cores whose router connects to a sink or a source.
        sinks: Sink task id -> linear index of the core whose border link
            leads to that sink.
        source_loads: Linear core index -> {direction: load} for the links
            coming in from sources.
    """

    core_border_map: Dict[int, Dict[Direction, BorderType]] = field(
        default_factory=dict
    )
    sinks: Dict[int, int] = field(default_factory=dict)
    source_loads: Dict[int, Dict[Direction, int]] = field(default_factory=dict)

    def sink_direction(self, core_index: int) -> Optional[Direction]:
        """Direction of the sink link on a core, if it has one."""
        for direction, border_type in self.core_border_map.get(core_index, {}).items():
            if border_type is BorderType.SINK:
                return direction
        return None


@dataclass
class ManycoreSystem:
    """
    A parsed many-core architecture.

    Attributes:
        rows: Number of grid rows.
        columns: Number of grid columns.
        cores: Cores in identity order (core i sits at linear index i).
        borders: Border routers.
        task_graph: Communicating task pairs as (from_task, to_task).
    """

    rows: int
    columns: int
    cores: List[Core] = field(default_factory=list)
    borders: Borders = field(default_factory=Borders)
    task_graph: List[Tuple[int, int]] = field(default_factory=list)

    def task_core_map(self) -> Dict[int, int]:
        """Task id -> linear index of the core it is allocated to."""
        return {
            core.allocated_task: index
            for index, core in enumerate(self.cores)
            if core.allocated_task is not None
        }
