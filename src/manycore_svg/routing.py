"""
Routing collaborator.

The renderer only needs to know which links carry load. Any object with a
route(algorithm) method returning {RoutingTarget: set of Directions} can be
used. DimensionOrderRouter is the reference implementation: it routes every
edge of the task graph with deterministic dimension-order routing.

    RowFirst:    travel along the source row, then along the target column
    ColumnFirst: travel along the source column, then along the target row
"""

import logging
from typing import Dict, Iterator, NamedTuple, Protocol, Set, Tuple

import networkx as nx

from .connections import border_node
from .errors import ConfigurationError, RoutingError
from .geometry import GridPosition
from .models import Direction, ManycoreSystem

logger = logging.getLogger(__name__)

ROW_FIRST = "RowFirst"
COLUMN_FIRST = "ColumnFirst"
SUPPORTED_ALGORITHMS = (ROW_FIRST, COLUMN_FIRST)


class RoutingTarget(NamedTuple):
    """Key of a routing result: a core, or the sink attached to a core."""

    kind: str
    index: int

    @classmethod
    def core(cls, index: int) -> "RoutingTarget":
        return cls("Core", index)

    @classmethod
    def sink(cls, index: int) -> "RoutingTarget":
        return cls("Sink", index)


LinkLoads = Dict[RoutingTarget, Set[Direction]]


class RoutingCollaborator(Protocol):
    """Anything that can compute loaded links for an algorithm."""

    def route(self, algorithm: str) -> LinkLoads: ...


class DimensionOrderRouter:
    """
    Routes the task graph of a system over its link topology.

    Attributes:
        system: The architecture whose task graph is routed.
        topology: Directed link graph; every hop must be an edge of it.
    """

    def __init__(self, system: ManycoreSystem, topology: nx.DiGraph):
        self.system = system
        self.topology = topology

    def route(self, algorithm: str) -> LinkLoads:
        """
        Compute the loaded links for every task-graph edge.

        Args:
            algorithm: "RowFirst" or "ColumnFirst".

        Returns:
            RoutingTarget -> directions of loaded links leaving that core
            (Core targets) or leading into its sink (Sink targets).

        Raises:
            ConfigurationError: If the algorithm is not supported.
            RoutingError: If a task is not allocated or a hop has no link.
        """
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported routing algorithm {algorithm!r}, "
                f"expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
            )

        task_cores = self.system.task_core_map()
        sinks = self.system.borders.sinks
        loads: LinkLoads = {}

        for from_task, to_task in self.system.task_graph:
            source = task_cores.get(from_task)
            if source is None:
                raise RoutingError(f"Task {from_task} is not allocated to any core")

            if to_task in sinks:
                destination = sinks[to_task]
            else:
                destination = task_cores.get(to_task)
                if destination is None:
                    raise RoutingError(f"Task {to_task} is not allocated to any core")

            for core_index, direction in self._hops(source, destination, algorithm):
                loads.setdefault(RoutingTarget.core(core_index), set()).add(direction)

            if to_task in sinks:
                direction = self._sink_direction(destination, to_task)
                loads.setdefault(RoutingTarget.sink(destination), set()).add(direction)

        logger.debug(
            "Routed %d task edges with %s, %d loaded targets",
            len(self.system.task_graph),
            algorithm,
            len(loads),
        )
        return loads

    def _sink_direction(self, core_index: int, task: int) -> Direction:
        direction = self.system.borders.sink_direction(core_index)
        if direction is None or not self.topology.has_edge(
            core_index, border_node(core_index, direction)
        ):
            raise RoutingError(
                f"Core {core_index} has no sink link for task {task}"
            )
        return direction

    def _hops(
        self, source: int, destination: int, algorithm: str
    ) -> Iterator[Tuple[int, Direction]]:
        """Yield (core index, direction) for every hop from source to destination."""
        columns = self.system.columns
        current = GridPosition.from_index(source, columns)
        target = GridPosition.from_index(destination, columns)

        if algorithm == ROW_FIRST:
            phases = ("column", "row")
        else:
            phases = ("row", "column")

        for phase in phases:
            while getattr(current, phase) != getattr(target, phase):
                if phase == "column":
                    if target.column > current.column:
                        direction = Direction.EAST
                    else:
                        direction = Direction.WEST
                else:
                    if target.row > current.row:
                        direction = Direction.SOUTH
                    else:
                        direction = Direction.NORTH

                row_delta, column_delta = direction.delta
                following = GridPosition(
                    current.row + row_delta, current.column + column_delta
                )
                current_index = current.to_index(columns)
                following_index = following.to_index(columns)

                if not self.topology.has_edge(current_index, following_index):
                    raise RoutingError(
                        f"No {direction.value} link from Core {current_index}"
                    )

                yield current_index, direction
                current = following
