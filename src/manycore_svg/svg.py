"""
Main SVG document.

Combines the grid composer and the reconfiguration orchestrator:

- SVG(system) builds the static document once: one box pair per core,
  the link topology, and the sinks/sources decorations.
- SVG.update_configurable_information(configuration) rebuilds only the
  overlay, stylesheet and viewBox and returns them as an UpdateResult.
- SVG.to_string() serialises the full document.

Example:
    >>> svg = SVG(system)
    >>> document = svg.to_string()
    >>> configuration = Configuration.from_dict(
    ...     {"coreConfig": {"@id": {"type": "Text", "data": "ID"}}}
    ... )
    >>> update = svg.update_configurable_information(configuration)
    >>> update.to_dict()["viewBox"]
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .configuration import Configuration
from .connections import ConnectionsGroup
from .errors import ConfigurationError, ManycoreMismatchError
from .geometry import GridPosition, grid_dimensions
from .information_layer import (
    TEXT_BACKGROUND_ID,
    InformationLayer,
    information_group_element,
)
from .models import Direction, ManycoreSystem
from .processing import PROCESSING_GROUP_ID, ProcessingGroup
from .routing import DimensionOrderRouter, LinkLoads, RoutingCollaborator, RoutingTarget
from .sinks_sources import SinksSourcesGroup, edge_directions
from .style import Style
from .view_box import ViewBox

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
MAIN_GROUP_ID = "mainGroup"
MARKER_ID = "arrowHead"
CLIP_PATH_ID = "mainClip"
USE_CLIP_PATH = f"url(#{CLIP_PATH_ID})"


def _marker_element() -> ET.Element:
    marker = ET.Element(
        "marker",
        {
            "id": MARKER_ID,
            "viewBox": "0 0 10 10",
            "refX": "10",
            "refY": "5",
            "markerWidth": "6",
            "markerHeight": "6",
            "orient": "auto-start-reverse",
        },
    )
    ET.SubElement(marker, "path", {"d": "M 0 0 L 10 5 L 0 10 z"})
    return marker


def _text_background_element() -> ET.Element:
    text_filter = ET.Element(
        "filter",
        {"id": TEXT_BACKGROUND_ID, "x": "0", "y": "0", "width": "1", "height": "1"},
    )
    ET.SubElement(text_filter, "feFlood", {"flood-color": "#ffffff", "result": "bg"})
    merge = ET.SubElement(text_filter, "feMerge")
    ET.SubElement(merge, "feMergeNode", {"in": "bg"})
    ET.SubElement(merge, "feMergeNode", {"in": "SourceGraphic"})
    return text_filter


@dataclass
class UpdateResult:
    """
    Payload sent back after a reconfiguration.

    Attributes:
        style: Stylesheet text.
        information_group: Serialised overlay group.
        view_box: "<min-x> <min-y> <width> <height>".
    """

    style: str
    information_group: str
    view_box: str

    def to_dict(self) -> Dict[str, str]:
        """Payload with the front-end's camelCase keys."""
        return {
            "style": self.style,
            "informationGroup": self.information_group,
            "viewBox": self.view_box,
        }


class SVG:
    """
    SVG rendering of a many-core system.

    Attributes:
        system: The architecture being rendered.
        rows: Grid rows.
        columns: Grid columns.
        width: Grid width in pixels.
        height: Grid height in pixels.
        view_box: Current viewBox.
        style: Current stylesheet.
        processing_groups: Core id -> box pair.
        connections: Link topology and paths.
        sinks_sources: Border decorations.
        information_layers: Overlay of the last reconfiguration.
    """

    def __init__(
        self,
        system: ManycoreSystem,
        routing: Optional[RoutingCollaborator] = None,
    ):
        """
        Compose the static grid for a system.

        Args:
            system: Parsed architecture.
            routing: Routing collaborator; defaults to a DimensionOrderRouter
                over this document's link topology.

        Raises:
            ConfigurationError: If the core list does not fill the grid, or a
                router id differs from its core id.
            ManycoreMismatchError: If a border entry is not on the grid edge.
        """
        self.system = system
        self.rows = system.rows
        self.columns = system.columns
        self._validate_dimensions()

        self.width, self.height = grid_dimensions(self.rows, self.columns)
        self.view_box = ViewBox(self.width, self.height)
        self.style = Style.minimal()
        self.clip_path: Optional[str] = None

        self.processing_groups: Dict[int, ProcessingGroup] = {}
        self.connections = ConnectionsGroup()
        self.sinks_sources = SinksSourcesGroup(self.rows, self.columns)
        self.information_layers: List[InformationLayer] = []

        self._compose()

        self.routing = routing or DimensionOrderRouter(system, self.connections.graph)

    def _validate_dimensions(self) -> None:
        if self.rows <= 0 or self.columns <= 0:
            raise ConfigurationError(
                f"Grid must have at least one row and column, got "
                f"{self.rows}x{self.columns}"
            )

        expected = self.rows * self.columns
        if len(self.system.cores) != expected:
            raise ConfigurationError(
                f"A {self.rows}x{self.columns} grid needs {expected} cores, "
                f"got {len(self.system.cores)}"
            )

        for index, core in enumerate(self.system.cores):
            if core.id != index:
                raise ConfigurationError(
                    f"Core at index {index} has id {core.id}; ids must be contiguous"
                )
            if core.router.id != core.id:
                raise ConfigurationError(
                    f"Router {core.router.id} is attached to Core {core.id}; "
                    f"router ids must match their core"
                )

    def _compose(self) -> None:
        border_map = self.system.borders.core_border_map

        for index in border_map:
            if not 0 <= index < len(self.system.cores):
                raise ManycoreMismatchError(
                    f"Border entry for Core {index}, which does not exist"
                )

        for index, core in enumerate(self.system.cores):
            position = GridPosition.from_index(index, self.columns)

            self.processing_groups[core.id] = ProcessingGroup(
                core.id, position, core.allocated_task
            )
            self.connections.add_connections(core.id, position, self.rows, self.columns)

            on_edge = edge_directions(position, self.rows, self.columns)
            for direction, border_type in border_map.get(index, {}).items():
                if direction not in on_edge:
                    raise ManycoreMismatchError(
                        f"Core {core.id} has a {border_type.value} to the "
                        f"{direction.value} but is not on that edge"
                    )
                self.connections.add_border_connection(
                    core.id, position, direction, border_type
                )
                self.sinks_sources.insert(core.id, position, direction, border_type)

        logger.debug(
            "Composed %dx%d grid: %d links, %d border links",
            self.rows,
            self.columns,
            self.connections.graph.number_of_edges(),
            len(self.sinks_sources),
        )

    def _core_loads(self, links: Optional[LinkLoads], index: int) -> Set[Direction]:
        """Union of the core's own loaded links and its sink links."""
        if not links:
            return set()

        loads: Set[Direction] = set()
        loads.update(links.get(RoutingTarget.core(index), ()))
        loads.update(links.get(RoutingTarget.sink(index), ()))
        return loads

    def update_configurable_information(
        self, configuration: Configuration
    ) -> UpdateResult:
        """
        Regenerate the overlay, stylesheet and viewBox for a configuration.

        The configuration is not modified. Calling this twice with the same
        configuration and system state gives identical results.

        Args:
            configuration: Attributes to show and how to show them.

        Returns:
            UpdateResult with the new stylesheet, overlay and viewBox.

        Raises:
            ConfigurationError: If the routing algorithm is not supported.
            RoutingError: If routing fails. The document is left unchanged.
            ManycoreMismatchError: If routing reports an unknown core.
            ConnectionNotFoundError: If a loaded link has no connection.
            ManycoreMismatchError: If a configured channel or source load is
                missing.
        """
        links: Optional[LinkLoads] = None
        routing = configuration.routing()
        if routing is not None:
            links = self.routing.route(routing.algorithm)
            for target in links:
                if not 0 <= target.index < len(self.system.cores):
                    raise ManycoreMismatchError(
                        f"Routing reported loads for {target.kind} {target.index}, "
                        f"which does not exist"
                    )

        # Rebuild, never merge
        self.information_layers.clear()
        self.view_box.reset(self.width, self.height)

        show_borders = configuration.show_border_routers()
        self.style.reset(show_borders)
        if show_borders:
            self.view_box.insert_edges()

        if not configuration.is_empty():
            for index, core in enumerate(self.system.cores):
                processing_group = self.processing_groups[core.id]
                self.information_layers.append(
                    InformationLayer.build(
                        processing_group.position,
                        configuration,
                        core,
                        self.style,
                        self.connections,
                        self._core_loads(links, index),
                        self.system.borders.source_loads,
                    )
                )

        logger.debug(
            "Reconfigured: %d overlay groups, borders %s",
            len(self.information_layers),
            "on" if show_borders else "off",
        )

        return UpdateResult(
            style=self.style.css,
            information_group=ET.tostring(
                information_group_element(self.information_layers), encoding="unicode"
            ),
            view_box=str(self.view_box),
        )

    def add_clip_path(self, polygon_points: str) -> None:
        """Clip the main group to a polygon (SVG points syntax)."""
        self.clip_path = polygon_points

    def clear_clip_path(self) -> None:
        self.clip_path = None

    def to_element(self) -> ET.Element:
        """Build the full document element."""
        root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NAMESPACE,
                "preserveAspectRatio": "xMidYMid meet",
                "class": "mx-auto",
                "viewBox": str(self.view_box),
            },
        )

        defs = ET.SubElement(root, "defs")
        defs.append(_marker_element())
        defs.append(_text_background_element())

        style = ET.SubElement(root, "style")
        style.text = self.style.css

        main_attributes = {"id": MAIN_GROUP_ID}
        if self.clip_path is not None:
            clip = ET.SubElement(root, "clipPath", {"id": CLIP_PATH_ID})
            ET.SubElement(clip, "polygon", {"points": self.clip_path})
            main_attributes["clip-path"] = USE_CLIP_PATH

        main_group = ET.SubElement(root, "g", main_attributes)

        processing = ET.SubElement(main_group, "g", {"id": PROCESSING_GROUP_ID})
        for core_id in sorted(self.processing_groups):
            processing.append(self.processing_groups[core_id].to_element())

        main_group.append(self.connections.to_element())
        main_group.append(information_group_element(self.information_layers))
        main_group.append(self.sinks_sources.to_element())

        return root

    def to_string(self) -> str:
        """Serialise the full document."""
        return ET.tostring(self.to_element(), encoding="unicode")

    def __str__(self) -> str:
        return self.to_string()
