"""
Configurable information overlay.

For every grid cell an InformationLayer holds:
- a core group: text lines drawn inside the core box,
- a router group: text lines drawn inside the router box,
- a channel group: text lines drawn beside the links of the core,
- an optional "(row,column)" coordinates label under the core.

Fill rules, channel strokes and loaded-link highlights are appended to the
shared Style while the layer is generated. Layers are rebuilt from scratch on
every reconfiguration.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .buckets import attribute_colour, bucket_index, parse_unsigned
from .configuration import (
    COORDINATES_KEY,
    ID_KEY,
    LOAD_KEY,
    ColouredTextField,
    Configuration,
    FieldConfiguration,
    FillField,
    TextField,
)
from .connections import (
    ConnectionKind,
    ConnectionsGroup,
    ConnectionType,
    DirectionType,
)
from .errors import ManycoreMismatchError
from .geometry import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    FONT_SIZE_WITH_OFFSET,
    HALF_SIDE_LENGTH,
    OFFSET_FROM_BORDER,
    ROUTER_OFFSET,
    SIDE_LENGTH,
    ElementKind,
    GridPosition,
    core_coordinates,
    router_coordinates,
    saturating_add,
    saturating_sub,
)
from .models import Core, Direction, Router
from .style import Style

logger = logging.getLogger(__name__)

TEXT_BACKGROUND_ID = "textBackground"
TEXT_GROUP_FILTER = f"url(#{TEXT_BACKGROUND_ID})"
DEFAULT_TEXT_FILL = "black"
LOADED_LINK_COLOUR = "#ff4d4d"
# Space between a link and the text written beside it
CHANNEL_TEXT_GAP = 2
INFORMATION_GROUP_ID = "information"


@dataclass
class TextInformation:
    """A positioned text line."""

    x: int
    y: int
    text_anchor: str
    value: str
    fill: str = DEFAULT_TEXT_FILL
    dominant_baseline: str = "text-before-edge"
    font_size: str = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY

    def to_element(self) -> ET.Element:
        element = ET.Element(
            "text",
            {
                "x": str(self.x),
                "y": str(self.y),
                "font-size": self.font_size,
                "font-family": self.font_family,
                "text-anchor": self.text_anchor,
                "dominant-baseline": self.dominant_baseline,
                "fill": self.fill,
            },
        )
        element.text = self.value
        return element


@dataclass
class ProcessingInformation:
    """
    Overlay group for one core or router.

    Attributes:
        information: Text lines, top to bottom.
        filter: Background filter reference, set when the box has a fill.
    """

    information: List[TextInformation] = field(default_factory=list)
    filter: Optional[str] = None

    def to_element(self) -> ET.Element:
        attributes = {"filter": self.filter} if self.filter else {}
        group = ET.Element("g", attributes)
        for text in self.information:
            group.append(text.to_element())
        return group


def generate(
    x: int,
    y: int,
    configuration: Dict[str, FieldConfiguration],
    target: Union[Core, Router],
    group: ProcessingInformation,
    text_anchor: str,
    style: Style,
) -> ProcessingInformation:
    """
    Fill an overlay group for a core or router.

    Keys are processed in sorted order so lines stack in a stable order. The
    identity line always comes first.

    Args:
        x: Anchor x coordinate (box border).
        y: Anchor y coordinate (box border).
        configuration: Attribute key -> field configuration.
        target: Element the attributes are read from.
        group: Group to append text lines to.
        text_anchor: "start" for cores, "end" for routers.
        style: Shared stylesheet, receives fill rules.

    Returns:
        The group passed in.
    """
    # Padding between text and element border
    x = saturating_add(x, OFFSET_FROM_BORDER)
    y = saturating_add(y, OFFSET_FROM_BORDER)

    id_configuration = configuration.get(ID_KEY)
    if isinstance(id_configuration, TextField):
        group.information.append(
            TextInformation(
                x, y, text_anchor, f"{id_configuration.title}: {target.id}"
            )
        )
        y = saturating_add(y, FONT_SIZE_WITH_OFFSET)

    for key in sorted(configuration):
        if key in (ID_KEY, COORDINATES_KEY):
            continue

        field_configuration = configuration[key]
        value = target.lookup(key)
        if value is None:
            # Not applicable to this element
            continue

        if isinstance(field_configuration, TextField):
            group.information.append(
                TextInformation(
                    x, y, text_anchor, f"{field_configuration.title}: {value}"
                )
            )
            y = saturating_add(y, FONT_SIZE_WITH_OFFSET)

        elif isinstance(field_configuration, FillField):
            numeric = parse_unsigned(value)
            if numeric is None:
                logger.debug(
                    "Skipping fill for %s%s: %r=%r is not an unsigned integer",
                    target.variant,
                    target.id,
                    key,
                    value,
                )
                continue

            settings = field_configuration.colour_settings
            colour = settings.colours[bucket_index(settings.bounds, numeric)]
            style.append(f"#{target.variant}{target.id} {{ fill: {colour}; }}")
            # Text over a coloured box needs a background
            group.filter = TEXT_GROUP_FILTER

        elif isinstance(field_configuration, ColouredTextField):
            settings = field_configuration.colour_settings
            fill = attribute_colour(settings.bounds, settings.colours, value)
            if fill is None:
                logger.debug(
                    "Default colour for %s%s: %r=%r is not an unsigned integer",
                    target.variant,
                    target.id,
                    key,
                    value,
                )
                fill = DEFAULT_TEXT_FILL

            group.information.append(
                TextInformation(
                    x,
                    y,
                    text_anchor,
                    f"{field_configuration.title}: {value}",
                    fill=fill,
                )
            )
            y = saturating_add(y, FONT_SIZE_WITH_OFFSET)

        # Routing and Boolean directives are handled by the caller

    return group


def _channel_text_layout(
    connection: ConnectionType, direction: Direction
) -> Tuple[int, int, str, str, int]:
    """
    Where text beside a link starts and which way further lines go.

    Horizontal links carry text centred above (East) or below (West) the
    line. Vertical links carry text to the right (South) or left (North),
    a quarter of the way along the link.

    Returns:
        (x, y, text anchor, dominant baseline, y step per line).
    """
    (x1, y1), (x2, y2) = connection.start, connection.end

    if direction is Direction.EAST:
        return (
            (x1 + x2) // 2,
            y1 - CHANNEL_TEXT_GAP,
            "middle",
            "text-after-edge",
            -FONT_SIZE_WITH_OFFSET,
        )
    if direction is Direction.WEST:
        return (
            (x1 + x2) // 2,
            y1 + CHANNEL_TEXT_GAP,
            "middle",
            "text-before-edge",
            FONT_SIZE_WITH_OFFSET,
        )

    y = y1 + (y2 - y1) // 4
    if direction is Direction.SOUTH:
        x, text_anchor = x1 + CHANNEL_TEXT_GAP, "start"
    else:
        x, text_anchor = x1 - CHANNEL_TEXT_GAP, "end"
    return x, y, text_anchor, "text-before-edge", FONT_SIZE_WITH_OFFSET


def _source_lookup(
    core_id: int,
    direction: Direction,
    source_loads: Mapping[int, Mapping[Direction, int]],
) -> Callable[[str], Optional[str]]:
    """Attribute lookup for a source link: only its load is known."""

    def lookup(key: str) -> Optional[str]:
        if key != LOAD_KEY:
            return None

        loads = source_loads.get(core_id)
        if loads is None:
            raise ManycoreMismatchError(
                f"Could not retrieve source loads for Core {core_id}"
            )
        load = loads.get(direction)
        if load is None:
            raise ManycoreMismatchError(
                f"Could not retrieve {direction.value} source channel load "
                f"for Core {core_id}"
            )
        return str(load)

    return lookup


def generate_channels(
    core: Core,
    configuration: Dict[str, FieldConfiguration],
    keys: List[str],
    connections: ConnectionsGroup,
    source_loads: Mapping[int, Mapping[Direction, int]],
    group: ProcessingInformation,
    style: Style,
) -> ProcessingInformation:
    """
    Fill the channel group of a core.

    Every output link (to a neighbour or a sink) is annotated from the core's
    channel record for that direction. Source links are annotated with their
    load. Input links from neighbours belong to the neighbour's output and
    are skipped.

    Args:
        core: Core whose links are annotated.
        configuration: Channel attribute key -> field configuration.
        keys: Attribute keys to render, in order.
        connections: Link topology of the document.
        source_loads: Core index -> {direction: load} of source links.
        group: Group to append text lines to.
        style: Shared stylesheet, receives channel stroke rules.

    Returns:
        The group passed in.

    Raises:
        ManycoreMismatchError: If a link has no channel record, or a source
            link has no load while the load is requested.
    """
    links = connections.connections_of(core.id)
    ordered = sorted(links, key=lambda d: (d.direction.value, d.kind.value))

    for direction_type in ordered:
        connection = links[direction_type]
        direction = direction_type.direction

        if direction_type.kind is ConnectionKind.OUTPUT:
            channel = core.channels.get(direction)
            if channel is None:
                raise ManycoreMismatchError(
                    f"Could not retrieve {direction.value} channel for Core {core.id}"
                )
            lookup = channel.lookup
        elif connection.is_edge:
            lookup = _source_lookup(core.id, direction, source_loads)
        else:
            continue

        x, y, text_anchor, baseline, step = _channel_text_layout(connection, direction)

        for key in keys:
            field_configuration = configuration[key]
            value = lookup(key)
            if value is None:
                continue

            if isinstance(field_configuration, TextField):
                fill = DEFAULT_TEXT_FILL
            elif isinstance(field_configuration, ColouredTextField):
                settings = field_configuration.colour_settings
                fill = (
                    attribute_colour(settings.bounds, settings.colours, value)
                    or DEFAULT_TEXT_FILL
                )
            elif isinstance(field_configuration, FillField):
                numeric = parse_unsigned(value)
                if numeric is None:
                    logger.debug(
                        "Skipping stroke for %s: %r=%r is not an unsigned integer",
                        connection.path_id,
                        key,
                        value,
                    )
                    continue
                settings = field_configuration.colour_settings
                colour = settings.colours[bucket_index(settings.bounds, numeric)]
                style.append(f"#{connection.path_id} {{ stroke: {colour}; }}")
                continue
            else:
                continue

            group.information.append(
                TextInformation(
                    x,
                    y,
                    text_anchor,
                    f"{field_configuration.title}: {value}",
                    fill=fill,
                    dominant_baseline=baseline,
                )
            )
            # Link text may sit beyond the grid edge, so no clamping here
            y += step

    return group


@dataclass
class InformationLayer:
    """
    Overlay for one grid cell.

    Attributes:
        core_group: Text lines for the core box.
        router_group: Text lines for the router box.
        channel_group: Text lines beside the core's links.
        coordinates: Optional "(row,column)" label, 1-based.
    """

    core_group: ProcessingInformation = field(default_factory=ProcessingInformation)
    router_group: ProcessingInformation = field(default_factory=ProcessingInformation)
    channel_group: ProcessingInformation = field(default_factory=ProcessingInformation)
    coordinates: Optional[TextInformation] = None

    @classmethod
    def build(
        cls,
        position: GridPosition,
        configuration: Configuration,
        core: Core,
        style: Style,
        connections: ConnectionsGroup,
        core_loads: Optional[AbstractSet[Direction]] = None,
        source_loads: Optional[Mapping[int, Mapping[Direction, int]]] = None,
    ) -> "InformationLayer":
        """
        Generate the overlay for a core, its router and its links.

        Args:
            position: Grid position of the core.
            configuration: Current attribute configuration.
            core: The core record.
            style: Shared stylesheet for this reconfiguration pass.
            connections: Link topology of the document.
            core_loads: Directions of loaded links leaving this core.
            source_loads: Core index -> {direction: load} of source links.

        Returns:
            The new InformationLayer.

        Raises:
            ConnectionNotFoundError: If a loaded link has no drawn connection.
            ManycoreMismatchError: If a channel record or source load is missing.
        """
        layer = cls()
        core_x, core_y = core_coordinates(position.row, position.column)

        # Coordinates live in the core config but apply to the whole cell
        if configuration.show_coordinates():
            layer.coordinates = TextInformation(
                saturating_add(core_x, HALF_SIDE_LENGTH),
                saturating_add(core_y, SIDE_LENGTH),
                "middle",
                f"({position.row + 1},{position.column + 1})",
            )

        generate(
            core_x,
            core_y,
            configuration.core_config,
            core,
            layer.core_group,
            ElementKind.CORE.text_anchor,
            style,
        )

        # Router text is right-aligned against the router's right border
        router_x, router_y = router_coordinates(position.row, position.column)
        router_x = saturating_sub(
            saturating_add(router_x, ROUTER_OFFSET), 2 * OFFSET_FROM_BORDER
        )
        generate(
            router_x,
            router_y,
            configuration.router_config,
            core.router,
            layer.router_group,
            ElementKind.ROUTER.text_anchor,
            style,
        )

        channel_keys = configuration.channel_attribute_keys()
        if channel_keys:
            generate_channels(
                core,
                configuration.channel_config,
                channel_keys,
                connections,
                source_loads or {},
                layer.channel_group,
                style,
            )

        if core_loads:
            layer._highlight_loads(core.id, core_loads, connections, style)

        return layer

    @staticmethod
    def _highlight_loads(
        core_id: int,
        core_loads: AbstractSet[Direction],
        connections: ConnectionsGroup,
        style: Style,
    ) -> None:
        for direction in sorted(core_loads, key=lambda d: d.value):
            connection = connections.get_connection_type(
                core_id, DirectionType(direction, ConnectionKind.OUTPUT)
            )
            style.append(f"#{connection.path_id} {{ stroke: {LOADED_LINK_COLOUR}; }}")

    @property
    def texts(self) -> List[TextInformation]:
        """Every text line of the cell, in drawing order."""
        texts = (
            self.core_group.information
            + self.router_group.information
            + self.channel_group.information
        )
        if self.coordinates is not None:
            texts.append(self.coordinates)
        return texts

    def to_element(self) -> ET.Element:
        """Build the cell's group element."""
        group = ET.Element("g")
        group.append(self.core_group.to_element())
        group.append(self.router_group.to_element())
        if self.channel_group.information:
            group.append(self.channel_group.to_element())
        if self.coordinates is not None:
            group.append(self.coordinates.to_element())
        return group


def information_group_element(layers: List[InformationLayer]) -> ET.Element:
    """Build the group that holds every cell's overlay."""
    group = ET.Element("g", {"id": INFORMATION_GROUP_ID})
    for layer in layers:
        group.append(layer.to_element())
    return group
