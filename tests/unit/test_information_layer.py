"""Unit tests for the information overlay generator."""

import logging

import pytest

from manycore_svg.configuration import (
    BORDER_ROUTERS_KEY,
    COORDINATES_KEY,
    ID_KEY,
    LOAD_KEY,
    ROUTING_KEY,
    BooleanField,
    ColouredTextField,
    Configuration,
    FillField,
    RoutingField,
    TextField,
)
from manycore_svg.connections import ConnectionsGroup
from manycore_svg.errors import ConnectionNotFoundError, ManycoreMismatchError
from manycore_svg.geometry import (
    FONT_SIZE_WITH_OFFSET,
    HALF_SIDE_LENGTH,
    OFFSET_FROM_BORDER,
    ROUTER_OFFSET,
    SIDE_LENGTH,
    GridPosition,
    core_coordinates,
    router_coordinates,
)
from manycore_svg.information_layer import (
    DEFAULT_TEXT_FILL,
    LOADED_LINK_COLOUR,
    TEXT_GROUP_FILTER,
    InformationLayer,
    ProcessingInformation,
    generate,
)
from manycore_svg.models import BorderType, Channel, Core, Direction, Router
from manycore_svg.style import MINIMAL_STYLE, Style


@pytest.fixture
def style():
    return Style.minimal()


@pytest.fixture
def no_links():
    """Topology of a cell with no links."""
    return ConnectionsGroup()


@pytest.fixture
def core():
    return Core(
        id=7,
        router=Router(id=7, attributes={"packets": "3"}),
        allocated_task=4,
        attributes={"load": "25", "name": "alpha", "temperature": "hot"},
    )


def run_generate(configuration, target, style, anchor="start"):
    return generate(0, 0, configuration, target, ProcessingInformation(), anchor, style)


class TestGenerateText:
    """Tests for Text and identity lines."""

    def test_identity_line(self, core, style):
        group = run_generate({ID_KEY: TextField("ID")}, core, style)
        assert [t.value for t in group.information] == ["ID: 7"]

    def test_identity_comes_first(self, core, style):
        """The id line precedes keys that sort before it."""
        configuration = {"@allocatedTask": TextField("Task"), ID_KEY: TextField("ID")}
        group = run_generate(configuration, core, style)
        assert [t.value for t in group.information] == ["ID: 7", "Task: 4"]

    def test_lines_stack_downwards_in_key_order(self, core, style):
        configuration = {"name": TextField("Name"), "load": TextField("Load")}
        group = run_generate(configuration, core, style)

        assert [t.value for t in group.information] == ["Load: 25", "Name: alpha"]
        first, second = group.information
        assert first.y == OFFSET_FROM_BORDER
        assert second.y == OFFSET_FROM_BORDER + FONT_SIZE_WITH_OFFSET
        assert first.x == second.x == OFFSET_FROM_BORDER

    def test_missing_attribute_skipped(self, core, style):
        group = run_generate({"voltage": TextField("V")}, core, style)
        assert group.information == []

    def test_identity_not_text_is_ignored(self, core, style):
        group = run_generate({ID_KEY: BooleanField(True)}, core, style)
        assert group.information == []

    def test_coordinates_key_not_rendered_per_element(self, core, style):
        group = run_generate({COORDINATES_KEY: TextField("C")}, core, style)
        assert group.information == []

    def test_text_attributes(self, core, style):
        group = run_generate({"load": TextField("Load")}, core, style, anchor="end")
        text = group.information[0]
        assert text.text_anchor == "end"
        assert text.dominant_baseline == "text-before-edge"
        assert text.fill == DEFAULT_TEXT_FILL


class TestGenerateFill:
    """Tests for Fill rules."""

    def test_fill_rule_appended(self, core, style, colour_settings):
        group = run_generate({"load": FillField(colour_settings)}, core, style)

        assert style.css == MINIMAL_STYLE + "\n#core7 { fill: c1; }"
        assert group.filter == TEXT_GROUP_FILTER
        assert group.information == []

    def test_unparsable_fill_skipped(self, core, style, colour_settings, caplog):
        with caplog.at_level(logging.DEBUG, logger="manycore_svg.information_layer"):
            group = run_generate(
                {"temperature": FillField(colour_settings)}, core, style
            )

        assert style.css == MINIMAL_STYLE
        assert group.filter is None
        assert "not an unsigned integer" in caplog.text

    def test_router_fill_uses_router_variant(self, core, style, colour_settings):
        run_generate({"packets": FillField(colour_settings)}, core.router, style)
        assert style.css.endswith("#router7 { fill: c0; }")


class TestGenerateColouredText:
    """Tests for ColouredText lines."""

    def test_coloured_text(self, core, style, colour_settings):
        group = run_generate(
            {"load": ColouredTextField("Load", colour_settings)}, core, style
        )
        text = group.information[0]
        assert text.value == "Load: 25"
        assert text.fill == "c1"
        assert style.css == MINIMAL_STYLE

    def test_unparsable_value_keeps_text(self, core, style, colour_settings):
        group = run_generate(
            {"temperature": ColouredTextField("Temp", colour_settings)}, core, style
        )
        text = group.information[0]
        assert text.value == "Temp: hot"
        assert text.fill == DEFAULT_TEXT_FILL

    def test_directives_ignored(self, core, style):
        group = run_generate(
            {"load": RoutingField("RowFirst"), "name": BooleanField(True)}, core, style
        )
        assert group.information == []


class TestInformationLayer:
    """Tests for InformationLayer.build."""

    def test_core_and_router_anchors(self, core, style, no_links):
        position = GridPosition(1, 2)
        configuration = Configuration(
            core_config={ID_KEY: TextField("ID")},
            router_config={"packets": TextField("Packets")},
        )
        layer = InformationLayer.build(position, configuration, core, style, no_links)

        core_x, core_y = core_coordinates(1, 2)
        core_text = layer.core_group.information[0]
        assert (core_text.x, core_text.y) == (
            core_x + OFFSET_FROM_BORDER,
            core_y + OFFSET_FROM_BORDER,
        )
        assert core_text.text_anchor == "start"

        router_x, router_y = router_coordinates(1, 2)
        router_text = layer.router_group.information[0]
        assert router_text.value == "Packets: 3"
        assert router_text.text_anchor == "end"
        assert router_text.x == router_x + ROUTER_OFFSET - OFFSET_FROM_BORDER
        assert router_text.y == router_y + OFFSET_FROM_BORDER

    def test_coordinates_label(self, core, style, no_links):
        configuration = Configuration(core_config={COORDINATES_KEY: BooleanField(True)})
        layer = InformationLayer.build(
            GridPosition(0, 1), configuration, core, style, no_links
        )

        core_x, core_y = core_coordinates(0, 1)
        assert layer.coordinates.value == "(1,2)"
        assert layer.coordinates.text_anchor == "middle"
        assert layer.coordinates.x == core_x + HALF_SIDE_LENGTH
        assert layer.coordinates.y == core_y + SIDE_LENGTH

    def test_no_coordinates_by_default(self, core, style, no_links):
        layer = InformationLayer.build(
            GridPosition(0, 0), Configuration(), core, style, no_links
        )
        assert layer.coordinates is None

    def test_loaded_links_highlighted(self, style):
        connections = ConnectionsGroup()
        connections.add_connections(0, GridPosition(0, 0), 1, 2)
        layer_core = Core(id=0)

        InformationLayer.build(
            GridPosition(0, 0),
            Configuration(),
            layer_core,
            style,
            core_loads={Direction.EAST},
            connections=connections,
        )
        expected = f"#connection0East {{ stroke: {LOADED_LINK_COLOUR}; }}"
        assert style.css.endswith(expected)

    def test_missing_loaded_link_raises(self, style):
        connections = ConnectionsGroup()
        connections.add_connections(0, GridPosition(0, 0), 1, 2)

        with pytest.raises(ConnectionNotFoundError, match="Core 0"):
            InformationLayer.build(
                GridPosition(0, 0),
                Configuration(),
                Core(id=0),
                style,
                core_loads={Direction.NORTH},
                connections=connections,
            )

    def test_to_element(self, core, style, colour_settings, no_links):
        configuration = Configuration(
            core_config={
                ID_KEY: TextField("ID"),
                "load": FillField(colour_settings),
                COORDINATES_KEY: BooleanField(True),
            }
        )
        layer = InformationLayer.build(
            GridPosition(0, 0), configuration, core, style, no_links
        )
        element = layer.to_element()

        core_group, router_group, coordinates = list(element)
        assert core_group.get("filter") == TEXT_GROUP_FILTER
        assert core_group[0].text == "ID: 7"
        assert router_group.get("filter") is None
        assert len(router_group) == 0
        assert coordinates.tag == "text"


@pytest.fixture
def linked_core():
    """Core 0 of a 1x2 grid with a sink to the North and a source to the West."""
    return Core(
        id=0,
        channels={
            Direction.EAST: Channel(
                Direction.EAST, current_load=25, attributes={"bandwidth": "100"}
            ),
            Direction.NORTH: Channel(Direction.NORTH, current_load=5),
        },
    )


@pytest.fixture
def links():
    connections = ConnectionsGroup()
    connections.add_connections(0, GridPosition(0, 0), 1, 2)
    connections.add_connections(1, GridPosition(0, 1), 1, 2)
    connections.add_border_connection(
        0, GridPosition(0, 0), Direction.WEST, BorderType.SOURCE
    )
    connections.add_border_connection(
        0, GridPosition(0, 0), Direction.NORTH, BorderType.SINK
    )
    return connections


def build_channels(core, channel_config, links, style, source_loads=None):
    return InformationLayer.build(
        GridPosition(0, 0),
        Configuration(channel_config=channel_config),
        core,
        style,
        links,
        source_loads=source_loads,
    )


class TestChannelInformation:
    """Tests for text and strokes on a core's links."""

    def test_links_annotated_in_direction_order(
        self, linked_core, links, style, colour_settings
    ):
        layer = build_channels(
            linked_core,
            {
                LOAD_KEY: TextField("Load"),
                "bandwidth": ColouredTextField("BW", colour_settings),
            },
            links,
            style,
            source_loads={0: {Direction.WEST: 30}},
        )

        texts = layer.channel_group.information
        assert [t.value for t in texts] == [
            "Load: 25",
            "BW: 100",
            "Load: 5",
            "Load: 30",
        ]
        assert texts[1].fill == "c3"

    def test_east_link_text_stacks_upwards(self, linked_core, links, style):
        layer = build_channels(
            linked_core,
            {LOAD_KEY: TextField("Load"), "bandwidth": TextField("BW")},
            links,
            style,
            source_loads={0: {Direction.WEST: 30}},
        )

        load, bandwidth = layer.channel_group.information[:2]
        assert (load.x, load.y) == (276, 26)
        assert (bandwidth.x, bandwidth.y) == (276, 8)
        assert load.text_anchor == "middle"
        assert load.dominant_baseline == "text-after-edge"

    def test_border_link_positions(self, linked_core, links, style):
        layer = build_channels(
            linked_core,
            {LOAD_KEY: TextField("Load")},
            links,
            style,
            source_loads={0: {Direction.WEST: 30}},
        )

        _, sink, source = layer.channel_group.information
        assert (sink.x, sink.y, sink.text_anchor) == (136, -9, "end")
        assert (source.x, source.y, source.text_anchor) == (81, 40, "middle")

    def test_fill_strokes_links(self, linked_core, links, style, colour_settings):
        layer = build_channels(
            linked_core,
            {LOAD_KEY: FillField(colour_settings)},
            links,
            style,
            source_loads={0: {Direction.WEST: 30}},
        )

        assert "\n#connection0East { stroke: c1; }" in style.css
        assert "\n#connection0North { stroke: c0; }" in style.css
        assert "\n#connection0West { stroke: c2; }" in style.css
        assert layer.channel_group.information == []
        assert len(layer.to_element()) == 2

    def test_channel_group_serialised(self, linked_core, links, style):
        layer = build_channels(
            linked_core,
            {"bandwidth": TextField("BW")},
            links,
            style,
        )
        core_group, router_group, channel_group = list(layer.to_element())
        assert [t.text for t in channel_group] == ["BW: 100"]
        assert [t.value for t in layer.texts] == ["BW: 100"]

    def test_missing_channel_record(self, links, style):
        with pytest.raises(ManycoreMismatchError) as exc_info:
            build_channels(Core(id=0), {LOAD_KEY: TextField("Load")}, links, style)
        assert str(exc_info.value) == "Could not retrieve East channel for Core 0"

    def test_missing_source_loads(self, linked_core, links, style):
        with pytest.raises(
            ManycoreMismatchError, match="Could not retrieve source loads for Core 0"
        ):
            build_channels(
                linked_core, {LOAD_KEY: TextField("Load")}, links, style, {}
            )

    def test_missing_source_load_direction(self, linked_core, links, style):
        with pytest.raises(ManycoreMismatchError) as exc_info:
            build_channels(
                linked_core,
                {LOAD_KEY: TextField("Load")},
                links,
                style,
                {0: {Direction.NORTH: 3}},
            )
        assert str(exc_info.value) == (
            "Could not retrieve West source channel load for Core 0"
        )

    def test_source_loads_only_needed_for_load(self, linked_core, links, style):
        layer = build_channels(
            linked_core, {"bandwidth": TextField("BW")}, links, style
        )
        assert len(layer.channel_group.information) == 1

    def test_directives_need_no_channel_records(self, links, style):
        layer = build_channels(
            Core(id=0),
            {
                ROUTING_KEY: RoutingField("RowFirst"),
                BORDER_ROUTERS_KEY: BooleanField(True),
            },
            links,
            style,
        )
        assert layer.channel_group.information == []
