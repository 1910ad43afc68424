"""Pytest configuration and shared fixtures for manycore_svg tests."""

import pytest

from manycore_svg import (
    SVG,
    Borders,
    BorderType,
    ColourSettings,
    Core,
    Direction,
    ManycoreSystem,
    Router,
)


def make_system(rows, columns, core_attributes=None, router_attributes=None, **kwargs):
    """Build a system with contiguous core ids and optional attributes."""
    core_attributes = core_attributes or {}
    router_attributes = router_attributes or {}
    cores = [
        Core(
            id=i,
            router=Router(id=i, attributes=dict(router_attributes.get(i, {}))),
            attributes=dict(core_attributes.get(i, {})),
        )
        for i in range(rows * columns)
    ]
    return ManycoreSystem(rows=rows, columns=columns, cores=cores, **kwargs)


@pytest.fixture
def colour_settings():
    """Bounds 10/20/30/40 with colours c0..c3."""
    return ColourSettings(bounds=[10, 20, 30, 40], colours=["c0", "c1", "c2", "c3"])


@pytest.fixture
def load_system():
    """2x2 grid where each core has a 'load' attribute."""
    return make_system(
        2,
        2,
        core_attributes={
            0: {"load": "5"},
            1: {"load": "25"},
            2: {"load": "40"},
            3: {"load": "100"},
        },
        router_attributes={0: {"packets": "12"}},
    )


@pytest.fixture
def load_svg(load_system):
    """SVG document for the 2x2 load grid."""
    return SVG(load_system)


@pytest.fixture
def routed_system():
    """
    3x3 grid with tasks on cores 0, 8 and 2, and a sink east of core 5.

    Task graph: 1 -> 2 (core 0 to core 8), 1 -> 3 (core 0 to core 2),
    2 -> 99 (core 8 to the sink on core 5).
    """
    system = make_system(
        3,
        3,
        borders=Borders(
            core_border_map={
                5: {Direction.EAST: BorderType.SINK},
                3: {Direction.WEST: BorderType.SOURCE},
            },
            sinks={99: 5},
        ),
        task_graph=[(1, 2), (1, 3), (2, 99)],
    )
    system.cores[0].allocated_task = 1
    system.cores[8].allocated_task = 2
    system.cores[2].allocated_task = 3
    return system


@pytest.fixture
def system_factory():
    """The make_system builder, for tests that need custom grids."""
    return make_system
