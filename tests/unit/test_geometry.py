"""Unit tests for the geometry module."""

import pytest

from manycore_svg.geometry import (
    BLOCK_DISTANCE,
    BLOCK_LENGTH,
    COORDINATE_MAX,
    CORE_ROUTER_STROKE_WIDTH,
    ROUTER_OFFSET,
    SIDE_LENGTH,
    ElementKind,
    GridPosition,
    core_coordinates,
    element_coordinates,
    grid_dimensions,
    router_coordinates,
    saturating_add,
    saturating_mul,
    saturating_sub,
)


class TestSaturatingArithmetic:
    """Tests for clamped coordinate arithmetic."""

    def test_add_within_bounds(self):
        assert saturating_add(3, 4) == 7

    def test_add_clamps_at_max(self):
        assert saturating_add(COORDINATE_MAX, 1) == COORDINATE_MAX

    def test_sub_clamps_at_zero(self):
        assert saturating_sub(3, 10) == 0

    def test_mul_clamps_at_max(self):
        assert saturating_mul(COORDINATE_MAX, 2) == COORDINATE_MAX


class TestGridPosition:
    """Tests for GridPosition."""

    def test_from_index(self):
        position = GridPosition.from_index(5, 3)
        assert position == GridPosition(row=1, column=2)

    @pytest.mark.parametrize("rows,columns", [(1, 1), (2, 3), (4, 4), (3, 7)])
    def test_positions_unique_and_invertible(self, rows, columns):
        """Every index maps to a unique position with index == row*cols + col."""
        positions = set()
        for index in range(rows * columns):
            position = GridPosition.from_index(index, columns)
            assert index == position.row * columns + position.column
            assert position.to_index(columns) == index
            assert 0 <= position.column < columns
            positions.add(position)
        assert len(positions) == rows * columns

    def test_position_is_immutable(self):
        position = GridPosition(0, 0)
        with pytest.raises(AttributeError):
            position.row = 1


class TestCoordinates:
    """Tests for core and router coordinates."""

    def test_first_core(self):
        assert core_coordinates(0, 0) == (
            CORE_ROUTER_STROKE_WIDTH,
            ROUTER_OFFSET + CORE_ROUTER_STROKE_WIDTH,
        )

    def test_cores_step_by_block(self):
        x0, y0 = core_coordinates(0, 0)
        x1, y1 = core_coordinates(1, 1)
        assert x1 - x0 == BLOCK_LENGTH + BLOCK_DISTANCE
        assert y1 - y0 == BLOCK_LENGTH + BLOCK_DISTANCE

    def test_router_adjacent_to_core(self):
        """Router sits at the core's top-right corner without overlapping it."""
        core_x, core_y = core_coordinates(2, 3)
        router_x, router_y = router_coordinates(2, 3)
        assert router_x == core_x + SIDE_LENGTH
        assert router_y + ROUTER_OFFSET == core_y

    def test_coordinates_never_negative(self):
        for row in range(3):
            for column in range(3):
                for kind in ElementKind:
                    x, y = element_coordinates(GridPosition(row, column), kind)
                    assert x >= 0 and y >= 0

    def test_element_coordinates_dispatch(self):
        position = GridPosition(1, 2)
        assert element_coordinates(position, ElementKind.CORE) == core_coordinates(1, 2)
        assert element_coordinates(position, ElementKind.ROUTER) == router_coordinates(
            1, 2
        )

    def test_text_anchor_per_kind(self):
        assert ElementKind.CORE.text_anchor == "start"
        assert ElementKind.ROUTER.text_anchor == "end"


class TestGridDimensions:
    """Tests for grid_dimensions."""

    def test_single_cell(self):
        assert grid_dimensions(1, 1) == (BLOCK_LENGTH + 2, BLOCK_LENGTH + 2)

    def test_two_by_three(self):
        width, height = grid_dimensions(2, 3)
        assert width == 3 * BLOCK_LENGTH + 2 * BLOCK_DISTANCE + 2
        assert height == 2 * BLOCK_LENGTH + BLOCK_DISTANCE + 2
