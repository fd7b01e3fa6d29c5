"""Tests for the model layer: Message identity and the spatial grid index."""

import pytest

from dtnsim.model import (
    CELL_SIZE,
    DELIMITER,
    GridNotBuiltError,
    Message,
    SpatialGridIndex,
    cell_for,
)


class TestMessage:
    """Tests for the Message value type."""

    def test_message_fields(self):
        """Message should expose source, destination and sequence."""
        msg = Message(source=1, destination=2, sequence=3)

        assert msg.source == 1
        assert msg.destination == 2
        assert msg.sequence == 3

    def test_structural_equality(self):
        """Messages with the same triple should be equal and hash the same."""
        a = Message(1, 2, 3)
        b = Message(1, 2, 3)

        assert a == b
        assert hash(a) == hash(b)
        assert {a: 1}[b] == 1

    def test_different_sequence_is_different_message(self):
        """Sequence number is part of the identity."""
        assert Message(1, 2, 3) != Message(1, 2, 4)

    def test_message_is_immutable(self):
        """Message should be frozen."""
        msg = Message(1, 2, 3)

        with pytest.raises(AttributeError):
            msg.source = 5  # type: ignore[misc]

    def test_encode(self):
        """encode() should join fields with the delimiter."""
        assert DELIMITER == "-"
        assert Message(12, 7, 1).encode() == "12-7-1"
        assert str(Message(12, 7, 1)) == "12-7-1"

    def test_decode(self):
        """decode() should parse the flat encoding."""
        assert Message.decode("3-9-42") == Message(3, 9, 42)

    @pytest.mark.parametrize("text", ["", "1-2", "1-2-3-4", "a-2-3", "1--2", "1-2-x", "-1-2-3"])
    def test_decode_rejects_malformed(self, text):
        """decode() should reject anything but three non-negative integers."""
        with pytest.raises(ValueError):
            Message.decode(text)

    def test_negative_field_rejected(self):
        """A negative field would embed the delimiter and is rejected."""
        with pytest.raises(ValueError):
            Message(-1, 2, 3)

    def test_non_integer_field_rejected(self):
        """Fields must be integers."""
        with pytest.raises(ValueError):
            Message(1, "2", 3)  # type: ignore[arg-type]
        with pytest.raises(ValueError):
            Message(True, 2, 3)

    def test_messages_sort_by_triple(self):
        """Messages should order by (source, destination, sequence)."""
        msgs = [Message(2, 1, 1), Message(1, 3, 2), Message(1, 3, 1)]

        assert sorted(msgs) == [Message(1, 3, 1), Message(1, 3, 2), Message(2, 1, 1)]


class TestCellFor:
    """Tests for cell_for()."""

    def test_origin(self):
        """Origin should map to cell (0, 0)."""
        assert cell_for(0.0, 0.0) == (0, 0)

    def test_cell_size_is_200(self):
        """The fixed cell side length should be 200."""
        assert CELL_SIZE == 200.0

    def test_cell_boundaries(self):
        """Coordinates should floor-divide by the cell size."""
        assert cell_for(199.9, 0.0) == (0, 0)
        assert cell_for(200.0, 0.0) == (1, 0)
        assert cell_for(450.0, 610.0) == (2, 3)

    def test_negative_coordinates_clamp_to_zero(self):
        """Negative coordinates should collapse to row/column 0."""
        assert cell_for(-5.0, -300.0) == (0, 0)
        assert cell_for(-1000.0, 250.0) == (0, 1)

    @pytest.mark.parametrize(
        "x,y", [(-1e9, -1e9), (-0.001, 5.0), (3.0, -7.5), (1e6, -1e6), (123.4, 567.8)]
    )
    def test_cells_never_negative(self, x, y):
        """Computed cells should always have non-negative row and column."""
        i, j = cell_for(x, y)

        assert i >= 0
        assert j >= 0

    def test_custom_cell_size(self):
        """cell_for() should honour an explicit cell size."""
        assert cell_for(25.0, 75.0, cell_size=50.0) == (0, 1)


class TestSpatialGridIndex:
    """Tests for SpatialGridIndex."""

    def test_empty_index(self):
        """A new index should hold nothing."""
        grid = SpatialGridIndex()

        assert len(grid) == 0
        assert grid.cells() == []
        assert grid.occupants((0, 0)) == []

    def test_register_appends_to_bucket(self):
        """register() should append nodes to the bucket at the cell."""
        grid = SpatialGridIndex()
        grid.register("a", (1, 2))
        grid.register("b", (1, 2))
        grid.register("c", (0, 0))

        assert grid.occupants((1, 2)) == ["a", "b"]
        assert grid.occupants((0, 0)) == ["c"]
        assert len(grid) == 3

    def test_occupants_returns_copy(self):
        """Changing the returned list should not change the index."""
        grid = SpatialGridIndex()
        grid.register("a", (0, 0))
        grid.occupants((0, 0)).append("b")

        assert grid.occupants((0, 0)) == ["a"]
        assert len(grid) == 1

    def test_occupants_does_not_create_buckets(self):
        """Looking up an empty cell should not add it to the index."""
        grid = SpatialGridIndex()
        grid.occupants((5, 5))

        assert grid.cells() == []

    def test_cell_at_uses_cell_size(self):
        """cell_at() should use the index's own cell size."""
        grid = SpatialGridIndex(cell_size=10.0)

        assert grid.cell_at(25.0, -3.0) == (2, 0)

    def test_invalid_cell_size(self):
        """Cell size must be positive."""
        with pytest.raises(ValueError):
            SpatialGridIndex(cell_size=0)

    def test_neighborhood_covers_3x3_block(self):
        """neighborhood() should yield nodes in the 3x3 block around a cell."""
        grid = SpatialGridIndex()
        for i in range(5):
            for j in range(5):
                grid.register((i, j), (i, j))

        found = set(grid.neighborhood((2, 2)))

        assert found == {(i, j) for i in (1, 2, 3) for j in (1, 2, 3)}

    def test_neighborhood_at_edge_has_no_wraparound(self):
        """Cells with negative indices should be skipped, not wrapped."""
        grid = SpatialGridIndex()
        for i in range(5):
            for j in range(5):
                grid.register((i, j), (i, j))

        found = set(grid.neighborhood((0, 0)))

        assert found == {(0, 0), (1, 0), (0, 1), (1, 1)}

    def test_clear(self):
        """clear() should empty the index."""
        grid = SpatialGridIndex()
        grid.register("a", (0, 0))
        grid.clear()

        assert len(grid) == 0
        assert grid.occupants((0, 0)) == []

    def test_grid_not_built_error_is_runtime_error(self):
        """GridNotBuiltError should be a RuntimeError."""
        assert issubclass(GridNotBuiltError, RuntimeError)
