"""Tests for the Board model."""

import numpy as np
import pytest

from strangle.board import DIRECTIONS, MAX_HEALTH, Board, Direction, SnakeState


def _board() -> Board:
    return Board.from_coords(
        5, 4,
        snakes={
            "b": [(3, 1), (3, 0)],
            "a": [(1, 1), (1, 2), (1, 3)],
        },
        health={"a": 60},
        food=[(4, 3)],
        hazards=[(0, 0)],
        turn=7,
    )


class TestDirection:
    def test_priority_order(self):
        assert DIRECTIONS == (
            Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT,
        )

    def test_up_increases_y(self):
        assert Direction.UP.value == (0, 1)

    def test_opposite(self):
        assert Direction.UP.opposite is Direction.DOWN
        assert Direction.LEFT.opposite is Direction.RIGHT

    def test_labels(self):
        assert [d.label for d in DIRECTIONS] == ["up", "down", "left", "right"]
        assert Direction.from_label("left") is Direction.LEFT
        assert Direction.from_label("RIGHT") is Direction.RIGHT

    def test_unknown_label(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            Direction.from_label("sideways")


class TestBoardConstruction:
    def test_from_coords_flat_indices(self):
        board = _board()
        a = board.snake("a")
        assert a.body == (1 * 5 + 1, 2 * 5 + 1, 3 * 5 + 1)
        assert a.head == 6
        assert a.tail == 16
        assert a.length == 3
        assert a.health == 60

    def test_default_health(self):
        assert _board().snake("b").health == MAX_HEALTH

    def test_alive_ids_sorted(self):
        assert _board().alive_ids == ("a", "b")

    def test_snakes_read_only(self):
        board = _board()
        with pytest.raises(TypeError):
            board.snakes["c"] = SnakeState("c", (0,), 100)

    def test_turn_and_sets(self):
        board = _board()
        assert board.turn == 7
        assert board.food == frozenset({3 * 5 + 4})
        assert board.hazards == frozenset({0})


class TestBoardQueries:
    def test_in_bounds(self):
        board = _board()
        assert board.in_bounds(0, 0)
        assert board.in_bounds(4, 3)
        assert not board.in_bounds(5, 0)
        assert not board.in_bounds(0, -1)

    def test_index_coords_roundtrip(self):
        board = _board()
        assert board.coords(board.index(3, 2)) == (3, 2)

    def test_neighbour_may_leave_board(self):
        board = _board()
        assert board.neighbour(board.index(0, 0), Direction.LEFT) == (-1, 0)
        assert board.neighbour(board.index(0, 0), Direction.UP) == (0, 1)

    def test_occupant(self):
        board = _board()
        assert board.occupant(1, 2) == "a"
        assert board.occupant(3, 0) == "b"
        assert board.occupant(0, 2) is None

    def test_occupant_out_of_range_is_absent(self):
        board = _board()
        assert board.occupant(-1, 0) is None
        assert board.occupant(10, 10) is None

    def test_food_and_hazard(self):
        board = _board()
        assert board.has_food(4, 3)
        assert not board.has_food(0, 0)
        assert board.has_hazard(0, 0)
        assert not board.has_food(99, 99)
        assert not board.has_hazard(-1, -1)

    def test_opponents_of(self):
        board = _board()
        assert [s.snake_id for s in board.opponents_of("a")] == ["b"]

    def test_dead_snake_absent(self):
        board = _board()
        assert not board.is_alive("zed")
        assert board.snake("zed") is None

    def test_occupancy_array(self):
        board = _board()
        assert board.occupancy.shape == (20,)
        assert int(np.count_nonzero(board.occupancy)) == 5


class TestReleaseTimes:
    def test_segments_release_in_order(self):
        board = _board()
        release = board.release_times()
        assert release[board.index(1, 1)] == 3
        assert release[board.index(1, 2)] == 2
        assert release[board.index(1, 3)] == 1
        assert release[board.index(0, 2)] == 0

    def test_stacked_segments_take_latest(self):
        board = Board.from_coords(3, 3, snakes={"a": [(1, 1), (1, 1), (1, 1)]})
        assert board.release_times()[board.index(1, 1)] == 3


class TestCanonicalKey:
    def test_equal_positions_share_key(self):
        assert _board().canonical_key() == _board().canonical_key()

    def test_health_changes_key(self):
        other = Board.from_coords(
            5, 4,
            snakes={"a": [(1, 1), (1, 2), (1, 3)], "b": [(3, 1), (3, 0)]},
            health={"a": 59},
            food=[(4, 3)],
            hazards=[(0, 0)],
            turn=7,
        )
        assert other.canonical_key() != _board().canonical_key()

    def test_key_is_hashable(self):
        assert isinstance(hash(_board().canonical_key()), int)


class TestRender:
    def test_render_layout(self):
        board = Board.from_coords(
            3, 2, snakes={"a": [(0, 0), (1, 0)]}, food=[(2, 1)],
        )
        assert board.render() == "..*\nAa."
