"""Immutable per-turn board model backed by flat cell indices."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType

import numpy as np

MAX_HEALTH = 100
DEFAULT_HAZARD_DAMAGE = 14


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values.

    The y axis points up, so ``UP`` increases ``y``.
    """

    UP = (0, 1)
    DOWN = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> Direction:
        dx, dy = self.value
        return Direction((-dx, -dy))

    @property
    def label(self) -> str:
        """Lowercase name used on the wire."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> Direction:
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {label!r}.") from None


# Fixed move-priority order for every deterministic tie-break.
DIRECTIONS: tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)


@dataclass(frozen=True)
class SnakeState:
    """A living snake: ordered flat cell indices, head first."""

    snake_id: str
    body: tuple[int, ...]
    health: int

    @property
    def head(self) -> int:
        return self.body[0]

    @property
    def tail(self) -> int:
        return self.body[-1]

    @property
    def length(self) -> int:
        return len(self.body)


class Board:
    """Snapshot of the game at one turn.

    Cells are addressed by flat index ``y * width + x``. Only living snakes
    are stored; a snake missing from :attr:`snakes` has been eliminated.
    Instances are never mutated after construction.
    """

    def __init__(
        self,
        width: int,
        height: int,
        snakes: Iterable[SnakeState] = (),
        food: Iterable[int] = (),
        hazards: Iterable[int] = (),
        turn: int = 0,
    ) -> None:
        self.width = width
        self.height = height
        ordered = sorted(snakes, key=lambda s: s.snake_id)
        self.snakes: Mapping[str, SnakeState] = MappingProxyType(
            {s.snake_id: s for s in ordered},
        )
        self.food: frozenset[int] = frozenset(food)
        self.hazards: frozenset[int] = frozenset(hazards)
        self.turn = turn

    @classmethod
    def from_coords(
        cls,
        width: int,
        height: int,
        *,
        snakes: Mapping[str, Sequence[tuple[int, int]]],
        health: Mapping[str, int] | None = None,
        food: Iterable[tuple[int, int]] = (),
        hazards: Iterable[tuple[int, int]] = (),
        turn: int = 0,
    ) -> Board:
        """Build a board from ``(x, y)`` coordinates."""
        health = health or {}
        states = [
            SnakeState(
                snake_id=sid,
                body=tuple(y * width + x for x, y in body),
                health=health.get(sid, MAX_HEALTH),
            )
            for sid, body in snakes.items()
        ]
        return cls(
            width,
            height,
            snakes=states,
            food=(y * width + x for x, y in food),
            hazards=(y * width + x for x, y in hazards),
            turn=turn,
        )

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the board."""
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def coords(self, index: int) -> tuple[int, int]:
        return index % self.width, index // self.width

    def neighbour(self, index: int, direction: Direction) -> tuple[int, int]:
        """Coordinate one step from *index*; may lie off the board."""
        x, y = self.coords(index)
        dx, dy = direction.value
        return x + dx, y + dy

    @property
    def alive_ids(self) -> tuple[str, ...]:
        return tuple(self.snakes)

    def is_alive(self, snake_id: str) -> bool:
        return snake_id in self.snakes

    def snake(self, snake_id: str) -> SnakeState | None:
        return self.snakes.get(snake_id)

    def opponents_of(self, snake_id: str) -> tuple[SnakeState, ...]:
        return tuple(s for sid, s in self.snakes.items() if sid != snake_id)

    @cached_property
    def occupancy(self) -> np.ndarray:
        """Dense array of ``ordinal + 1`` per cell (0 means empty)."""
        cells = np.zeros(self.size, dtype=np.int16)
        for ordinal, snake in enumerate(self.snakes.values(), start=1):
            cells[list(snake.body)] = ordinal
        return cells

    def occupant(self, x: int, y: int) -> str | None:
        """Return the id of the snake on a cell, or ``None``."""
        if not self.in_bounds(x, y):
            return None
        ordinal = int(self.occupancy[self.index(x, y)])
        if ordinal == 0:
            return None
        return self.alive_ids[ordinal - 1]

    def has_food(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.index(x, y) in self.food

    def has_hazard(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.index(x, y) in self.hazards

    def release_times(self) -> np.ndarray:
        """Turns until each cell is vacated by the segment currently on it.

        Free cells hold 0. A segment ``i`` of a snake of length ``n`` leaves
        after ``n - i`` moves; where segments stack, the latest one wins.
        """
        release = np.zeros(self.size, dtype=np.int32)
        for snake in self.snakes.values():
            n = snake.length
            for i, cell in enumerate(snake.body):
                if n - i > release[cell]:
                    release[cell] = n - i
        return release

    def canonical_key(self) -> tuple:
        """Hashable key identifying this position."""
        return (
            self.turn,
            tuple(
                (s.snake_id, s.body, s.health) for s in self.snakes.values()
            ),
            tuple(sorted(self.food)),
        )

    def render(self) -> str:
        """Draw the board, highest row first.

        Heads are uppercase letters, bodies lowercase (by snake ordinal),
        food ``*``, hazards ``~`` and free cells ``.``.
        """
        rows = [["." for _ in range(self.width)] for _ in range(self.height)]
        for idx in self.hazards:
            x, y = self.coords(idx)
            rows[y][x] = "~"
        for idx in self.food:
            x, y = self.coords(idx)
            rows[y][x] = "*"
        for ordinal, snake in enumerate(self.snakes.values()):
            letter = chr(ord("a") + ordinal % 26)
            for idx in reversed(snake.body):
                x, y = self.coords(idx)
                rows[y][x] = letter
            x, y = self.coords(snake.head)
            rows[y][x] = letter.upper()
        return "\n".join("".join(row) for row in reversed(rows))

    def __repr__(self) -> str:
        return (
            f"Board({self.width}x{self.height}, turn={self.turn}, "
            f"snakes={list(self.snakes)}, food={len(self.food)})"
        )
