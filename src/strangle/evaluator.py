"""Heuristic scoring of boards from one snake's point of view."""

from __future__ import annotations

import heapq
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from strangle.board import MAX_HEALTH, Board
from strangle.config import EvaluatorWeights


@lru_cache(maxsize=32)
def _neighbour_table(width: int, height: int) -> tuple[tuple[int, ...], ...]:
    """Orthogonal in-bounds neighbours of every flat index."""
    table = []
    for idx in range(width * height):
        x, y = idx % width, idx // width
        cells = []
        if y + 1 < height:
            cells.append(idx + width)
        if y > 0:
            cells.append(idx - width)
        if x > 0:
            cells.append(idx - 1)
        if x + 1 < width:
            cells.append(idx + 1)
        table.append(tuple(cells))
    return tuple(table)


def _explore(
    board: Board,
    start: int,
    max_distance: int,
    release: Sequence[int],
    targets: frozenset[int] = frozenset(),
) -> tuple[int, int | None]:
    """Earliest-arrival search from *start*.

    A cell is entered no earlier than one step after its neighbour and
    no earlier than ``release[cell]``. Returns the number of cells reached
    within *max_distance* (excluding *start*) and the arrival step at the
    nearest cell in *targets*, if any was reached.
    """
    neighbours = _neighbour_table(board.width, board.height)
    arrival = {start: 0}
    heap = [(0, start)]
    target_distance = None
    while heap:
        step, cell = heapq.heappop(heap)
        if step > arrival[cell]:
            continue
        if target_distance is None and cell != start and cell in targets:
            target_distance = step
        for nxt in neighbours[cell]:
            when = max(step + 1, release[nxt])
            if when > max_distance or when >= arrival.get(nxt, max_distance + 1):
                continue
            arrival[nxt] = when
            heapq.heappush(heap, (when, nxt))
    return len(arrival) - 1, target_distance


def flood_fill(
    board: Board,
    start: int,
    *,
    max_distance: int | None = None,
    release: Sequence[int] | None = None,
) -> int:
    """Count cells reachable from *start* within *max_distance* steps.

    *release* gives per cell the step from which it is free (see
    :meth:`Board.release_times`); lowering any entry never shrinks the
    result.
    """
    if release is None:
        release = board.release_times().tolist()
    if max_distance is None:
        max_distance = board.size
    area, _ = _explore(board, start, max_distance, release)
    return area


@dataclass(frozen=True)
class ScoreFactors:
    """Breakdown of a board score for one snake."""

    snake_id: str
    weights: EvaluatorWeights
    dead: bool
    turn: int
    health: int = 0
    area: int = 0
    best_opponent_area: int = 0
    length: int = 0
    longest_opponent: int = 0
    food_distance: int | None = None
    remaining_opponents: int = 0
    head_danger: int = 0

    @property
    def heuristic(self) -> float:
        """Weighted sum of the alive terms, clipped to the heuristic bound."""
        w = self.weights
        value = w.space * self.area
        value += w.space_advantage * (self.area - self.best_opponent_area)
        if self.area < self.length:
            value -= w.trapped
        value += w.health * self.health
        value -= w.starvation * ((MAX_HEALTH - self.health) / MAX_HEALTH) ** 3
        if self.remaining_opponents:
            value += w.length * (self.length - self.longest_opponent)
        if (
            self.health < w.food_health_threshold
            and self.food_distance is not None
        ):
            value += w.food / (1 + self.food_distance)
        value -= w.opponents * self.remaining_opponents
        value -= w.head_danger * self.head_danger
        return max(-w.heuristic_bound, min(w.heuristic_bound, value))

    @property
    def total(self) -> float:
        w = self.weights
        if self.dead:
            # Later deaths are less bad, but never approach an alive score.
            return min(-w.death + w.survival_turn * self.turn, -w.death / 2)
        value = self.heuristic
        if self.remaining_opponents == 0:
            value += w.victory
        return float(value)

    def __str__(self) -> str:
        if self.dead:
            return f"{self.total:.1f} (snake {self.snake_id} is dead)"
        food = "none" if self.food_distance is None else self.food_distance
        return (
            f"{self.total:.1f} (snake {self.snake_id} @ {self.health} health, "
            f"area {self.area} vs {self.best_opponent_area}, "
            f"length {self.length} vs {self.longest_opponent}, "
            f"food {food}, {self.remaining_opponents} remaining opponents, "
            f"{self.head_danger} dangerous heads)"
        )


class Evaluator:
    """Pure board evaluator: the same board always gets the same score."""

    def __init__(self, weights: EvaluatorWeights | None = None) -> None:
        self.weights = weights or EvaluatorWeights()

    def factors(self, board: Board, snake_id: str) -> ScoreFactors:
        """Collect the scoring terms for *snake_id* on *board*."""
        w = self.weights
        me = board.snake(snake_id)
        if me is None:
            return ScoreFactors(
                snake_id=snake_id, weights=w, dead=True, turn=board.turn,
            )

        release = board.release_times().tolist()
        horizon = min(w.space_horizon, me.health)
        area, food_distance = _explore(
            board, me.head, horizon, release, board.food,
        )

        opponents = board.opponents_of(snake_id)
        best_opponent_area = 0
        longest_opponent = 0
        head_danger = 0
        mx, my = board.coords(me.head)
        for other in opponents:
            other_area, _ = _explore(
                board, other.head, min(w.space_horizon, other.health), release,
            )
            best_opponent_area = max(best_opponent_area, other_area)
            longest_opponent = max(longest_opponent, other.length)
            if other.length >= me.length:
                ox, oy = board.coords(other.head)
                if abs(ox - mx) + abs(oy - my) <= 2:
                    head_danger += 1

        return ScoreFactors(
            snake_id=snake_id,
            weights=w,
            dead=False,
            turn=board.turn,
            health=me.health,
            area=area,
            best_opponent_area=best_opponent_area,
            length=me.length,
            longest_opponent=longest_opponent,
            food_distance=food_distance,
            remaining_opponents=len(opponents),
            head_danger=head_danger,
        )

    def evaluate(self, board: Board, snake_id: str) -> float:
        """Score *board* for *snake_id*; higher is better."""
        return self.factors(board, snake_id).total
