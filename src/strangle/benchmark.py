"""Search-depth calibration against a wall-clock limit."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field

import numpy as np

from strangle.board import MAX_HEALTH, Board, SnakeState
from strangle.config import EngineConfig
from strangle.search import SearchDriver, SearchPhase

logger = logging.getLogger(__name__)


@dataclass
class DepthTiming:
    """Mean wall time of a fixed-depth search."""

    depth: int
    mean_ms: float
    nodes: int


@dataclass
class BenchmarkResult:
    """Results from a depth calibration run."""

    num_players: int
    width: int
    height: int
    limit_ms: float
    runs: int
    chosen_depth: int
    timings: list[DepthTiming] = field(default_factory=list)

    def summary(self) -> str:
        lines = [
            f"Benchmark: {self.num_players} player(s) on "
            f"{self.width}x{self.height}, {self.runs} run(s) per depth, "
            f"limit {self.limit_ms:.0f} ms",
        ]
        for t in self.timings:
            lines.append(
                f"  depth {t.depth:2d}: {t.mean_ms:8.1f} ms, {t.nodes} nodes",
            )
        lines.append(f"Chosen depth: {self.chosen_depth}")
        return "\n".join(lines)


def make_board(
    num_players: int,
    width: int = 11,
    height: int = 11,
    *,
    num_food: int = 3,
    seed: int | None = None,
) -> Board:
    """Build the benchmark position.

    Snakes are vertical columns spread evenly across the board, heads at
    the bottom, with food scattered on free cells by a seeded RNG.
    """
    if num_players < 1:
        raise ValueError("num_players must be at least 1.")
    if width < 2 * num_players or height < 6:
        raise ValueError("board is too small for the benchmark layout.")

    spacing = width // num_players
    offset = spacing // 2
    snakes = []
    for i in range(num_players):
        x = offset + spacing * i
        body = tuple(y * width + x for y in range(2, height - 2))
        snakes.append(
            SnakeState(snake_id=f"snake-{i}", body=body, health=MAX_HEALTH),
        )

    occupied = {cell for s in snakes for cell in s.body}
    free = np.array(
        [idx for idx in range(width * height) if idx not in occupied],
    )
    rng = np.random.default_rng(seed)
    count = min(num_food, len(free))
    food = rng.choice(free, size=count, replace=False).tolist() if count else []
    return Board(width, height, snakes=snakes, food=food)


def calibrate_depth(
    *,
    num_players: int = 2,
    width: int = 11,
    height: int = 11,
    limit_ms: float = 250.0,
    runs: int = 3,
    max_depth: int = 20,
    config: EngineConfig | None = None,
    seed: int | None = 42,
) -> BenchmarkResult:
    """Find the deepest fixed depth whose mean search time stays in budget.

    Searches of increasing depth run without a deadline; the first depth
    whose mean exceeds *limit_ms* stops the sweep and the previous one
    (at least 1) is chosen.
    """
    if runs < 1:
        raise ValueError("runs must be at least 1.")
    if max_depth < 1:
        raise ValueError("max_depth must be at least 1.")

    board = make_board(num_players, width, height, seed=seed)
    driver = SearchDriver(config)
    me = board.alive_ids[0]

    timings: list[DepthTiming] = []
    chosen = max_depth
    for depth in range(1, max_depth + 1):
        elapsed = 0.0
        nodes = 0
        result = None
        for _ in range(runs):
            start = time.perf_counter()
            result = driver.search(
                board, me, time_budget_ms=math.inf, max_depth=depth,
            )
            elapsed += time.perf_counter() - start
            nodes = result.nodes
        mean_ms = elapsed / runs * 1000.0
        timings.append(DepthTiming(depth=depth, mean_ms=mean_ms, nodes=nodes))

        if mean_ms >= limit_ms:
            chosen = max(depth - 1, 1)
            logger.info(
                "Reached the limit of %.0f ms at depth %d (took %.1f ms); "
                "going with a max depth of %d.",
                limit_ms, depth, mean_ms, chosen,
            )
            break
        if result is not None and result.phase is SearchPhase.DONE:
            chosen = depth
            logger.info("Search tree exhausted at depth %d.", depth)
            break
    else:
        logger.info(
            "All depths up to %d finished within %.0f ms.", max_depth, limit_ms,
        )

    bench = BenchmarkResult(
        num_players=num_players,
        width=width,
        height=height,
        limit_ms=limit_ms,
        runs=runs,
        chosen_depth=chosen,
        timings=timings,
    )
    logger.info(bench.summary())
    return bench


def calibrate_depth_caps(
    player_counts: tuple[int, ...] = (1, 2, 3, 4),
    **kwargs,
) -> dict[int, int]:
    """Calibrate one depth per player count, for :attr:`EngineConfig.depth_caps`.

    Keyword arguments are passed on to :func:`calibrate_depth`.
    """
    caps = {
        count: calibrate_depth(num_players=count, **kwargs).chosen_depth
        for count in player_counts
    }
    logger.info("Calibrated depth caps: %s", caps)
    return caps
