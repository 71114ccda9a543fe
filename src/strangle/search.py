"""Time-bounded iterative-deepening search over simultaneous moves."""

from __future__ import annotations

import enum
import itertools
import logging
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from strangle.board import DIRECTIONS, Board, Direction
from strangle.cache import Bound, CacheEntry, TranspositionCache
from strangle.config import EngineConfig, OpponentModel
from strangle.evaluator import Evaluator
from strangle.moves import is_safe, legal_moves
from strangle.simulator import simulate

logger = logging.getLogger(__name__)

# Root window widening so that ties with the best move get exact scores.
_TIE_EPSILON = 1e-6


class SearchPhase(enum.Enum):
    """Lifecycle of one search invocation."""

    EXPANDING = "expanding"
    CUTOFF_REACHED = "cutoff-reached"
    TIME_EXPIRED = "time-expired"
    DONE = "done"


class _SearchTimeout(Exception):
    """Unwinds the current depth once the deadline has passed."""


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one turn's search.

    ``move`` is ``None`` only when the snake had no legal move at all;
    such a result must not be sent as a move. ``scores`` holds the root
    values of the last completed depth; with paranoid opponents only the
    chosen move's value is exact, the others may be upper bounds left by
    alpha-beta cutoffs.
    """

    move: Direction | None
    score: float
    depth: int
    nodes: int
    elapsed_ms: float
    phase: SearchPhase
    scores: Mapping[Direction, float] = field(default_factory=dict)

    @property
    def has_move(self) -> bool:
        return self.move is not None

    @property
    def annotation(self) -> str:
        """Short human-readable note; no effect on play."""
        if self.move is None:
            return "no legal moves"
        if self.depth == 0:
            return "no completed search"
        return f"depth {self.depth}, score {self.score:.0f}"

    @classmethod
    def no_move(cls, *, elapsed_ms: float = 0.0) -> SearchResult:
        return cls(
            move=None,
            score=-math.inf,
            depth=0,
            nodes=0,
            elapsed_ms=elapsed_ms,
            phase=SearchPhase.DONE,
        )


@dataclass
class _Context:
    """Mutable bookkeeping owned by a single search invocation."""

    snake_id: str
    deadline: float | None
    hazard_damage: int
    multisnake: bool
    cache: TranspositionCache
    nodes: int = 0
    evaluations: int = 0
    cutoff: bool = False
    # Clock bookkeeping for deadline checks, in clock units.
    last_check: float = 0.0
    reserve: float = 0.0


def joint_replies(board: Board, snake_id: str) -> list[dict[str, Direction]]:
    """Every combination of opponent moves, in ascending-id priority order.

    Moves that leave the board are dropped unless a snake has no other
    option. With no opponents the single empty combination is returned.
    """
    ids: list[str] = []
    options: list[tuple[Direction, ...]] = []
    for other in board.opponents_of(snake_id):
        moves = legal_moves(board, other.snake_id)
        on_board = tuple(
            m for m in moves
            if board.in_bounds(*board.neighbour(other.head, m))
        )
        ids.append(other.snake_id)
        options.append(on_board or moves)
    return [dict(zip(ids, combo)) for combo in itertools.product(*options)]


class SearchDriver:
    """Anytime move selection for one controlled snake.

    Runs a depth-1 search, then depth 2 and so on, until the deadline,
    the configured maximum depth, or an exhausted tree stops it. The move
    from the deepest completed depth is returned. Opponents are modelled
    as paranoid minimisers (with alpha-beta pruning) or as uniformly
    random movers, chosen once from the configuration.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        evaluator: Evaluator | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config or EngineConfig()
        self.evaluator = evaluator or Evaluator(self.config.weights)
        self._clock = clock
        self._paranoid = self.config.opponents is OpponentModel.PARANOID
        self._reply = (
            self._paranoid_reply if self._paranoid else self._expected_reply
        )

    def search(
        self,
        board: Board,
        snake_id: str,
        *,
        time_budget_ms: float | None = None,
        max_depth: int | None = None,
        hazard_damage: int | None = None,
    ) -> SearchResult:
        """Choose a move for *snake_id*.

        *time_budget_ms* defaults to the configured budget; pass
        ``math.inf`` to search to *max_depth* without a deadline. *max_depth*
        defaults to the configured cap for the number of living snakes.
        """
        cfg = self.config
        start = self._clock()
        budget = cfg.default_time_budget_ms if time_budget_ms is None else time_budget_ms
        deadline = None
        if math.isfinite(budget):
            deadline = start + (budget - cfg.safety_margin_ms) / 1000.0
        if max_depth is None:
            max_depth = cfg.depth_cap(len(board.snakes))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Turn %d board:\n%s", board.turn, board.render())

        root_moves = legal_moves(board, snake_id)
        if not root_moves:
            logger.warning(
                "Turn %d: snake %s has no legal moves.", board.turn, snake_id,
            )
            return SearchResult.no_move(
                elapsed_ms=(self._clock() - start) * 1000.0,
            )

        fallback = next(
            (m for m in root_moves if is_safe(board, snake_id, m)),
            root_moves[0],
        )

        ctx = _Context(
            snake_id=snake_id,
            deadline=deadline,
            hazard_damage=cfg.hazard_damage if hazard_damage is None else hazard_damage,
            multisnake=len(board.snakes) > 1,
            cache=TranspositionCache(cfg.cache_size),
            last_check=start,
        )

        best_move = fallback
        best_score = -math.inf
        scores: dict[Direction, float] = {}
        completed = 0
        order = list(root_moves)
        phase = SearchPhase.EXPANDING

        while phase is SearchPhase.EXPANDING:
            depth = completed + 1
            ctx.cutoff = False
            try:
                depth_scores = self._search_root(ctx, board, order, depth)
            except _SearchTimeout:
                phase = SearchPhase.TIME_EXPIRED
                break

            completed = depth
            scores = depth_scores
            best_move = max(
                scores, key=lambda m: (scores[m], -DIRECTIONS.index(m)),
            )
            best_score = scores[best_move]
            order = [best_move] + [m for m in root_moves if m is not best_move]
            logger.debug(
                "Depth %d complete: best %s (%.1f), %d nodes.",
                depth, best_move.label, best_score, ctx.nodes,
            )

            if not ctx.cutoff:
                phase = SearchPhase.DONE
            elif depth >= max_depth:
                phase = SearchPhase.CUTOFF_REACHED

        if completed == 0:
            logger.warning(
                "Turn %d: deadline passed before depth 1 completed; "
                "falling back to %s.", board.turn, fallback.label,
            )

        logger.debug(
            "Search finished: %d evaluations, cache %s",
            ctx.evaluations, ctx.cache.stats(),
        )
        return self._finish(
            board, snake_id, start, best_move, best_score, completed,
            ctx.nodes, phase, scores,
        )

    def _finish(
        self,
        board: Board,
        snake_id: str,
        start: float,
        move: Direction,
        score: float,
        depth: int,
        nodes: int,
        phase: SearchPhase,
        scores: dict[Direction, float],
    ) -> SearchResult:
        elapsed_ms = (self._clock() - start) * 1000.0
        logger.info(
            "Turn %d: %s moves %s (depth %d, score %.1f, %d nodes, "
            "%.1f ms, %s).",
            board.turn, snake_id, move.label, depth, score, nodes,
            elapsed_ms, phase.value,
        )
        return SearchResult(
            move=move,
            score=score,
            depth=depth,
            nodes=nodes,
            elapsed_ms=elapsed_ms,
            phase=phase,
            scores=dict(scores),
        )

    # ------------------------------------------------------------------
    # Tree search
    # ------------------------------------------------------------------

    def _tick(self, ctx: _Context) -> None:
        ctx.nodes += 1
        if ctx.nodes % self.config.check_interval == 0:
            self._check_deadline(ctx)

    def _check_deadline(self, ctx: _Context) -> None:
        """Stop once the longest work seen between checks would overrun."""
        if ctx.deadline is None:
            return
        now = self._clock()
        ctx.reserve = max(ctx.reserve, now - ctx.last_check)
        ctx.last_check = now
        if now + ctx.reserve >= ctx.deadline:
            raise _SearchTimeout

    def _evaluate(self, ctx: _Context, board: Board) -> float:
        self._check_deadline(ctx)
        ctx.evaluations += 1
        return self.evaluator.evaluate(board, ctx.snake_id)

    def _search_root(
        self,
        ctx: _Context,
        board: Board,
        order: list[Direction],
        depth: int,
    ) -> dict[Direction, float]:
        scores: dict[Direction, float] = {}
        best = -math.inf
        for move in order:
            self._tick(ctx)
            value = self._reply(
                ctx, board, move, depth, best - _TIE_EPSILON, math.inf,
            )
            scores[move] = value
            best = max(best, value)
        return scores

    def _max_node(
        self,
        ctx: _Context,
        board: Board,
        depth: int,
        alpha: float,
        beta: float,
    ) -> float:
        self._tick(ctx)
        me = ctx.snake_id
        if not board.is_alive(me) or (ctx.multisnake and len(board.snakes) == 1):
            return self._evaluate(ctx, board)

        key = board.canonical_key()
        entry = ctx.cache.get(key)
        hint = None
        if entry is not None:
            hint = entry.best_move
            if entry.depth >= depth:
                # Stored subtrees may have been cut off by depth.
                ctx.cutoff = True
                if entry.bound is Bound.EXACT:
                    return entry.value
                if entry.bound is Bound.LOWER and entry.value >= beta:
                    return entry.value
                if entry.bound is Bound.UPPER and entry.value <= alpha:
                    return entry.value

        if depth == 0:
            ctx.cutoff = True
            value = self._evaluate(ctx, board)
            ctx.cache.put(key, CacheEntry(0, value, Bound.EXACT))
            return value

        moves = legal_moves(board, me)
        if hint is not None and hint in moves:
            moves = (hint, *(m for m in moves if m is not hint))

        alpha_orig = alpha
        best = -math.inf
        best_move = None
        for move in moves:
            value = self._reply(ctx, board, move, depth, alpha, beta)
            if value > best:
                best, best_move = value, move
            if self._paranoid:
                alpha = max(alpha, best)
                if alpha >= beta:
                    break

        bound = Bound.EXACT
        if best <= alpha_orig:
            bound = Bound.UPPER
        elif best >= beta:
            bound = Bound.LOWER
        ctx.cache.put(key, CacheEntry(depth, best, bound, best_move))
        return best

    def _paranoid_reply(
        self,
        ctx: _Context,
        board: Board,
        move: Direction,
        depth: int,
        alpha: float,
        beta: float,
    ) -> float:
        """Worst case over every joint opponent reply to *move*."""
        self._check_deadline(ctx)
        worst = math.inf
        for replies in joint_replies(board, ctx.snake_id):
            replies[ctx.snake_id] = move
            child = simulate(board, replies, hazard_damage=ctx.hazard_damage)
            value = self._max_node(ctx, child, depth - 1, alpha, beta)
            worst = min(worst, value)
            beta = min(beta, worst)
            if beta <= alpha:
                break
        return worst

    def _expected_reply(
        self,
        ctx: _Context,
        board: Board,
        move: Direction,
        depth: int,
        alpha: float,
        beta: float,
    ) -> float:
        """Mean over joint opponent replies, each assumed equally likely."""
        self._check_deadline(ctx)
        total = 0.0
        combos = joint_replies(board, ctx.snake_id)
        for replies in combos:
            replies[ctx.snake_id] = move
            child = simulate(board, replies, hazard_damage=ctx.hazard_damage)
            total += self._max_node(ctx, child, depth - 1, -math.inf, math.inf)
        return total / len(combos)
