"""Simultaneous-move simulation producing the next board."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping

from strangle.board import (
    DEFAULT_HAZARD_DAMAGE,
    MAX_HEALTH,
    Board,
    Direction,
    SnakeState,
)

logger = logging.getLogger(__name__)

FALLBACK_MOVE = Direction.UP


def simulate(
    board: Board,
    actions: Mapping[str, Direction],
    *,
    hazard_damage: int = DEFAULT_HAZARD_DAMAGE,
) -> Board:
    """Advance *board* by one turn with one action per living snake.

    Snakes without an entry in *actions* move :data:`FALLBACK_MOVE`;
    entries for dead or unknown snakes are ignored. Never raises: certain
    death is simply reflected in the returned board.
    """
    trace = logger.isEnabledFor(logging.DEBUG)

    # --- move, feed and starve ---
    moved: dict[str, SnakeState] = {}
    ate: set[str] = set()
    eliminated: dict[str, str] = {}
    for sid, snake in board.snakes.items():
        direction = actions.get(sid, FALLBACK_MOVE)
        x, y = board.neighbour(snake.head, direction)
        if not board.in_bounds(x, y):
            eliminated[sid] = "out of bounds"
            continue

        new_head = board.index(x, y)
        if new_head in board.food:
            ate.add(sid)
            body = (new_head, *snake.body)
            health = MAX_HEALTH
        else:
            body = (new_head, *snake.body[:-1])
            health = snake.health - 1
            if new_head in board.hazards:
                health -= hazard_damage

        if health <= 0:
            eliminated[sid] = "starvation"
            continue
        moved[sid] = SnakeState(snake_id=sid, body=body, health=health)

    # --- collisions, judged together against the snakes still standing ---
    segments: set[int] = set()
    for snake in moved.values():
        segments.update(snake.body[1:])
    heads = Counter(snake.head for snake in moved.values())

    for sid, snake in moved.items():
        if snake.head in segments:
            eliminated[sid] = "body collision"
            continue
        if heads[snake.head] > 1:
            rivals = [
                other.length for other in moved.values()
                if other.head == snake.head and other.snake_id != sid
            ]
            longest = max(rivals)
            if snake.length <= longest:
                eliminated[sid] = "head-to-head collision"

    survivors = [s for sid, s in moved.items() if sid not in eliminated]

    eaten = {s.head for s in survivors if s.snake_id in ate}
    food = board.food - eaten

    if trace:
        for sid, cause in eliminated.items():
            logger.debug(
                "Turn %d: snake %s eliminated (%s).", board.turn + 1, sid, cause,
            )
        for cell in eaten:
            logger.debug(
                "Turn %d: food at %s consumed.", board.turn + 1,
                board.coords(cell),
            )

    return Board(
        board.width,
        board.height,
        snakes=survivors,
        food=food,
        hazards=board.hazards,
        turn=board.turn + 1,
    )
