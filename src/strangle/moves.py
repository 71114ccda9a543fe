"""Candidate move generation."""

from __future__ import annotations

from strangle.board import DIRECTIONS, Board, Direction


def facing(board: Board, snake_id: str) -> Direction | None:
    """Direction the snake last moved in, from its neck to its head.

    Returns ``None`` for dead snakes and for stacked segments (as at the
    start of a game), where no reversal is possible.
    """
    snake = board.snake(snake_id)
    if snake is None or snake.length < 2:
        return None
    head, neck = snake.body[0], snake.body[1]
    if head == neck:
        return None
    hx, hy = board.coords(head)
    nx, ny = board.coords(neck)
    try:
        return Direction((hx - nx, hy - ny))
    except ValueError:
        # Neck is not orthogonally adjacent; nothing to exclude.
        return None


def legal_moves(board: Board, snake_id: str) -> tuple[Direction, ...]:
    """Return every move except reversing into the neck.

    Moves into walls or bodies stay in the result: when every option is
    lethal the least-bad one must still be chosen.
    """
    if not board.is_alive(snake_id):
        return ()
    current = facing(board, snake_id)
    if current is None:
        return DIRECTIONS
    reverse = current.opposite
    return tuple(d for d in DIRECTIONS if d is not reverse)


def is_safe(board: Board, snake_id: str, direction: Direction) -> bool:
    """One-step check: stays on the board and avoids bodies that remain.

    Tails are treated as vacating; head-to-head risk is ignored.
    """
    snake = board.snake(snake_id)
    if snake is None:
        return False
    x, y = board.neighbour(snake.head, direction)
    if not board.in_bounds(x, y):
        return False
    target = board.index(x, y)
    for other in board.snakes.values():
        if target in other.body[:-1]:
            return False
    return True
