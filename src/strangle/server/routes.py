"""Game-server webhook handlers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from strangle import __version__
from strangle.search import SearchDriver
from strangle.server.models import (
    GameState,
    InfoResponse,
    MoveRequest,
    MoveResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_driver(request: Request) -> SearchDriver:
    return request.app.state.driver


@router.get("/")
async def info() -> InfoResponse:
    """Report API version and appearance."""
    return InfoResponse(version=__version__)


@router.post("/start")
async def start(state: GameState) -> dict:
    """Acknowledge a new game."""
    logger.info(
        "Game %s starting: %dx%d, %d snakes, ruleset %s.",
        state.game.id, state.board.width, state.board.height,
        len(state.board.snakes), state.game.ruleset.name,
    )
    return {}


@router.post("/move")
async def move(state: MoveRequest, request: Request) -> MoveResponse:
    """Search for this turn's move within the game's timeout."""
    driver = _get_driver(request)
    board = state.to_board()
    # CPU bound; runs off the event loop.
    result = await run_in_threadpool(
        driver.search,
        board,
        state.you.id,
        time_budget_ms=state.game.timeout,
        hazard_damage=state.hazard_damage,
    )
    if not result.has_move:
        raise HTTPException(status_code=409, detail=result.annotation)
    return MoveResponse(move=result.move.label, shout=result.annotation)


@router.post("/end")
async def end(state: GameState) -> dict:
    """Log the end of a game."""
    alive = [s.id for s in state.board.snakes]
    outcome = "won" if alive == [state.you.id] else "finished"
    logger.info(
        "Game %s %s on turn %d (remaining: %s).",
        state.game.id, outcome, state.turn, ", ".join(alive) or "none",
    )
    return {}
