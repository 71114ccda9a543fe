"""Pydantic models for the turn snapshot and move response."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from strangle.board import Board


class Coord(BaseModel):
    """A board coordinate; ``y`` grows upwards."""

    x: int
    y: int


class SnakeModel(BaseModel):
    """One snake as sent by the game server."""

    id: str
    name: str = ""
    health: int = Field(ge=0, le=100)
    body: list[Coord] = Field(min_length=1)
    head: Coord | None = None
    length: int | None = None
    shout: str | None = None


class RulesetSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hazard_damage_per_turn: int | None = Field(
        default=None, alias="hazardDamagePerTurn", ge=0,
    )


class Ruleset(BaseModel):
    name: str = "standard"
    version: str = ""
    settings: RulesetSettings | None = None


class GameInfo(BaseModel):
    id: str
    ruleset: Ruleset = Field(default_factory=Ruleset)
    timeout: int = Field(default=500, ge=1)
    map: str | None = None
    source: str | None = None


class BoardModel(BaseModel):
    height: int = Field(ge=1)
    width: int = Field(ge=1)
    food: list[Coord] = Field(default_factory=list)
    hazards: list[Coord] = Field(default_factory=list)
    snakes: list[SnakeModel] = Field(default_factory=list)


class GameState(BaseModel):
    """Request body of ``/start`` and ``/end``, base of :class:`MoveRequest`.

    Structural problems are rejected here so the engine only ever sees a
    consistent board.
    """

    game: GameInfo
    turn: int = Field(default=0, ge=0)
    board: BoardModel
    you: SnakeModel

    @model_validator(mode="after")
    def _check_consistency(self) -> GameState:
        board = self.board

        def inside(c: Coord) -> bool:
            return 0 <= c.x < board.width and 0 <= c.y < board.height

        ids = [s.id for s in board.snakes]
        if len(ids) != len(set(ids)):
            raise ValueError("snake ids must be unique.")
        for snake in board.snakes:
            if not all(inside(c) for c in snake.body):
                raise ValueError(f"snake {snake.id} has segments off the board.")
        if not all(inside(c) for c in board.food):
            raise ValueError("food must lie on the board.")
        if not all(inside(c) for c in board.hazards):
            raise ValueError("hazards must lie on the board.")
        return self

    @property
    def hazard_damage(self) -> int | None:
        settings = self.game.ruleset.settings
        return settings.hazard_damage_per_turn if settings else None

    def to_board(self) -> Board:
        """Convert to the engine's board model."""
        board = self.board
        return Board.from_coords(
            board.width,
            board.height,
            snakes={s.id: [(c.x, c.y) for c in s.body] for s in board.snakes},
            health={s.id: s.health for s in board.snakes},
            food=[(c.x, c.y) for c in board.food],
            hazards=[(c.x, c.y) for c in board.hazards],
            turn=self.turn,
        )


class MoveRequest(GameState):
    """Request body of ``/move``; the controlled snake must still be alive."""

    @model_validator(mode="after")
    def _check_you_alive(self) -> MoveRequest:
        if self.you.id not in {s.id for s in self.board.snakes}:
            raise ValueError("you must be one of the board's snakes.")
        return self


class MoveResponse(BaseModel):
    """Response body of ``/move``."""

    move: str
    shout: str | None = Field(default=None, max_length=256)


class InfoResponse(BaseModel):
    """Appearance and API version reported on ``GET /``."""

    apiversion: str = "1"
    author: str = ""
    color: str = "#A18CD1"
    head: str = "default"
    tail: str = "default"
    version: str = "0.1.0"
