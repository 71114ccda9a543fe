"""Strangle: time-bounded move search for a multiplayer snake game."""

from strangle.board import DIRECTIONS, Board, Direction, SnakeState
from strangle.config import EngineConfig, EvaluatorWeights, OpponentModel
from strangle.evaluator import Evaluator, ScoreFactors, flood_fill
from strangle.moves import legal_moves
from strangle.search import SearchDriver, SearchPhase, SearchResult
from strangle.simulator import simulate

__version__ = "0.1.0"

__all__ = [
    "DIRECTIONS",
    "Board",
    "Direction",
    "EngineConfig",
    "Evaluator",
    "EvaluatorWeights",
    "OpponentModel",
    "ScoreFactors",
    "SearchDriver",
    "SearchPhase",
    "SearchResult",
    "SnakeState",
    "flood_fill",
    "legal_moves",
    "simulate",
]
