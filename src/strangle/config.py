"""Engine configuration, read once at process start."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from strangle.board import DEFAULT_HAZARD_DAMAGE

logger = logging.getLogger(__name__)


class OpponentModel(enum.Enum):
    """How the search assumes opponents choose their moves."""

    PARANOID = "paranoid"
    EXPECTATION = "expectation"


@dataclass(frozen=True)
class EvaluatorWeights:
    """Tunable weights of the board evaluator."""

    # Survival
    death: float = 1_000_000.0
    victory: float = 500_000.0
    survival_turn: float = 10.0
    heuristic_bound: float = 100_000.0

    # Space control
    space: float = 10.0
    space_advantage: float = 5.0
    space_horizon: int = 12
    trapped: float = 2_000.0

    # Health and food
    health: float = 10.0
    starvation: float = 2_000.0
    food: float = 500.0
    food_health_threshold: int = 50

    # Opponents
    length: float = 50.0
    opponents: float = 1_000.0
    head_danger: float = 300.0

    def __post_init__(self) -> None:
        if self.heuristic_bound * 2 >= self.death:
            raise ValueError("death must exceed twice heuristic_bound.")
        if self.space_horizon < 1:
            raise ValueError("space_horizon must be at least 1.")


@dataclass(frozen=True)
class EngineConfig:
    """Search and evaluation settings.

    Supports JSON serialization like the rest of the configuration.
    """

    # Time keeping
    safety_margin_ms: int = 100
    default_time_budget_ms: int = 500
    check_interval: int = 64

    # Search
    opponent_model: str = "paranoid"
    max_depth: int = 32
    # Living snakes -> deepest search, usually filled by calibration.
    depth_caps: dict[int, int] = field(default_factory=dict)
    cache_size: int = 100_000

    # Rules
    hazard_damage: int = DEFAULT_HAZARD_DAMAGE

    weights: EvaluatorWeights = field(default_factory=EvaluatorWeights)

    def __post_init__(self) -> None:
        if self.safety_margin_ms < 0:
            raise ValueError("safety_margin_ms must not be negative.")
        if self.default_time_budget_ms < 1:
            raise ValueError("default_time_budget_ms must be at least 1.")
        if self.check_interval < 1:
            raise ValueError("check_interval must be at least 1.")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1.")
        if any(depth < 1 for depth in self.depth_caps.values()):
            raise ValueError("depth_caps must all be at least 1.")
        if self.cache_size < 0:
            raise ValueError("cache_size must not be negative.")
        if self.hazard_damage < 0:
            raise ValueError("hazard_damage must not be negative.")
        # Raises ValueError for unknown modes.
        OpponentModel(self.opponent_model)

    @property
    def opponents(self) -> OpponentModel:
        return OpponentModel(self.opponent_model)

    def depth_cap(self, num_snakes: int) -> int:
        """Deepest search for a board with *num_snakes* living snakes."""
        return min(self.max_depth, self.depth_caps.get(num_snakes, self.max_depth))

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def from_dict(cls, raw: dict) -> EngineConfig:
        raw = dict(raw)
        weights = raw.pop("weights", {})
        # JSON object keys are strings.
        raw["depth_caps"] = {
            int(k): int(v) for k, v in raw.get("depth_caps", {}).items()
        }
        return cls(weights=EvaluatorWeights(**weights), **raw)

    @classmethod
    def load(cls, path: str | Path) -> EngineConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))
