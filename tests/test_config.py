"""Tests for the engine configuration dataclasses."""

import json

import pytest

from strangle.config import EngineConfig, EvaluatorWeights, OpponentModel


class TestEvaluatorWeights:
    def test_defaults(self):
        w = EvaluatorWeights()
        assert w.death == 1_000_000.0
        assert w.space_horizon == 12
        assert w.food_health_threshold == 50

    def test_death_must_dominate_heuristic(self):
        with pytest.raises(ValueError, match="twice heuristic_bound"):
            EvaluatorWeights(death=100.0, heuristic_bound=50.0)

    def test_space_horizon_positive(self):
        with pytest.raises(ValueError):
            EvaluatorWeights(space_horizon=0)


class TestEngineConfig:
    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.safety_margin_ms == 100
        assert cfg.default_time_budget_ms == 500
        assert cfg.opponents is OpponentModel.PARANOID
        assert cfg.hazard_damage == 14

    def test_expectation_model(self):
        cfg = EngineConfig(opponent_model="expectation")
        assert cfg.opponents is OpponentModel.EXPECTATION

    def test_unknown_model(self):
        with pytest.raises(ValueError):
            EngineConfig(opponent_model="optimistic")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"safety_margin_ms": -1},
            {"default_time_budget_ms": 0},
            {"check_interval": 0},
            {"max_depth": 0},
            {"cache_size": -5},
            {"hazard_damage": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_frozen(self):
        cfg = EngineConfig()
        with pytest.raises(AttributeError):
            cfg.max_depth = 3

    def test_to_dict(self):
        d = EngineConfig().to_dict()
        assert d["opponent_model"] == "paranoid"
        assert d["weights"]["space"] == 10.0

    def test_save_and_load(self, tmp_path):
        cfg = EngineConfig(
            safety_margin_ms=40,
            opponent_model="expectation",
            weights=EvaluatorWeights(food=900.0),
        )
        path = tmp_path / "sub" / "engine.json"
        cfg.save(path)
        assert path.exists()
        assert json.loads(path.read_text())["safety_margin_ms"] == 40

        loaded = EngineConfig.load(path)
        assert loaded == cfg
        assert loaded.weights.food == 900.0

    def test_partial_file(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"max_depth": 6, "weights": {"length": 1.0}}))
        loaded = EngineConfig.load(path)
        assert loaded.max_depth == 6
        assert loaded.weights.length == 1.0
        assert loaded.weights.death == EvaluatorWeights().death

    def test_depth_cap(self):
        cfg = EngineConfig(max_depth=10, depth_caps={1: 14, 2: 6})
        assert cfg.depth_cap(1) == 10
        assert cfg.depth_cap(2) == 6
        assert cfg.depth_cap(3) == 10

    def test_invalid_depth_cap(self):
        with pytest.raises(ValueError, match="depth_caps"):
            EngineConfig(depth_caps={2: 0})

    def test_depth_caps_survive_json(self, tmp_path):
        path = tmp_path / "engine.json"
        EngineConfig(depth_caps={1: 9, 4: 3}).save(path)
        loaded = EngineConfig.load(path)
        assert loaded.depth_caps == {1: 9, 4: 3}
        assert loaded.depth_cap(4) == 3
