"""Tests for the command-line entry point."""

import pytest

from strangle.cli import _build_parser, main
from strangle.config import EngineConfig


class TestCLIParser:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_serve_defaults(self):
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host == "0.0.0.0"
        assert args.port == 6502
        assert args.config is None

    def test_benchmark_defaults(self):
        args = _build_parser().parse_args(["benchmark"])
        assert args.players == 2
        assert args.limit_ms == 250.0
        assert args.max_depth == 20

    def test_rejects_non_positive(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["benchmark", "--players", "0"])


class TestCLICommands:
    def test_benchmark_prints_summary(self, capsys):
        code = main([
            "benchmark",
            "--players", "1",
            "--width", "5",
            "--height", "6",
            "--runs", "1",
            "--max-depth", "2",
            "--limit-ms", "1e9",
        ])
        assert code == 0
        assert "Chosen depth: 2" in capsys.readouterr().out

    def test_benchmark_bad_layout_returns_2(self):
        assert main(["benchmark", "--players", "3", "--width", "5"]) == 2

    def test_serve_uses_config(self, tmp_path, monkeypatch):
        path = tmp_path / "engine.json"
        EngineConfig(safety_margin_ms=25).save(path)
        calls = {}

        def fake_run(app, host, port):
            calls.update(app=app, host=host, port=port)

        monkeypatch.setattr("uvicorn.run", fake_run)
        code = main(["serve", "--port", "9000", "--config", str(path)])
        assert code == 0
        assert calls["port"] == 9000
        assert calls["app"].title == "Strangle"
        assert calls["app"].state.config.safety_margin_ms == 25

    def test_serve_calibrates_depth_caps(self, monkeypatch):
        seen = {}

        def fake_caps(**kwargs):
            seen.update(kwargs)
            return {1: 7, 2: 4}

        def fake_run(app, host, port):
            seen["app"] = app

        monkeypatch.setattr("strangle.benchmark.calibrate_depth_caps", fake_caps)
        monkeypatch.setattr("uvicorn.run", fake_run)
        code = main(["serve", "--calibrate", "--limit-ms", "120"])
        assert code == 0
        assert seen["limit_ms"] == 120.0
        assert seen["app"].state.config.depth_caps == {1: 7, 2: 4}

    def test_serve_without_calibration_keeps_caps(self, monkeypatch):
        apps = []
        monkeypatch.setattr(
            "uvicorn.run", lambda app, host, port: apps.append(app),
        )
        assert main(["serve"]) == 0
        assert apps[0].state.config.depth_caps == {}
