"""Command-line entry point: serve the engine or calibrate search depth."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strangle",
        description="Strangle snake engine: HTTP server and benchmarks.",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the game-server webhook API.")
    serve_p.add_argument("--host", type=str, default="0.0.0.0")
    serve_p.add_argument("--port", type=int, default=6502)
    serve_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON engine config file.",
    )
    serve_p.add_argument(
        "--calibrate", action="store_true",
        help="Cap search depth per player count by a startup benchmark.",
    )
    serve_p.add_argument(
        "--limit-ms", type=float, default=250.0,
        help="Time limit per search used by --calibrate.",
    )

    # --- benchmark ---
    bench_p = sub.add_parser(
        "benchmark", help="Find the deepest search that fits a time limit.",
    )
    bench_p.add_argument("--players", type=_positive_int, default=2)
    bench_p.add_argument("--width", type=_positive_int, default=11)
    bench_p.add_argument("--height", type=_positive_int, default=11)
    bench_p.add_argument("--limit-ms", type=float, default=250.0)
    bench_p.add_argument("--runs", type=_positive_int, default=3)
    bench_p.add_argument("--max-depth", type=_positive_int, default=20)
    bench_p.add_argument("--seed", type=int, default=42)
    bench_p.add_argument("--config", type=str, default=None)

    return parser


def _load_config(path: str | None):
    from strangle.config import EngineConfig

    return EngineConfig.load(path) if path else EngineConfig()


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from strangle.server.app import create_app

    config = _load_config(args.config)
    if args.calibrate:
        from strangle.benchmark import calibrate_depth_caps

        caps = calibrate_depth_caps(limit_ms=args.limit_ms, config=config)
        config = dataclasses.replace(config, depth_caps=caps)

    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def _run_benchmark(args: argparse.Namespace) -> int:
    from strangle.benchmark import calibrate_depth

    result = calibrate_depth(
        num_players=args.players,
        width=args.width,
        height=args.height,
        limit_ms=args.limit_ms,
        runs=args.runs,
        max_depth=args.max_depth,
        config=_load_config(args.config),
        seed=args.seed,
    )
    print(result.summary())  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``strangle`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "benchmark": _run_benchmark,
    }
    try:
        return handlers[args.command](args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
