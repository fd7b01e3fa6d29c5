"""Command-line interface for dtnsim."""

import argparse
import json
import sys

import uvicorn
from pydantic import ValidationError

from dtnsim.config import SimulationConfig
from dtnsim.engine.stats import summarize
from dtnsim.logging_config import configure_logging
from dtnsim.mobility.models import MobilityKind
from dtnsim.scenario import create_simulation


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtnsim",
        description="dtnsim - carry-only delay-tolerant network simulator",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a headless simulation and print statistics")
    run.add_argument("--ticks", type=int, help="Number of ticks to run")
    run.add_argument("--nodes", type=int, help="Number of nodes")
    run.add_argument("--messages", type=int, help="Number of messages to inject")
    run.add_argument("--range", type=float, dest="comm_range", help="Communication range")
    run.add_argument(
        "--mobility",
        choices=[kind.value for kind in MobilityKind],
        help="Mobility model",
    )
    run.add_argument("--seed", type=int, help="Random seed")
    run.add_argument("--json", action="store_true", help="Print statistics as JSON")

    serve = subparsers.add_parser("serve", help="Run the web viewer")
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    return parser


def _run(parsed: argparse.Namespace) -> int:
    overrides = {
        "ticks": parsed.ticks,
        "node_count": parsed.nodes,
        "message_count": parsed.messages,
        "comm_range": parsed.comm_range,
        "mobility": parsed.mobility,
        "seed": parsed.seed,
    }
    try:
        config = SimulationConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2

    scheduler = create_simulation(config)
    scheduler.run(config.ticks)
    stats = summarize(scheduler)

    if parsed.json:
        print(json.dumps(stats.as_dict(), indent=2))
    else:
        print(f"ticks:          {stats.tick}")
        print(f"nodes:          {stats.node_count}")
        print(f"injected:       {stats.injected}")
        print(f"delivered:      {stats.delivered}")
        print(f"in transit:     {stats.in_transit}")
        print(f"delivery ratio: {stats.delivery_ratio:.3f}")
        print(f"tx/rx/dup:      {stats.tx_count}/{stats.rx_count}/{stats.dup_count}")
    return 0


def _serve(parsed: argparse.Namespace) -> int:
    print(f"Starting dtnsim viewer at http://{parsed.host}:{parsed.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "dtnsim.server.app:app",
        host=parsed.host,
        port=parsed.port,
        reload=parsed.reload,
    )
    return 0


def main(args: list[str] | None = None) -> int:
    """Entry point.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parsed = _build_parser().parse_args(args)
    configure_logging()

    if parsed.command == "run":
        return _run(parsed)
    return _serve(parsed)


if __name__ == "__main__":
    sys.exit(main())
