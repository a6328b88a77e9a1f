"""Labyrinth CLI entry point.

Provides subcommands for running the Socket.IO server, generating a single
dungeon to the terminal (summary, ASCII layers or JSON), and stress-looping
the generator. Accepts configuration via flags and DUNGEON_* environment
variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

MAX_LOOP_ITERATIONS = 1000


def _load_version() -> str:
    try:
        with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION"), "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Labyrinth Dungeon Generator

    Generate 3D (or flat 2D) dungeons of rooms joined by hallways and
    staircases, either from the command line or through the Flask/Socket.IO
    server. Generation defaults come from DUNGEON_* environment variables;
    CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                    Bind address for the web server (default: 0.0.0.0)
          PORT                    Port for the web server (default: 5000)
          DUNGEON_GRID_SIZE       Grid extent, e.g. 30,5,30
          DUNGEON_ROOM_ATTEMPTS   Room placement attempts (default: 30)
          DUNGEON_MAX_ROOM_SIZE   Largest room, e.g. 6,2,6
          DUNGEON_SEED            Fixed seed (default: random per run)
          DUNGEON_LOOP_CHANCE     Chance of keeping a non-tree edge (default: 0.125)
          DUNGEON_STAIR_COST      Base cost of a staircase move (default: 100)
          DUNGEON_MODE            3d or 2d (default: 3d)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Generate one dungeon and print every level
          python run.py generate --seed 42 --layers

          # Flat dungeon as JSON
          python run.py generate --mode 2d --size 40 1 40 --json

          # Regenerate 200 times and count incomplete dungeons
          python run.py loop --iterations 200
        """
    )

    parser = argparse.ArgumentParser(
        prog="labyrinth",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Labyrinth {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask/Socket.IO generation server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode",
    )

    # Generation flags shared by generate and loop
    gen_flags = argparse.ArgumentParser(add_help=False)
    gen_flags.add_argument("--seed", default=None, help="Seed (int); omit for a random seed")
    gen_flags.add_argument("--size", nargs=3, type=int, metavar=("X", "Y", "Z"), help="Grid extent")
    gen_flags.add_argument("--attempts", type=int, default=None, help="Room placement attempts")
    gen_flags.add_argument("--max-room", dest="max_room", nargs=3, type=int, metavar=("X", "Y", "Z"), help="Largest room size")
    gen_flags.add_argument("--loop-chance", dest="loop_chance", type=float, default=None, help="Chance to keep a non-tree edge")
    gen_flags.add_argument("--stair-cost", dest="stair_cost", type=float, default=None, help="Base staircase cost")
    gen_flags.add_argument("--mode", choices=("3d", "2d"), default=None, help="Layout mode")

    gen_parser = subparsers.add_parser(
        "generate",
        parents=[gen_flags],
        help="Generate one dungeon and print it",
        description="Generate one dungeon and print a summary, its layers, or JSON",
    )
    gen_parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    gen_parser.add_argument("--layers", action="store_true", help="Print every level as ASCII")

    loop_parser = subparsers.add_parser(
        "loop",
        parents=[gen_flags],
        help="Regenerate repeatedly and count incomplete dungeons",
        description=f"Regenerate up to {MAX_LOOP_ITERATIONS} times with one driver",
    )
    loop_parser.add_argument("--iterations", type=int, default=100, help="Number of runs (capped)")

    if not argv:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def build_config(args):
    """Turn generation flags into a GenerationConfig over the env defaults."""
    from labyrinth.dungeon import GenerationConfig

    overrides = {
        "grid_size": getattr(args, "size", None),
        "room_attempts": getattr(args, "attempts", None),
        "max_room_size": getattr(args, "max_room", None),
        "loop_chance": getattr(args, "loop_chance", None),
        "stair_cost": getattr(args, "stair_cost", None),
        "mode": getattr(args, "mode", None),
    }
    base = GenerationConfig.from_env()
    config = GenerationConfig.from_mapping({k: v for k, v in overrides.items() if v is not None}, base=base)
    if getattr(args, "seed", None) is not None:
        config = config.with_seed(args.seed)
    return config


def _banner(mode: str, rows) -> str:
    title = f"{Fore.CYAN}{Style.BRIGHT}Labyrinth{Style.RESET_ALL}" if _COLOR_ENABLED else "Labyrinth"

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {title}", divider, f"  {label('Mode:'):12} {value(mode.upper())}"]
    for key, val in rows:
        lines.append(f"  {label(key + ':'):12} {value(val)}")
    lines += [divider, ""]
    return "\n".join(lines)


def _run_generate(args) -> int:
    from labyrinth.dungeon import GenerationDriver

    result = GenerationDriver(build_config(args)).generate()
    if args.json:
        print(json.dumps(result.to_dict(), separators=(",", ":")))
        return 0
    s = result.summary()
    rows = [
        ("Seed", s["seed"]),
        ("Size", "x".join(str(v) for v in s["size"])),
        ("Rooms", s["rooms"]),
        ("Edges", f"{s['selected_edges']}/{s['edges']}"),
        ("Paths", s["paths"]),
        ("Failed", s["failed_connections"]),
        ("Stairs", result.metrics["tiles_stairs"]),
        ("Time", f"{result.metrics['runtime_ms']} ms"),
    ]
    print(_banner("generate", rows))
    if args.layers:
        for y in range(result.grid.size[1]):
            print(f"y={y}")
            print("\n".join(result.layer(y)))
            print()
    return 0


def _run_loop(args) -> int:
    from labyrinth.dungeon import GenerationDriver

    iterations = max(0, min(args.iterations, MAX_LOOP_ITERATIONS))
    driver = GenerationDriver(build_config(args))
    incomplete = 0
    for _ in range(iterations):
        if not driver.regenerate().complete:
            incomplete += 1
    print(_banner("loop", [("Runs", iterations), ("Incomplete", incomplete)]))
    return 0


def _config_error(e) -> int:
    prefix = f"{Fore.RED}[ERROR]{Style.RESET_ALL}" if _COLOR_ENABLED else "[ERROR]"
    print(f"{prefix} {e.message}", file=sys.stderr)
    return 2


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()

    from labyrinth.dungeon.errors import ConfigurationError

    # Generation config errors (flags or DUNGEON_* variables) surface as a message, not a traceback
    if mode in ("generate", "loop"):
        try:
            return _run_generate(args) if mode == "generate" else _run_loop(args)
        except ConfigurationError as e:
            return _config_error(e)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoint only after environment is ready
    from labyrinth.logging_utils import log
    from labyrinth.server import start_server

    print(_banner(mode, [("Host", host), ("Port", port), ("WebSockets", "enabled")]))
    info_prefix = f"{Fore.CYAN}[INFO]{Style.RESET_ALL}" if _COLOR_ENABLED else "[INFO]"
    print(f"{info_prefix} Listening for connections... Press Ctrl+C to stop.")
    log.info(event="listen", host=host, port=port, debug=debug)
    try:
        start_server(host=host, port=port, debug=debug)
    except ConfigurationError as e:
        return _config_error(e)
    return 0


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli())
