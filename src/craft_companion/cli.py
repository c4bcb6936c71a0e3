"""
Command-line interface for Craft Companion.

Provides CLI commands for running and inspecting the assistant:
- run: Start the chat pipeline on the console or the HTTP bridge
- config: Print the effective configuration
- structures: List the structure assets available for build requests

Usage:
    craft-companion run [--backend console|http] [--host HOST] [--port PORT]
    craft-companion config
    craft-companion structures

Environment Variables:
    CRAFT_OLLAMA_URL: Ollama base URL (default: http://localhost:11434)
    CRAFT_MODEL: Ollama model tag (default: gemma2:2b)
    CRAFT_HOST: Host to bind the HTTP bridge (default: 0.0.0.0)
    CRAFT_PORT: Port for the HTTP bridge (default: 8000)
    See craft_companion.config for the full list.
"""

import argparse
import asyncio
import logging
import sys

from craft_companion.errors import CraftCompanionError

LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


def configure_logging(level: str, fmt: str) -> None:
    """Configure the root logger once from the ``[logging]`` settings."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMATS.get(fmt, LOG_FORMATS["detailed"]),
    )


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the assistant on the chosen backend.

    The console backend reads ``username: message`` lines from stdin. The
    HTTP backend serves the bridge API with uvicorn.

    Returns:
        0 on clean shutdown, 1 on configuration error
    """
    from craft_companion.config import config
    from craft_companion.core.pipeline import build_pipeline

    configure_logging(config.logging.level, config.logging.format)

    try:
        if args.backend == "console":
            from craft_companion.transport.console import ConsoleSession, run_console

            pipeline = build_pipeline(config, ConsoleSession(config.game.bot_name))
            print(f"{config.game.bot_name} is listening. Type 'username: message', or 'quit'.")
            return asyncio.run(run_console(pipeline))

        import uvicorn

        from craft_companion.transport.http import OutboxSession, create_app

        outbox = OutboxSession()
        pipeline = build_pipeline(config, outbox)
        app = create_app(pipeline, outbox, model=config.ai.model)
        host = args.host or config.server.host
        port = args.port or config.server.port
        uvicorn.run(app, host=host, port=port, log_level=config.logging.level.lower())
        return 0
    except CraftCompanionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration and report invalid values."""
    from craft_companion.config import config, print_config_summary, validate_config

    print_config_summary()
    problems = validate_config(config)
    for problem in problems:
        print(f"  invalid: {problem}", file=sys.stderr)
    return 1 if problems else 0


def cmd_structures(args: argparse.Namespace) -> int:
    """List discovered structure assets."""
    from craft_companion.config import config
    from craft_companion.interpret.structures import discover_structures

    directory = config.structures.absolute_path
    names = discover_structures(directory, config.structures.extension)
    if not names:
        print(f"No structures found in {directory}")
        return 0
    print(f"{len(names)} structures in {directory}:")
    for name in names:
        print(f"  {name}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="craft-companion",
        description="Craft Companion - a child-safe AI helper for game chat",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run the assistant",
        description="Start the chat pipeline on the console or as an HTTP bridge.",
    )
    run_parser.add_argument(
        "--backend",
        choices=("console", "http"),
        default="console",
        help="Game-session backend (default: console)",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind the HTTP bridge to (default: server.host)",
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="HTTP bridge port (default: server.port)",
    )
    run_parser.set_defaults(func=cmd_run)

    # config command
    config_parser = subparsers.add_parser("config", help="Show the effective configuration")
    config_parser.set_defaults(func=cmd_config)

    # structures command
    structures_parser = subparsers.add_parser(
        "structures", help="List structure assets available for builds"
    )
    structures_parser.set_defaults(func=cmd_structures)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
