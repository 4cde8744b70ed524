"""
CLI entry point for rvp.

Usage:
    python -m rvp grab --selector "body > div > h1" --from https://example.com
    python -m rvp batch --path quotes.toml --params AAPL MSFT --json
    python -m rvp new --name quotes --format json
    python -m rvp edit --path quotes.toml
"""

import argparse
import asyncio
import logging
import sys

import structlog
from rich.console import Console
from rich.markup import escape

from .core.exceptions import ConfigurationError
from .core.http_client import DEFAULT_TIMEOUT

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def setup_logging(level: str = "WARNING", json_output: bool = False):
    """Configure structured logging to stderr."""
    log_level = LOG_LEVELS.get(level.upper(), logging.WARNING)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="rvp",
        description="Remote Value Parser - grab values from static web pages with CSS selectors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Grab a single value
  rvp grab --selector "body > div > h1" --from https://example.com

  # Run a config file, substituting %% in every URL with one parameter
  rvp batch --path quotes.toml --one-param AAPL

  # Run a config file once per parameter, JSON output
  rvp batch --path quotes.toml --params AAPL MSFT GOOG --json

  # Create a config file interactively
  rvp new --name quotes --format json

  # Edit an existing config file interactively
  rvp edit --path quotes.toml
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Timeout per page fetch in seconds (default: {DEFAULT_TIMEOUT:g})",
    )

    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retries on timeout/network errors (default: 0)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    grab = subparsers.add_parser("grab", help="Grab one value from a web page")
    grab.add_argument(
        "-s", "--selector",
        required=True,
        metavar="PATH",
        help='CSS selector path, e.g. "#search > div"',
    )
    grab.add_argument(
        "-f", "--from",
        dest="url",
        required=True,
        metavar="URL",
        help="URL of the web page",
    )

    batch = subparsers.add_parser("batch", help="Grab values from resources defined in a config file")
    batch.add_argument(
        "-p", "--path",
        required=True,
        help="Path to the .toml or .json config file",
    )
    params = batch.add_mutually_exclusive_group()
    params.add_argument(
        "--one-param",
        metavar="PARAM",
        help="Parameter substituted into every URL containing %%%%",
    )
    params.add_argument(
        "--params",
        nargs="+",
        metavar="PARAM",
        help="Parameters; each URL containing %%%% is fetched once per parameter",
    )
    batch.add_argument(
        "--json",
        action="store_true",
        help="Output the data in JSON format",
    )

    new = subparsers.add_parser("new", help="Create a config file interactively")
    new.add_argument(
        "-n", "--name",
        default="default",
        help="Base name of the config file (default: default)",
    )
    new.add_argument(
        "--format",
        choices=["toml", "json"],
        default="toml",
        help="Config file format (default: toml)",
    )

    edit = subparsers.add_parser("edit", help="Edit a config file interactively")
    edit.add_argument(
        "-p", "--path",
        required=True,
        help="Path to the .toml or .json config file",
    )

    return parser


async def grab_async(args) -> int:
    """Run the grab command."""
    from .orchestrator import BatchRunner

    runner = BatchRunner(timeout=args.timeout, max_retries=args.retries)
    item = await runner.grab(args.selector, args.url)

    if not item.ok:
        print(item.display, file=sys.stderr)
        return EXIT_FAILED

    print(item.display)
    return EXIT_OK


async def batch_async(args, console: Console) -> int:
    """Run the batch command."""
    from .config.loader import load_config
    from .orchestrator import BatchRunner, all_failed
    from .output import build_tables, to_json

    logger = structlog.get_logger(__name__)

    config = load_config(args.path)
    params = args.one_param if args.one_param is not None else args.params

    runner = BatchRunner(timeout=args.timeout, max_retries=args.retries)
    items = await runner.run(config, params)

    if args.json:
        print(to_json(items))
    else:
        for table in build_tables(items):
            console.print(table)

    if all_failed(items):
        logger.error("all_items_failed", items=len(items))
        return EXIT_FAILED
    return EXIT_OK


def new_command(args, console: Console) -> int:
    """Run the new command."""
    from .builder import create_config

    path = create_config(name=args.name, fmt=args.format, console=console)
    return EXIT_OK if path else EXIT_FAILED


def edit_command(args, console: Console) -> int:
    """Run the edit command."""
    from .editor import edit_config

    edit_config(args.path, console=console)
    return EXIT_OK


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"rvp {__version__}")
        sys.exit(EXIT_OK)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_CONFIG_ERROR)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)
    logger = structlog.get_logger(__name__)
    console = Console()

    try:
        if args.command == "grab":
            code = asyncio.run(grab_async(args))
        elif args.command == "batch":
            code = asyncio.run(batch_async(args, console))
        elif args.command == "new":
            code = new_command(args, console)
        else:
            code = edit_command(args, console)
        sys.exit(code)
    except ConfigurationError as e:
        Console(stderr=True).print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    main()
