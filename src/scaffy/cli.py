"""Command-line interface for scaffy."""

import argparse
import logging
import sys
import time
from pathlib import Path

from rich.logging import RichHandler

from .errors import ScaffoldError
from .generator import Scaffolder
from .models import GENERATORS_PATH_ENV


def add_name_arguments(parser: argparse.ArgumentParser, name_required: bool = True) -> None:
    """Add the entity name and template data flags to a subcommand."""
    parser.add_argument("type", help="Generator type")
    if name_required:
        parser.add_argument("name", help="Name of the entity to scaffold")
    else:
        parser.add_argument(
            "name", nargs="?", default="name", help="Name used to render paths"
        )
    parser.add_argument(
        "--plural",
        default=None,
        metavar="PLURAL",
        help="Plural of the name (default: derived from the name)",
    )
    parser.add_argument(
        "-p",
        "--path",
        default=None,
        metavar="DIR",
        help="Directory for the generated files, overriding each file's default",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scaffy",
        description="File scaffolding - Generate files from generator recipes",
    )
    ap.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    ap.add_argument(
        "-g",
        "--generators",
        type=Path,
        default=None,
        metavar="PATH",
        help=f"Generators directory (also: {GENERATORS_PATH_ENV} env var, default: generators)",
    )

    subparsers = ap.add_subparsers(dest="command", help="Command to run")

    generate_sub = subparsers.add_parser(
        "generate", aliases=["gen", "g"], help="Generate files from a generator"
    )
    add_name_arguments(generate_sub)

    destroy_sub = subparsers.add_parser(
        "destroy", aliases=["d"], help="Remove files created by a generator"
    )
    add_name_arguments(destroy_sub)

    subparsers.add_parser("list", aliases=["ls"], help="List available generators")

    help_sub = subparsers.add_parser(
        "help", help="Show what a generator would do without applying it"
    )
    add_name_arguments(help_sub, name_required=False)
    help_sub.add_argument(
        "--revert", action="store_true", help="Describe the destroy operations instead"
    )

    return ap


def main(argv: list[str] | None = None) -> int:
    """Main entry point for scaffy CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()

    ap = build_parser()
    args = ap.parse_args(argv)

    # Setup logging
    log = logging.getLogger("scaffy")
    log_level = logging.DEBUG if args.debug else logging.INFO
    log.handlers = [RichHandler(rich_tracebacks=True, show_path=False, show_time=False)]
    log.setLevel(log_level)

    if args.command is None:
        ap.print_help()
        return 1

    scaffolder = Scaffolder(args.generators)

    try:
        if args.command in ("list", "ls"):
            generators = scaffolder.list_generators()
            if not generators:
                log.info(f"No generators found in {scaffolder.generators_path}")
            for info in generators:
                if info.description:
                    print(f"{info.type}: {info.description}")
                else:
                    print(info.type)

        elif args.command == "help":
            scaffolder.help(args.type, args.name, args.plural, args.path, args.revert)

        else:
            revert = args.command in ("destroy", "d")
            results = scaffolder.generate(
                args.type, args.name, args.plural, args.path, revert
            )
            log.debug(f"Processed {len(results)} files")

    except ScaffoldError as e:
        log.error(f"{args.command} failed: {e}")
        if args.debug:
            raise
        return 1

    end_time = time.time()
    log.debug(f"Done after {end_time - start_time:.2f} seconds.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
