"""Main CLI entry point for cpassembler.

Provides commands: resolve, check
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from cpassembler.cli.check import check_command
from cpassembler.cli.resolve import resolve_command
from cpassembler.model.scope import Scope

logger = logging.getLogger("cpassembler.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    # Log to stderr so that a printed classpath can be piped.
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=[handler],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpassembler",
        description="cpassembler - Classpath Assembly Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Assemble and print the classpath of one project",
    )
    resolve_parser.add_argument(
        "workspace",
        help="Workspace file (TOML or JSON) describing the projects",
    )
    resolve_parser.add_argument(
        "project",
        help="Name of the project to resolve",
    )
    resolve_parser.add_argument(
        "--test",
        action="store_true",
        help="Assemble the test classpath (output directories first, test scope)",
    )
    resolve_parser.add_argument(
        "-s",
        "--scope",
        action="append",
        choices=[s.value for s in Scope],
        help=(
            "Scope to include instead of the default; repeatable. "
            "Defaults to 'test' with --test and 'compile' otherwise."
        ),
    )
    resolve_parser.add_argument(
        "-f",
        "--format",
        choices=["path", "list", "table"],
        default="path",
        help="Output format (default: path, a single path-separator joined string)",
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Validate project references and detect dependency cycles",
    )
    check_parser.add_argument(
        "workspace",
        help="Workspace file (TOML or JSON) describing the projects",
    )
    check_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help=(
            "Maximum number of cycles to report (default: 20). "
            "Use <=0 for no limit (may be expensive on large graphs)."
        ),
    )
    return parser


def main() -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(args.verbose)
    logger.debug("Running command %s", args.command)

    if args.command == "resolve":
        return resolve_command(args)
    elif args.command == "check":
        return check_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
