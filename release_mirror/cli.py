"""Command-line interface for release-mirror.

This module parses the command line, configures logging and runs a single
sync pass. It is the only place that decides the process exit status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import build_config
from .errors import NoAccessTokenError
from .sync import ReleaseMirror


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable debug logging if True
    """
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level, format=format_str, handlers=[logging.StreamHandler()]
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Mirror the latest upstream GitHub release into this repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check for a new release and mirror it
  python main.py ghp_xxxxxxxx

  # Same, with debug logging and a shorter request timeout
  python main.py ghp_xxxxxxxx -v --timeout 10
        """.strip(),
    )

    # Optional here so a missing token is reported as NoAccessTokenError
    parser.add_argument(
        "access_token",
        nargs="?",
        help="GitHub access token used to create the downstream release",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run one sync pass and return the process exit status.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]

    Returns:
        0 if the mirror is up to date or a release was published, 130 if
        interrupted, 1 on any other outcome
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not args.access_token:
        logger.error(str(NoAccessTokenError()))
        return 1

    try:
        config = build_config(timeout=args.timeout)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        with ReleaseMirror(args.access_token, config) as mirror:
            result = mirror.run()

        if result.is_success:
            logger.info(f"✓ {result}")
        else:
            logger.error(f"✗ {result}")

        return result.exit_code

    except KeyboardInterrupt:
        logger.info("Sync interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        return 1


def main() -> None:
    """Main entry point for the CLI application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
