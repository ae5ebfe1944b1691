# CLI interface for dcsetup
import argparse
import logging
import sys
import time
from collections.abc import Sequence
from dataclasses import replace

from dcsetup import __version__
from dcsetup.config import DEBUG_PORT, FAILURE_EXIT_DELAY_SECONDS, get_log_path
from dcsetup.detect import DEBUG_FLAG, detect
from dcsetup.orchestrator import setup
from dcsetup.utils import configure_logging, sanitize_error

# ABOUTME: Exit codes: 0 = config written, 1 = setup failed
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

logger = logging.getLogger(__name__)

BANNER = "=== Desktop Commander setup for Claude Desktop ==="


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="desktop-commander-setup",
        description="Register the Desktop Commander MCP server with Claude Desktop",
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"desktop-commander-setup v{__version__}",
    )
    parser.add_argument(
        DEBUG_FLAG,
        action="store_true",
        help=f"Configure the server to start under the Node.js inspector (port {DEBUG_PORT})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Configures logging, runs setup, returns the exit code for sys.exit()
    ABOUTME: On failure waits FAILURE_EXIT_DELAY_SECONDS before returning
    """
    args_list = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(args_list)

    configure_logging(get_log_path())
    print()
    print(BANNER)
    print()

    try:
        context = replace(detect(argv=[sys.argv[0], *args_list]), debug_mode=args.debug)
        success = setup(context=context)
    except Exception as e:
        logger.error(f"Fatal error: {sanitize_error(e)}")
        success = False

    if not success:
        time.sleep(FAILURE_EXIT_DELAY_SECONDS)
        return EXIT_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
