"""Command-line entry point: check out the workflow's commit into a directory."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import CheckoutSettings
from engine import workflow
from engine.checkout import GitCheckout
from engine.credentials import CredentialStore
from engine.git_ops import GitOps
from engine.retry import RetryingRunner
from engine.runner import CommandError, CommandRunner
from host.detect import UnsupportedHostError, detect_host
from host.installers import InstallState, ensure_git

logger = logging.getLogger(__name__)

EXIT_UNSUPPORTED_HOST = 1
EXIT_BAD_CONFIG = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Shallow checkout of the workflow commit into the working directory"
    )
    parser.add_argument(
        "--working-directory",
        type=Path,
        default=Path.cwd(),
        help="Directory to check the repository out into (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the checkout runner."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = CheckoutSettings()
    except ValueError as e:
        logger.error(f"Invalid workflow environment: {e}")
        workflow.error("checkout-action has missing or invalid environment variables")
        return EXIT_BAD_CONFIG

    try:
        host = detect_host()
    except UnsupportedHostError as e:
        workflow.error(str(e))
        return EXIT_UNSUPPORTED_HOST

    working_directory = args.working_directory.resolve()
    retrying = RetryingRunner(CommandRunner(cwd=working_directory))

    try:
        ensure_git(host, retrying, InstallState())
        checkout = GitCheckout(
            settings,
            GitOps(retrying),
            CredentialStore(),
            working_directory=working_directory,
        )
        checkout.run()
    except CommandError as e:
        logger.error(str(e))
        return e.exit_status

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
