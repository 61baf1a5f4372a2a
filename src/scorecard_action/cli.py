"""Entry point: load config from the environment and run the workflow."""

from __future__ import annotations

import argparse
import logging
import sys

from scorecard_action.config import load_config
from scorecard_action.driver import run_action
from scorecard_action.errors import ActionError, ConfigError
from scorecard_action.scan import SCORECARD_BIN, ScorecardCommand

logger = logging.getLogger("scorecard_action")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scorecard-action",
        description="Run OpenSSF Scorecard and optionally sign and publish the results.",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity (default: INFO)",
    )
    p.add_argument(
        "--scorecard-bin",
        default=SCORECARD_BIN,
        help="scorecard executable to run (default: scorecard on PATH)",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config()
    except ConfigError as e:
        logger.error("invalid configuration: %s", e)
        return EXIT_CONFIG

    try:
        run_action(config, scan_command=ScorecardCommand(args.scorecard_bin))
    except ActionError as e:
        logger.error("%s failed: %s: %s", e.phase or "action", e.code, e)
        logger.debug("error envelope: %s", e.to_dict())
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
