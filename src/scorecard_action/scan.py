"""Scan invoker: run the scorecard engine and read back its results file."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable

from scorecard_action.config import ActionConfig
from scorecard_action.errors import ResultRetrievalError, ScanExecutionError

logger = logging.getLogger("scorecard_action.scan")

ScanCommand = Callable[[ActionConfig], None]

SCORECARD_BIN = "scorecard"
STDERR_TAIL_CHARS = 2000


class ScorecardCommand:
    """Run the ``scorecard`` executable synchronously for one config."""

    def __init__(self, binary: str = SCORECARD_BIN) -> None:
        self.binary = binary

    def argv(self, config: ActionConfig) -> list[str]:
        return [
            self.binary,
            f"--repo=github.com/{config.repository}",
            f"--format={config.results_format}",
            f"--output={config.results_file}",
            "--show-details",
        ]

    def __call__(self, config: ActionConfig) -> None:
        env = os.environ.copy()
        if config.repo_token:
            env["GITHUB_AUTH_TOKEN"] = config.repo_token

        args = self.argv(config)
        logger.debug("running %s", " ".join(args))
        # stdout goes straight to the CI log; stderr is kept for the error.
        try:
            proc = subprocess.run(args, env=env, check=True, stderr=subprocess.PIPE, text=True)
        except FileNotFoundError as exc:
            raise ScanExecutionError(
                "scorecard executable not found", {"binary": self.binary}
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()[-STDERR_TAIL_CHARS:]
            message = f"scorecard exited with status {exc.returncode}"
            if stderr:
                message = f"{message}: {stderr}"
            raise ScanExecutionError(message, {"returncode": exc.returncode, "stderr": stderr}) from exc
        if proc.stderr:
            logger.debug("scorecard stderr: %s", proc.stderr.strip())


def execute_scan(config: ActionConfig, command: ScanCommand) -> None:
    """Execute ``command`` for ``config``.

    Errors raised by the command that are not already ``ScanExecutionError``
    are wrapped as one.
    """
    try:
        command(config)
    except ScanExecutionError:
        raise
    except Exception as exc:
        raise ScanExecutionError("error during command execution") from exc


def run_scan(config: ActionConfig, command: ScanCommand) -> bytes:
    """Execute ``command`` and return the results file contents.

    A missing or unreadable results file after a successful run is a
    ``ResultRetrievalError``.
    """
    execute_scan(config, command)

    path = Path(config.results_file)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ResultRetrievalError(
            "reading scorecard results from file", {"path": str(path)}
        ) from exc


def run_json_scan(config: ActionConfig, command: ScanCommand) -> bytes:
    """Re-run the scan with output forced to JSON.

    Works on a derived copy of ``config``; the caller's config and the
    process environment keep their values.
    """
    json_config = config.with_json_results()
    logger.info("re-running scorecard with json output to %s", json_config.results_file)
    return run_scan(json_config, command)
