"""Top-level workflow: scan, then optionally re-scan as JSON, sign and publish."""

from __future__ import annotations

import logging
from typing import Callable

from scorecard_action.config import ActionConfig
from scorecard_action.errors import ActionError
from scorecard_action.models import Phase
from scorecard_action.publish import publish_results
from scorecard_action.scan import ScanCommand, execute_scan, run_json_scan
from scorecard_action.signing import sign_results

logger = logging.getLogger("scorecard_action.driver")

Signer = Callable[[str], None]
Publisher = Callable[..., None]


def _enter(phase: Phase) -> Phase:
    logger.info("phase: %s", phase.value)
    return phase


def run_action(
    config: ActionConfig,
    *,
    scan_command: ScanCommand,
    signer: Signer = sign_results,
    publisher: Publisher = publish_results,
) -> Phase:
    """Run the workflow and return the terminal phase (always ``Phase.DONE``).

    Any ``ActionError`` is re-raised with ``phase`` set to the phase that
    failed; later phases are not attempted.
    """
    phase = _enter(Phase.SCAN_PRIMARY)
    try:
        execute_scan(config, scan_command)

        if not config.publish_results:
            logger.info("publishing disabled, skipping signing and upload")
            return Phase.DONE

        phase = _enter(Phase.SCAN_SECONDARY)
        json_config = config.with_json_results()
        json_payload = run_json_scan(config, scan_command)

        phase = _enter(Phase.SIGN)
        signer(json_config.results_file)

        phase = _enter(Phase.PUBLISH)
        publisher(
            json_payload,
            config.repository,
            config.ref,
            config.repo_token,
            base_url=config.publish_base_url,
        )
    except ActionError as exc:
        exc.phase = phase.value
        raise

    return _enter(Phase.DONE)
