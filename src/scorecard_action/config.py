"""Configuration: action inputs read from the environment into an immutable object."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping

from scorecard_action.errors import ConfigError

ENV_PUBLISH_RESULTS = "INPUT_PUBLISH_RESULTS"
ENV_GITHUB_REPOSITORY = "GITHUB_REPOSITORY"
ENV_GITHUB_REF = "GITHUB_REF"
ENV_REPO_TOKEN = "INPUT_REPO_TOKEN"
ENV_RESULTS_FILE = "INPUT_RESULTS_FILE"
ENV_RESULTS_FORMAT = "INPUT_RESULTS_FORMAT"
ENV_PUBLISH_BASE_URL = "INPUT_INTERNAL_PUBLISH_BASE_URL"

DEFAULT_PUBLISH_BASE_URL = "https://api.securityscorecards.dev"
DEFAULT_RESULTS_FORMAT = "sarif"
RESULTS_FORMATS = ("sarif", "json", "default")

JSON_RESULTS_FILE = "results.json"
JSON_RESULTS_FORMAT = "json"


@dataclass(frozen=True)
class ActionConfig:
    publish_results: bool
    repository: str  # owner/repo
    ref: str
    repo_token: str = field(repr=False)
    results_file: str
    results_format: str
    publish_base_url: str = DEFAULT_PUBLISH_BASE_URL

    def with_json_results(self) -> ActionConfig:
        """Return a copy whose scan output is forced to results.json in JSON."""
        return replace(self, results_file=JSON_RESULTS_FILE, results_format=JSON_RESULTS_FORMAT)


def _parse_bool(raw: str) -> bool:
    # Exact match, as the action input is documented: only "true" enables.
    return raw == "true"


def _validate_repository(name: str) -> str:
    owner, sep, repo = name.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ConfigError(
            f"{ENV_GITHUB_REPOSITORY} must be of the form owner/repo.",
            {"value": name},
        )
    return name


def load_config(environ: Mapping[str, str] | None = None) -> ActionConfig:
    """Load action inputs from ``environ`` (default: ``os.environ``).

    Fail closed on a missing repository or results file, or an unknown format.
    """
    env = os.environ if environ is None else environ

    repository = env.get(ENV_GITHUB_REPOSITORY, "").strip()
    if not repository:
        raise ConfigError(f"{ENV_GITHUB_REPOSITORY} environment variable is required.")

    results_file = env.get(ENV_RESULTS_FILE, "").strip()
    if not results_file:
        raise ConfigError(f"{ENV_RESULTS_FILE} environment variable is required.")

    results_format = env.get(ENV_RESULTS_FORMAT, "").strip().lower() or DEFAULT_RESULTS_FORMAT
    if results_format not in RESULTS_FORMATS:
        raise ConfigError(
            f"{ENV_RESULTS_FORMAT} must be one of: {', '.join(RESULTS_FORMATS)}.",
            {"value": results_format},
        )

    base_url = env.get(ENV_PUBLISH_BASE_URL, "").strip() or DEFAULT_PUBLISH_BASE_URL

    return ActionConfig(
        publish_results=_parse_bool(env.get(ENV_PUBLISH_RESULTS, "")),
        repository=_validate_repository(repository),
        ref=env.get(ENV_GITHUB_REF, ""),
        repo_token=env.get(ENV_REPO_TOKEN, ""),
        results_file=results_file,
        results_format=results_format,
        publish_base_url=base_url.rstrip("/"),
    )
