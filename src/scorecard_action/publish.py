"""Publisher: upload signed scorecard results to the scorecard API."""

from __future__ import annotations

import logging
import time
from urllib.parse import urlsplit

import requests

from scorecard_action.errors import (
    EndpointError,
    PayloadError,
    PublishStatusError,
    PublishTimeoutError,
    RequestBuildError,
    TransportError,
)
from scorecard_action.models import PublishPayload

logger = logging.getLogger("scorecard_action.publish")

PUBLISH_TIMEOUT_SECONDS = 10.0
READ_CHUNK_SIZE = 1
ENDPOINT_TEMPLATE = "{base_url}/projects/github.com/{repo_name}"


def build_endpoint(base_url: str, repo_name: str) -> str:
    """Join the API base URL and repository into the publish endpoint."""
    raw = ENDPOINT_TEMPLATE.format(base_url=base_url, repo_name=repo_name)
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise EndpointError("parsing scorecard API endpoint", {"url": raw}) from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise EndpointError("parsing scorecard API endpoint", {"url": raw})
    return raw


def build_payload(json_payload: bytes, repo_ref: str, access_token: str) -> bytes:
    try:
        result = json_payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadError("marshalling json results") from exc
    try:
        return PublishPayload(result=result, branch=repo_ref, access_token=access_token).to_json()
    except (TypeError, ValueError) as exc:
        raise PayloadError("marshalling json results") from exc


def publish_results(
    json_payload: bytes,
    repo_name: str,
    repo_ref: str,
    access_token: str,
    *,
    base_url: str,
    session: requests.Session | None = None,
    timeout: float = PUBLISH_TIMEOUT_SECONDS,
) -> None:
    """POST the results to the scorecard API; succeed only on 201 Created.

    ``timeout`` bounds the whole call, from building the request to reading
    the last byte of the response.
    """
    deadline = time.monotonic() + timeout
    body = build_payload(json_payload, repo_ref, access_token)
    url = build_endpoint(base_url, repo_name)

    try:
        prepared = requests.Request(
            "POST",
            url,
            data=body,
            headers={"Content-Type": "application/json"},
        ).prepare()
    except requests.RequestException as exc:
        raise RequestBuildError("creating HTTP request", {"url": url}) from exc

    if session is None:
        with requests.Session() as owned:
            _send(owned, prepared, deadline, timeout)
    else:
        _send(session, prepared, deadline, timeout)

    logger.info("published results for %s", repo_name)


def _remaining(deadline: float, url: str | None, timeout: float) -> float:
    left = deadline - time.monotonic()
    if left <= 0:
        raise PublishTimeoutError(
            "executing scorecard-api call: deadline exceeded", {"url": url, "timeout": timeout}
        )
    return left


def _send(
    session: requests.Session,
    prepared: requests.PreparedRequest,
    deadline: float,
    timeout: float,
) -> None:
    url = prepared.url
    logger.debug("POST %s (timeout=%ss)", url, timeout)
    try:
        with session.send(prepared, timeout=_remaining(deadline, url, timeout), stream=True) as resp:
            # Byte-sized reads so the deadline is checked while a slow body arrives.
            body = bytearray()
            for chunk in resp.iter_content(chunk_size=READ_CHUNK_SIZE):
                body.extend(chunk)
                _remaining(deadline, url, timeout)
            _remaining(deadline, url, timeout)
            if resp.status_code != requests.codes.created:
                text = body.decode(resp.encoding or "utf-8", errors="replace")
                raise PublishStatusError(resp.status_code, resp.reason or "", text)
    except requests.RequestException as exc:
        # requests reports a socket timeout while streaming the body as a ConnectionError.
        if isinstance(exc, requests.Timeout) or time.monotonic() >= deadline:
            raise PublishTimeoutError(
                "executing scorecard-api call", {"url": url, "timeout": timeout}
            ) from exc
        raise TransportError("executing scorecard-api call", {"url": url}) from exc
