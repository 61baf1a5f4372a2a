"""Shared test fixtures for scorecard-action tests."""

from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Generator

import pytest

from scorecard_action.config import ActionConfig


SAMPLE_RESULTS = {"repo": {"name": "github.com/octo/repo"}, "score": 7.5, "checks": []}


class FakeScanCommand:
    """Writes canned output to ``config.results_file`` and records each call."""

    def __init__(self, fail_on_format: str | None = None, write: bool = True) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_on_format = fail_on_format
        self.write = write

    def __call__(self, config: ActionConfig) -> None:
        self.calls.append((config.results_file, config.results_format))
        if config.results_format == self.fail_on_format:
            raise RuntimeError(f"scorecard exited 1 for format {config.results_format}")
        if not self.write:
            return
        if config.results_format == "json":
            Path(config.results_file).write_text(json.dumps(SAMPLE_RESULTS), encoding="utf-8")
        else:
            Path(config.results_file).write_text('{"version": "2.1.0", "runs": []}', encoding="utf-8")


class RecordingSigner:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[str] = []
        self.error = error

    def __call__(self, results_file: str) -> None:
        self.calls.append(results_file)
        if self.error is not None:
            raise self.error


class RecordingPublisher:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, json_payload: bytes, repo_name: str, repo_ref: str, access_token: str, **kwargs: Any) -> None:
        self.calls.append({
            "payload": json_payload,
            "repo_name": repo_name,
            "repo_ref": repo_ref,
            "access_token": access_token,
            **kwargs,
        })


@pytest.fixture
def base_env() -> dict[str, str]:
    return {
        "INPUT_PUBLISH_RESULTS": "true",
        "GITHUB_REPOSITORY": "octo/repo",
        "GITHUB_REF": "refs/heads/main",
        "INPUT_REPO_TOKEN": "ghp_test_token",
        "INPUT_RESULTS_FILE": "results.sarif",
        "INPUT_RESULTS_FORMAT": "sarif",
        "INPUT_INTERNAL_PUBLISH_BASE_URL": "https://api.example.com",
    }


@pytest.fixture
def config(tmp_path, monkeypatch) -> ActionConfig:
    """A publishing config whose relative results paths land in tmp_path."""
    monkeypatch.chdir(tmp_path)
    return ActionConfig(
        publish_results=True,
        repository="octo/repo",
        ref="refs/heads/main",
        repo_token="ghp_test_token",
        results_file="results.sarif",
        results_format="sarif",
        publish_base_url="https://api.example.com",
    )


class _ApiHandler(BaseHTTPRequestHandler):
    def do_POST(self) -> None:  # noqa: N802
        server: ApiServer = self.server  # type: ignore[assignment]
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length)
        server.requests.append({
            "path": self.path,
            "headers": dict(self.headers),
            "body": body,
        })
        if server.delay:
            server.release.wait(server.delay)
        try:
            payload = server.response_body.encode("utf-8")
            self.send_response(server.status)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            if not server.drip_interval:
                self.wfile.write(payload)
                return
            self.wfile.flush()
            for i in range(len(payload)):
                if server.release.wait(server.drip_interval):
                    return
                self.wfile.write(payload[i:i + 1])
        except OSError:
            pass

    def log_message(self, format: str, *args: Any) -> None:
        pass


class ApiServer(ThreadingHTTPServer):
    daemon_threads = True
    block_on_close = False

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _ApiHandler)
        self.status = 201
        self.response_body = ""
        self.delay = 0.0
        self.drip_interval = 0.0  # seconds between body bytes
        self.release = threading.Event()
        self.requests: list[dict[str, Any]] = []

    @property
    def base_url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


@pytest.fixture
def api_server() -> Generator[ApiServer, None, None]:
    """Local HTTP server standing in for the scorecard API."""
    server = ApiServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.release.set()
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
