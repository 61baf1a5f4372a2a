"""Error taxonomy: structured exceptions with error envelopes."""

from __future__ import annotations

from typing import Any


class ActionError(Exception):
    """Base class for every failure the workflow reports.

    Each subclass carries a stable ``code``. The driver sets ``phase`` to the
    workflow phase that was running when the error surfaced.
    """

    code = "E_ACTION"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.phase: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Build a structured error envelope."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
        if self.phase is not None:
            error["phase"] = self.phase
        return {"ok": False, "error": error}

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class ConfigError(ActionError):
    code = "E_CONFIG"


class ScanExecutionError(ActionError):
    code = "E_SCAN_EXECUTION"


class ResultRetrievalError(ActionError):
    code = "E_RESULT_RETRIEVAL"


class SigningError(ActionError):
    code = "E_SIGNING"


class PayloadError(ActionError):
    code = "E_PAYLOAD"


class EndpointError(ActionError):
    code = "E_ENDPOINT"


class RequestBuildError(ActionError):
    code = "E_REQUEST"


class TransportError(ActionError):
    code = "E_TRANSPORT"


class PublishTimeoutError(TransportError):
    code = "E_TIMEOUT"


class PublishStatusError(ActionError):
    """The publish API answered with anything other than 201 Created."""

    code = "E_PUBLISH_STATUS"

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        super().__init__(
            f"http response {status_code}, status: {status_code} {reason}, error: {body}",
            {"statusCode": status_code, "reason": reason, "body": body},
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body
