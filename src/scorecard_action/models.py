"""Data models: publish payload and phase names."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Phase(str, Enum):
    SCAN_PRIMARY = "scan_primary"
    SCAN_SECONDARY = "scan_secondary"
    SIGN = "sign"
    PUBLISH = "publish"
    DONE = "done"


@dataclass
class PublishPayload:
    result: str  # raw JSON report as text
    branch: str
    access_token: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "branch": self.branch,
            "accessToken": self.access_token,
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")
