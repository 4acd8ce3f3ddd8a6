"""Wire envelope and session expiry models."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CODE_OK = 0
CODE_INVALID_PARAMETERS = 1
CODE_INTERNAL_ERROR = 2
CODE_INVALID_METHOD = 3
CODE_INVALID_API_KEY = 4

API_ERROR_CODES = frozenset(
    {
        CODE_INVALID_PARAMETERS,
        CODE_INTERNAL_ERROR,
        CODE_INVALID_METHOD,
        CODE_INVALID_API_KEY,
    }
)


class ResponseEnvelope(BaseModel):
    """
    JSON object returned by every Etherpad Lite API call.

    Example:
        {"code": 0, "message": "ok", "data": {"padIDs": ["test"]}}
    """

    model_config = ConfigDict(extra="ignore")

    code: int = Field(..., strict=True, description="0 on success, 1-4 for known errors")
    message: str | None = Field(None, description="Human readable status message")
    data: Any = Field(None, description="Endpoint specific payload, may be null")


# =============================================================================
# SESSION EXPIRY
# =============================================================================


@dataclass(frozen=True)
class ValidUntil:
    """Session expires at an explicit UNIX time, in seconds."""

    seconds: int

    def to_epoch_seconds(self, now: float | None = None) -> int:
        return int(self.seconds)


@dataclass(frozen=True)
class ValidFor:
    """Session expires a number of hours from now."""

    hours: int

    def to_epoch_seconds(self, now: float | None = None) -> int:
        if now is None:
            now = time.time()
        return int(now + self.hours * 3600)


@dataclass(frozen=True)
class ValidThrough:
    """
    Session expires at a calendar time.

    Naive datetimes are read as local time, the same way
    ``datetime.timestamp`` treats them.
    """

    moment: datetime

    def to_epoch_seconds(self, now: float | None = None) -> int:
        return int(self.moment.timestamp())


SessionExpiry = ValidUntil | ValidFor | ValidThrough
