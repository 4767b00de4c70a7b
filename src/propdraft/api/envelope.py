# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Backend response envelope.

Every backend response is wrapped: successes as
``{success: true, message, data, path?, timestamp?}`` and failures as
``{success: false, message, errorCode, statusCode, details?}``. Failures
surface to callers as `ApiError`.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.base.property import PropertyVersion

T = TypeVar("T")


class _Envelope(BaseModel):
    # Envelopes are decoded leniently; the backend adds fields over time
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ApiSuccessResponse(_Envelope, Generic[T]):
    success: bool = True
    message: str = ""
    path: Optional[str] = None
    timestamp: Optional[str] = None
    data: T


class ApiErrorResponse(_Envelope):
    success: bool = False
    message: str = ""
    error_code: str = "UNKNOWN_ERROR"
    status_code: int = 0
    path: Optional[str] = None
    timestamp: Optional[str] = None
    details: Any = None


class MutationResult(BaseModel):
    """Outcome of a write: the aggregate as stored by the backend and its message."""

    model_config = ConfigDict(frozen=True)

    data: PropertyVersion
    message: str = Field(default="", description="Backend confirmation text.")


class ApiError(Exception):
    """
    A request the backend rejected or that never completed.

    Attributes:
        message: Best available description of the failure
        error_code: Backend error code, or ``NETWORK_ERROR`` when no response arrived
        status_code: HTTP status, 0 when no response arrived
        details: Backend ``details`` payload; ``details["message"]`` may be a
            string or a list of strings naming individual field violations
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        status_code: int = 0,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details

    @classmethod
    def from_response(cls, body: ApiErrorResponse, http_status: int) -> "ApiError":
        message = body.message or f"HTTP {http_status}"
        return cls(
            message=message,
            error_code=body.error_code,
            status_code=body.status_code or http_status,
            details=body.details,
        )

    @property
    def is_conflict(self) -> bool:
        """True when the write was rejected because ``expectedRevision`` was stale."""
        code = (self.error_code or "").upper()
        return self.status_code == 409 or "REVISION" in code or "CONFLICT" in code

    @property
    def detail_messages(self) -> list:
        """Per-field violation texts from ``details.message``, always as a list."""
        details = self.details
        if not isinstance(details, dict):
            return []
        raw = details.get("message")
        if isinstance(raw, str):
            return [raw]
        if isinstance(raw, list):
            return [str(item) for item in raw]
        return []

    def __repr__(self) -> str:
        return (
            f"ApiError(status_code={self.status_code}, error_code={self.error_code!r}, "
            f"message={self.message!r})"
        )


def extract_error_message(error: BaseException) -> str:
    """Best-effort display text for any failure raised by the store or the transport."""
    if isinstance(error, ApiError):
        return error.message or f"HTTP {error.status_code}"
    text = str(error)
    if text:
        return text
    return "An unexpected error occurred"
