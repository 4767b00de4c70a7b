# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Transport layer: response envelope, errors, and the httpx client.
"""

from .client import PropertyApiClient
from .envelope import (
    ApiError,
    ApiErrorResponse,
    ApiSuccessResponse,
    MutationResult,
    extract_error_message,
)
from .transport import EntityPayload, PropertyTransport, SavePayload

__all__ = [
    "ApiError",
    "ApiErrorResponse",
    "ApiSuccessResponse",
    "EntityPayload",
    "MutationResult",
    "PropertyApiClient",
    "PropertyTransport",
    "SavePayload",
    "extract_error_message",
]
