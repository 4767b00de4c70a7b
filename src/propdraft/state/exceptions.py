# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Local failures raised by the draft store.

All of these are raised before any request is sent. Backend and network
failures are reported separately as `propdraft.api.ApiError`.
"""

from __future__ import annotations

from typing import List


class DraftError(Exception):
    """Base class for failures detected by the draft store itself."""


class PropertyNotLoadedError(DraftError):
    def __init__(self, message: str = "Property not loaded"):
        super().__init__(message)


class VacantRowError(DraftError):
    """An entity operation targeted the system-managed vacant row."""

    def __init__(
        self, message: str = "Vacant row is system-managed and cannot be modified directly"
    ):
        super().__init__(message)


class EntityNotFoundError(DraftError):
    """The broker or tenant id is not in the draft, or is already deleted."""


class RequiredFieldError(DraftError):
    """A single broker or tenant failed its save-time field checks."""


class DraftValidationError(DraftError):
    """
    The full draft violates one or more domain rules.

    Attributes:
        errors: Every violation message, in rule order
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(" | ".join(self.errors))
