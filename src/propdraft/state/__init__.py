# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Draft state for property version editing.

The store keeps the user's in-memory draft and the last persisted snapshot,
tracks dirtiness, validates before writing, and reconciles single broker and
tenant writes into drafts that may carry other pending edits.
"""

from .exceptions import (
    DraftError,
    DraftValidationError,
    EntityNotFoundError,
    PropertyNotLoadedError,
    RequiredFieldError,
    VacantRowError,
)
from .field_errors import (
    BackendErrorInfo,
    extract_backend_error_info,
    map_backend_messages_to_field_errors,
    map_validation_errors_to_field_errors,
    resolve_field_error,
)
from .guard import PendingChangesGuard
from .identifiers import generate_id, is_client_only_id, is_transient_id, materialize_transient_ids
from .reconciliation import reconcile_collection
from .store import PropertyStore

__all__ = [
    "BackendErrorInfo",
    "DraftError",
    "DraftValidationError",
    "EntityNotFoundError",
    "PendingChangesGuard",
    "PropertyNotLoadedError",
    "PropertyStore",
    "RequiredFieldError",
    "VacantRowError",
    "extract_backend_error_info",
    "generate_id",
    "is_client_only_id",
    "is_transient_id",
    "map_backend_messages_to_field_errors",
    "map_validation_errors_to_field_errors",
    "materialize_transient_ids",
    "reconcile_collection",
    "resolve_field_error",
]
