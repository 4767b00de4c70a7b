# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
propdraft core

Records of the property version aggregate, shared primitives, and the domain
validation rules applied before a full save.
"""

from . import base, primitives
from .base import (
    Broker,
    PropertyDetails,
    PropertyVersion,
    Tenant,
    UnderwritingInputs,
    VersionSummary,
)
from .validation import (
    TOTAL_SQFT_MESSAGE,
    VACANT_ROW_MESSAGE,
    VACANT_TENANT_ID,
    broker_save_errors,
    tenant_save_errors,
    validate_property_draft,
)

__all__ = [
    "base",
    "primitives",
    "Broker",
    "PropertyDetails",
    "PropertyVersion",
    "Tenant",
    "UnderwritingInputs",
    "VersionSummary",
    "TOTAL_SQFT_MESSAGE",
    "VACANT_ROW_MESSAGE",
    "VACANT_TENANT_ID",
    "broker_save_errors",
    "tenant_save_errors",
    "validate_property_draft",
]
