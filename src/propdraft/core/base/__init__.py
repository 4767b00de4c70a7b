# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Property version records.
"""

from .broker import BROKER_TEXT_FIELDS, Broker
from .property import PropertyDetails, PropertyVersion, UnderwritingInputs, VersionSummary
from .tenant import TENANT_PAYLOAD_FIELDS, Tenant

__all__ = [
    "BROKER_TEXT_FIELDS",
    "Broker",
    "PropertyDetails",
    "PropertyVersion",
    "TENANT_PAYLOAD_FIELDS",
    "Tenant",
    "UnderwritingInputs",
    "VersionSummary",
]
