# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class CollectionEnum(str, Enum):
    """
    Child collections of a property version.

    The value doubles as the wire key and as the first segment of a field
    error path (``brokers.0.email``).
    """

    BROKERS = "brokers"
    TENANTS = "tenants"


class SectionEnum(str, Enum):
    """Scalar sections of a property version."""

    PROPERTY_DETAILS = "propertyDetails"
    UNDERWRITING_INPUTS = "underwritingInputs"


class LeaseTypeEnum(str, Enum):
    """Common lease structures. Tenant rows store the value as free text."""

    GROSS = "Gross"
    MODIFIED_GROSS = "Modified Gross"
    NNN = "NNN"
    NOT_APPLICABLE = "N/A"


class CreditTypeEnum(str, Enum):
    """Tenant credit classification. Stored as free text on tenant rows."""

    LOCAL = "Local"
    REGIONAL = "Regional"
    NATIONAL = "National"
    NOT_APPLICABLE = "N/A"


class RenewEnum(str, Enum):
    """Renewal assumption for a tenant at lease expiration."""

    YES = "Yes"
    NO = "No"
    NOT_APPLICABLE = "N/A"
