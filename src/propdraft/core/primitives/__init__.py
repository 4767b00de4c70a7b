# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
propdraft core primitives

Building blocks shared by the records and the store: the base model, enums,
settings, observable state, and field-level validation helpers.
"""

from .enums import (
    CollectionEnum,
    CreditTypeEnum,
    LeaseTypeEnum,
    RenewEnum,
    SectionEnum,
)
from .model import Model
from .settings import ApiSettings, ClientSettings, DraftSettings
from .signal import State
from .validation import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    is_blank,
    is_valid_date,
    is_valid_email,
    is_valid_phone,
    parse_date,
)

__all__ = [
    # Core models
    "Model",
    "State",
    # Settings
    "ApiSettings",
    "ClientSettings",
    "DraftSettings",
    # Enums
    "CollectionEnum",
    "CreditTypeEnum",
    "LeaseTypeEnum",
    "RenewEnum",
    "SectionEnum",
    # Validation
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "is_blank",
    "is_valid_date",
    "is_valid_email",
    "is_valid_phone",
    "parse_date",
]
