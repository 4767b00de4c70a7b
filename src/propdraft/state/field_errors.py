# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Translation of validation and backend messages into field error paths.

Field errors are keyed by dotted camelCase paths matching the wire shape:
``propertyDetails.buildingSizeSf``, ``brokers.2.email``, ``tenants.0.leaseEnd``,
or a coarse collection path such as ``tenants.squareFeet``. Two producers
write into the same mapping:

- local validation messages (see `propdraft.core.validation`), where
  ``"Broker N:"`` / ``"Tenant N:"`` refer to the N-th active record and are
  resolved back to that record's index in the full draft array;
- backend rejections, whose ``details.message`` strings are scanned for
  dotted paths and a handful of known phrases.

The mapping is driven by the tables below. It matches free text, so message
wording on either side is load-bearing.

Three entries differ from the earlier mapping of the same messages:

- ``"Broker N: Company name is required"`` maps to ``company`` (it used to
  match the ``name`` pattern first and land on ``name``);
- ``"Tenant N: Lease end date cannot exceed lease start + hold period"`` maps
  to ``leaseEnd`` (it used to land on ``leaseStart``);
- ``"Property address is required"`` maps to ``propertyDetails.address`` (it
  used to have no field).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Tuple

from ..api.envelope import ApiError, extract_error_message
from ..core.base.property import PropertyVersion

FieldErrors = Dict[str, str]

# Aggregate-level messages: substring -> path
VALIDATION_MESSAGE_PATHS: List[Tuple[str, str]] = [
    ("Property address is required", "propertyDetails.address"),
    ("Building Size (SF)", "propertyDetails.buildingSizeSf"),
    ("Est Start Date is invalid", "underwritingInputs.estStartDate"),
    ("Hold Period (Yrs)", "underwritingInputs.holdPeriodYears"),
    ("Total tenant square footage", "tenants.squareFeet"),
]

# Detail of a "Broker N: ..." message (lowercased) -> broker field; first match wins
BROKER_DETAIL_FIELDS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^company"), "company"),
    (re.compile(r"phone"), "phone"),
    (re.compile(r"email"), "email"),
    (re.compile(r"^name"), "name"),
]

# Detail of a "Tenant N: ..." message (lowercased) -> tenant field; first match wins
TENANT_DETAIL_FIELDS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"tenant name"), "tenantName"),
    (re.compile(r"square feet"), "squareFeet"),
    (re.compile(r"^rent"), "rentPsf"),
    (re.compile(r"escalation"), "annualEscalations"),
    (re.compile(r"downtime"), "downtimeMonths"),
    (re.compile(r"^lease end"), "leaseEnd"),
    (re.compile(r"^lease start"), "leaseStart"),
]

ENUMERATED_MESSAGE = re.compile(r"^(Broker|Tenant) (\d+): (.+)$")

# Dotted paths as emitted by backend request validation
INDEXED_PATH = re.compile(r"\b(brokers|tenants)\.(\d+)\.([A-Za-z]+)\b")
SECTION_PATH = re.compile(r"\b(propertyDetails|underwritingInputs)\.([A-Za-z]+)\b")
COLLECTION_PATH = re.compile(r"\b(brokers|tenants)\.([A-Za-z]+)\b")

# Backend phrases without a dotted path (lowercased substring -> path)
BACKEND_PHRASE_PATHS: List[Tuple[str, str]] = [
    ("square footage", "tenants.squareFeet"),
    ("building size", "propertyDetails.buildingSizeSf"),
    ("est start date", "underwritingInputs.estStartDate"),
    ("hold period", "underwritingInputs.holdPeriodYears"),
    ("property address", "propertyDetails.address"),
]


def _enumerated_path(message: str, draft: PropertyVersion) -> Optional[str]:
    match = ENUMERATED_MESSAGE.match(message)
    if not match:
        return None
    kind, number, detail = match.group(1), int(match.group(2)), match.group(3).lower()
    if kind == "Broker":
        active, rows, table, collection = draft.active_brokers(), draft.brokers, BROKER_DETAIL_FIELDS, "brokers"
    else:
        active, rows, table, collection = draft.active_tenants(), draft.tenants, TENANT_DETAIL_FIELDS, "tenants"

    if number < 1 or number > len(active):
        return None
    record = active[number - 1]
    index = next(i for i, row in enumerate(rows) if row is record)
    for pattern, field_name in table:
        if pattern.search(detail):
            return f"{collection}.{index}.{field_name}"
    return None


def map_validation_errors_to_field_errors(
    validation_errors: List[str], draft: PropertyVersion
) -> FieldErrors:
    """
    Map local validation messages to field paths.

    Messages without a recognisable field (duplicate ids, missing internal
    ids, vacant row tampering) stay in the validation list only.
    """
    field_errors: FieldErrors = {}
    for message in validation_errors:
        for needle, path in VALIDATION_MESSAGE_PATHS:
            if needle in message:
                field_errors[path] = message
                break
        path = _enumerated_path(message, draft)
        if path:
            field_errors[path] = message
    return field_errors


def map_backend_messages_to_field_errors(
    messages: List[str], draft: Optional[PropertyVersion] = None
) -> FieldErrors:
    """
    Map backend violation texts to field paths.

    Every dotted path found in a message is recorded. Known phrases map to
    their coarse path, and when a draft is supplied, enumerated
    ``"Broker N:"`` / ``"Tenant N:"`` messages are resolved as for local
    validation.
    """
    field_errors: FieldErrors = {}
    for message in messages:
        for match in INDEXED_PATH.finditer(message):
            field_errors[".".join(match.groups())] = message
        for match in SECTION_PATH.finditer(message):
            field_errors[".".join(match.groups())] = message
        for match in COLLECTION_PATH.finditer(message):
            field_errors[".".join(match.groups())] = message

        lowered = message.lower()
        for needle, path in BACKEND_PHRASE_PATHS:
            if needle in lowered:
                field_errors[path] = message

        if draft is not None:
            path = _enumerated_path(message, draft)
            if path:
                field_errors[path] = message
    return field_errors


@dataclass(frozen=True)
class BackendErrorInfo:
    """Display message and field errors extracted from a failed request."""

    message: str
    field_errors: FieldErrors = field(default_factory=dict)
    error_code: str = ""
    status_code: int = 0


def extract_backend_error_info(
    error: BaseException, draft: Optional[PropertyVersion] = None
) -> BackendErrorInfo:
    """
    Extract field errors from any failure.

    Only `ApiError` carries field detail; everything else yields a message
    and an empty mapping.
    """
    message = extract_error_message(error)
    if not isinstance(error, ApiError):
        return BackendErrorInfo(message=message)
    messages = error.detail_messages or [error.message]
    return BackendErrorInfo(
        message=message,
        field_errors=map_backend_messages_to_field_errors(messages, draft),
        error_code=error.error_code,
        status_code=error.status_code,
    )


def coarse_path(path: str) -> str:
    """Drop the row index: ``tenants.3.squareFeet`` -> ``tenants.squareFeet``."""
    parts = path.split(".")
    if len(parts) == 3 and parts[1].isdigit():
        return f"{parts[0]}.{parts[2]}"
    return path


def resolve_field_error(field_errors: FieldErrors, path: str) -> Optional[str]:
    """Error for ``path``, preferring the indexed entry over the coarse one."""
    if path in field_errors:
        return field_errors[path]
    coarse = coarse_path(path)
    if coarse != path:
        return field_errors.get(coarse)
    return None
