# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Domain validation for a property version draft.

`validate_property_draft` evaluates every rule and returns all violations as
human-readable messages, in a fixed order. Messages for individual records
follow ``"Broker {n}: {detail}"`` / ``"Tenant {n}: {detail}"`` where ``n`` is
the 1-based position among active records; aggregate rules are bare
sentences. The field error mapper in `propdraft.state.field_errors` parses
these messages, so their wording is part of the contract.

The per-entity checks used before a single broker or tenant save live here
too, so that save-time rules and the store's can-save predicates share one
definition.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .base.broker import Broker
from .base.property import PropertyVersion
from .base.tenant import Tenant
from .primitives.validation import (
    is_blank,
    is_valid_email,
    is_valid_phone,
    parse_date,
)

VACANT_TENANT_ID = "vacant-row"

VACANT_ROW_MESSAGE = "Vacant row is system-managed and cannot be modified directly"
TOTAL_SQFT_MESSAGE = "Total tenant square footage must be <= property space"


def _check_broker(broker: Broker, number: int, errors: List[str]) -> None:
    prefix = f"Broker {number}:"
    if not broker.id:
        errors.append(f"{prefix} Internal ID is missing")
    if is_blank(broker.name):
        errors.append(f"{prefix} Name is required")
    if is_blank(broker.phone):
        errors.append(f"{prefix} Phone number is required")
    elif not is_valid_phone(broker.phone):
        errors.append(f"{prefix} Enter a valid phone number")
    if is_blank(broker.company):
        errors.append(f"{prefix} Company name is required")
    if is_blank(broker.email):
        errors.append(f"{prefix} Email address is required")
    elif not is_valid_email(broker.email):
        errors.append(f"{prefix} Enter a valid email address")


def _check_tenant(tenant: Tenant, number: int, errors: List[str]) -> None:
    prefix = f"Tenant {number}:"
    if not tenant.id:
        errors.append(f"{prefix} Internal ID is missing")
    if is_blank(tenant.tenant_name):
        errors.append(f"{prefix} Tenant name is required")
    if tenant.square_feet < 0:
        errors.append(f"{prefix} Square feet must be 0 or more")
    if min(tenant.rent_psf, tenant.annual_escalations, tenant.ti_psf, tenant.lc_psf) < 0:
        errors.append(f"{prefix} Rent, escalation, TI and LC values must be 0 or more")
    if tenant.downtime_months < 0:
        errors.append(f"{prefix} Downtime must be 0 or more")
    if parse_date(tenant.lease_start) is None or parse_date(tenant.lease_end) is None:
        errors.append(f"{prefix} Lease start and lease end must be valid dates")


def _has_duplicates(ids: List[str]) -> bool:
    return len(set(ids)) != len(ids)


def _latest_lease_end(lease_start: date, hold_period_years: float) -> Optional[date]:
    """
    Last allowed lease end for a lease starting at ``lease_start``.

    Partial hold years are truncated to whole years. Returns None when the
    bound falls outside the calendar, in which case no lease end exceeds it.
    """
    try:
        return lease_start + relativedelta(years=int(hold_period_years))
    except (ValueError, OverflowError):
        return None


def validate_property_draft(
    draft: PropertyVersion, vacant_row_id: str = VACANT_TENANT_ID
) -> List[str]:
    """
    Validate a full draft.

    Args:
        draft: The property version to check
        vacant_row_id: Reserved id of the system-managed vacant row

    Returns:
        Violation messages in rule order; an empty list means the draft is valid.
    """
    errors: List[str] = []
    details = draft.property_details
    underwriting = draft.underwriting_inputs

    if is_blank(details.address):
        errors.append("Property address is required")
    if details.building_size_sf <= 0:
        errors.append("Building Size (SF) must be greater than 0")
    property_start = parse_date(underwriting.est_start_date)
    if property_start is None:
        errors.append("Est Start Date is invalid")
    if underwriting.hold_period_years <= 0:
        errors.append("Hold Period (Yrs) must be greater than 0")

    active_brokers = draft.active_brokers()
    if _has_duplicates([broker.id for broker in active_brokers]):
        errors.append("Broker IDs must be unique")
    for number, broker in enumerate(active_brokers, start=1):
        _check_broker(broker, number, errors)

    active_tenants = draft.active_tenants()
    if _has_duplicates([tenant.id for tenant in active_tenants]):
        errors.append("Tenant IDs must be unique for non-vacant rows")

    # Independent of deletion state and every other rule
    if any(t.id == vacant_row_id and not t.is_vacant for t in draft.tenants):
        errors.append(VACANT_ROW_MESSAGE)

    for number, tenant in enumerate(active_tenants, start=1):
        _check_tenant(tenant, number, errors)

    total_square_feet = sum(tenant.square_feet for tenant in active_tenants)
    if total_square_feet > details.building_size_sf:
        errors.append(TOTAL_SQFT_MESSAGE)

    for number, tenant in enumerate(active_tenants, start=1):
        lease_start = parse_date(tenant.lease_start)
        lease_end = parse_date(tenant.lease_end)
        if lease_start is None:
            continue
        if property_start is not None and lease_start < property_start:
            errors.append(f"Tenant {number}: Lease start date cannot be before Est Start Date")
        latest_end = _latest_lease_end(lease_start, underwriting.hold_period_years)
        if lease_end is not None and latest_end is not None and lease_end > latest_end:
            errors.append(f"Tenant {number}: Lease end date cannot exceed lease start + hold period")

    return errors


def broker_save_errors(broker: Broker) -> List[str]:
    """
    Checks applied before a single broker create or update.

    All four contact fields are required after trimming, and the phone and
    email must be well formed.
    """
    payload = broker.sanitized()
    missing = [field for field in ("name", "phone", "email", "company") if not payload[field]]
    if missing:
        return ["Broker name, phone, email and company are required"]
    errors = []
    if not is_valid_phone(payload["phone"]):
        errors.append("Enter a valid phone number")
    if not is_valid_email(payload["email"]):
        errors.append("Enter a valid email address")
    return errors


def tenant_save_errors(tenant: Tenant) -> List[str]:
    """Checks applied before a single tenant create or update."""
    if not tenant.sanitized()["tenantName"]:
        return ["Tenant name is required"]
    return []
