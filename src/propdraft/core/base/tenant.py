# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta

from ..primitives.enums import CreditTypeEnum, LeaseTypeEnum, RenewEnum
from ..primitives.model import Model

# Fields sent to the per-tenant create/update endpoints, in wire order
TENANT_PAYLOAD_FIELDS = (
    "tenant_name",
    "credit_type",
    "square_feet",
    "rent_psf",
    "annual_escalations",
    "lease_start",
    "lease_end",
    "lease_type",
    "renew",
    "downtime_months",
    "ti_psf",
    "lc_psf",
)


class Tenant(Model):
    """
    A rent roll row.

    Exactly one row per property is the system-managed vacant row
    (`is_vacant=True`, reserved id) representing unleased space.
    Lease dates are ISO date strings exactly as entered; they are validated
    rather than coerced so that a half-typed date survives in the draft.
    """

    id: str
    tenant_name: str = ""
    credit_type: str = CreditTypeEnum.LOCAL.value
    square_feet: float = 0.0
    rent_psf: float = 0.0
    annual_escalations: float = 0.0
    lease_start: str = ""
    lease_end: str = ""
    lease_type: str = LeaseTypeEnum.GROSS.value
    renew: str = RenewEnum.NO.value
    downtime_months: float = 0.0
    ti_psf: float = 0.0
    lc_psf: float = 0.0
    is_vacant: bool = False
    is_deleted: bool = False

    @classmethod
    def draft(cls, tenant_id: str, lease_start: date) -> "Tenant":
        """
        New leased row with a one-year lease starting at ``lease_start``.

        The lease end is clamped to the last representable date.
        """
        try:
            lease_end = lease_start + relativedelta(years=1)
        except (ValueError, OverflowError):
            lease_end = date.max
        return cls(
            id=tenant_id,
            lease_start=lease_start.isoformat(),
            lease_end=lease_end.isoformat(),
        )

    def sanitized(self) -> dict:
        """Wire payload for per-tenant writes: name trimmed, flags and id omitted."""
        payload = self.model_dump(mode="json", by_alias=True, include=set(TENANT_PAYLOAD_FIELDS))
        payload["tenantName"] = (self.tenant_name or "").strip()
        return payload

    def to_save_row(self) -> dict:
        """Row shape accepted by the bulk save endpoint."""
        return self.model_dump(mode="json", by_alias=True)
