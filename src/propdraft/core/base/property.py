# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Property version aggregate.

A `PropertyVersion` is the unit of load and save: identity fields, the
descriptive `PropertyDetails`, the `UnderwritingInputs` assumptions, and the
ordered broker and tenant collections. Field names are snake_case in Python
and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from ..primitives.enums import CollectionEnum
from ..primitives.model import Model
from .broker import Broker
from .tenant import Tenant


class PropertyDetails(Model):
    """Descriptive attributes of the building and its listing."""

    address: str = ""
    market: str = ""
    sub_market: str = ""
    property_type: str = ""
    property_sub_type: str = ""
    zoning: str = ""
    zoning_details: str = ""
    listing_type: str = ""
    business_plan: str = ""
    seller_type: str = ""
    last_trade_price: float = 0.0
    last_trade_date: str = ""
    asking_price: float = 0.0
    bid_amount: float = 0.0
    year_one_cap_rate: float = 0.0
    stabilized_cap_rate: float = 0.0
    vintage: int = 0
    building_size_sf: float = 0.0
    warehouse_sf: float = 0.0
    office_sf: float = 0.0
    property_size_acres: float = 0.0
    coverage_ratio: float = 0.0
    outdoor_storage: str = ""
    construction_type: str = ""
    clear_height_ft: float = 0.0
    dock_doors: int = 0
    drive_in_doors: int = 0
    heavy_power: str = ""
    sprinkler_type: str = ""


class UnderwritingInputs(Model):
    """Deal-level underwriting assumptions."""

    list_price: float = 0.0
    bid: float = 0.0
    gp_equity_stack: float = 0.0
    lp_equity_stack: float = 0.0
    acq_fee: float = 0.0
    am_fee: float = 0.0
    promote: float = 0.0
    pref_hurdle: float = 0.0
    prop_mgmt_fee: float = 0.0
    est_start_date: str = ""  # ISO date; validated, not parsed, on load
    hold_period_years: float = 0.0
    closing_costs_pct: float = 0.0
    sale_costs_pct: float = 0.0
    vacancy_pct: float = 0.0
    annual_capex_reserves_pct: float = 0.0
    annual_admin_exp_pct: float = 0.0
    expense_inflation_pct: float = 0.0
    exit_cap_rate: float = 0.0


class VersionSummary(Model):
    """One entry of the version picker."""

    version: str
    revision: int
    is_historical: bool = False


class PropertyVersion(Model):
    """
    A loaded property version.

    `revision` is the optimistic concurrency token: it only advances when the
    backend confirms a write, and every write sends it back as
    ``expectedRevision``.
    """

    property_id: str
    version: str
    revision: int
    is_latest: bool = False
    is_historical: bool = False
    property_details: PropertyDetails = Field(default_factory=PropertyDetails)
    underwriting_inputs: UnderwritingInputs = Field(default_factory=UnderwritingInputs)
    brokers: List[Broker] = Field(default_factory=list)
    tenants: List[Tenant] = Field(default_factory=list)

    @property
    def identity(self) -> tuple:
        return (self.property_id, self.version)

    def collection(self, name: CollectionEnum) -> List[Union[Broker, Tenant]]:
        return self.brokers if name is CollectionEnum.BROKERS else self.tenants

    def find_broker(self, broker_id: str) -> Optional[Broker]:
        return next((b for b in self.brokers if b.id == broker_id), None)

    def find_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return next((t for t in self.tenants if t.id == tenant_id), None)

    def active_brokers(self) -> List[Broker]:
        """Brokers that are not soft-deleted, in draft order."""
        return [b for b in self.brokers if not b.is_deleted]

    def active_tenants(self) -> List[Tenant]:
        """Leased tenant rows: not soft-deleted and not the vacant row."""
        return [t for t in self.tenants if not t.is_deleted and not t.is_vacant]

    @classmethod
    def from_wire(cls, data: Any) -> "PropertyVersion":
        """
        Decode a backend payload, keeping only the fields this model knows.

        The backend may attach bookkeeping fields (timestamps, audit ids) to
        the aggregate and its rows; they are dropped at every level so that
        drafts and persisted snapshots compare on editable content only.
        """
        if not isinstance(data, dict):
            return cls.model_validate(data)
        sections = {
            "propertyDetails": PropertyDetails,
            "property_details": PropertyDetails,
            "underwritingInputs": UnderwritingInputs,
            "underwriting_inputs": UnderwritingInputs,
        }
        rows = {"brokers": Broker, "tenants": Tenant}
        keys = cls.wire_keys()
        projected: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in keys:
                continue
            if key in sections and isinstance(value, dict):
                section_keys = sections[key].wire_keys()
                value = {k: v for k, v in value.items() if k in section_keys}
            elif key in rows and isinstance(value, list):
                row_keys = rows[key].wire_keys()
                value = [
                    {k: v for k, v in row.items() if k in row_keys} if isinstance(row, dict) else row
                    for row in value
                ]
            projected[key] = value
        return cls.model_validate(projected)
