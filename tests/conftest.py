# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for propdraft testing.

Provides a baseline property version (one broker, one leased tenant and the
vacant row) and `InMemoryPropertyApi`, an in-memory stand-in for the property
backend that enforces ``expectedRevision`` and records every call.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from propdraft.api import ApiError, MutationResult
from propdraft.core.base import Broker, PropertyVersion, Tenant, VersionSummary
from propdraft.state import PropertyStore

BASE_PROPERTY: Dict[str, Any] = {
    "propertyId": "property-1",
    "version": "1.1",
    "revision": 2,
    "isLatest": True,
    "isHistorical": False,
    "propertyDetails": {
        "address": "504 N Ashe Ave",
        "market": "Charlotte",
        "subMarket": "Southwest Charlotte",
        "propertyType": "Industrial",
        "propertySubType": "Multi Tenant",
        "zoning": "M-1",
        "zoningDetails": "M-1",
        "listingType": "Broker Listed",
        "businessPlan": "Light Value Add",
        "sellerType": "Private",
        "lastTradePrice": 1,
        "lastTradeDate": "2025-01-01",
        "askingPrice": 1,
        "bidAmount": 1,
        "yearOneCapRate": 1,
        "stabilizedCapRate": 1,
        "vintage": 2000,
        "buildingSizeSf": 1000,
        "warehouseSf": 500,
        "officeSf": 500,
        "propertySizeAcres": 10,
        "coverageRatio": 20,
        "outdoorStorage": "Yes",
        "constructionType": "Hybrid",
        "clearHeightFt": 32,
        "dockDoors": 2,
        "driveInDoors": 1,
        "heavyPower": "Yes",
        "sprinklerType": "Wet",
    },
    "underwritingInputs": {
        "listPrice": 0,
        "bid": 0,
        "gpEquityStack": 0,
        "lpEquityStack": 0,
        "acqFee": 0,
        "amFee": 0,
        "promote": 0,
        "prefHurdle": 0,
        "propMgmtFee": 0,
        "estStartDate": "2025-01-01",
        "holdPeriodYears": 5,
        "closingCostsPct": 0,
        "saleCostsPct": 0,
        "vacancyPct": 0,
        "annualCapexReservesPct": 0,
        "annualAdminExpPct": 0,
        "expenseInflationPct": 0,
        "exitCapRate": 0,
    },
    "brokers": [
        {
            "id": "b1",
            "name": "Broker One",
            "phone": "704-555-0100",
            "email": "one@example.com",
            "company": "A",
            "isDeleted": False,
        }
    ],
    "tenants": [
        {
            "id": "t1",
            "tenantName": "Tenant One",
            "creditType": "National",
            "squareFeet": 300,
            "rentPsf": 20,
            "annualEscalations": 2,
            "leaseStart": "2025-01-02",
            "leaseEnd": "2027-01-01",
            "leaseType": "NNN",
            "renew": "Yes",
            "downtimeMonths": 0,
            "tiPsf": 0,
            "lcPsf": 0,
            "isVacant": False,
            "isDeleted": False,
        },
        {
            "id": "vacant-row",
            "tenantName": "VACANT",
            "creditType": "N/A",
            "squareFeet": 700,
            "rentPsf": 0,
            "annualEscalations": 0,
            "leaseStart": "2025-01-02",
            "leaseEnd": "2027-01-01",
            "leaseType": "N/A",
            "renew": "N/A",
            "downtimeMonths": 0,
            "tiPsf": 0,
            "lcPsf": 0,
            "isVacant": True,
            "isDeleted": False,
        },
    ],
}


def make_property(**overrides: Any) -> PropertyVersion:
    """
    Baseline property version with top-level wire fields replaced.

    Example:
        >>> make_property(revision=7).revision
        7
    """
    data = copy.deepcopy(BASE_PROPERTY)
    data.update(overrides)
    return PropertyVersion.from_wire(data)


class InMemoryPropertyApi:
    """
    Minimal property backend held in memory.

    Writes check ``expected_revision`` against the stored aggregate and bump
    the revision, new entities get server-issued ids, and deletes are soft.
    Use `fail_next` to make the next call of an operation raise, and `hold` to
    keep an operation pending until the returned event is set.
    """

    def __init__(self, aggregate: Optional[PropertyVersion] = None):
        self.aggregate = aggregate or make_property()
        self.versions: List[VersionSummary] = [
            VersionSummary(version="1.0", revision=4, is_historical=True),
            VersionSummary(version=self.aggregate.version, revision=self.aggregate.revision),
        ]
        self.calls: List[Tuple[str, tuple]] = []
        self._failures: Dict[str, BaseException] = {}
        self._gates: Dict[str, asyncio.Event] = {}
        self._ids = itertools.count(1)

    # Test helpers

    def fail_next(self, operation: str, error: BaseException) -> None:
        self._failures[operation] = error

    def hold(self, operation: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[operation] = gate
        return gate

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def last_call(self, operation: str) -> tuple:
        return [args for name, args in self.calls if name == operation][-1]

    async def _enter(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        gate = self._gates.pop(operation, None)
        if gate is not None:
            await gate.wait()
        error = self._failures.pop(operation, None)
        if error is not None:
            raise error

    def _check_revision(self, expected_revision: int) -> None:
        if expected_revision != self.aggregate.revision:
            raise ApiError(
                message="Revision mismatch; reload and try again",
                error_code="REVISION_CONFLICT",
                status_code=409,
            )

    def _commit(self, message: str, **update: Any) -> MutationResult:
        self.aggregate = self.aggregate.model_copy(
            update={"revision": self.aggregate.revision + 1, **update}
        ).model_copy(deep=True)
        return MutationResult(data=self.aggregate.model_copy(deep=True), message=message)

    # PropertyTransport

    async def get_versions(self, property_id: str) -> List[VersionSummary]:
        await self._enter("get_versions", property_id)
        return list(self.versions)

    async def get_version(self, property_id: str, version: str) -> PropertyVersion:
        await self._enter("get_version", property_id, version)
        return self.aggregate.model_copy(deep=True)

    async def save_version(self, property_id: str, version: str, payload: dict) -> MutationResult:
        await self._enter("save_version", property_id, version, payload)
        self._check_revision(payload["expectedRevision"])
        saved = PropertyVersion.from_wire(
            {
                **self.aggregate.to_wire(),
                **{k: v for k, v in payload.items() if k != "expectedRevision"},
            }
        )
        return self._commit(
            "Saved",
            property_details=saved.property_details,
            underwriting_inputs=saved.underwriting_inputs,
            brokers=saved.brokers,
            tenants=saved.tenants,
        )

    async def save_as(self, property_id: str, version: str, payload: dict) -> MutationResult:
        await self._enter("save_as", property_id, version, payload)
        self._check_revision(payload["expectedRevision"])
        saved = PropertyVersion.from_wire(
            {
                **self.aggregate.to_wire(),
                **{k: v for k, v in payload.items() if k != "expectedRevision"},
                "version": "1.2",
                "revision": 0,
            }
        )
        self.aggregate = saved
        return MutationResult(data=saved.model_copy(deep=True), message="Saved as 1.2")

    async def create_broker(self, property_id, version, expected_revision, payload) -> MutationResult:
        await self._enter("create_broker", property_id, version, expected_revision, payload)
        self._check_revision(expected_revision)
        broker = Broker.from_wire({**payload, "id": f"srv-broker-{next(self._ids)}"})
        return self._commit("Broker created", brokers=[*self.aggregate.brokers, broker])

    async def update_broker(self, property_id, version, broker_id, expected_revision, payload) -> MutationResult:
        await self._enter("update_broker", property_id, version, broker_id, expected_revision, payload)
        self._check_revision(expected_revision)
        brokers = [
            Broker.from_wire({**b.to_wire(), **payload}) if b.id == broker_id else b
            for b in self.aggregate.brokers
        ]
        return self._commit("Broker updated", brokers=brokers)

    async def soft_delete_broker(self, property_id, version, broker_id, expected_revision) -> MutationResult:
        await self._enter("soft_delete_broker", property_id, version, broker_id, expected_revision)
        self._check_revision(expected_revision)
        brokers = [
            b.model_copy(update={"is_deleted": True}) if b.id == broker_id else b
            for b in self.aggregate.brokers
        ]
        return self._commit("Broker deleted", brokers=brokers)

    async def create_tenant(self, property_id, version, expected_revision, payload) -> MutationResult:
        await self._enter("create_tenant", property_id, version, expected_revision, payload)
        self._check_revision(expected_revision)
        tenant = Tenant.from_wire({**payload, "id": f"srv-tenant-{next(self._ids)}"})
        leased = [t for t in self.aggregate.tenants if not t.is_vacant]
        vacant = [t for t in self.aggregate.tenants if t.is_vacant]
        return self._commit("Tenant created", tenants=[*leased, tenant, *vacant])

    async def update_tenant(self, property_id, version, tenant_id, expected_revision, payload) -> MutationResult:
        await self._enter("update_tenant", property_id, version, tenant_id, expected_revision, payload)
        self._check_revision(expected_revision)
        tenants = [
            Tenant.from_wire({**t.to_wire(), **payload}) if t.id == tenant_id else t
            for t in self.aggregate.tenants
        ]
        return self._commit("Tenant updated", tenants=tenants)

    async def soft_delete_tenant(self, property_id, version, tenant_id, expected_revision) -> MutationResult:
        await self._enter("soft_delete_tenant", property_id, version, tenant_id, expected_revision)
        self._check_revision(expected_revision)
        tenants = [
            t.model_copy(update={"is_deleted": True}) if t.id == tenant_id else t
            for t in self.aggregate.tenants
        ]
        return self._commit("Tenant deleted", tenants=tenants)


@pytest.fixture
def base_property_wire() -> Dict[str, Any]:
    return copy.deepcopy(BASE_PROPERTY)


@pytest.fixture
def base_property() -> PropertyVersion:
    return make_property()


@pytest.fixture
def property_factory() -> Callable[..., PropertyVersion]:
    """Builds the baseline property version with top-level wire overrides."""
    return make_property


@pytest.fixture
def backend_factory() -> Callable[..., InMemoryPropertyApi]:
    """Builds an in-memory backend holding the given aggregate."""
    return InMemoryPropertyApi


@pytest.fixture
def backend() -> InMemoryPropertyApi:
    return InMemoryPropertyApi()


@pytest.fixture
def store(backend: InMemoryPropertyApi) -> PropertyStore:
    return PropertyStore(backend)
