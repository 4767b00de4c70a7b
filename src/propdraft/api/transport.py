# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Transport contract consumed by the draft store.

Implementations perform the network calls and unwrap the response
envelope; failures are raised as `ApiError`. Per-entity payloads are the
sanitized entity fields in wire form without ``id``, ``isDeleted`` and
``isVacant``. Every write carries ``expected_revision``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from ..core.base.property import PropertyVersion, VersionSummary
from .envelope import MutationResult

SavePayload = Dict[str, Any]
EntityPayload = Dict[str, Any]


class PropertyTransport(Protocol):
    async def get_versions(self, property_id: str) -> List[VersionSummary]: ...

    async def get_version(self, property_id: str, version: str) -> PropertyVersion: ...

    async def save_version(
        self, property_id: str, version: str, payload: SavePayload
    ) -> MutationResult: ...

    async def save_as(
        self, property_id: str, version: str, payload: SavePayload
    ) -> MutationResult: ...

    async def create_broker(
        self, property_id: str, version: str, expected_revision: int, payload: EntityPayload
    ) -> MutationResult: ...

    async def update_broker(
        self,
        property_id: str,
        version: str,
        broker_id: str,
        expected_revision: int,
        payload: EntityPayload,
    ) -> MutationResult: ...

    async def soft_delete_broker(
        self, property_id: str, version: str, broker_id: str, expected_revision: int
    ) -> MutationResult: ...

    async def create_tenant(
        self, property_id: str, version: str, expected_revision: int, payload: EntityPayload
    ) -> MutationResult: ...

    async def update_tenant(
        self,
        property_id: str,
        version: str,
        tenant_id: str,
        expected_revision: int,
        payload: EntityPayload,
    ) -> MutationResult: ...

    async def soft_delete_tenant(
        self, property_id: str, version: str, tenant_id: str, expected_revision: int
    ) -> MutationResult: ...
