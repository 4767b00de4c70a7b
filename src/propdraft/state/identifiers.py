# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Client-minted identifiers for brokers and tenants.

New rows get a transient id (``temp-broker-<uuid>``) so the rendering layer
can address them before the backend has seen them. An id is *client-only*
when it is transient AND absent from the persisted snapshot: records created
under an older id scheme may carry a transient-looking id that the backend
already knows, and those must be updated, not created again.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Set
from uuid import uuid4

from ..core.base.property import PropertyVersion
from ..core.primitives.enums import CollectionEnum
from ..core.primitives.settings import DraftSettings

logger = logging.getLogger(__name__)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid4()}"


def is_transient_id(entity_id: str, transient_prefix: str = "temp-") -> bool:
    return entity_id.startswith(transient_prefix)


def is_client_only_id(
    entity_id: str,
    persisted: Optional[PropertyVersion],
    collection: CollectionEnum,
    transient_prefix: str = "temp-",
) -> bool:
    """True when ``entity_id`` is transient and unknown to the persisted snapshot."""
    if not is_transient_id(entity_id, transient_prefix):
        return False
    if persisted is None:
        return True
    return not any(item.id == entity_id for item in persisted.collection(collection))


def _fresh_id(prefix: str, taken: Set[str], generate: Callable[[str], str]) -> str:
    candidate = generate(prefix)
    while candidate in taken:
        candidate = generate(prefix)
    taken.add(candidate)
    return candidate


def materialize_transient_ids(
    draft: PropertyVersion,
    persisted: Optional[PropertyVersion],
    settings: Optional[DraftSettings] = None,
    generate: Callable[[str], str] = generate_id,
) -> PropertyVersion:
    """
    Replace every client-only broker and tenant id with a fresh, non-transient id.

    New ids never collide with an id already present in either collection of
    the draft. The vacant row keeps its reserved id. The input draft is left
    untouched; a deep copy is returned.

    Args:
        draft: Draft about to be sent in a bulk save
        persisted: Last snapshot confirmed by the backend
        settings: Identifier scheme; defaults to `DraftSettings()`
        generate: Id factory taking a prefix
    """
    settings = settings or DraftSettings()
    prefix = settings.transient_prefix
    taken = {b.id for b in draft.brokers} | {t.id for t in draft.tenants}

    brokers = []
    for broker in draft.brokers:
        if is_client_only_id(broker.id, persisted, CollectionEnum.BROKERS, prefix):
            new_id = _fresh_id(settings.broker_id_prefix, taken, generate)
            logger.debug(f"Materialized broker id {broker.id} -> {new_id}")
            broker = broker.model_copy(update={"id": new_id})
        brokers.append(broker)

    tenants = []
    for tenant in draft.tenants:
        if not tenant.is_vacant and is_client_only_id(
            tenant.id, persisted, CollectionEnum.TENANTS, prefix
        ):
            new_id = _fresh_id(settings.tenant_id_prefix, taken, generate)
            logger.debug(f"Materialized tenant id {tenant.id} -> {new_id}")
            tenant = tenant.model_copy(update={"id": new_id})
        tenants.append(tenant)

    return draft.model_copy(update={"brokers": brokers, "tenants": tenants}).model_copy(deep=True)
