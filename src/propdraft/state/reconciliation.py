# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Merging single-entity write results back into a live draft.

A broker or tenant write returns the whole aggregate, but only the collection
that was written is authoritative: the draft may already hold newer unsaved
edits to the scalar sections and to the other collection. The merge takes
identity, revision and the written collection from the server and keeps
everything else from the draft.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.base.property import PropertyVersion
from ..core.primitives.enums import CollectionEnum

logger = logging.getLogger(__name__)


def reconcile_collection(
    draft: Optional[PropertyVersion],
    saved: PropertyVersion,
    collection: CollectionEnum,
) -> PropertyVersion:
    """
    Build the next draft after a confirmed write to ``collection``.

    Args:
        draft: Draft at the time the response arrived; None if nothing is loaded
        saved: Aggregate returned by the backend
        collection: The collection the write targeted

    Returns:
        A new draft sharing no mutable structure with either input.
    """
    if draft is None:
        return saved.model_copy(deep=True)

    other = CollectionEnum.TENANTS if collection is CollectionEnum.BROKERS else CollectionEnum.BROKERS
    merged = saved.model_copy(
        update={
            "property_details": draft.property_details,
            "underwriting_inputs": draft.underwriting_inputs,
            other.value: draft.collection(other),
        }
    ).model_copy(deep=True)

    logger.debug(
        f"Reconciled {collection.value} at revision {saved.revision}; "
        f"kept draft details, underwriting and {other.value}"
    )
    return merged
