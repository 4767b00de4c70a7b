# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging

"""
propdraft - Draft synchronization for versioned property underwriting records

Keeps a single editable draft of a property version in memory, tracks whether
it differs from what the backend last confirmed, validates it before writing,
and reconciles single broker and tenant writes without losing other pending
edits.

Key Entry Points:
- propdraft.PropertyStore - The draft store (load, edit, save)
- propdraft.PropertyApiClient - httpx transport for the property API
- propdraft.ClientSettings - Configuration for both
- propdraft.validate_property_draft() - Domain validation of a draft

Example Usage:
    ```python
    from propdraft import ClientSettings, PropertyStore

    store = PropertyStore.from_settings(ClientSettings())
    await store.load_version("1.1")
    broker_id = store.add_broker_draft()
    store.update_broker_field(broker_id, "name", "Jane Broker")
    ```
"""

# Add a NullHandler so applications that don't configure logging see no
# "No handlers could be found" warnings. Applications configure their own
# handlers as needed.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "api",
    "core",
    "state",
    "ApiError",
    "ClientSettings",
    "PendingChangesGuard",
    "PropertyApiClient",
    "PropertyStore",
    "PropertyVersion",
    "validate_property_draft",
]


_LAZY_MODULES = {
    "api": "propdraft.api",
    "core": "propdraft.core",
    "state": "propdraft.state",
}

_LAZY_ATTRIBUTES = {
    "ApiError": "propdraft.api",
    "ClientSettings": "propdraft.core.primitives",
    "PendingChangesGuard": "propdraft.state",
    "PropertyApiClient": "propdraft.api",
    "PropertyStore": "propdraft.state",
    "PropertyVersion": "propdraft.core.base",
    "validate_property_draft": "propdraft.core.validation",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is not None:
        module = importlib.import_module(module_path)
        globals()[name] = module
        return module
    module_path = _LAZY_ATTRIBUTES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'propdraft' has no attribute '{name}'")
    value = getattr(importlib.import_module(module_path), name)
    globals()[name] = value
    return value
