# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Draft store for a single property version.

The store owns two copies of the loaded aggregate: the user-editable draft and
the persisted snapshot last confirmed by the backend. They never share
mutable structure. Dirtiness is derived by comparing the two.

Every edit goes through `PropertyStore.patch_draft`. Full saves validate the
draft first and materialize client-minted ids; single broker and tenant
writes reconcile the returned aggregate into the live draft so that unrelated
pending edits survive.

Network operations are coroutines. Everything else, including validation,
reconciliation and state publication, runs synchronously, so a `patch_draft`
issued while a write is in flight is always safe.

Example:
    ```python
    from propdraft import ClientSettings, PropertyStore

    store = PropertyStore.from_settings(ClientSettings())
    await store.load_versions()
    await store.load_version("1.1")

    store.update_property_details_field("market", "Charlotte")
    assert store.has_unsaved_changes()

    result = await store.save_current()
    print(result.message)
    ```
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, List, Optional, Set, Tuple

from ..api.client import PropertyApiClient
from ..api.envelope import MutationResult
from ..api.transport import PropertyTransport, SavePayload
from ..core.base.broker import Broker
from ..core.base.property import PropertyDetails, PropertyVersion, UnderwritingInputs, VersionSummary
from ..core.base.tenant import Tenant
from ..core.primitives.enums import CollectionEnum, SectionEnum
from ..core.primitives.model import Model
from ..core.primitives.settings import ClientSettings, DraftSettings
from ..core.primitives.signal import State
from ..core.primitives.validation import parse_date
from ..core.validation import broker_save_errors, tenant_save_errors, validate_property_draft
from .exceptions import (
    DraftValidationError,
    EntityNotFoundError,
    PropertyNotLoadedError,
    RequiredFieldError,
    VacantRowError,
)
from .field_errors import (
    BackendErrorInfo,
    FieldErrors,
    coarse_path,
    extract_backend_error_info,
    map_validation_errors_to_field_errors,
    resolve_field_error,
)
from .identifiers import generate_id, is_client_only_id, materialize_transient_ids
from .reconciliation import reconcile_collection

logger = logging.getLogger(__name__)

Mutator = Callable[[PropertyVersion], PropertyVersion]


def _wire_name(model: type, key: str) -> str:
    field = model.model_fields.get(key)
    if field is None:
        raise ValueError(f"Unknown field '{key}' for {model.__name__}")
    return field.alias or key


class PropertyStore:
    """
    Single source of truth for the property version being edited.

    Observable state (each a `State`; subscribe to receive the current value
    immediately and every later replacement):

    - ``property``: the draft, or None before the first load
    - ``versions``: available `VersionSummary` entries
    - ``dirty``: whether the draft differs from the persisted snapshot
    - ``validation_errors``: messages from the last full validation
    - ``field_errors``: dotted field path -> message
    """

    def __init__(self, api: PropertyTransport, settings: Optional[DraftSettings] = None):
        self.api = api
        self.settings = settings or DraftSettings()
        self._persisted: Optional[PropertyVersion] = None
        # Bumped on every successful load; responses from an older load are stale
        self._load_generation = 0
        self._background_tasks: Set[asyncio.Task] = set()

        self.property: State[Optional[PropertyVersion]] = State(None, "property")
        self.versions: State[List[VersionSummary]] = State([], "versions")
        self.dirty: State[bool] = State(False, "dirty")
        self.validation_errors: State[List[str]] = State([], "validation_errors")
        self.field_errors: State[FieldErrors] = State({}, "field_errors")

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "PropertyStore":
        """Store backed by a `PropertyApiClient` built from ``settings``."""
        settings = settings or ClientSettings()
        return cls(PropertyApiClient(settings.api), settings.draft)

    @property
    def property_id(self) -> str:
        return self.settings.property_id

    @property
    def persisted_snapshot(self) -> Optional[PropertyVersion]:
        """Deep copy of the last aggregate confirmed by the backend."""
        if self._persisted is None:
            return None
        return self._persisted.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_version(self, version: Optional[str] = None) -> PropertyVersion:
        """
        Fetch a version and make it both the draft and the persisted snapshot.

        Transport failures propagate and leave the store untouched.
        """
        version = version or self.settings.default_version
        loaded = await self.api.get_version(self.property_id, version)
        self._replace_loaded(loaded)
        self._load_generation += 1
        self.validation_errors.set([])
        self.field_errors.set({})
        logger.debug(f"Loaded {self.property_id} version {version} at revision {loaded.revision}")
        return self.property.value

    async def load_versions(self) -> List[VersionSummary]:
        versions = await self.api.get_versions(self.property_id)
        self.versions.set(list(versions))
        return self.versions.value

    # ------------------------------------------------------------------
    # Draft mutation
    # ------------------------------------------------------------------

    def patch_draft(self, mutator: Mutator) -> None:
        """
        Apply ``mutator`` to a deep copy of the draft and publish the result.

        No-op when nothing is loaded. While validation errors are displayed
        the new draft is re-validated immediately.
        """
        current = self.property.value
        if current is None:
            return
        next_draft = mutator(current.model_copy(deep=True))
        if not isinstance(next_draft, PropertyVersion):
            raise TypeError("patch_draft mutator must return the next PropertyVersion")

        self.property.set(next_draft)
        if self.validation_errors.value:
            errors = validate_property_draft(next_draft, self.settings.vacant_row_id)
            self.validation_errors.set(errors)
            self.field_errors.set(map_validation_errors_to_field_errors(errors, next_draft))
        self._refresh_dirty()

    def update_property_details_field(self, key: str, value: Any) -> None:
        path = f"{SectionEnum.PROPERTY_DETAILS.value}.{_wire_name(PropertyDetails, key)}"
        self.clear_field_errors([path])
        self.patch_draft(
            lambda draft: draft.model_copy(
                update={"property_details": draft.property_details.with_field(key, value)}
            )
        )

    def update_underwriting_field(self, key: str, value: Any) -> None:
        path = f"{SectionEnum.UNDERWRITING_INPUTS.value}.{_wire_name(UnderwritingInputs, key)}"
        self.clear_field_errors([path])
        self.patch_draft(
            lambda draft: draft.model_copy(
                update={"underwriting_inputs": draft.underwriting_inputs.with_field(key, value)}
            )
        )

    def update_broker_field(self, broker_id: str, key: str, value: Any) -> None:
        wire = _wire_name(Broker, key)
        self._clear_row_field_errors(CollectionEnum.BROKERS, broker_id, wire)
        self.patch_draft(
            lambda draft: draft.model_copy(
                update={
                    "brokers": [
                        broker.with_field(key, value) if broker.id == broker_id else broker
                        for broker in draft.brokers
                    ]
                }
            )
        )

    def update_tenant_field(self, tenant_id: str, key: str, value: Any) -> None:
        """
        Edit one field of a leased tenant row.

        Raises:
            VacantRowError: If ``tenant_id`` is the vacant row
        """
        current = self.property.value
        target = current.find_tenant(tenant_id) if current is not None else None
        if tenant_id == self.settings.vacant_row_id or (target is not None and target.is_vacant):
            raise VacantRowError()

        wire = _wire_name(Tenant, key)
        self._clear_row_field_errors(CollectionEnum.TENANTS, tenant_id, wire)
        self.patch_draft(
            lambda draft: draft.model_copy(
                update={
                    "tenants": [
                        tenant.with_field(key, value)
                        if tenant.id == tenant_id and not tenant.is_vacant and not tenant.is_deleted
                        else tenant
                        for tenant in draft.tenants
                    ]
                }
            )
        )

    def add_broker_draft(self) -> Optional[str]:
        """Append an empty broker with a transient id. Returns the id, or None if nothing is loaded."""
        if self.property.value is None:
            return None
        broker = Broker(id=generate_id(self.settings.broker_draft_prefix))
        self.patch_draft(lambda draft: draft.model_copy(update={"brokers": [*draft.brokers, broker]}))
        return broker.id

    def add_tenant_draft(self) -> Optional[str]:
        """
        Insert a new tenant ahead of the vacant row.

        The lease starts at the underwriting start date (today if that is not
        a valid date) and runs for one year.
        """
        current = self.property.value
        if current is None:
            return None
        start = parse_date(current.underwriting_inputs.est_start_date) or date.today()
        tenant = Tenant.draft(generate_id(self.settings.tenant_draft_prefix), start)

        def insert(draft: PropertyVersion) -> PropertyVersion:
            leased = [row for row in draft.tenants if not row.is_vacant]
            vacant = [row for row in draft.tenants if row.is_vacant]
            return draft.model_copy(update={"tenants": [*leased, tenant, *vacant]})

        self.patch_draft(insert)
        return tenant.id

    # ------------------------------------------------------------------
    # Single entity writes
    # ------------------------------------------------------------------

    async def save_broker(self, broker_id: str) -> MutationResult:
        """
        Create or update one broker, depending on whether its id is client-only.

        Raises:
            PropertyNotLoadedError: If nothing is loaded
            EntityNotFoundError: If the broker is missing or deleted
            RequiredFieldError: If the trimmed contact fields are incomplete or malformed
        """
        current = self._require_loaded()
        broker = current.find_broker(broker_id)
        if broker is None:
            raise EntityNotFoundError("Broker not found in draft")
        if broker.is_deleted:
            raise EntityNotFoundError("Broker not found")
        errors = broker_save_errors(broker)
        if errors:
            raise RequiredFieldError(" | ".join(errors))

        payload = broker.sanitized()
        generation = self._load_generation
        if self.is_client_only_broker_id(broker_id):
            logger.debug(f"Creating broker from draft row {broker_id}")
            result = await self.api.create_broker(
                self.property_id, current.version, current.revision, payload
            )
        else:
            result = await self.api.update_broker(
                self.property_id, current.version, broker_id, current.revision, payload
            )
        self._apply_collection_result(result.data, CollectionEnum.BROKERS, generation, current.identity)
        return result

    async def delete_broker(self, broker_id: str) -> MutationResult:
        """
        Remove a broker.

        Client-only rows are dropped from the draft without a request;
        persisted rows are soft-deleted on the backend.
        """
        current = self._require_loaded()
        broker = current.find_broker(broker_id)
        if broker is None:
            raise EntityNotFoundError("Broker not found in draft")
        if self.is_client_only_broker_id(broker_id):
            self.patch_draft(
                lambda draft: draft.model_copy(
                    update={"brokers": [b for b in draft.brokers if b.id != broker_id]}
                )
            )
            return MutationResult(data=self.property.value, message="Unsaved broker removed")

        if broker.is_deleted:
            raise EntityNotFoundError("Broker not found")

        generation = self._load_generation
        result = await self.api.soft_delete_broker(
            self.property_id, current.version, broker_id, current.revision
        )
        self._apply_collection_result(result.data, CollectionEnum.BROKERS, generation, current.identity)
        return result

    async def save_tenant(self, tenant_id: str) -> MutationResult:
        """
        Create or update one tenant, depending on whether its id is client-only.

        Raises:
            PropertyNotLoadedError: If nothing is loaded
            VacantRowError: If the tenant is the vacant row
            EntityNotFoundError: If the tenant is missing or deleted
            RequiredFieldError: If the trimmed tenant name is empty
        """
        current = self._require_loaded()
        if tenant_id == self.settings.vacant_row_id:
            raise VacantRowError()
        tenant = current.find_tenant(tenant_id)
        if tenant is None:
            raise EntityNotFoundError("Tenant not found in draft")
        if tenant.is_vacant:
            raise VacantRowError()
        if tenant.is_deleted:
            raise EntityNotFoundError("Tenant not found")
        errors = tenant_save_errors(tenant)
        if errors:
            raise RequiredFieldError(" | ".join(errors))

        payload = tenant.sanitized()
        generation = self._load_generation
        if self.is_client_only_tenant_id(tenant_id):
            logger.debug(f"Creating tenant from draft row {tenant_id}")
            result = await self.api.create_tenant(
                self.property_id, current.version, current.revision, payload
            )
        else:
            result = await self.api.update_tenant(
                self.property_id, current.version, tenant_id, current.revision, payload
            )
        self._apply_collection_result(result.data, CollectionEnum.TENANTS, generation, current.identity)
        return result

    async def delete_tenant(self, tenant_id: str) -> MutationResult:
        """
        Remove a tenant.

        The vacant row can never be deleted. Client-only rows are dropped
        from the draft without a request; persisted rows are soft-deleted.
        """
        current = self._require_loaded()
        if tenant_id == self.settings.vacant_row_id:
            raise VacantRowError()
        tenant = current.find_tenant(tenant_id)
        if tenant is None:
            raise EntityNotFoundError("Tenant not found in draft")
        if tenant.is_vacant:
            raise VacantRowError()

        if self.is_client_only_tenant_id(tenant_id):
            self.patch_draft(
                lambda draft: draft.model_copy(
                    update={"tenants": [t for t in draft.tenants if t.id != tenant_id]}
                )
            )
            return MutationResult(data=self.property.value, message="Unsaved tenant removed")

        if tenant.is_deleted:
            raise EntityNotFoundError("Tenant not found")

        generation = self._load_generation
        result = await self.api.soft_delete_tenant(
            self.property_id, current.version, tenant_id, current.revision
        )
        self._apply_collection_result(result.data, CollectionEnum.TENANTS, generation, current.identity)
        return result

    # ------------------------------------------------------------------
    # Full saves
    # ------------------------------------------------------------------

    async def save_current(self) -> MutationResult:
        """
        Validate and save the whole draft over the loaded version.

        Raises:
            PropertyNotLoadedError: If nothing is loaded
            DraftValidationError: If the draft violates any rule; nothing is sent
            ApiError: If the backend rejects the write, e.g. on a stale revision
        """
        current = self._require_loaded()
        errors = validate_property_draft(current, self.settings.vacant_row_id)
        self.validation_errors.set(errors)
        if errors:
            self.field_errors.set(map_validation_errors_to_field_errors(errors, current))
            raise DraftValidationError(errors)

        payload = self.build_save_payload(current)
        generation = self._load_generation
        result = await self.api.save_version(self.property_id, current.version, payload)
        if not self._is_current(generation, current.identity):
            logger.debug(f"Ignoring save response for stale draft {current.identity}")
            return result

        self._replace_loaded(result.data)
        self.validation_errors.set([])
        self.field_errors.set({})
        self._refresh_versions_in_background()
        return result

    async def save_as_next_version(self) -> MutationResult:
        """
        Save the draft as a new version; the new version becomes the loaded one.

        Unlike `save_current`, the draft is not validated here; the backend
        decides.
        """
        current = self._require_loaded()
        payload = self.build_save_payload(current)
        generation = self._load_generation
        result = await self.api.save_as(self.property_id, current.version, payload)
        if not self._is_current(generation, current.identity):
            logger.debug(f"Ignoring save-as response for stale draft {current.identity}")
            return result

        self._replace_loaded(result.data)
        self._load_generation += 1
        self.validation_errors.set([])
        self.field_errors.set({})
        self._refresh_versions_in_background()
        return result

    def build_save_payload(self, draft: PropertyVersion) -> SavePayload:
        """
        Full save body for ``draft``.

        Client-only ids are replaced by fresh ids first. Soft-deleted rows are
        included so the backend can record the deletion.
        """
        shape = materialize_transient_ids(draft, self._persisted, self.settings)
        return {
            "expectedRevision": draft.revision,
            "propertyDetails": shape.property_details.to_wire(),
            "underwritingInputs": shape.underwriting_inputs.to_wire(),
            "brokers": [broker.to_save_row() for broker in shape.brokers],
            "tenants": [tenant.to_save_row() for tenant in shape.tenants],
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_unsaved_changes(self) -> bool:
        return self.dirty.value

    def get_current_version(self) -> str:
        current = self.property.value
        return current.version if current is not None else ""

    def is_client_only_broker_id(self, broker_id: str) -> bool:
        return is_client_only_id(
            broker_id, self._persisted, CollectionEnum.BROKERS, self.settings.transient_prefix
        )

    def is_client_only_tenant_id(self, tenant_id: str) -> bool:
        return is_client_only_id(
            tenant_id, self._persisted, CollectionEnum.TENANTS, self.settings.transient_prefix
        )

    def can_add_broker_or_tenant(self) -> bool:
        current = self.property.value
        return current is not None and not current.is_historical

    def can_save_broker(self, broker_id: str) -> bool:
        """True when `save_broker` would pass its checks and change something."""
        current = self._editable()
        if current is None:
            return False
        broker = current.find_broker(broker_id)
        if broker is None or broker.is_deleted or broker_save_errors(broker):
            return False
        if self.is_client_only_broker_id(broker_id):
            return True
        persisted = self._persisted.find_broker(broker_id) if self._persisted else None
        if persisted is None:
            return False
        return broker.sanitized() != persisted.sanitized()

    def can_delete_broker(self, broker_id: str) -> bool:
        current = self._editable()
        if current is None:
            return False
        broker = current.find_broker(broker_id)
        return broker is not None and not broker.is_deleted

    def can_save_tenant(self, tenant_id: str) -> bool:
        """True when `save_tenant` would pass its checks and change something."""
        current = self._editable()
        if current is None or tenant_id == self.settings.vacant_row_id:
            return False
        tenant = current.find_tenant(tenant_id)
        if tenant is None or tenant.is_deleted or tenant.is_vacant or tenant_save_errors(tenant):
            return False
        if self.is_client_only_tenant_id(tenant_id):
            return True
        persisted = self._persisted.find_tenant(tenant_id) if self._persisted else None
        if persisted is None:
            return False
        return tenant.sanitized() != persisted.sanitized()

    def can_delete_tenant(self, tenant_id: str) -> bool:
        current = self._editable()
        if current is None or tenant_id == self.settings.vacant_row_id:
            return False
        tenant = current.find_tenant(tenant_id)
        return tenant is not None and not tenant.is_deleted and not tenant.is_vacant

    # ------------------------------------------------------------------
    # Field errors
    # ------------------------------------------------------------------

    def set_server_errors(self, error: BaseException) -> BackendErrorInfo:
        """Merge the field errors carried by a failed request into ``field_errors``."""
        info = extract_backend_error_info(error, self.property.value)
        if info.field_errors:
            self.field_errors.set({**self.field_errors.value, **info.field_errors})
        return info

    def get_field_error(self, path: str) -> Optional[str]:
        return resolve_field_error(self.field_errors.value, path)

    def clear_field_errors(self, paths: List[str]) -> None:
        current = self.field_errors.value
        remaining = {key: value for key, value in current.items() if key not in paths}
        if len(remaining) != len(current):
            self.field_errors.set(remaining)

    def has_field_errors(self) -> bool:
        return bool(self.field_errors.value)

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    async def flush_background_tasks(self) -> None:
        """Wait for pending version-list refreshes."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _refresh_versions_in_background(self) -> None:
        task = asyncio.get_running_loop().create_task(self.load_versions())
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Background version refresh failed: {error}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_loaded(self) -> PropertyVersion:
        current = self.property.value
        if current is None:
            raise PropertyNotLoadedError()
        return current

    def _editable(self) -> Optional[PropertyVersion]:
        current = self.property.value
        if current is None or current.is_historical:
            return None
        return current

    def _is_current(self, generation: int, identity: Tuple[str, str]) -> bool:
        current = self.property.value
        return (
            generation == self._load_generation
            and current is not None
            and current.identity == identity
        )

    def _replace_loaded(self, loaded: PropertyVersion) -> None:
        self._persisted = loaded.model_copy(deep=True)
        self.property.set(loaded.model_copy(deep=True))
        self._refresh_dirty()

    def _apply_collection_result(
        self,
        saved: PropertyVersion,
        collection: CollectionEnum,
        generation: int,
        identity: Tuple[str, str],
    ) -> None:
        if not self._is_current(generation, identity) or saved.identity != identity:
            logger.debug(
                f"Ignoring {collection.value} write response for {saved.identity}; "
                f"loaded aggregate has changed"
            )
            return

        self._persisted = saved.model_copy(deep=True)
        self.property.set(reconcile_collection(self.property.value, saved, collection))
        self._refresh_dirty()
        self.validation_errors.set([])
        prefix = f"{collection.value}."
        self.field_errors.set(
            {path: message for path, message in self.field_errors.value.items() if not path.startswith(prefix)}
        )
        self._refresh_versions_in_background()

    def _refresh_dirty(self) -> None:
        current = self.property.value
        persisted = self._persisted
        self.dirty.set(current is not None and persisted is not None and current != persisted)

    def _clear_row_field_errors(self, collection: CollectionEnum, entity_id: str, wire: str) -> None:
        current = self.property.value
        if current is None:
            return
        rows: List[Model] = current.collection(collection)
        index = next((i for i, row in enumerate(rows) if row.id == entity_id), None)
        if index is None:
            return
        path = f"{collection.value}.{index}.{wire}"
        self.clear_field_errors([path, coarse_path(path)])
