# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from .model import Model


class ApiSettings(Model):
    """Settings for the HTTP transport client."""

    base_url: str = Field(
        default="http://localhost:3000",
        description="Scheme and host of the property backend.",
    )
    api_prefix: str = Field(
        default="/api/properties",
        description="Path prefix under which property resources are served.",
    )
    timeout_seconds: float = Field(
        default=30.0, gt=0, description="Per-request timeout in seconds."
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url must not be blank")
        return value.rstrip("/")

    @property
    def properties_url(self) -> str:
        return f"{self.base_url}/{self.api_prefix.strip('/')}"


class DraftSettings(Model):
    """
    Settings controlling the draft store and its identifier scheme.

    The vacant row id and the transient prefix are shared with the backend:
    the server recognises ``vacant-row`` as the system-managed unleased space
    row, and ids starting with the transient prefix are client-minted
    placeholders that must never reach a bulk save.
    """

    property_id: str = Field(
        default="property-1", description="Identifier of the property being edited."
    )
    default_version: str = Field(
        default="1.1", description="Version loaded when none is requested."
    )
    vacant_row_id: str = Field(
        default="vacant-row", description="Reserved id of the vacant tenant row."
    )
    transient_prefix: str = Field(
        default="temp-", description="Prefix shared by all client-minted ids."
    )
    broker_draft_prefix: str = "temp-broker"
    tenant_draft_prefix: str = "temp-tenant"
    broker_id_prefix: str = "broker"
    tenant_id_prefix: str = "tenant"

    @model_validator(mode="after")
    def check_prefixes(self) -> "DraftSettings":
        """Draft prefixes must be recognisable as transient, materialized ones must not."""
        for name in ("property_id", "vacant_row_id", "transient_prefix"):
            if not getattr(self, name).strip():
                raise ValueError(f"{name} must not be blank")

        for prefix in (self.broker_draft_prefix, self.tenant_draft_prefix):
            if not prefix.startswith(self.transient_prefix):
                raise ValueError(
                    f"Draft id prefix '{prefix}' must start with '{self.transient_prefix}'"
                )

        for prefix in (self.broker_id_prefix, self.tenant_id_prefix):
            if prefix.startswith(self.transient_prefix):
                raise ValueError(
                    f"Materialized id prefix '{prefix}' must not start with '{self.transient_prefix}'"
                )

        return self


class ClientSettings(Model):
    """
    Top-level configuration for a property editing client.

    Usage Examples:
        # Defaults: local backend, property-1, version 1.1
        settings = ClientSettings()

        # Remote backend with a longer timeout
        settings = ClientSettings(
            api={"base_url": "https://uw.example.com", "timeout_seconds": 60},
            draft={"property_id": "property-7"},
        )
    """

    api: ApiSettings = Field(default_factory=ApiSettings)
    draft: DraftSettings = Field(default_factory=DraftSettings)
