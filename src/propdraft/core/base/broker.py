# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from ..primitives.model import Model

BROKER_TEXT_FIELDS = ("name", "phone", "email", "company")


class Broker(Model):
    """
    Listing broker contact.

    Brokers are never hard-deleted once persisted; removal sets `is_deleted`
    through the soft-delete endpoint.
    """

    id: str
    name: str = ""
    phone: str = ""
    email: str = ""
    company: str = ""
    is_deleted: bool = False

    def sanitized(self) -> dict:
        """Trimmed text fields in wire form, without id and deletion flag."""
        return {field: (getattr(self, field) or "").strip() for field in BROKER_TEXT_FIELDS}

    def to_save_row(self) -> dict:
        """Row shape accepted by the bulk save endpoint."""
        return self.model_dump(mode="json", by_alias=True)
