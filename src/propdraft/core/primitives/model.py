# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable records with camelCase wire aliases. Python code addresses
    fields by their snake_case names; payloads exchanged with the backend use
    the aliases (`model_dump(by_alias=True)`). Mutable runtime state lives in
    the draft store, never in the models themselves.
    """

    model_config = ConfigDict(
        frozen=True,  # Edits always produce a new record
        extra="forbid",  # Catches typos and unknown wire fields immediately
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Serialize to the camelCase JSON shape used on the wire."""
        return self.model_dump(mode="json", by_alias=True)

    def with_field(self, key: str, value):
        """Return a re-validated copy with a single field replaced.

        Raises:
            ValueError: If ``key`` is not a field of this model
        """
        if key not in type(self).model_fields:
            raise ValueError(f"Unknown field '{key}' for {type(self).__name__}")
        data = self.model_dump()
        data[key] = value
        return type(self).model_validate(data)

    @classmethod
    def wire_keys(cls) -> set:
        """Every accepted input key: field names and their camelCase aliases."""
        keys = set(cls.model_fields)
        keys.update(field.alias for field in cls.model_fields.values() if field.alias)
        return keys

    @classmethod
    def from_wire(cls, data: Any):
        """Validate a backend payload, dropping keys this model does not define."""
        if isinstance(data, dict):
            keys = cls.wire_keys()
            data = {key: value for key, value in data.items() if key in keys}
        return cls.model_validate(data)
