# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
HTTP implementation of `PropertyTransport` over httpx.

Example:
    ```python
    from propdraft.api import PropertyApiClient
    from propdraft.core.primitives import ApiSettings

    async with PropertyApiClient(ApiSettings(base_url="http://localhost:3000")) as api:
        versions = await api.get_versions("property-1")
    ```
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from ..core.base.property import PropertyVersion, VersionSummary
from ..core.primitives.settings import ApiSettings
from .envelope import ApiError, ApiErrorResponse, ApiSuccessResponse, MutationResult
from .transport import EntityPayload, SavePayload

logger = logging.getLogger(__name__)


class PropertyApiClient:
    """
    Async client for the property versions API.

    The client owns its `httpx.AsyncClient` unless one is passed in, in which
    case closing is left to the caller.
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or ApiSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.timeout_seconds)

    async def __aenter__(self) -> "PropertyApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, property_id: str, *parts: str) -> str:
        segments = [self.settings.properties_url, property_id, "versions", *parts]
        return "/".join(segments)

    async def _request(
        self,
        method: str,
        url: str,
        json: Any = None,
        expected_revision: Optional[int] = None,
    ) -> ApiSuccessResponse[Any]:
        params = {"expectedRevision": expected_revision} if expected_revision is not None else None
        logger.debug(f"{method} {url} params={params}")
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            raise ApiError(
                message=str(e) or type(e).__name__,
                error_code="NETWORK_ERROR",
                status_code=0,
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success or not isinstance(body, dict) or body.get("success") is False:
            error = self._error_from(response, body)
            logger.debug(f"{method} {url} failed: {error!r}")
            raise error

        return self._decode(ApiSuccessResponse[Any], body)

    @staticmethod
    def _error_from(response: httpx.Response, body: Any) -> ApiError:
        if isinstance(body, dict):
            try:
                return ApiError.from_response(
                    ApiErrorResponse.model_validate(body), response.status_code
                )
            except ValidationError as e:
                logger.debug(f"Unrecognised error body: {e}")
        return ApiError(
            message=response.reason_phrase or f"HTTP {response.status_code}",
            error_code="HTTP_ERROR",
            status_code=response.status_code,
            details=body if isinstance(body, dict) else None,
        )

    @staticmethod
    def _decode(model, data: Any):
        decode = getattr(model, "from_wire", model.model_validate)
        try:
            return decode(data)
        except ValidationError as e:
            raise ApiError(
                message=f"Malformed {model.__name__} in response",
                error_code="INVALID_RESPONSE",
                details={"message": [err["msg"] for err in e.errors()]},
            ) from e

    async def _mutate(
        self,
        method: str,
        url: str,
        json: Any = None,
        expected_revision: Optional[int] = None,
    ) -> MutationResult:
        envelope = await self._request(method, url, json=json, expected_revision=expected_revision)
        return MutationResult(
            data=self._decode(PropertyVersion, envelope.data), message=envelope.message
        )

    async def get_versions(self, property_id: str) -> List[VersionSummary]:
        envelope = await self._request("GET", self._url(property_id))
        return [self._decode(VersionSummary, item) for item in envelope.data or []]

    async def get_version(self, property_id: str, version: str) -> PropertyVersion:
        envelope = await self._request("GET", self._url(property_id, version))
        return self._decode(PropertyVersion, envelope.data)

    async def save_version(
        self, property_id: str, version: str, payload: SavePayload
    ) -> MutationResult:
        return await self._mutate("PUT", self._url(property_id, version), json=payload)

    async def save_as(
        self, property_id: str, version: str, payload: SavePayload
    ) -> MutationResult:
        return await self._mutate("POST", self._url(property_id, version, "save-as"), json=payload)

    async def create_broker(
        self, property_id: str, version: str, expected_revision: int, payload: EntityPayload
    ) -> MutationResult:
        return await self._mutate(
            "POST",
            self._url(property_id, version, "brokers"),
            json=payload,
            expected_revision=expected_revision,
        )

    async def update_broker(
        self,
        property_id: str,
        version: str,
        broker_id: str,
        expected_revision: int,
        payload: EntityPayload,
    ) -> MutationResult:
        return await self._mutate(
            "PUT",
            self._url(property_id, version, "brokers", broker_id),
            json=payload,
            expected_revision=expected_revision,
        )

    async def soft_delete_broker(
        self, property_id: str, version: str, broker_id: str, expected_revision: int
    ) -> MutationResult:
        return await self._mutate(
            "DELETE",
            self._url(property_id, version, "brokers", broker_id),
            expected_revision=expected_revision,
        )

    async def create_tenant(
        self, property_id: str, version: str, expected_revision: int, payload: EntityPayload
    ) -> MutationResult:
        return await self._mutate(
            "POST",
            self._url(property_id, version, "tenants"),
            json=payload,
            expected_revision=expected_revision,
        )

    async def update_tenant(
        self,
        property_id: str,
        version: str,
        tenant_id: str,
        expected_revision: int,
        payload: EntityPayload,
    ) -> MutationResult:
        return await self._mutate(
            "PUT",
            self._url(property_id, version, "tenants", tenant_id),
            json=payload,
            expected_revision=expected_revision,
        )

    async def soft_delete_tenant(
        self, property_id: str, version: str, tenant_id: str, expected_revision: int
    ) -> MutationResult:
        return await self._mutate(
            "DELETE",
            self._url(property_id, version, "tenants", tenant_id),
            expected_revision=expected_revision,
        )
