# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from propdraft.api import ApiError, PropertyApiClient, extract_error_message
from propdraft.core.primitives import ApiSettings


def _ok(data, message="OK"):
    return {"success": True, "message": message, "data": data, "timestamp": "2025-01-01T00:00:00Z"}


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self.body = body
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


def _call(handler, operation):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            api = PropertyApiClient(ApiSettings(base_url="http://api.test/"), client=http)
            return await operation(api)

    return asyncio.run(scenario())


class TestReads:
    def test_get_version_unwraps_envelope(self, base_property_wire):
        wire = {**base_property_wire, "createdAt": "2025-01-01T00:00:00Z"}
        handler = Recorder(body=_ok(wire))

        loaded = _call(handler, lambda api: api.get_version("property-1", "1.1"))

        request = handler.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "http://api.test/api/properties/property-1/versions/1.1"
        assert loaded.revision == 2
        assert loaded.brokers[0].id == "b1"

    def test_get_versions(self):
        handler = Recorder(
            body=_ok([{"version": "1.0", "revision": 4, "isHistorical": True}, {"version": "1.1", "revision": 2}])
        )
        versions = _call(handler, lambda api: api.get_versions("property-1"))

        assert str(handler.requests[0].url) == "http://api.test/api/properties/property-1/versions"
        assert [(v.version, v.is_historical) for v in versions] == [("1.0", True), ("1.1", False)]

    def test_malformed_aggregate_is_reported(self):
        handler = Recorder(body=_ok({"propertyId": "property-1"}))
        with pytest.raises(ApiError) as excinfo:
            _call(handler, lambda api: api.get_version("property-1", "1.1"))
        assert excinfo.value.error_code == "INVALID_RESPONSE"


class TestWrites:
    def test_entity_write_sends_expected_revision(self, base_property_wire):
        handler = Recorder(body=_ok(base_property_wire, message="Broker updated"))
        payload = {"name": "B", "phone": "704", "email": "b@x.io", "company": "C"}

        result = _call(
            handler, lambda api: api.update_broker("property-1", "1.1", "b1", 2, payload)
        )

        request = handler.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/properties/property-1/versions/1.1/brokers/b1"
        assert request.url.params["expectedRevision"] == "2"
        assert json.loads(request.content) == payload
        assert result.message == "Broker updated"
        assert result.data.version == "1.1"

    def test_soft_delete_tenant(self, base_property_wire):
        handler = Recorder(body=_ok(base_property_wire))
        _call(handler, lambda api: api.soft_delete_tenant("property-1", "1.1", "t1", 2))

        request = handler.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/api/properties/property-1/versions/1.1/tenants/t1"
        assert request.url.params["expectedRevision"] == "2"

    def test_bulk_save_carries_revision_in_body(self, base_property_wire):
        handler = Recorder(body=_ok(base_property_wire))
        payload = {"expectedRevision": 2, "brokers": [], "tenants": []}

        _call(handler, lambda api: api.save_as("property-1", "1.1", payload))

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/properties/property-1/versions/1.1/save-as"
        assert "expectedRevision" not in request.url.params
        assert json.loads(request.content)["expectedRevision"] == 2


class TestErrors:
    def test_error_envelope_becomes_api_error(self):
        handler = Recorder(
            status_code=400,
            body={
                "success": False,
                "message": "Validation failed",
                "errorCode": "VALIDATION_ERROR",
                "statusCode": 400,
                "details": {"message": ["brokers.0.email must be an email"]},
            },
        )
        with pytest.raises(ApiError) as excinfo:
            _call(handler, lambda api: api.save_version("property-1", "1.1", {"expectedRevision": 2}))

        error = excinfo.value
        assert error.message == "Validation failed"
        assert error.status_code == 400
        assert error.detail_messages == ["brokers.0.email must be an email"]
        assert not error.is_conflict

    def test_revision_conflict(self):
        handler = Recorder(
            status_code=409,
            body={"success": False, "message": "Stale revision", "errorCode": "REVISION_MISMATCH", "statusCode": 409},
        )
        with pytest.raises(ApiError) as excinfo:
            _call(handler, lambda api: api.create_tenant("property-1", "1.1", 1, {"tenantName": "A"}))
        assert excinfo.value.is_conflict

    def test_non_json_error_body(self):
        def respond(request):
            return httpx.Response(502, text="<html>Bad gateway</html>")

        with pytest.raises(ApiError) as excinfo:
            _call(respond, lambda api: api.get_versions("property-1"))

        assert excinfo.value.error_code == "HTTP_ERROR"
        assert excinfo.value.status_code == 502
        assert excinfo.value.message == "Bad Gateway"

    def test_network_failure(self):
        handler = Recorder(error=httpx.ConnectError("connection refused"))
        with pytest.raises(ApiError) as excinfo:
            _call(handler, lambda api: api.get_version("property-1", "1.1"))

        assert excinfo.value.error_code == "NETWORK_ERROR"
        assert excinfo.value.status_code == 0
        assert extract_error_message(excinfo.value) == "connection refused"


def test_extract_error_message_for_plain_exceptions():
    assert extract_error_message(RuntimeError("boom")) == "boom"
    assert extract_error_message(RuntimeError()) == "An unexpected error occurred"


def test_client_closes_only_its_own_http_client():
    async def scenario():
        http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(body=_ok([]))))
        async with PropertyApiClient(client=http):
            pass
        assert not http.is_closed
        await http.aclose()

        owned = PropertyApiClient()
        await owned.aclose()
        assert owned._client.is_closed

    asyncio.run(scenario())
