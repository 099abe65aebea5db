# ============================================================================
# MANAGEMENT CLIENT TESTS
# ============================================================================
# STATUS: Tests - ARM Container Apps client
# PURPOSE: Verify URLs, auth headers, error classification and decoding
# CREATED: 19 OCT 2026
# ============================================================================
"""
Management Client Tests

Tests ContainerAppClient against an httpx.MockTransport; no real HTTP
traffic. The token provider is an AsyncMock.

Run with:
    pytest tests/test_management_client.py -v
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from core.config.settings import DashboardConfig
from core.errors import ConfigurationError, ConflictError, DecodeError, RequestError
from infrastructure.management_client import (
    ContainerAppClient,
    ResourceId,
    parse_app_id_from_connection_string,
)

RESOURCE = ResourceId("sub-123", "rg-demo", "myapp")
APP_URL = (
    "https://management.azure.com/subscriptions/sub-123/resourceGroups/rg-demo"
    "/providers/Microsoft.App/containerApps/myapp"
)

APP_DOCUMENT = {
    "id": "/subscriptions/sub-123/resourceGroups/rg-demo/providers/Microsoft.App/containerApps/myapp",
    "name": "myapp",
    "location": "westeurope",
    "systemData": {"createdBy": "someone"},
    "properties": {
        "provisioningState": "Succeeded",
        "runningStatus": "Running",
        "latestRevisionName": "myapp--rev-4",
        "template": {
            "containers": [{
                "name": "functions",
                "image": "acr.io/functions:1.0",
                "env": [
                    {"name": "FUNCTIONS_WORKER_RUNTIME", "value": "python"},
                    {"name": "APPLICATIONINSIGHTS_CONNECTION_STRING",
                     "value": "InstrumentationKey=abc;IngestionEndpoint=https://x/;ApplicationId=app-guid-1"},
                    {"name": "DB_PASSWORD", "secretRef": "db-password"},
                ],
                "probes": [],
            }],
        },
    },
}


class Recorder:
    """Records requests and replays canned responses."""

    def __init__(self, *responses):
        self.requests = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        template = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        # Fresh response per call; httpx binds a response to one request
        return httpx.Response(template.status_code, content=template.content, headers=template.headers)


def make_client(recorder):
    tokens = MagicMock()
    tokens.get_token = AsyncMock(return_value="arm-token")
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return ContainerAppClient(tokens, http_client=http), tokens


def run(coro):
    return asyncio.run(coro)


# ============================================================================
# RESOURCE ID
# ============================================================================

class TestResourceId:

    def test_path(self):
        assert RESOURCE.path == (
            "/subscriptions/sub-123/resourceGroups/rg-demo/providers/Microsoft.App/containerApps/myapp"
        )

    def test_blank_identifier_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ResourceId("sub", "  ", "")
        assert exc_info.value.missing == ["resource_group", "app_name"]

    def test_from_incomplete_config(self):
        with pytest.raises(ConfigurationError):
            ResourceId.from_config(DashboardConfig(subscription_id="sub", resource_group="rg"))


# ============================================================================
# VERBS
# ============================================================================

class TestVerbs:

    def test_get_raw_returns_full_document(self):
        recorder = Recorder(httpx.Response(200, json=APP_DOCUMENT))
        client, tokens = make_client(recorder)

        document = run(client.get_raw(RESOURCE))

        assert document == APP_DOCUMENT
        request = recorder.requests[0]
        assert request.method == "GET"
        assert str(request.url) == f"{APP_URL}?api-version=2025-10-02-preview"
        assert request.headers["Authorization"] == "Bearer arm-token"
        tokens.get_token.assert_awaited_once_with("https://management.azure.com/.default")

    def test_get_returns_typed_projection(self):
        client, _ = make_client(Recorder(httpx.Response(200, json=APP_DOCUMENT)))

        app = run(client.get(RESOURCE))

        assert app.provisioning_state == "Succeeded"
        assert app.running_status == "Running"
        assert app.latest_revision_name == "myapp--rev-4"
        assert app.is_ready
        assert app.containers[0].get_env("DB_PASSWORD").secret_ref == "db-password"

    def test_token_fetched_per_call(self):
        client, tokens = make_client(Recorder(httpx.Response(200, json=APP_DOCUMENT)))

        run(client.get_raw(RESOURCE))
        run(client.get_raw(RESOURCE))

        assert tokens.get_token.await_count == 2

    def test_patch_sends_given_subtree(self):
        recorder = Recorder(httpx.Response(200, json={}))
        client, _ = make_client(recorder)
        body = {"properties": {"template": {"containers": [], "revisionSuffix": "rev-5"}}}

        run(client.patch(RESOURCE, body))

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == body

    def test_start_and_stop_post_without_body(self):
        recorder = Recorder(httpx.Response(202))
        client, _ = make_client(recorder)

        run(client.start_app(RESOURCE))
        run(client.stop_app(RESOURCE))

        start, stop = recorder.requests
        assert start.method == "POST"
        assert start.url.path.endswith("/containerApps/myapp/start")
        assert stop.url.path.endswith("/containerApps/myapp/stop")
        assert start.content == b""


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:

    def test_non_success_raises_request_error_with_body(self):
        body = '{"error": {"code": "ResourceNotFound", "message": "gone"}}'
        client, _ = make_client(Recorder(httpx.Response(404, text=body)))

        with pytest.raises(RequestError) as exc_info:
            run(client.get_raw(RESOURCE))

        error = exc_info.value
        assert not isinstance(error, ConflictError)
        assert error.status_code == 404
        assert error.body == body
        assert error.error_code == "ResourceNotFound"
        assert body in str(error)

    def test_operation_in_progress_is_conflict(self):
        body = json.dumps({"error": {"code": "ContainerAppOperationInProgress", "message": "busy"}})
        client, _ = make_client(Recorder(httpx.Response(409, text=body)))

        with pytest.raises(ConflictError) as exc_info:
            run(client.patch(RESOURCE, {"properties": {"template": {}}}))

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "ContainerAppOperationInProgress"

    def test_conflict_needs_error_code_not_message_text(self):
        body = "ContainerAppOperationInProgress somewhere in plain text"
        client, _ = make_client(Recorder(httpx.Response(409, text=body)))

        with pytest.raises(RequestError) as exc_info:
            run(client.patch(RESOURCE, {}))

        assert not isinstance(exc_info.value, ConflictError)
        assert exc_info.value.error_code is None

    def test_unparsable_body_is_decode_error(self):
        client, _ = make_client(Recorder(httpx.Response(200, text="<html>")))

        with pytest.raises(DecodeError):
            run(client.get_raw(RESOURCE))

    def test_non_object_document_is_decode_error(self):
        client, _ = make_client(Recorder(httpx.Response(200, json=[1, 2])))

        with pytest.raises(DecodeError):
            run(client.get_raw(RESOURCE))


# ============================================================================
# FUNCTIONS & APP INSIGHTS
# ============================================================================

class TestFunctions:

    def test_list_functions_follows_next_link(self):
        next_link = f"{APP_URL}/functions?api-version=2025-10-02-preview&$skiptoken=2"
        recorder = Recorder(
            httpx.Response(200, json={
                "value": [{"id": f"{APP_URL}/functions/Alpha", "name": "Alpha",
                           "properties": {"triggerType": "http", "isDisabled": False}}],
                "nextLink": next_link,
            }),
            httpx.Response(200, json={
                "value": [{"id": f"{APP_URL}/functions/Beta", "name": "",
                           "properties": {"triggerType": "timer", "isDisabled": True, "language": None}}],
            }),
        )
        client, _ = make_client(recorder)

        functions = run(client.list_functions(RESOURCE))

        assert [f.name for f in functions] == ["Alpha", "Beta"]
        assert functions[1].properties.is_disabled is True
        assert recorder.requests[0].url.path.endswith("/containerApps/myapp/functions")
        assert "skiptoken" in str(recorder.requests[1].url)

    def test_list_functions_by_revision_path(self):
        recorder = Recorder(httpx.Response(200, json={"value": []}))
        client, _ = make_client(recorder)

        assert run(client.list_functions_by_revision(RESOURCE, "myapp--rev-4")) == []
        assert recorder.requests[0].url.path.endswith("/revisions/myapp--rev-4/functions")

    def test_get_function(self):
        recorder = Recorder(httpx.Response(200, json={
            "id": f"{APP_URL}/functions/Alpha",
            "properties": {"invokeUrlTemplate": "https://myapp/api/alpha", "isDisabled": None},
        }))
        client, _ = make_client(recorder)

        function = run(client.get_function(RESOURCE, "Alpha"))

        assert function.name == "Alpha"
        assert function.properties.is_disabled is False
        assert function.to_dict()["invokeUrlTemplate"] == "https://myapp/api/alpha"

    def test_app_insights_app_id(self):
        client, _ = make_client(Recorder(httpx.Response(200, json=APP_DOCUMENT)))

        assert run(client.get_app_insights_app_id(RESOURCE)) == "app-guid-1"

    def test_app_insights_missing(self):
        document = json.loads(json.dumps(APP_DOCUMENT))
        document["properties"]["template"]["containers"][0]["env"] = []
        client, _ = make_client(Recorder(httpx.Response(200, json=document)))

        assert run(client.get_app_insights_app_id(RESOURCE)) is None

    @pytest.mark.parametrize("connection_string,expected", [
        ("InstrumentationKey=k;ApplicationId=guid", "guid"),
        (" applicationid = guid2 ; x=y", "guid2"),
        ("InstrumentationKey=k", None),
        ("ApplicationId=", None),
    ])
    def test_parse_app_id(self, connection_string, expected):
        assert parse_app_id_from_connection_string(connection_string) == expected
