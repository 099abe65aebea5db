# ============================================================================
# DASHBOARD SERVICE TESTS
# ============================================================================
# STATUS: Tests - Upstream-facing operations
# PURPOSE: Verify status/payload mapping, config gating and input checks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Dashboard Service Tests

Tests DashboardService with mocked ARM, telemetry and reconciler
collaborators.

Run with:
    pytest tests/test_dashboard_service.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.config import DashboardConfig
from core.config.defaults import TelemetryDefaults
from core.errors import RequestError, RetriesExhaustedError
from core.models import AppResource, ContainerAppFunction, InvocationCounts
from services.dashboard_service import (
    APP_INSIGHTS_NOT_CONFIGURED,
    EMPTY_UPDATE_MESSAGE,
    DashboardService,
    parse_limit,
)
from services.reconciler import ReconcileResult


def make_config(**overrides) -> DashboardConfig:
    values = dict(subscription_id="sub-1", resource_group="rg-1", app_name="orders")
    values.update(overrides)
    return DashboardConfig(**values)


def make_service(config=None):
    arm = MagicMock()
    arm.list_functions = AsyncMock(return_value=[])
    arm.get = AsyncMock()
    arm.start_app = AsyncMock()
    arm.stop_app = AsyncMock()
    arm.get_app_insights_app_id = AsyncMock(return_value="app-guid-1")
    arm.aclose = AsyncMock()

    telemetry = MagicMock()
    telemetry.get_invocations = AsyncMock(return_value=[])
    telemetry.get_invocation_counts = AsyncMock(return_value=InvocationCounts())
    telemetry.get_traces = AsyncMock(return_value=[])
    telemetry.aclose = AsyncMock()

    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock(
        return_value=ReconcileResult(attempts=1, revision_suffix="v-2", disabled=["A"], enabled=[])
    )

    service = DashboardService(
        config or make_config(),
        arm,
        telemetry,
        reconciler=reconciler,
        telemetry_defaults=TelemetryDefaults(),
    )
    return service, arm, telemetry, reconciler


def function(name: str, disabled: bool = False) -> ContainerAppFunction:
    return ContainerAppFunction.model_validate({
        "id": f"/subscriptions/sub-1/.../functions/{name}",
        "name": name,
        "properties": {"triggerType": "Timer", "language": "python", "isDisabled": disabled},
    })


# ============================================================================
# CONFIGURATION GATE
# ============================================================================

class TestConfigurationGate:

    @pytest.mark.parametrize("method,args", [
        ("list_functions", ()),
        ("update_functions", ({"disable": ["A"]},)),
        ("get_app_status", ()),
        ("start_app", ()),
        ("stop_app", ()),
        ("get_invocations", ("A",)),
        ("get_invocation_counts", ("A",)),
        ("get_traces", ("op-1",)),
    ])
    def test_missing_config_is_400_without_network(self, method, args):
        service, arm, telemetry, reconciler = make_service(make_config(app_name="  "))

        status, payload = asyncio.run(getattr(service, method)(*args))

        assert status == 400
        assert "not configured" in payload["error"]
        arm.list_functions.assert_not_awaited()
        arm.get.assert_not_awaited()
        arm.get_app_insights_app_id.assert_not_awaited()
        reconciler.reconcile.assert_not_awaited()
        telemetry.get_traces.assert_not_awaited()


# ============================================================================
# FUNCTIONS
# ============================================================================

class TestFunctions:

    def test_list_hides_configured_functions(self):
        service, arm, _, _ = make_service(make_config(hidden_functions=frozenset({"Internal"})))
        arm.list_functions.return_value = [function("Public"), function("Internal", disabled=True)]

        status, payload = asyncio.run(service.list_functions())

        assert status == 200
        assert [f["name"] for f in payload] == ["Public"]
        assert payload[0]["triggerType"] == "Timer"
        assert payload[0]["isDisabled"] is False

    def test_update_success(self):
        service, _, _, reconciler = make_service()

        status, payload = asyncio.run(service.update_functions({"disable": ["A"], "enable": ["B", "C"]}))

        assert status == 200
        assert payload["message"] == "3 function(s) updated. A new revision is being created."
        assert payload["revisionSuffix"] == "v-2"
        resource_id, disable, enable = reconciler.reconcile.await_args.args
        assert resource_id.app_name == "orders"
        assert disable == ["A"]
        assert enable == ["B", "C"]

    @pytest.mark.parametrize("body", [{}, None, {"disable": [], "enable": None}])
    def test_empty_update_is_400(self, body):
        service, _, _, reconciler = make_service()

        status, payload = asyncio.run(service.update_functions(body))

        assert (status, payload) == (400, {"error": EMPTY_UPDATE_MESSAGE})
        reconciler.reconcile.assert_not_awaited()

    @pytest.mark.parametrize("body", [{"disable": "A"}, {"enable": [" "]}, ["A"]])
    def test_invalid_update_is_400(self, body):
        service, _, _, reconciler = make_service()

        status, payload = asyncio.run(service.update_functions(body))

        assert status == 400
        assert payload["error"].startswith("Invalid request body")
        reconciler.reconcile.assert_not_awaited()

    def test_exhausted_retries_is_500(self):
        service, _, _, reconciler = make_service()
        reconciler.reconcile.side_effect = RetriesExhaustedError(10)

        status, payload = asyncio.run(service.update_functions({"disable": ["A"]}))

        assert status == 500
        assert "error" in payload


# ============================================================================
# APP LIFECYCLE
# ============================================================================

class TestAppLifecycle:

    def test_status(self):
        service, arm, _, _ = make_service()
        arm.get.return_value = AppResource.model_validate({
            "name": "orders",
            "properties": {
                "provisioningState": "Succeeded",
                "runningStatus": "Running",
                "latestRevisionName": "orders--v-2",
            },
        })

        status, payload = asyncio.run(service.get_app_status())

        assert status == 200
        assert payload == {
            "appName": "orders",
            "runningStatus": "Running",
            "provisioningState": "Succeeded",
            "latestRevision": "orders--v-2",
        }

    def test_start_and_stop_messages(self):
        service, arm, _, _ = make_service()

        assert asyncio.run(service.start_app()) == (200, {"message": "Container App 'orders' is starting."})
        assert asyncio.run(service.stop_app()) == (200, {"message": "Container App 'orders' is stopping."})
        arm.start_app.assert_awaited_once()
        arm.stop_app.assert_awaited_once()

    def test_arm_failure_is_500(self):
        service, arm, _, _ = make_service()
        arm.start_app.side_effect = RequestError(409, '{"error": {"code": "Busy", "message": "busy"}}')

        status, payload = asyncio.run(service.start_app())

        assert status == 500
        assert "409" in payload["error"]

    def test_unexpected_failure_is_500(self):
        service, arm, _, _ = make_service()
        arm.stop_app.side_effect = RuntimeError("boom")

        assert asyncio.run(service.stop_app()) == (500, {"error": "boom"})


# ============================================================================
# TELEMETRY
# ============================================================================

class TestTelemetry:

    def test_app_insights_missing_is_400(self):
        service, arm, telemetry, _ = make_service()
        arm.get_app_insights_app_id.return_value = None

        for coro in (
            service.get_invocations("A"),
            service.get_invocation_counts("A"),
            service.get_traces("op-1"),
        ):
            assert asyncio.run(coro) == (400, {"error": APP_INSIGHTS_NOT_CONFIGURED})

        telemetry.get_invocations.assert_not_awaited()
        telemetry.get_invocation_counts.assert_not_awaited()
        telemetry.get_traces.assert_not_awaited()

    def test_invocations_defaults(self):
        service, _, telemetry, _ = make_service()

        status, payload = asyncio.run(service.get_invocations("A", limit="junk"))

        assert (status, payload) == (200, [])
        telemetry.get_invocations.assert_awaited_once_with("app-guid-1", "A", timespan="P1D", limit=50)

    def test_invocations_passthrough(self):
        service, _, telemetry, _ = make_service()

        asyncio.run(service.get_invocations("A", timespan="PT6H", limit="200"))

        telemetry.get_invocations.assert_awaited_once_with("app-guid-1", "A", timespan="PT6H", limit=200)

    def test_counts(self):
        service, _, telemetry, _ = make_service()
        telemetry.get_invocation_counts.return_value = InvocationCounts(total=5, failed=1, succeeded=4)

        status, payload = asyncio.run(service.get_invocation_counts("A"))

        assert (status, payload) == (200, {"total": 5, "failed": 1, "succeeded": 4})
        telemetry.get_invocation_counts.assert_awaited_once_with("app-guid-1", "A", timespan="P30D")


class TestParseLimit:

    @pytest.mark.parametrize("raw,expected", [
        (None, 50),
        ("", 50),
        ("abc", 50),
        ("0", 50),
        ("-3", 50),
        ("1001", 50),
        ("1000", 1000),
        ("7", 7),
        (20, 20),
    ])
    def test_parse_limit(self, raw, expected):
        assert parse_limit(raw) == expected
