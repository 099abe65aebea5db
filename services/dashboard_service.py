# ============================================================================
# DASHBOARD SERVICE
# ============================================================================
# STATUS: Service - Upstream-facing operations
# PURPOSE: Function listing/toggling, app lifecycle and telemetry lookups
# CREATED: 19 OCT 2026
# ============================================================================
"""
Dashboard Service

The operations a front end relays. All methods return
(status_code, payload) tuples; the caller decides how to format the
HTTP response. Failures come back as {"error": message}:

    400  configuration missing, invalid request, App Insights not configured
    500  anything else (ARM/App Insights failures, exhausted retries)

Configuration is validated before any network call.
"""

from typing import Any, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from core.config import DashboardConfig, get_config, get_defaults
from core.config.defaults import TelemetryDefaults
from core.errors import ConfigurationError, DashboardError
from core.logging import ComponentType, get_logger, log_context
from core.models import FunctionsUpdateRequest
from infrastructure.auth import AzureTokenProvider, TokenProvider
from infrastructure.management_client import ContainerAppClient, ResourceId
from infrastructure.telemetry_client import TelemetryClient
from services.reconciler import StateReconciler

logger = get_logger(__name__, ComponentType.SERVICE)

Result = Tuple[int, Any]

APP_INSIGHTS_NOT_CONFIGURED = "Application Insights is not configured for this container app."
EMPTY_UPDATE_MESSAGE = "Request body must include 'disable' and/or 'enable' arrays."


def parse_limit(raw: Union[str, int, None], default: int = 50, maximum: int = 1000) -> int:
    """Row limit from a query parameter; out-of-range or junk falls back to the default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if 0 < value <= maximum else default


def _error(status: int, message: str) -> Result:
    return status, {"error": message}


class DashboardService:
    """Upstream-facing operations over one configured Container App."""

    def __init__(
        self,
        config: DashboardConfig,
        arm_client: ContainerAppClient,
        telemetry_client: TelemetryClient,
        reconciler: Optional[StateReconciler] = None,
        telemetry_defaults: Optional[TelemetryDefaults] = None,
    ):
        self.config = config
        self.arm = arm_client
        self.telemetry = telemetry_client
        self.reconciler = reconciler or StateReconciler(arm_client)
        self._telemetry_defaults = telemetry_defaults or TelemetryDefaults()

    @classmethod
    def from_env(cls, token_provider: Optional[TokenProvider] = None) -> "DashboardService":
        """Wire the service from environment configuration."""
        defaults = get_defaults()
        tokens = token_provider or AzureTokenProvider()
        arm = ContainerAppClient(tokens, defaults=defaults.management)
        return cls(
            config=get_config(),
            arm_client=arm,
            telemetry_client=TelemetryClient(tokens, defaults=defaults.telemetry),
            reconciler=StateReconciler(arm, defaults=defaults.reconcile),
            telemetry_defaults=defaults.telemetry,
        )

    async def aclose(self) -> None:
        await self.arm.aclose()
        await self.telemetry.aclose()

    def _resource_id(self) -> ResourceId:
        return ResourceId.from_config(self.config)

    async def _guard(self, operation: str, call) -> Result:
        """Run `call` and map exceptions to error payloads."""
        with log_context(operation=operation, app_name=self.config.app_name):
            try:
                return await call()
            except ConfigurationError as e:
                return _error(400, str(e))
            except (DashboardError, httpx.HTTPError) as e:
                logger.error(f"{operation} failed: {type(e).__name__}: {e}")
                return _error(500, str(e))
            except Exception as e:
                logger.exception(f"Unexpected error in {operation}: {e}")
                return _error(500, str(e))

    async def _app_insights_id(self, resource_id: ResourceId) -> Optional[str]:
        return await self.arm.get_app_insights_app_id(resource_id)

    # ------------------------------------------------------------------
    # FUNCTIONS
    # ------------------------------------------------------------------

    async def list_functions(self) -> Result:
        async def call() -> Result:
            functions = await self.arm.list_functions(self._resource_id())
            hidden = self.config.hidden_functions
            return 200, [f.to_dict() for f in functions if f.name not in hidden]

        return await self._guard("list_functions", call)

    async def update_functions(self, body: Any) -> Result:
        """Apply a batched {"disable": [...], "enable": [...]} request."""
        async def call() -> Result:
            resource_id = self._resource_id()
            try:
                request = FunctionsUpdateRequest.model_validate(body if body is not None else {})
            except ValidationError as e:
                return _error(400, f"Invalid request body: {e.errors()[0]['msg']}")
            if request.is_empty:
                return _error(400, EMPTY_UPDATE_MESSAGE)

            result = await self.reconciler.reconcile(resource_id, request.disable, request.enable)
            return 200, {
                "message": f"{request.total} function(s) updated. A new revision is being created.",
                "revisionSuffix": result.revision_suffix,
            }

        return await self._guard("update_functions", call)

    # ------------------------------------------------------------------
    # APP LIFECYCLE
    # ------------------------------------------------------------------

    async def get_app_status(self) -> Result:
        async def call() -> Result:
            app = await self.arm.get(self._resource_id())
            return 200, {
                "appName": self.config.app_name,
                "runningStatus": app.running_status,
                "provisioningState": app.provisioning_state,
                "latestRevision": app.latest_revision_name,
            }

        return await self._guard("get_app_status", call)

    async def start_app(self) -> Result:
        async def call() -> Result:
            await self.arm.start_app(self._resource_id())
            return 200, {"message": f"Container App '{self.config.app_name}' is starting."}

        return await self._guard("start_app", call)

    async def stop_app(self) -> Result:
        async def call() -> Result:
            await self.arm.stop_app(self._resource_id())
            return 200, {"message": f"Container App '{self.config.app_name}' is stopping."}

        return await self._guard("stop_app", call)

    # ------------------------------------------------------------------
    # TELEMETRY
    # ------------------------------------------------------------------

    async def get_invocations(
        self,
        function_name: str,
        timespan: Optional[str] = None,
        limit: Union[str, int, None] = None,
    ) -> Result:
        async def call() -> Result:
            resource_id = self._resource_id()
            app_id = await self._app_insights_id(resource_id)
            if not app_id:
                return _error(400, APP_INSIGHTS_NOT_CONFIGURED)

            defaults = self._telemetry_defaults
            invocations = await self.telemetry.get_invocations(
                app_id,
                function_name,
                timespan=timespan or defaults.invocations_timespan,
                limit=parse_limit(limit, defaults.default_limit, defaults.max_limit),
            )
            return 200, [i.to_dict() for i in invocations]

        with log_context(function_name=function_name):
            return await self._guard("get_invocations", call)

    async def get_invocation_counts(self, function_name: str, timespan: Optional[str] = None) -> Result:
        async def call() -> Result:
            resource_id = self._resource_id()
            app_id = await self._app_insights_id(resource_id)
            if not app_id:
                return _error(400, APP_INSIGHTS_NOT_CONFIGURED)

            counts = await self.telemetry.get_invocation_counts(
                app_id,
                function_name,
                timespan=timespan or self._telemetry_defaults.counts_timespan,
            )
            return 200, counts.to_dict()

        with log_context(function_name=function_name):
            return await self._guard("get_invocation_counts", call)

    async def get_traces(self, operation_id: str) -> Result:
        async def call() -> Result:
            resource_id = self._resource_id()
            app_id = await self._app_insights_id(resource_id)
            if not app_id:
                return _error(400, APP_INSIGHTS_NOT_CONFIGURED)

            traces = await self.telemetry.get_traces(app_id, operation_id)
            return 200, [t.to_dict() for t in traces]

        with log_context(operation_id=operation_id):
            return await self._guard("get_traces", call)


__all__ = ["DashboardService", "parse_limit"]
