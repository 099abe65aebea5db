# ============================================================================
# APPLICATION INSIGHTS QUERY CLIENT
# ============================================================================
# STATUS: Infrastructure - Async HTTP client for the App Insights query API
# PURPOSE: Invocation history, counts and traces for a function
# CREATED: 19 OCT 2026
# ============================================================================
"""
Application Insights Query Client

POSTs KQL to https://api.applicationinsights.io/v1/apps/{app_id}/query
with a `timespan` parameter and decodes the first result table with
core.tabular.

Function names and operation ids are embedded verbatim in the KQL text.

Lookback: the KQL carries its own fixed `ago(...)` clause (24h for
invocations, 30d for counts) in addition to the request `timespan`.
The service applies both, so the narrower window wins. When the two
disagree a warning is logged rather than silently picking one.
"""

import logging
import re
from datetime import timedelta
from typing import List, Optional

import httpx

from __version__ import USER_AGENT
from core.config.defaults import TelemetryDefaults
from core.errors import DecodeError, RequestError
from core.logging import ComponentType, get_logger
from core.models import FunctionInvocation, InvocationCounts, InvocationTrace, QueryResult
from core.tabular import decode_table
from infrastructure.auth import TokenProvider

logger = get_logger(__name__, ComponentType.TELEMETRY)

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$",
    re.IGNORECASE,
)
_KQL_TIMESPAN = re.compile(r"^(?P<amount>\d+)(?P<unit>d|h|m|s)$")
_KQL_UNITS = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds"}


# ============================================================================
# QUERY TEXT
# ============================================================================

def build_invocations_query(function_name: str, limit: int, lookback: str = "24h") -> str:
    return f"""requests
| extend functionNameFromCustomDimension = tostring(customDimensions['faas.name']),
         invocationId = coalesce(tostring(customDimensions['InvocationId']), tostring(customDimensions['faas.invocation_id']))
| where timestamp > ago({lookback})
| where operation_Name =~ '{function_name}' or functionNameFromCustomDimension =~ '{function_name}'
| order by timestamp desc
| take {limit}
| project timestamp, success, resultCode, durationInMilliSeconds=duration, invocationId, operationId=operation_Id, operationName=operation_Name"""


def build_counts_query(function_name: str, lookback: str = "30d") -> str:
    return f"""requests
| extend functionNameFromCustomDimension = tostring(customDimensions['faas.name'])
| where timestamp > ago({lookback})
| where operation_Name =~ '{function_name}' or functionNameFromCustomDimension =~ '{function_name}'
| summarize total = count(), failed = countif(success == false)
| extend succeeded = total - failed"""


def build_traces_query(operation_id: str) -> str:
    return f"""traces
| where operation_Id == '{operation_id}'
| order by timestamp asc
| project timestamp, message, severityLevel"""


def _iso_duration(value: str) -> Optional[timedelta]:
    match = _ISO_DURATION.match(value.strip())
    if not match or not any(match.groupdict().values()):
        return None
    return timedelta(**{k: int(v) for k, v in match.groupdict().items() if v})


def _kql_timespan(value: str) -> Optional[timedelta]:
    match = _KQL_TIMESPAN.match(value.strip())
    if not match:
        return None
    return timedelta(**{_KQL_UNITS[match.group("unit")]: int(match.group("amount"))})


def lookback_mismatch(timespan: str, lookback: str) -> bool:
    """True when a request timespan and an in-query lookback cover different windows."""
    requested = _iso_duration(timespan)
    fixed = _kql_timespan(lookback)
    if requested is None or fixed is None:
        # Intervals ("start/end") and unknown forms cannot be compared
        return False
    return requested != fixed


# ============================================================================
# CLIENT
# ============================================================================

class TelemetryClient:
    """Async client for the Application Insights query API."""

    def __init__(
        self,
        token_provider: TokenProvider,
        http_client: Optional[httpx.AsyncClient] = None,
        defaults: Optional[TelemetryDefaults] = None,
    ):
        self._tokens = token_provider
        self._defaults = defaults or TelemetryDefaults()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._defaults.timeout_seconds)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "TelemetryClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def query(self, app_id: str, kql: str, timespan: str) -> QueryResult:
        """Run a KQL query and return the raw table envelope."""
        token = await self._tokens.get_token(self._defaults.scope)
        url = f"{self._defaults.endpoint}/{app_id}/query"

        try:
            response = await self._http.post(
                url,
                json={"query": kql, "timespan": timespan},
                headers={"Authorization": f"Bearer {token}", "User-Agent": USER_AGENT},
            )
        except httpx.TimeoutException as e:
            logger.error(f"Application Insights timeout: {url}: {e}")
            raise
        except httpx.TransportError as e:
            logger.error(f"Cannot reach Application Insights at {url}: {e}")
            raise

        if not response.is_success:
            logger.error(f"Application Insights error {response.status_code} for app {app_id}")
            raise RequestError(response.status_code, response.text, url=url, service="Application Insights")

        try:
            return QueryResult.model_validate(response.json())
        except ValueError as e:
            # json.JSONDecodeError and pydantic ValidationError are both ValueErrors
            raise DecodeError(f"Failed to deserialize Application Insights response: {e}") from e

    def _flag_lookback(self, timespan: str, lookback: str) -> None:
        if lookback_mismatch(timespan, lookback):
            logger.warning(
                f"Requested timespan {timespan} differs from the query's fixed lookback "
                f"ago({lookback}); results cover the narrower window"
            )

    async def get_invocations(
        self,
        app_id: str,
        function_name: str,
        timespan: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[FunctionInvocation]:
        """Most recent invocations of a function, newest first."""
        timespan = timespan or self._defaults.invocations_timespan
        limit = limit or self._defaults.default_limit
        self._flag_lookback(timespan, self._defaults.invocations_lookback)

        kql = build_invocations_query(function_name, limit, self._defaults.invocations_lookback)
        result = await self.query(app_id, kql, timespan)
        invocations = decode_table(result, FunctionInvocation)
        logger.debug(f"Decoded {len(invocations)} invocations for {function_name}")
        return invocations

    async def get_invocation_counts(
        self,
        app_id: str,
        function_name: str,
        timespan: Optional[str] = None,
    ) -> InvocationCounts:
        """Total / failed / succeeded request counts for a function."""
        timespan = timespan or self._defaults.counts_timespan
        self._flag_lookback(timespan, self._defaults.counts_lookback)

        kql = build_counts_query(function_name, self._defaults.counts_lookback)
        result = await self.query(app_id, kql, timespan)
        rows = decode_table(result, InvocationCounts)
        return rows[0] if rows else InvocationCounts()

    async def get_traces(self, app_id: str, operation_id: str) -> List[InvocationTrace]:
        """Trace lines of one operation, oldest first."""
        result = await self.query(app_id, build_traces_query(operation_id), self._defaults.traces_timespan)
        return decode_table(result, InvocationTrace)


__all__ = [
    "TelemetryClient",
    "build_invocations_query",
    "build_counts_query",
    "build_traces_query",
    "lookback_mismatch",
]
