# ============================================================================
# CONTAINER APP MANAGEMENT CLIENT
# ============================================================================
# STATUS: Infrastructure - Async HTTP client for Azure Resource Manager
# PURPOSE: Typed GET / raw GET / PATCH / POST against a Container App
# CREATED: 19 OCT 2026
# ============================================================================
"""
Container App Management Client

Async httpx client for the ARM Container Apps API
(Microsoft.App/containerApps, api-version 2025-10-02-preview).

Two views of the same resource:
- get()      -> AppResource, a typed read-only projection
- get_raw()  -> dict, the full document for round-trip-preserving writes

Every call fetches a bearer token from the TokenProvider. Any non-2xx
status raises RequestError (ConflictError when ARM reports an operation
already in progress). Nothing is retried here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from __version__ import USER_AGENT
from core.config.defaults import ManagementApiDefaults
from core.errors import ConfigurationError, ConflictError, DecodeError, RequestError
from core.models import AppResource, ContainerAppFunction, ContainerAppFunctionCollection
from infrastructure.auth import TokenProvider

logger = logging.getLogger(__name__)

APP_INSIGHTS_CONNECTION_STRING_ENV = "APPLICATIONINSIGHTS_CONNECTION_STRING"


@dataclass(frozen=True)
class ResourceId:
    """Identifies one Container App in ARM."""

    subscription_id: str
    resource_group: str
    app_name: str

    def __post_init__(self):
        missing = [
            name for name in ("subscription_id", "resource_group", "app_name")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Container App identifier incomplete, missing: {', '.join(missing)}",
                missing=missing,
            )

    @classmethod
    def from_config(cls, config) -> "ResourceId":
        """Build from a DashboardConfig, failing fast when it is incomplete."""
        config.validate()
        return cls(config.subscription_id, config.resource_group, config.app_name)

    @property
    def path(self) -> str:
        return (
            f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"
            f"/providers/Microsoft.App/containerApps/{self.app_name}"
        )

    def __str__(self) -> str:
        return self.path


def parse_app_id_from_connection_string(connection_string: str) -> Optional[str]:
    """Return the ApplicationId= segment of an App Insights connection string."""
    for part in connection_string.split(";"):
        key, sep, value = part.strip().partition("=")
        if sep and key.strip().lower() == "applicationid":
            return value.strip() or None
    return None


class ContainerAppClient:
    """Async HTTP client for the ARM Container Apps API."""

    def __init__(
        self,
        token_provider: TokenProvider,
        http_client: Optional[httpx.AsyncClient] = None,
        defaults: Optional[ManagementApiDefaults] = None,
    ):
        self._tokens = token_provider
        self._defaults = defaults or ManagementApiDefaults()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._defaults.timeout_seconds)
        self._conflict_codes = {c.lower() for c in self._defaults.conflict_error_codes}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ContainerAppClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # PLUMBING
    # ------------------------------------------------------------------

    def url_for(self, resource_id: ResourceId, sub_path: str = "") -> str:
        """Absolute ARM URL for the app (or a child path), api-version included."""
        return (
            f"{self._defaults.endpoint}{resource_id.path}{sub_path}"
            f"?api-version={self._defaults.api_version}"
        )

    async def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        token = await self._tokens.get_token(self._defaults.scope)
        headers = {"Authorization": f"Bearer {token}", "User-Agent": USER_AGENT}

        try:
            response = await self._http.request(method, url, json=json_body, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"ARM timeout: {method} {url}: {e}")
            raise
        except httpx.TransportError as e:
            logger.error(f"Cannot reach ARM at {url}: {e}")
            raise

        if not response.is_success:
            raise self._classify(response.status_code, response.text, url)
        return response

    def _classify(self, status_code: int, body: str, url: str) -> RequestError:
        error = RequestError(status_code, body, url=url)
        if error.error_code and error.error_code.lower() in self._conflict_codes:
            logger.warning(f"ARM conflict {status_code} ({error.error_code}) on {url}")
            return ConflictError(status_code, body, url=url)
        logger.error(f"ARM error {status_code} ({error.error_code or 'no code'}) on {url}")
        return error

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Failed to parse JSON response from {response.request.url}: {e}") from e

    # ------------------------------------------------------------------
    # RESOURCE VERBS
    # ------------------------------------------------------------------

    async def get_raw(self, resource_id: ResourceId) -> Dict[str, Any]:
        """GET the full app document as a plain dict."""
        response = await self._send("GET", self.url_for(resource_id))
        document = self._json(response)
        if not isinstance(document, dict):
            raise DecodeError(f"Expected a JSON object for {resource_id.app_name}, got {type(document).__name__}")
        return document

    async def get(self, resource_id: ResourceId) -> AppResource:
        """GET the app as a typed projection."""
        document = await self.get_raw(resource_id)
        try:
            return AppResource.model_validate(document)
        except ValidationError as e:
            raise DecodeError(f"Unexpected Container App shape: {e}") from e

    async def patch(self, resource_id: ResourceId, partial_document: Dict[str, Any]) -> None:
        """PATCH only the given subtree of the app."""
        await self._send("PATCH", self.url_for(resource_id), json_body=partial_document)

    async def post(self, action_url: str) -> None:
        """POST a bodiless lifecycle action."""
        await self._send("POST", action_url)

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start_app(self, resource_id: ResourceId) -> None:
        """POST .../containerApps/{name}/start"""
        logger.info(f"Starting Container App {resource_id.app_name}")
        await self.post(self.url_for(resource_id, "/start"))

    async def stop_app(self, resource_id: ResourceId) -> None:
        """POST .../containerApps/{name}/stop"""
        logger.info(f"Stopping Container App {resource_id.app_name}")
        await self.post(self.url_for(resource_id, "/stop"))

    # ------------------------------------------------------------------
    # FUNCTIONS
    # ------------------------------------------------------------------

    async def _list_functions_at(self, url: str) -> List[ContainerAppFunction]:
        functions: List[ContainerAppFunction] = []
        next_url: Optional[str] = url
        while next_url:
            response = await self._send("GET", next_url)
            try:
                page = ContainerAppFunctionCollection.model_validate(self._json(response))
            except ValidationError as e:
                raise DecodeError(f"Unexpected functions list shape: {e}") from e
            functions.extend(page.value)
            next_url = page.next_link
        return functions

    async def list_functions(self, resource_id: ResourceId) -> List[ContainerAppFunction]:
        """Functions in the latest revision."""
        return await self._list_functions_at(self.url_for(resource_id, "/functions"))

    async def list_functions_by_revision(
        self, resource_id: ResourceId, revision_name: str
    ) -> List[ContainerAppFunction]:
        """Functions in a specific revision."""
        return await self._list_functions_at(
            self.url_for(resource_id, f"/revisions/{revision_name}/functions")
        )

    async def get_function(self, resource_id: ResourceId, function_name: str) -> ContainerAppFunction:
        """One function from the latest revision."""
        response = await self._send("GET", self.url_for(resource_id, f"/functions/{function_name}"))
        try:
            return ContainerAppFunction.model_validate(self._json(response))
        except ValidationError as e:
            raise DecodeError(f"Unexpected function shape: {e}") from e

    # ------------------------------------------------------------------
    # APPLICATION INSIGHTS DISCOVERY
    # ------------------------------------------------------------------

    async def get_app_insights_app_id(self, resource_id: ResourceId) -> Optional[str]:
        """
        ApplicationId of the App Insights resource the app reports to.

        Read from the APPLICATIONINSIGHTS_CONNECTION_STRING env var of the
        app's containers. None when not configured.
        """
        app = await self.get(resource_id)
        connection_string = app.find_env_value(APP_INSIGHTS_CONNECTION_STRING_ENV)
        if not connection_string:
            return None
        return parse_app_id_from_connection_string(connection_string)


__all__ = [
    "ResourceId",
    "ContainerAppClient",
    "parse_app_id_from_connection_string",
    "APP_INSIGHTS_CONNECTION_STRING_ENV",
]
