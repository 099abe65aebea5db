# ============================================================================
# STATE RECONCILER
# ============================================================================
# STATUS: Service - Function enable/disable via template mutation
# PURPOSE: Read-modify-write of the app template under optimistic concurrency
# CREATED: 19 OCT 2026
# ============================================================================
"""
State Reconciler

Enables and disables functions by editing the
`AzureWebJobs_{name}_Disabled` env vars of the app's first container,
then PATCHing only `properties.template` back to ARM.

Each attempt:
    1. GET the raw app document (never reused between attempts)
    2. provisioningState != Succeeded      -> wait, retry
    3. no containers                       -> InvalidResourceShapeError
    4. disables (set "true"), then enables (remove); enable wins on overlap
    5. bump template.revisionSuffix
    6. PATCH {"properties": {"template": ...}}
    7. ConflictError                       -> wait, retry
       any other error                     -> raise

Busy and conflict retries share one attempt budget (default 10 attempts,
3 s apart). Reconciliations of the same resource through one reconciler
are serialized by a per-resource asyncio.Lock; callers in other processes
are not coordinated and the last PATCH wins.

Cancellation: the waits are plain awaits, so cancelling the calling task
aborts at the next network call or sleep. The patch body is local to the
attempt and is never sent partially.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from core.config.defaults import ReconcileDefaults
from core.contracts import DISABLED_ENV_VAR_VALUE, ProvisioningState, disabled_env_var_name
from core.errors import ConflictError, InvalidResourceShapeError, RetriesExhaustedError, StaleStateError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from infrastructure.management_client import ContainerAppClient, ResourceId
from services.revision import next_suffix

logger = get_logger(__name__, ComponentType.RECONCILER)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a successful reconciliation."""
    attempts: int
    revision_suffix: str
    disabled: Tuple[str, ...] = field(default_factory=tuple)
    enabled: Tuple[str, ...] = field(default_factory=tuple)


# ============================================================================
# TEMPLATE MUTATION (pure)
# ============================================================================

def _first_container(template: Any) -> Dict[str, Any]:
    containers = template.get("containers") if isinstance(template, dict) else None
    if not isinstance(containers, list) or not containers or not isinstance(containers[0], dict):
        raise InvalidResourceShapeError("Container App has no containers defined.")
    return containers[0]


def apply_function_states(
    template: Dict[str, Any],
    to_disable: Iterable[str],
    to_enable: Iterable[str],
) -> Dict[str, Any]:
    """
    Return a copy of `template` with the disable switches updated.

    Disables are applied before enables, so a name in both sets ends up
    enabled. The input template is not modified.
    """
    mutated = copy.deepcopy(template)
    container = _first_container(mutated)

    env = container.get("env")
    if not isinstance(env, list):
        env = []
        container["env"] = env

    for function_name in to_disable:
        var_name = disabled_env_var_name(function_name)
        matches = [v for v in env if isinstance(v, dict) and v.get("name") == var_name]
        if matches:
            keeper = matches[0]
            keeper["value"] = DISABLED_ENV_VAR_VALUE
            keeper.pop("secretRef", None)
            duplicates = {id(v) for v in matches[1:]}
            env[:] = [v for v in env if id(v) not in duplicates]
        else:
            env.append({"name": var_name, "value": DISABLED_ENV_VAR_VALUE})

    for function_name in to_enable:
        var_name = disabled_env_var_name(function_name)
        env[:] = [v for v in env if not (isinstance(v, dict) and v.get("name") == var_name)]

    return mutated


def build_template_patch(
    document: Dict[str, Any],
    app_name: str,
    to_disable: Iterable[str],
    to_enable: Iterable[str],
) -> Tuple[Dict[str, Any], str]:
    """
    Build the minimal PATCH body for a raw app document.

    Returns:
        ({"properties": {"template": <mutated template>}}, revision_suffix)
    """
    properties = document.get("properties")
    if not isinstance(properties, dict):
        raise InvalidResourceShapeError("Container App has no properties section.")

    template = apply_function_states(properties.get("template"), to_disable, to_enable)

    suffix = next_suffix(properties.get("latestRevisionName"), app_name)
    template["revisionSuffix"] = suffix

    return {"properties": {"template": template}}, suffix


# ============================================================================
# RECONCILER
# ============================================================================

class StateReconciler:
    """Applies enable/disable requests to a Container App with bounded retries."""

    def __init__(
        self,
        client: ContainerAppClient,
        defaults: Optional[ReconcileDefaults] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._client = client
        self._defaults = defaults or ReconcileDefaults()
        if self._defaults.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._sleep = sleep
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def max_attempts(self) -> int:
        return self._defaults.max_attempts

    def _lock_for(self, resource_id: ResourceId) -> asyncio.Lock:
        return self._locks.setdefault(resource_id.path.lower(), asyncio.Lock())

    async def reconcile(
        self,
        resource_id: ResourceId,
        to_disable: Iterable[str] = (),
        to_enable: Iterable[str] = (),
    ) -> ReconcileResult:
        """
        Disable and enable functions in one new revision.

        Raises:
            StaleStateError: app never left a busy provisioning state
            RetriesExhaustedError: ARM kept reporting an operation in progress
            InvalidResourceShapeError: app has no containers
            RequestError: any other ARM failure (not retried)
        """
        disable: List[str] = sorted(set(to_disable))
        enable: List[str] = sorted(set(to_enable))

        async with self._lock_for(resource_id):
            with log_context(app_name=resource_id.app_name, operation="reconcile"):
                logger.info(f"Reconciling functions: disable={disable} enable={enable}")
                try:
                    return await self._reconcile_locked(resource_id, disable, enable)
                except asyncio.CancelledError:
                    logger.warning("Reconciliation cancelled")
                    raise

    async def _reconcile_locked(
        self,
        resource_id: ResourceId,
        disable: List[str],
        enable: List[str],
    ) -> ReconcileResult:
        max_attempts = self._defaults.max_attempts
        delay = self._defaults.delay_seconds

        for attempt in range(1, max_attempts + 1):
            with log_context(attempt=attempt):
                document = await self._client.get_raw(resource_id)
                properties = document.get("properties")
                state = properties.get("provisioningState") if isinstance(properties, dict) else None
                state = None if state is None else str(state)

                if not ProvisioningState.is_ready(state):
                    if attempt >= max_attempts:
                        logger.error(f"Still provisioning ({state}) after {attempt} attempts")
                        raise StaleStateError(state, attempt)
                    logger.info(f"Provisioning state is {state}; waiting {delay}s")
                    await self._sleep(delay)
                    continue

                patch_body, suffix = build_template_patch(
                    document, resource_id.app_name, disable, enable
                )

                try:
                    await self._client.patch(resource_id, patch_body)
                except ConflictError as e:
                    if attempt >= max_attempts:
                        logger.error(f"Operation still in progress after {attempt} attempts")
                        raise RetriesExhaustedError(attempt, e) from e
                    logger.info(f"ARM reports {e.error_code}; waiting {delay}s")
                    await self._sleep(delay)
                    continue

                log_checkpoint("reconcile_patched", {
                    "revision_suffix": suffix,
                    "disabled": disable,
                    "enabled": enable,
                })
                return ReconcileResult(
                    attempts=attempt,
                    revision_suffix=suffix,
                    disabled=tuple(disable),
                    enabled=tuple(enable),
                )

        # Unreachable: the last attempt either returns or raises
        raise RetriesExhaustedError(max_attempts)


__all__ = [
    "StateReconciler",
    "ReconcileResult",
    "apply_function_states",
    "build_template_patch",
]
