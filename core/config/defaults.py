# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for ARM, Application Insights and retries
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the management client, the telemetry
client and the reconciliation loop. These can be overridden via
environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ManagementApiDefaults:
    """Azure Resource Manager endpoint settings."""
    endpoint: str = "https://management.azure.com"
    api_version: str = "2025-10-02-preview"
    scope: str = "https://management.azure.com/.default"
    timeout_seconds: float = 60.0

    # ARM error codes meaning "another operation is running on this app"
    conflict_error_codes: tuple = (
        "ContainerAppOperationInProgress",
        "OperationInProgress",
        "AnotherOperationInProgress",
    )

    @classmethod
    def from_env(cls) -> "ManagementApiDefaults":
        """Create from environment variables."""
        return cls(
            endpoint=os.getenv("ARM_ENDPOINT", "https://management.azure.com").rstrip("/"),
            api_version=os.getenv("ARM_API_VERSION", "2025-10-02-preview"),
            timeout_seconds=float(os.getenv("ARM_TIMEOUT_SECONDS", 60.0)),
        )


@dataclass(frozen=True)
class TelemetryDefaults:
    """
    Application Insights query settings.

    The in-query lookbacks are fixed clauses inside the KQL text and are
    independent of the `timespan` request parameter; the narrower of the
    two wins at query time.
    """
    endpoint: str = "https://api.applicationinsights.io/v1/apps"
    scope: str = "https://api.applicationinsights.io/.default"
    timeout_seconds: float = 60.0

    invocations_timespan: str = "P1D"
    invocations_lookback: str = "24h"
    counts_timespan: str = "P30D"
    counts_lookback: str = "30d"
    traces_timespan: str = "P1D"

    default_limit: int = 50
    max_limit: int = 1000

    @classmethod
    def from_env(cls) -> "TelemetryDefaults":
        """Create from environment variables."""
        return cls(
            endpoint=os.getenv("APPINSIGHTS_ENDPOINT", "https://api.applicationinsights.io/v1/apps").rstrip("/"),
            timeout_seconds=float(os.getenv("APPINSIGHTS_TIMEOUT_SECONDS", 60.0)),
        )


@dataclass(frozen=True)
class ReconcileDefaults:
    """Retry budget for template reconciliation."""
    max_attempts: int = 10
    delay_seconds: float = 3.0

    @classmethod
    def from_env(cls) -> "ReconcileDefaults":
        """Create from environment variables."""
        return cls(
            max_attempts=int(os.getenv("RECONCILE_MAX_ATTEMPTS", 10)),
            delay_seconds=float(os.getenv("RECONCILE_DELAY_SECONDS", 3.0)),
        )


@dataclass(frozen=True)
class Defaults:
    """Container for all default configurations."""
    management: ManagementApiDefaults
    telemetry: TelemetryDefaults
    reconcile: ReconcileDefaults

    @classmethod
    def from_env(cls) -> "Defaults":
        """Load all defaults from environment."""
        return cls(
            management=ManagementApiDefaults.from_env(),
            telemetry=TelemetryDefaults.from_env(),
            reconcile=ReconcileDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance (lazy-loaded)."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


__all__ = [
    "ManagementApiDefaults",
    "TelemetryDefaults",
    "ReconcileDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
