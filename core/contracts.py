# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by clients and services
# PURPOSE: Provisioning/running states, severity levels, env var naming
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ProvisioningState, RunningStatus, SeverityLevel, disabled_env_var_name
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the Container App functions dashboard.

These define the small vocabulary shared across boundaries:
- ARM management API (provisioning / running states)
- Application Insights (trace severity levels)
- Azure Functions host (function disable switch)
"""

from enum import Enum
from typing import Optional


# ============================================================================
# STATUS ENUMS
# ============================================================================

class ProvisioningState(str, Enum):
    """
    ARM provisioning states for a Container App.

    Only SUCCEEDED means the resource accepts another mutation.
    Every other value (including ones not listed here) means "busy".
    """
    SUCCEEDED = "Succeeded"
    IN_PROGRESS = "InProgress"
    UPDATING = "Updating"
    DELETING = "Deleting"
    FAILED = "Failed"
    CANCELED = "Canceled"

    @staticmethod
    def is_ready(state: Optional[str]) -> bool:
        """True when the observed state allows a PATCH (absent counts as ready)."""
        if state is None:
            return True
        return state.lower() == ProvisioningState.SUCCEEDED.value.lower()


class RunningStatus(str, Enum):
    """Container App running status as reported by ARM."""
    RUNNING = "Running"
    STOPPED = "Stopped"
    PROGRESSING = "Progressing"


class SeverityLevel(int, Enum):
    """Application Insights trace severity levels."""
    VERBOSE = 0
    INFORMATION = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4

    @classmethod
    def label_for(cls, level: int) -> str:
        """Human label for a raw severity value, 'Unknown' when out of range."""
        try:
            return cls(level).name.capitalize()
        except ValueError:
            return "Unknown"


# ============================================================================
# FUNCTION DISABLE SWITCH
# ============================================================================

DISABLED_ENV_VAR_TEMPLATE = "AzureWebJobs_{function_name}_Disabled"
DISABLED_ENV_VAR_VALUE = "true"


def disabled_env_var_name(function_name: str) -> str:
    """Name of the env var whose presence disables a function."""
    return DISABLED_ENV_VAR_TEMPLATE.format(function_name=function_name)


__all__ = [
    "ProvisioningState",
    "RunningStatus",
    "SeverityLevel",
    "DISABLED_ENV_VAR_TEMPLATE",
    "DISABLED_ENV_VAR_VALUE",
    "disabled_env_var_name",
]
