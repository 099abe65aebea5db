# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export contracts, errors and models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import ProvisioningState, RunningStatus, SeverityLevel
from core.errors import (
    DashboardError,
    ConfigurationError,
    RequestError,
    ConflictError,
    StaleStateError,
    RetriesExhaustedError,
    InvalidResourceShapeError,
    DecodeError,
)
from core.models import (
    AppResource,
    ContainerAppFunction,
    QueryResult,
    FunctionInvocation,
    InvocationTrace,
    InvocationCounts,
)

__all__ = [
    # Enums
    "ProvisioningState",
    "RunningStatus",
    "SeverityLevel",
    # Errors
    "DashboardError",
    "ConfigurationError",
    "RequestError",
    "ConflictError",
    "StaleStateError",
    "RetriesExhaustedError",
    "InvalidResourceShapeError",
    "DecodeError",
    # Models
    "AppResource",
    "ContainerAppFunction",
    "QueryResult",
    "FunctionInvocation",
    "InvocationTrace",
    "InvocationCounts",
]
