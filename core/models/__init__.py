# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models for the dashboard core:
    - app_resource: typed, read-only projections of ARM documents
    - telemetry: Application Insights query envelope and decoded records
"""

from core.models.app_resource import (
    EnvironmentVariable,
    Container,
    Template,
    AppProperties,
    AppResource,
    FunctionProperties,
    ContainerAppFunction,
    ContainerAppFunctionCollection,
)
from core.models.telemetry import (
    EPOCH,
    QueryColumn,
    QueryTable,
    QueryResult,
    FunctionInvocation,
    InvocationTrace,
    InvocationCounts,
)
from core.models.requests import FunctionsUpdateRequest

__all__ = [
    # ARM
    "EnvironmentVariable",
    "Container",
    "Template",
    "AppProperties",
    "AppResource",
    "FunctionProperties",
    "ContainerAppFunction",
    "ContainerAppFunctionCollection",
    # Telemetry
    "EPOCH",
    "QueryColumn",
    "QueryTable",
    "QueryResult",
    "FunctionInvocation",
    "InvocationTrace",
    "InvocationCounts",
    # Requests
    "FunctionsUpdateRequest",
]
