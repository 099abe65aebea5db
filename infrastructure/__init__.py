# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Azure API clients
# PURPOSE: ARM management and Application Insights query clients
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module.

Provides:
- AzureTokenProvider: bearer tokens per scope (azure-identity)
- ContainerAppClient: ARM Container Apps API (httpx)
- TelemetryClient: Application Insights query API (httpx)

Usage:
    from infrastructure import AzureTokenProvider, ContainerAppClient, ResourceId

    tokens = AzureTokenProvider()
    async with ContainerAppClient(tokens) as arm:
        app = await arm.get(ResourceId("sub", "rg", "myapp"))
"""

from infrastructure.auth import (
    TokenProvider,
    AzureTokenProvider,
)
from infrastructure.management_client import (
    ResourceId,
    ContainerAppClient,
)
from infrastructure.telemetry_client import (
    TelemetryClient,
)

__all__ = [
    # Auth
    'TokenProvider',
    'AzureTokenProvider',
    # ARM
    'ResourceId',
    'ContainerAppClient',
    # Application Insights
    'TelemetryClient',
]
