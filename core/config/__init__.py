# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the dashboard core.
"""

from core.config.defaults import (
    ManagementApiDefaults,
    TelemetryDefaults,
    ReconcileDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)
from core.config.settings import (
    DashboardConfig,
    get_config,
    reset_config,
)

__all__ = [
    "ManagementApiDefaults",
    "TelemetryDefaults",
    "ReconcileDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "DashboardConfig",
    "get_config",
    "reset_config",
]
