# ============================================================================
# VERSION - CONTAINER APP FUNCTIONS DASHBOARD
# ============================================================================
"""
Version information for the Container App functions dashboard core.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch.build
__version__ = "0.1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-19"

# ARM API the clients are written against
ARM_API_VERSION = "2025-10-02-preview"
CODENAME = "Container App Functions Dashboard"

# Sent on every ARM and Application Insights request
USER_AGENT = f"containerapp-functions-dashboard/{__version__}"
