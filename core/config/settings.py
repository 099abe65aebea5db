# ============================================================================
# DASHBOARD CONFIGURATION
# ============================================================================
# STATUS: Core - Target app identification
# PURPOSE: Environment-based configuration for the managed Container App
# CREATED: 19 OCT 2026
# ============================================================================
"""
Dashboard Configuration

Loads the identity of the managed Container App from environment
variables. The core consumes these values; it never produces them.

Required:
- AZURE_SUBSCRIPTION_ID
- AZURE_RESOURCE_GROUP
- CONTAINER_APP_NAME

Optional:
- DASHBOARD_HIDDEN_FUNCTIONS  comma-separated function names left out of listings
"""

import os
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Dashboard is not configured. Set AZURE_SUBSCRIPTION_ID, "
    "AZURE_RESOURCE_GROUP, and CONTAINER_APP_NAME environment variables."
)


@dataclass
class DashboardConfig:
    """Configuration for the dashboard core."""

    subscription_id: Optional[str] = None
    resource_group: Optional[str] = None
    app_name: Optional[str] = None
    hidden_functions: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Load configuration from environment variables."""
        hidden = os.environ.get("DASHBOARD_HIDDEN_FUNCTIONS", "")
        return cls(
            subscription_id=os.environ.get("AZURE_SUBSCRIPTION_ID"),
            resource_group=os.environ.get("AZURE_RESOURCE_GROUP"),
            app_name=os.environ.get("CONTAINER_APP_NAME"),
            hidden_functions=frozenset(n.strip() for n in hidden.split(",") if n.strip()),
        )

    @property
    def missing_fields(self) -> list:
        """Names of required settings that are empty or whitespace."""
        required = {
            "subscription_id": self.subscription_id,
            "resource_group": self.resource_group,
            "app_name": self.app_name,
        }
        return [name for name, value in required.items() if not (value and value.strip())]

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields

    def validate(self) -> None:
        """Raise ConfigurationError when any required identifier is missing."""
        missing = self.missing_fields
        if missing:
            logger.warning(f"Dashboard configuration incomplete, missing: {', '.join(missing)}")
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE, missing=missing)


# Global config singleton
_config: Optional[DashboardConfig] = None


def get_config() -> DashboardConfig:
    """Get the global configuration singleton."""
    global _config
    if _config is None:
        _config = DashboardConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset configuration (for testing)."""
    global _config
    _config = None


__all__ = ["DashboardConfig", "get_config", "reset_config", "NOT_CONFIGURED_MESSAGE"]
