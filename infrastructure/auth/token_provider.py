# ============================================================================
# BEARER TOKEN PROVIDER
# ============================================================================
# STATUS: Infrastructure - Azure AD tokens for ARM and Application Insights
# PURPOSE: Scope-keyed token acquisition and caching
# CREATED: 19 OCT 2026
# ============================================================================
"""
Bearer token provider.

The clients ask for a token on every call and never cache it themselves;
caching lives here, keyed by scope, and tokens are refreshed when within
5 minutes of expiry.

Credential selection:
-------------------
AZURE_CLIENT_ID=<guid>  -> ManagedIdentityCredential (user-assigned)
otherwise               -> DefaultAzureCredential (system MI, env vars, az login)

Usage:
------
```python
from infrastructure.auth import AzureTokenProvider

provider = AzureTokenProvider()
token = await provider.get_token("https://management.azure.com/.default")
```
"""

import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Refresh tokens when less than 5 minutes until expiry
TOKEN_REFRESH_BUFFER_SECS = 300


@dataclass
class TokenCache:
    """Simple in-memory token cache."""
    token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def get_if_valid(self, min_ttl_seconds: int = 0) -> Optional[str]:
        """Get token if valid and has sufficient TTL."""
        if not self.token or not self.expires_at:
            return None

        if self.ttl_seconds() <= min_ttl_seconds:
            return None

        return self.token

    def set(self, token: str, expires_at: datetime) -> None:
        """Cache a new token."""
        self.token = token
        self.expires_at = expires_at

    def invalidate(self) -> None:
        """Clear the cache."""
        self.token = None
        self.expires_at = None

    def ttl_seconds(self) -> float:
        """Get remaining TTL in seconds."""
        if not self.expires_at:
            return 0
        return (self.expires_at - datetime.now(timezone.utc)).total_seconds()


class TokenProvider(ABC):
    """Returns a bearer token for a target audience (OAuth scope)."""

    @abstractmethod
    async def get_token(self, scope: str) -> str:
        """Return a bearer token valid for `scope`."""

    async def close(self) -> None:
        """Release credential resources."""


class AzureTokenProvider(TokenProvider):
    """Token provider backed by azure-identity async credentials."""

    def __init__(self, credential: Any = None, client_id: Optional[str] = None):
        """
        Args:
            credential: Pre-built async TokenCredential (tests, custom auth)
            client_id: User-assigned managed identity client ID
        """
        self._credential = credential
        self._client_id = client_id if client_id is not None else os.environ.get("AZURE_CLIENT_ID", "")
        self._caches: Dict[str, TokenCache] = {}

    def _get_credential(self) -> Any:
        if self._credential is None:
            from azure.identity.aio import DefaultAzureCredential, ManagedIdentityCredential

            if self._client_id:
                logger.info(f"Using user-assigned Managed Identity: {self._client_id[:8]}...")
                self._credential = ManagedIdentityCredential(client_id=self._client_id)
            else:
                logger.info("Using DefaultAzureCredential (system MI or az login)")
                self._credential = DefaultAzureCredential()
        return self._credential

    async def get_token(self, scope: str) -> str:
        cache = self._caches.setdefault(scope, TokenCache())
        cached = cache.get_if_valid(min_ttl_seconds=TOKEN_REFRESH_BUFFER_SECS)
        if cached:
            logger.debug(f"Using cached token for {scope}, TTL: {cache.ttl_seconds():.0f}s")
            return cached

        from azure.core.exceptions import ClientAuthenticationError

        try:
            access = await self._get_credential().get_token(scope)
        except ClientAuthenticationError as e:
            logger.error(f"Failed to acquire token for {scope}: {e}")
            logger.error("  - Verify the identity has Contributor on the Container App")
            logger.error("  - Verify Monitoring Reader on the Application Insights resource")
            raise

        expires_at = datetime.fromtimestamp(access.expires_on, tz=timezone.utc)
        cache.set(access.token, expires_at)
        logger.info(f"Token acquired for {scope}, expires: {expires_at.isoformat()}")
        return access.token

    def status(self) -> Dict[str, Any]:
        """Token cache state, for health checks."""
        return {
            scope: {
                "token_cached": cache.token is not None,
                "ttl_seconds": cache.ttl_seconds() if cache.token else 0,
                "expires_at": cache.expires_at.isoformat() if cache.expires_at else None,
            }
            for scope, cache in self._caches.items()
        }

    async def close(self) -> None:
        if self._credential is not None and hasattr(self._credential, "close"):
            await self._credential.close()


__all__ = ["TokenCache", "TokenProvider", "AzureTokenProvider", "TOKEN_REFRESH_BUFFER_SECS"]
