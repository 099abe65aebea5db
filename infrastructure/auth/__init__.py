# ============================================================================
# AUTHENTICATION MODULE
# ============================================================================
# PURPOSE: Azure AD bearer tokens for ARM and Application Insights
# CREATED: 19 OCT 2026
# ============================================================================
"""
Authentication module.

Usage:
    from infrastructure.auth import AzureTokenProvider

    provider = AzureTokenProvider()
"""

from infrastructure.auth.token_provider import (
    TokenCache,
    TokenProvider,
    AzureTokenProvider,
)

__all__ = [
    'TokenCache',
    'TokenProvider',
    'AzureTokenProvider',
]
