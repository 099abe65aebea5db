# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Business logic layer
# PURPOSE: Reconciliation, revision policy and upstream-facing operations
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the dashboard core.
Services coordinate the ARM and Application Insights clients.

Usage:
    from services import DashboardService

    service = DashboardService.from_env()
    status, payload = await service.update_functions({"disable": ["Cleanup"]})
"""

from .revision import next_suffix
from .reconciler import StateReconciler, ReconcileResult
from .dashboard_service import DashboardService

__all__ = [
    "next_suffix",
    "StateReconciler",
    "ReconcileResult",
    "DashboardService",
]
