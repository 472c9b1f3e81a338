# ============================================================================
# CLAUDE CONTEXT - LIVENESS CHECK HTTP TRIGGER
# ============================================================================
# STATUS: HTTP Trigger - Ultra-lightweight liveness probe
# PURPOSE: Fast endpoint for load balancer liveness checks
# EXPORTS: LivenessCheckTrigger, livez_trigger
# INTERFACES: SystemMonitoringTrigger (http_base.py)
# DEPENDENCIES: azure.functions (no external service dependencies!)
# PATTERNS: Singleton trigger instance
# ENTRY_POINTS: livez_trigger.handle_request(req)
# ============================================================================
"""
Lightweight Liveness Check HTTP Trigger.

Returns a minimal response to verify the Function App process is running.

CRITICAL: This endpoint must have ZERO external dependencies.
- NO storage checks
- NO source fetches
- NO config validation

For configuration and codec status, use /api/health instead.

Exports:
    LivenessCheckTrigger: Liveness check trigger class
    livez_trigger: Singleton trigger instance
"""

from typing import Dict, Any, List

import azure.functions as func

from .http_base import SystemMonitoringTrigger


class LivenessCheckTrigger(SystemMonitoringTrigger):
    """Ultra-lightweight liveness check - no external dependencies."""

    def __init__(self):
        super().__init__("livez")

    def get_allowed_methods(self) -> List[str]:
        """Liveness check only supports GET."""
        return ["GET"]

    def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        return {"status": "alive"}


# Singleton instance
livez_trigger = LivenessCheckTrigger()
