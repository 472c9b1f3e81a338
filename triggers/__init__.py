"""
Triggers Package.

Azure Functions HTTP trigger implementations.

HTTP Endpoints:
    /api/repackage: tar.zst -> zip conversion (POST)
    /api/health: Configuration and codec health (GET)
    /api/livez: Liveness probe (GET)

Exports:
    Base classes for HTTP triggers
"""

# Only import base classes to avoid initialization at import time
# Trigger instances should be imported directly from their modules
from .http_base import BaseHttpTrigger, SystemMonitoringTrigger

__all__ = [
    # Base classes for type hints and inheritance
    'BaseHttpTrigger',
    'SystemMonitoringTrigger',
]
