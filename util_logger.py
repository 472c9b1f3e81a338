"""
Unified Logger System.

JSON-only structured logging for Azure Functions with Application Insights.

Component loggers are plain logging.Logger objects cached by name and shared
by every request. Request context never lives on them: create_with_context()
returns a ContextLogger adapter that carries its own LogContext and adds it
to each record's custom dimensions.

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Per-request correlation fields
    JSONFormatter: Application Insights friendly formatter
    ContextLogger: Per-request adapter over a component logger
    LoggerFactory: Factory for creating loggers

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, replace
import logging
import sys
import os
import json


# ============================================================================
# COMPONENT TYPES - Aligned with layer architecture
# ============================================================================

class ComponentType(Enum):
    """Component types aligned with the application layers."""
    SERVICE = "service"        # Transcoder, fetcher, orchestration
    REPOSITORY = "repository"  # Object storage access
    FACTORY = "factory"        # Publisher selection
    TRIGGER = "trigger"        # HTTP entry points


class LogLevel(Enum):
    """Standard Python log levels as enum for type safety."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# LOG CONTEXT - Correlation for one repackage request
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Correlation fields for one repackage request."""
    request_id: Optional[str] = None  # X-Request-ID
    source_url: Optional[str] = None  # URL of the .tar.zst being converted
    object_key: Optional[str] = None  # Destination blob key, once known

    def to_dict(self) -> Dict[str, Any]:
        """Non-empty fields only."""
        return {
            k: v for k, v in {
                'request_id': self.request_id,
                'source_url': self.source_url,
                'object_key': self.object_key
            }.items() if v is not None
        }


# ============================================================================
# JSON FORMATTER - Structured logging for Azure Functions
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in Azure Functions.
    Outputs logs in a format that Application Insights can automatically parse.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Application Insights picks these up as customDimensions
        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class _ComponentFilter(logging.Filter):
    """Stamps component_type and component_name into every record's dimensions."""

    def __init__(self, component_type: ComponentType, name: str):
        super().__init__()
        self.dimensions = {
            'component_type': component_type.value,
            'component_name': name,
        }

    def filter(self, record: logging.LogRecord) -> bool:
        record.custom_dimensions = {
            **self.dimensions,
            **(getattr(record, 'custom_dimensions', None) or {}),
        }
        return True


class ContextLogger(logging.LoggerAdapter):
    """
    Per-request view of a shared component logger.

    Explicit custom_dimensions passed through extra= win over context fields.
    """

    def __init__(self, logger: logging.Logger, context: LogContext):
        super().__init__(logger, {})
        self.context = context

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra['custom_dimensions'] = {
            **self.context.to_dict(),
            **extra.get('custom_dimensions', {}),
        }
        kwargs['extra'] = extra
        return msg, kwargs

    def bind(self, **fields) -> 'ContextLogger':
        """New adapter with some context fields replaced; self is unchanged."""
        return ContextLogger(self.logger, replace(self.context, **fields))


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

def _resolve_default_level() -> LogLevel:
    if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
        return LogLevel.DEBUG
    try:
        return LogLevel.from_string(os.getenv('LOG_LEVEL', 'INFO'))
    except KeyError:
        return LogLevel.INFO


class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "ArchiveTranscoder"
        )
        logger.info("Transcoding archive")

        log = LoggerFactory.create_with_context(
            ComponentType.SERVICE, "RepackageService", request_id="a1b2c3d4"
        )
        log = log.bind(object_key="zips/file1-20250102T030405Z.zip")
    """

    _default_level = _resolve_default_level()

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        level: Optional[LogLevel] = None
    ) -> logging.Logger:
        """
        Create (or fetch) the shared logger for a component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "ArchiveTranscoder")
            level: Override for LOG_LEVEL / DEBUG_LOGGING

        Returns:
            Configured Python logger named "<component_type>.<name>"
        """
        logger = logging.getLogger(f"{component_type.value}.{name}")
        log_level = (level or cls._default_level).to_python_level()

        # Handler, filter and level are set once per logger name; later calls
        # only change the level when one is passed explicitly
        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            logger.setLevel(log_level)
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)
        elif level is not None:
            logger.setLevel(log_level)
        if not any(isinstance(f, _ComponentFilter) for f in logger.filters):
            logger.addFilter(_ComponentFilter(component_type, name))

        # Allow propagation to Azure's root logger for Application Insights
        logger.propagate = True
        return logger

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        request_id: Optional[str] = None,
        source_url: Optional[str] = None,
        object_key: Optional[str] = None
    ) -> ContextLogger:
        """
        Create a per-request adapter over the component logger.

        Args:
            component_type: Type of component
            name: Component name
            request_id: HTTP request ID
            source_url: URL being repackaged
            object_key: Destination blob key

        Returns:
            ContextLogger carrying its own LogContext
        """
        context = LogContext(
            request_id=request_id,
            source_url=source_url,
            object_key=object_key
        )
        return ContextLogger(cls.create_logger(component_type, name), context)
