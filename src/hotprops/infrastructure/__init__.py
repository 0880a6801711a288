"""
Infrastructure Layer - Cross-cutting technical services

This layer provides the exception hierarchy and the structured logging setup
shared by every other layer.
"""

from .exceptions import (
    HotPropsException,
    ConfigurationError,
    LoadError,
    PropertiesNotFoundError,
    PropertiesUnreadableError,
    MalformedEntryError,
    ConversionError,
    NotANumberError,
    BadDateFormatError,
    WatchError,
    PathResolutionError,
)
from .logging import (
    LogLevel,
    JSONLogFormatter,
    HumanReadableFormatter,
    ReloadContextFilter,
    reload_context,
    get_logger,
    configure_default_logging,
    get_correlation_id,
    get_reload_path,
)

__all__ = [
    "HotPropsException",
    "ConfigurationError",
    "LoadError",
    "PropertiesNotFoundError",
    "PropertiesUnreadableError",
    "MalformedEntryError",
    "ConversionError",
    "NotANumberError",
    "BadDateFormatError",
    "WatchError",
    "PathResolutionError",
    "LogLevel",
    "JSONLogFormatter",
    "HumanReadableFormatter",
    "ReloadContextFilter",
    "reload_context",
    "get_logger",
    "configure_default_logging",
    "get_correlation_id",
    "get_reload_path",
]
