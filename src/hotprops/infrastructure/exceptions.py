"""
Structured Exception Hierarchy

Provides the exception hierarchy of the properties store with contextual
information (error codes, context data, correlation IDs) for diagnostics.
"""

from typing import Dict, List, Any, Optional
import uuid
from datetime import datetime, timezone


class HotPropsException(Exception):
    """
    Base exception class for all hotprops-specific exceptions.

    Provides structured error information including error codes,
    context data, and correlation IDs for tracing.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(HotPropsException):
    """Raised when the store's own options cannot be loaded or are invalid."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        validation_errors: Optional[List[Any]] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if config_path:
            context['config_path'] = config_path
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "CONFIG_ERROR"),
            context=context,
            **kwargs
        )


class LoadError(HotPropsException):
    """Raised when a properties file cannot be loaded into the store."""

    default_code = "LOAD_ERROR"

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if file_path:
            context['file_path'] = file_path

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', self.default_code),
            context=context,
            **kwargs
        )
        self.file_path = file_path


class PropertiesNotFoundError(LoadError):
    """The properties file does not exist."""

    default_code = "PROPERTIES_NOT_FOUND"


class PropertiesUnreadableError(LoadError):
    """The properties file exists but could not be read."""

    default_code = "PROPERTIES_UNREADABLE"


class MalformedEntryError(LoadError):
    """A line of the properties file could not be parsed."""

    default_code = "MALFORMED_ENTRY"

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if line_number is not None:
            context['line_number'] = line_number
        super().__init__(message, file_path=file_path, context=context, **kwargs)
        self.line_number = line_number


class ConversionError(HotPropsException):
    """Raised when a property value cannot be converted to the requested type."""

    default_code = "CONVERSION_ERROR"

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        target_type: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if key is not None:
            context['key'] = key
        if value is not None:
            context['value'] = value
        if target_type:
            context['target_type'] = target_type

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', self.default_code),
            context=context,
            **kwargs
        )
        self.key = key
        self.value = value
        self.target_type = target_type


class NotANumberError(ConversionError):
    """The value is not a valid textual number for the target type."""

    default_code = "NOT_A_NUMBER"


class BadDateFormatError(ConversionError):
    """The value does not match the configured date pattern and locale."""

    default_code = "BAD_DATE_FORMAT"


class WatchError(HotPropsException):
    """Raised when a file watch cannot be established."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        backend: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if file_path:
            context['file_path'] = file_path
        if backend:
            context['backend'] = backend

        super().__init__(
            message=message,
            error_code="WATCH_ERROR",
            context=context,
            **kwargs
        )
        self.file_path = file_path


class PathResolutionError(HotPropsException):
    """Raised when a properties location cannot be resolved to files."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        variable: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if location:
            context['location'] = location
        if variable:
            context['variable'] = variable

        super().__init__(
            message=message,
            error_code="PATH_RESOLUTION_ERROR",
            context=context,
            **kwargs
        )
