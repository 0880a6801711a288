"""
Store Options Management

Type-safe options for the property store, loaded from YAML files,
environment variables and explicit overrides with validation.
"""

from .models import (
    StoreOptions,
    DEFAULT_DATE_PATTERN,
    DEFAULT_OBFUSCATED_PLACEHOLDER,
    DEFAULT_POLL_INTERVAL,
)

from .sources import (
    OptionsSource,
    DictOptionsSource,
    YAMLOptionsSource,
    EnvironmentOptionsSource,
)

from .validation import (
    OptionsValidator,
    ConfigurationValidationError,
)

from .core import OptionsLoader, load_options

__all__ = [
    # Models
    'StoreOptions',
    'DEFAULT_DATE_PATTERN',
    'DEFAULT_OBFUSCATED_PLACEHOLDER',
    'DEFAULT_POLL_INTERVAL',

    # Sources
    'OptionsSource',
    'DictOptionsSource',
    'YAMLOptionsSource',
    'EnvironmentOptionsSource',

    # Validation
    'OptionsValidator',
    'ConfigurationValidationError',

    # Core
    'OptionsLoader',
    'load_options',
]
