"""
Option sources for loading StoreOptions data.
"""

import os
import yaml
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Union
from pathlib import Path

from ...infrastructure.exceptions import ConfigurationError


class OptionsSource(ABC):
    """Abstract base class for store option sources."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Load option data from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass


class DictOptionsSource(OptionsSource):
    """In-memory option source, used for explicit overrides."""

    def __init__(self, data: Dict[str, Any], priority: int = 300):
        self.data = dict(data)
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        return dict(self.data)

    def get_priority(self) -> int:
        return self.priority


class YAMLOptionsSource(OptionsSource):
    """
    YAML file option source.

    Options are read from the ``section`` mapping of the document, or from the
    document root when ``section`` is None.
    """

    def __init__(self, file_path: Union[str, Path], priority: int = 100, section: Optional[str] = "hotprops"):
        self.file_path = Path(file_path)
        self.priority = priority
        self.section = section

    def load(self) -> Dict[str, Any]:
        """Load options from YAML file."""
        if not self.file_path.exists():
            raise ConfigurationError(
                f"Options file not found: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in options file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML",
                context={"yaml_error": str(e)},
                cause=e
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading options file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_READ_ERROR",
                context={"error": str(e)},
                cause=e
            ) from e

        if self.section is not None:
            data = (data.get(self.section) or {}) if isinstance(data, dict) else data
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Options in {self.file_path} must be a mapping",
                config_path=str(self.file_path),
                error_code="INVALID_OPTIONS_SECTION"
            )
        return data

    def get_priority(self) -> int:
        return self.priority


class EnvironmentOptionsSource(OptionsSource):
    """
    Environment variable option source.

    ``HOTPROPS_DATE_PATTERN`` maps to ``date_pattern``, ``HOTPROPS_HOT_RELOAD``
    to ``hot_reload`` and so on.
    """

    def __init__(self, prefix: str = "HOTPROPS_", priority: int = 200):
        self.prefix = prefix.upper()
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        """Load options from environment variables."""
        options = {}

        for key, value in os.environ.items():
            if key.startswith(self.prefix):
                option_key = key[len(self.prefix):].lower()
                options[option_key] = self._parse_value(value)

        return options

    def _parse_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        # Try to parse as boolean
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        # Try to parse as integer
        try:
            return int(value)
        except ValueError:
            pass

        # Try to parse as float
        try:
            return float(value)
        except ValueError:
            pass

        # Return as string
        return value

    def get_priority(self) -> int:
        return self.priority
