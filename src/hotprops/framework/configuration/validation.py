"""
Option validation utilities.
"""

import os
from typing import Dict, Any, List, Tuple

from pydantic import ValidationError

from ...infrastructure.exceptions import ConfigurationError
from .models import StoreOptions


class ConfigurationValidationError(ConfigurationError):
    """Exception raised when option validation fails."""

    def __init__(self, message: str, validation_errors: List[Dict[str, Any]]):
        super().__init__(
            message,
            validation_errors=validation_errors,
            error_code="CONFIGURATION_VALIDATION_ERROR"
        )
        self.validation_errors = validation_errors

    def get_detailed_message(self) -> str:
        """Get a detailed error message with all validation errors."""
        lines = [self.message]
        lines.append("Validation errors:")

        for error in self.validation_errors:
            location = " -> ".join(str(loc) for loc in error.get('loc', []))
            msg = error.get('msg', 'Unknown error')
            lines.append(f"- {location}: {msg}")

        return "\n".join(lines)


class OptionsValidator:
    """Validates option data and provides detailed error messages."""

    @staticmethod
    def split_known(options_data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """
        Separate known option keys from unknown ones.

        Returns:
            Tuple of (known options, warning messages for unknown keys)
        """
        known_keys = set(StoreOptions.model_fields)
        known = {key: value for key, value in options_data.items() if key in known_keys}
        warnings = [
            f"Unknown option key: {key}"
            for key in options_data
            if key not in known_keys
        ]
        return known, warnings

    @staticmethod
    def validate_options(options_data: Dict[str, Any]) -> List[str]:
        """
        Validate option data and return list of warnings.

        Args:
            options_data: Raw option data to validate

        Returns:
            List of warning messages for unknown keys

        Raises:
            ConfigurationValidationError: If validation fails with errors
        """
        known, warnings = OptionsValidator.split_known(options_data)
        OptionsValidator.build_options(known)
        return warnings

    @staticmethod
    def build_options(options_data: Dict[str, Any]) -> StoreOptions:
        """
        Build StoreOptions, translating pydantic errors.

        Raises:
            ConfigurationValidationError: If any option is invalid
        """
        try:
            return StoreOptions(**options_data)
        except ValidationError as e:
            errors = [
                {
                    'loc': list(error['loc']),
                    'msg': error['msg'],
                    'type': error['type']
                }
                for error in e.errors()
            ]
            raise ConfigurationValidationError(
                "Store options validation failed",
                errors
            ) from e

    @staticmethod
    def validate_environment_variables(prefix: str = "HOTPROPS_") -> List[str]:
        """
        Validate environment variables and return warnings for unknown variables.

        Args:
            prefix: Environment variable prefix to check

        Returns:
            List of warning messages for invalid environment variables
        """
        warnings = []
        valid_keys = set(StoreOptions.model_fields)

        prefix_upper = prefix.upper()
        for key in os.environ:
            if key.startswith(prefix_upper):
                option_key = key[len(prefix_upper):].lower()
                if option_key not in valid_keys:
                    warnings.append(f"Unknown environment variable: {key}")

        return warnings
