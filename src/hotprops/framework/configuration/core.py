"""
Priority-based loading of StoreOptions from multiple sources.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .models import StoreOptions
from .sources import OptionsSource, YAMLOptionsSource, EnvironmentOptionsSource, DictOptionsSource
from .validation import OptionsValidator

logger = logging.getLogger(__name__)


class OptionsLoader:
    """
    Merges option sources in priority order and validates the result.

    Sources with a higher priority override keys of lower priority sources.
    """

    def __init__(self, sources: Optional[List[OptionsSource]] = None):
        self._sources = list(sources or [])

    def add_source(self, source: OptionsSource) -> 'OptionsLoader':
        """Add an option source."""
        self._sources.append(source)
        return self

    @property
    def sources(self) -> List[OptionsSource]:
        return sorted(self._sources, key=lambda s: s.get_priority())

    def merged(self) -> Dict[str, Any]:
        """Load and merge raw option data from all sources."""
        merged_options: Dict[str, Any] = {}

        # Load from sources in priority order (lowest to highest)
        for source in self.sources:
            try:
                merged_options.update(source.load())
            except Exception as e:
                logger.error(f"Failed to load options from source: {type(source).__name__}: {e}")
                raise

        return merged_options

    def load(self) -> StoreOptions:
        """
        Build validated StoreOptions from all sources.

        Unknown keys are logged as warnings and ignored.

        Raises:
            ConfigurationError: If a source cannot be read
            ConfigurationValidationError: If an option value is invalid
        """
        known, warnings = OptionsValidator.split_known(self.merged())
        for warning in warnings:
            logger.warning(warning)
        return OptionsValidator.build_options(known)


def load_options(
    file_path: Optional[Union[str, Path]] = None,
    env_prefix: Optional[str] = "HOTPROPS_",
    section: Optional[str] = "hotprops",
    **overrides: Any
) -> StoreOptions:
    """
    Load store options from an optional YAML file, the environment and overrides.

    Args:
        file_path: YAML file holding the options (priority 100)
        env_prefix: Environment variable prefix (priority 200), None to skip
        section: Mapping of the YAML document holding the options
        **overrides: Explicit option values (priority 300)

    Returns:
        Validated StoreOptions
    """
    loader = OptionsLoader()
    if file_path is not None:
        loader.add_source(YAMLOptionsSource(file_path, 100, section))
    if env_prefix is not None:
        loader.add_source(EnvironmentOptionsSource(env_prefix, 200))
    if overrides:
        loader.add_source(DictOptionsSource(overrides, 300))
    return loader.load()
