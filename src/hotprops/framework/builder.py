"""
Builder for creating loaded PropertyStore instances.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union
from pathlib import Path

from ..domain.models import BindingTarget, SupportedType
from ..infrastructure.exceptions import WatchError
from .configuration import (
    DictOptionsSource,
    EnvironmentOptionsSource,
    OptionsLoader,
    OptionsSource,
    StoreOptions,
    YAMLOptionsSource,
)
from .store import PropertyStore
from .store.bindings import attribute_setter
from .store.property_store import ErrorCallback
from .store.watchers import WatcherFactory

logger = logging.getLogger(__name__)


class StoreBuilder:
    """
    Builder for creating PropertyStore instances.

    Collects option sources, properties locations and bindings, then builds a
    store with every binding registered before the first load.
    """

    def __init__(self):
        self._sources: List[OptionsSource] = []
        self._overrides: Dict[str, Any] = {}
        self._locations: List[str] = []
        self._variables: Dict[str, str] = {}
        self._bindings: List[Tuple[str, SupportedType, BindingTarget]] = []
        self._watcher_factory: Optional[WatcherFactory] = None
        self._error_callbacks: List[ErrorCallback] = []

    def add_yaml_source(self, path: Union[str, Path], priority: int = 100, section: Optional[str] = "hotprops") -> 'StoreBuilder':
        """
        Add a YAML options source.

        Args:
            path: Path to the YAML options file
            priority: Priority of this source (higher = more important)
            section: Mapping of the document holding the options
        """
        self._sources.append(YAMLOptionsSource(path, priority, section))
        return self

    def add_environment_source(self, prefix: str = "HOTPROPS_", priority: int = 200) -> 'StoreBuilder':
        """
        Add environment variable options source.

        Args:
            prefix: Environment variable prefix (default: HOTPROPS_)
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(EnvironmentOptionsSource(prefix, priority))
        return self

    def add_source(self, source: OptionsSource) -> 'StoreBuilder':
        """Add a custom options source."""
        self._sources.append(source)
        return self

    def with_options(self, **options: Any) -> 'StoreBuilder':
        """Set explicit option values, overriding every source."""
        self._overrides.update(options)
        return self

    def enable_hot_reload(self, enable: bool = True) -> 'StoreBuilder':
        """
        Enable or disable hot-reloading of properties files.

        Args:
            enable: Whether to enable hot-reloading
        """
        return self.with_options(hot_reload=enable)

    def add_location(self, *locations: str) -> 'StoreBuilder':
        """Add properties files or directories to load."""
        self._locations.extend(locations)
        return self

    def with_variables(self, **variables: str) -> 'StoreBuilder':
        """Add values for ``{name}`` placeholders in locations."""
        self._variables.update(variables)
        return self

    def bind(self, key: str, target_type: SupportedType, target: BindingTarget) -> 'StoreBuilder':
        """Register a binding with a setter callable."""
        self._bindings.append((key, target_type, target))
        return self

    def bind_attribute(self, key: str, target_type: SupportedType, obj: Any, attribute: str) -> 'StoreBuilder':
        """Register a binding writing to ``obj.<attribute>``."""
        return self.bind(key, target_type, attribute_setter(obj, attribute))

    def with_watcher_factory(self, factory: WatcherFactory) -> 'StoreBuilder':
        """Use a custom file watcher strategy."""
        self._watcher_factory = factory
        return self

    def on_error(self, callback: ErrorCallback) -> 'StoreBuilder':
        """Register an error callback on the store before anything is loaded."""
        self._error_callbacks.append(callback)
        return self

    def add_defaults(self) -> 'StoreBuilder':
        """Add default options sources (environment variables with HOTPROPS_ prefix)."""
        return self.add_environment_source("HOTPROPS_", 200)

    def build_options(self) -> StoreOptions:
        """Build validated options from the added sources."""
        if not self._sources:
            # Add default environment source if no sources specified
            self.add_defaults()

        loader = OptionsLoader(self._sources)
        if self._overrides:
            loader.add_source(DictOptionsSource(self._overrides, 1000))
        return loader.load()

    def build(self) -> PropertyStore:
        """
        Build the store, register the bindings and load every location.

        Error callbacks are registered before loading, so they also receive
        watch setup failures. A file that could not be watched stays loaded
        and the store is returned without hot reload for that file; any other
        failure closes the store and is re-raised.

        Returns:
            PropertyStore with all locations loaded
        """
        store = PropertyStore(self.build_options(), self._watcher_factory, self._variables)
        for key, target_type, target in self._bindings:
            store.register(key, target_type, target)
        for callback in self._error_callbacks:
            store.add_error_callback(callback)

        if self._locations:
            try:
                store.load_properties(*self._locations)
            except WatchError as e:
                logger.warning(f"Store built without hot reload for some files: {e}")
            except Exception:
                store.close()
                raise
        return store
