"""
Core property store with live reloading and typed bindings.
"""

import logging
import re
import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ...domain.models import (
    BindingEntry,
    BindingTarget,
    ConvertedValue,
    FileSignature,
    Property,
    SupportedType,
    WatchRegistration,
)
from ...infrastructure.exceptions import ConversionError, LoadError, WatchError
from ..configuration.models import StoreOptions
from .bindings import BindingRegistry, attribute_setter
from .conversion import TypeConverter
from .paths import PathResolver
from .properties_format import read_properties_file
from .watchers import WatchSupervisor, WatcherFactory

logger = logging.getLogger(__name__)

ReloadCallback = Callable[[str], None]
ErrorCallback = Callable[[str, Exception], None]


class PropertyStore:
    """
    Centralized key/value store fed by properties files.

    Loading merges a file's entries into the store (last loaded wins, keys
    only present in earlier files are kept) and then re-applies every
    registered binding. With ``hot_reload`` enabled each loaded file gets a
    watcher that repeats the load + re-apply sequence when the file changes.

    A single reentrant lock guards the entries, the bindings and the watch
    table: readers never observe a half-merged file and each file's
    load + re-apply pair is atomic with respect to other loads and to
    ``reset``.
    """

    def __init__(
        self,
        options: Optional[StoreOptions] = None,
        watcher_factory: Optional[WatcherFactory] = None,
        variables: Optional[Mapping[str, str]] = None
    ):
        self._lock = threading.RLock()
        self._options = options or StoreOptions()
        self._entries: Dict[str, str] = {}
        self._variables = dict(variables or {})
        self._reload_callbacks: List[ReloadCallback] = []
        self._error_callbacks: List[ErrorCallback] = []

        self._converter = TypeConverter(lambda: self._options)
        self._bindings = BindingRegistry(self.get, self._converter, self._lock)
        self._supervisor = WatchSupervisor(self._reload_from_watcher, self._lock, watcher_factory)

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------
    @property
    def options(self) -> StoreOptions:
        """Current options; changes apply to subsequent loads and conversions."""
        return self._options

    @options.setter
    def options(self, options: StoreOptions) -> None:
        self.set_options(options)

    def get_options(self) -> StoreOptions:
        return self._options

    def set_options(self, options: StoreOptions) -> None:
        """Replace the store options."""
        if not isinstance(options, StoreOptions):
            raise TypeError("options must be a StoreOptions instance")
        with self._lock:
            self._options = options

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, path: str) -> int:
        """
        Parse ``path`` and merge its entries into the store.

        The file is parsed completely before anything is merged, so a file
        failing to load leaves the store untouched.

        Returns:
            Number of entries read from the file

        Raises:
            LoadError: If the file is missing, unreadable or malformed
        """
        loaded = read_properties_file(path, self._options.encoding)
        with self._lock:
            self._entries.update(loaded)
            logger.info(f"Properties updated from {path} ({len(loaded)} entries)")
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Current entries: {self.to_display_text()}")
        return len(loaded)

    def load_properties(self, *locations: str, variables: Optional[Mapping[str, str]] = None) -> List[str]:
        """
        Load properties from the provided locations and merge them into the store.

        Locations may contain ``{name}`` placeholders resolved from
        ``variables``, the store variables and then the environment. A
        directory location loads every file matching ``properties_glob``.
        After each file the bindings are re-applied. When ``hot_reload`` is
        enabled a watcher is started for each file; call ``close`` or
        ``stop_watching`` before shutting down.

        A file whose watch cannot be started stays loaded, only its hot
        reload is lost. Each such failure is logged and passed to the error
        callbacks, the remaining files are still loaded, and a single
        ``WatchError`` naming every unwatched file is raised at the end.

        Returns:
            The file paths that were loaded

        Raises:
            PathResolutionError: If a location cannot be resolved
            LoadError: If a file cannot be loaded
            ConversionError: If a bound value cannot be converted
            WatchError: After every file is loaded, if monitoring of any of
                them could not be started
        """
        resolver = PathResolver({**self._variables, **(variables or {})}, self._options.properties_glob)
        paths = resolver.resolve(locations)
        watch_failures: List[Tuple[str, WatchError]] = []

        for path in paths:
            baseline = FileSignature.of(path)
            with self._lock:
                self.load(path)
                self._bindings.reapply()
            if self._options.hot_reload:
                try:
                    self._supervisor.watch(path, self._options, baseline)
                except WatchError as e:
                    logger.error(f"Hot reload disabled for properties file {path}: {e}")
                    self._notify_error(path, e)
                    watch_failures.append((path, e))

        if watch_failures:
            failed_paths = [path for path, _ in watch_failures]
            raise WatchError(
                f"Can't start monitoring properties: {', '.join(failed_paths)}",
                context={"failed_paths": failed_paths, "loaded_paths": paths},
                cause=watch_failures[0][1]
            )
        return paths

    def _reload_from_watcher(self, path: str) -> None:
        """Reload a watched file; runs on a watcher thread under the store lock."""
        try:
            self.load(path)
            self._bindings.reapply()
        except (LoadError, ConversionError) as e:
            logger.error(f"Failed to reload properties file {path}: {e}")
            self._notify_error(path, e)
            return

        for callback in list(self._reload_callbacks):
            try:
                callback(path)
            except Exception as e:
                logger.error(f"Error in reload callback: {e}")

    def _notify_error(self, path: str, error: Exception) -> None:
        for callback in list(self._error_callbacks):
            try:
                callback(path, error)
            except Exception as e:
                logger.error(f"Error in reload error callback: {e}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, key: str) -> Optional[str]:
        """Get a single property value, or None when absent."""
        with self._lock:
            return self._entries.get(key)

    get_property = get

    def get_all(self) -> List[Tuple[str, str]]:
        """All entries as (key, value) pairs."""
        with self._lock:
            return list(self._entries.items())

    def get_matching(self, key_pattern: str) -> List[Tuple[str, str]]:
        """
        Entries whose keys fully match the ``key_pattern`` regular expression.
        """
        compiled = re.compile(key_pattern)
        with self._lock:
            return [(key, value) for key, value in self._entries.items() if compiled.fullmatch(key)]

    def get_properties(self, key_pattern: Optional[str] = None) -> List[Property]:
        """Entries as Property objects, optionally filtered by a full-match key pattern."""
        pairs = self.get_all() if key_pattern is None else self.get_matching(key_pattern)
        return [Property(key, value) for key, value in pairs]

    def get_typed(self, key: str, target_type: SupportedType) -> Optional[ConvertedValue]:
        """
        Get a property converted to ``target_type``.

        Returns:
            The converted value, or None when the key is absent

        Raises:
            ConversionError: If the value cannot be converted
        """
        value = self.get(key)
        if value is None:
            return None
        return self._converter.convert(value, target_type, key=key)

    def get_integer(self, key: str) -> Optional[int]:
        return self.get_typed(key, SupportedType.INTEGER)

    def get_long(self, key: str) -> Optional[int]:
        return self.get_typed(key, SupportedType.LONG)

    def get_float(self, key: str) -> Optional[float]:
        return self.get_typed(key, SupportedType.FLOAT)

    def get_double(self, key: str) -> Optional[float]:
        return self.get_typed(key, SupportedType.DOUBLE)

    def get_decimal(self, key: str) -> Optional[Decimal]:
        return self.get_typed(key, SupportedType.DECIMAL)

    def get_date(self, key: str) -> Optional[datetime]:
        return self.get_typed(key, SupportedType.DATE)

    def to_display_text(self, options: Optional[StoreOptions] = None) -> str:
        """
        Render the entries as ``{k1=v1, k2=v2}``.

        Values of keys fully matching the obfuscation pattern are replaced by
        the placeholder; stored values are left untouched.
        """
        options = options or self._options
        with self._lock:
            rendered = [
                f"{key}={options.obfuscated_property_placeholder if options.is_obfuscated(key) else value}"
                for key, value in self._entries.items()
            ]
        return "{" + ", ".join(rendered) + "}"

    to_text = to_display_text

    def __str__(self) -> str:
        return self.to_display_text()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------
    def register(self, key: str, target_type: SupportedType, target: BindingTarget) -> BindingEntry:
        """
        Bind ``key`` to a setter callable receiving the converted value.

        Bindings registered before loading are applied by the next load.
        """
        return self._bindings.register(key, target_type, target)

    def bind_attribute(self, key: str, target_type: SupportedType, obj: Any, attribute: str) -> BindingEntry:
        """Bind ``key`` to ``obj.<attribute>``."""
        return self._bindings.register(key, target_type, attribute_setter(obj, attribute))

    def reapply(self) -> int:
        """Re-apply every binding with the current values and options."""
        return self._bindings.reapply()

    @property
    def bindings(self) -> BindingRegistry:
        return self._bindings

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def add_reload_callback(self, callback: ReloadCallback) -> None:
        """Add a callback invoked with the path after each successful watcher reload."""
        self._reload_callbacks.append(callback)

    def remove_reload_callback(self, callback: ReloadCallback) -> None:
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)

    def add_error_callback(self, callback: ErrorCallback) -> None:
        """Add a callback invoked with the path and error when a watch or a watcher reload fails."""
        self._error_callbacks.append(callback)

    def remove_error_callback(self, callback: ErrorCallback) -> None:
        if callback in self._error_callbacks:
            self._error_callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def watched_paths(self) -> List[str]:
        return [registration.path for registration in self._supervisor.registrations()]

    def watch_registrations(self) -> List[WatchRegistration]:
        return self._supervisor.registrations()

    def is_watching(self, path: str) -> bool:
        return self._supervisor.is_watching(path)

    def stop_watching(self) -> None:
        """Stop all threads watching for file changes."""
        self._supervisor.stop_all()

    def reset(self) -> None:
        """Stop watching and return the store to its empty initial state."""
        self._supervisor.stop_all()
        with self._lock:
            self._entries.clear()
            self._bindings.clear()
        logger.info("Property store reset")

    def close(self) -> None:
        """Release watcher resources; entries stay readable."""
        self._supervisor.stop_all()

    def __enter__(self) -> 'PropertyStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        """Cleanup when the store object is destroyed."""
        supervisor = getattr(self, '_supervisor', None)
        if supervisor is not None:
            supervisor.stop_all()
