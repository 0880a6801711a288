"""
Typed bindings kept in sync with the property store.
"""

import logging
import threading
from typing import Any, Callable, List, Optional

from ...domain.models import BindingEntry, BindingTarget, SupportedType
from .conversion import TypeConverter

logger = logging.getLogger(__name__)


def attribute_setter(obj: Any, attribute: str) -> BindingTarget:
    """
    Build a binding target that assigns to ``obj.<attribute>``.

    ``obj`` may be an instance, a class or a module.
    """
    def setter(value: Optional[Any]) -> None:
        setattr(obj, attribute, value)

    setter.__qualname__ = f"attribute_setter({getattr(obj, '__name__', type(obj).__name__)}.{attribute})"
    return setter


class BindingRegistry:
    """
    Holds the binding entries of a store and re-applies them on every load.

    The registry shares the store lock, so a ``reapply`` pass is never
    interleaved with a load or a reset.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[str]],
        converter: TypeConverter,
        lock: Optional[threading.RLock] = None
    ):
        self._lookup = lookup
        self._converter = converter
        self._lock = lock or threading.RLock()
        self._entries: List[BindingEntry] = []

    def register(self, key: str, target_type: SupportedType, target: BindingTarget) -> BindingEntry:
        """
        Register a binding between ``key`` and ``target``.

        Args:
            key: Property key to follow
            target_type: Type the value is converted to
            target: Callable receiving the converted value

        Returns:
            The created binding entry
        """
        if not isinstance(target_type, SupportedType):
            target_type = SupportedType(target_type)
        if not callable(target):
            raise TypeError(f"Binding target for {key!r} must be callable")

        entry = BindingEntry(key, target_type, target)
        with self._lock:
            self._entries.append(entry)
        logger.debug(f"Registered {target_type.name} binding for property {key}")
        return entry

    def reapply(self) -> int:
        """
        Convert and write every registered binding.

        Entries are applied in registration order. The first conversion error
        aborts the pass; entries already written in the pass keep their new
        values.

        Returns:
            Number of bindings written

        Raises:
            ConversionError: If a bound value cannot be converted
        """
        with self._lock:
            applied = 0
            for entry in self._entries:
                raw_value = self._lookup(entry.property_key)
                if raw_value is None:
                    value = None
                else:
                    value = self._converter.convert(raw_value, entry.target_type, key=entry.property_key)
                entry.target(value)
                applied += 1
            return applied

    def entries(self) -> List[BindingEntry]:
        """Snapshot of the registered entries."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop every registered binding."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
