"""
hotprops - centralized, live-reloading properties store

Loads classic ``.properties`` files into a single store, converts values to
typed results, reloads files when they change and keeps registered bindings
in sync.
"""

__version__ = "1.0.0"
__author__ = "hotprops Development Team"

from .domain.models import SupportedType, WatchBackend
from .framework import (
    StoreOptions,
    PropertyStore,
    StoreBuilder,
    load_options,
    load_store,
    load_store_with_hot_reload,
)
from .infrastructure.exceptions import (
    HotPropsException,
    LoadError,
    ConversionError,
    WatchError,
)

__all__ = [
    "SupportedType",
    "WatchBackend",
    "StoreOptions",
    "PropertyStore",
    "StoreBuilder",
    "load_options",
    "load_store",
    "load_store_with_hot_reload",
    "HotPropsException",
    "LoadError",
    "ConversionError",
    "WatchError",
]
