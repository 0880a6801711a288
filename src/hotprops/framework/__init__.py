"""
Framework Layer - Property store services

This layer provides the property store, its option management and the
builder used to assemble loaded stores.
"""

from .configuration import StoreOptions, OptionsLoader, load_options
from .store import PropertyStore, BindingRegistry, WatchSupervisor, TypeConverter, PathResolver
from .builder import StoreBuilder
from .utils import (
    load_store,
    load_store_with_hot_reload,
    load_store_from_options_file,
    create_store_builder,
)

__all__ = [
    "StoreOptions",
    "OptionsLoader",
    "load_options",
    "PropertyStore",
    "BindingRegistry",
    "WatchSupervisor",
    "TypeConverter",
    "PathResolver",
    "StoreBuilder",
    "load_store",
    "load_store_with_hot_reload",
    "load_store_from_options_file",
    "create_store_builder",
]
