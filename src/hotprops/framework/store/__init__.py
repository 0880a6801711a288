"""
Property Store

Concurrent key/value store fed by properties files, with typed conversion,
per-file hot reloading and bindings re-applied on every load.
"""

from .properties_format import loads, dumps, dump, read_properties_file
from .conversion import TypeConverter, parse_date
from .paths import PathResolver
from .bindings import BindingRegistry, attribute_setter
from .watchers import (
    PollingFileWatcher,
    NativeFileWatcher,
    WatchSupervisor,
    create_watcher,
)
from .property_store import PropertyStore

__all__ = [
    'loads',
    'dumps',
    'dump',
    'read_properties_file',
    'TypeConverter',
    'parse_date',
    'PathResolver',
    'BindingRegistry',
    'attribute_setter',
    'PollingFileWatcher',
    'NativeFileWatcher',
    'WatchSupervisor',
    'create_watcher',
    'PropertyStore',
]
