"""
Domain Layer - Core domain models and interfaces

This layer contains the value objects and interfaces that define the
properties store domain model.
"""

from .models import (
    SupportedType,
    WatchBackend,
    Property,
    BindingEntry,
    BindingTarget,
    ConvertedValue,
    WatchRegistration,
    FileSignature,
)
from .interfaces import FileWatcher, ChangeCallback

__all__ = [
    "SupportedType",
    "WatchBackend",
    "Property",
    "BindingEntry",
    "BindingTarget",
    "ConvertedValue",
    "WatchRegistration",
    "FileSignature",
    "FileWatcher",
    "ChangeCallback",
]
