"""
Core Domain Models

Defines the core data structures and value objects used throughout hotprops.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, Union


class SupportedType(Enum):
    """Closed set of types a property value can be converted to."""
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATE = "date"


class WatchBackend(Enum):
    """File change detection strategy."""
    POLLING = "polling"
    NATIVE = "native"


ConvertedValue = Union[str, int, float, Decimal, datetime]

# A binding target receives the converted value, or None when the key is absent
BindingTarget = Callable[[Optional[Any]], None]


@dataclass(frozen=True)
class Property:
    """A single key/value configuration entry."""
    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


@dataclass(frozen=True)
class BindingEntry:
    """Association between a property key and a typed, writable target."""
    property_key: str
    target_type: SupportedType
    target: BindingTarget


@dataclass
class WatchRegistration:
    """Hot-reload registration of a single properties file."""
    path: str
    active: bool = True


@dataclass(frozen=True)
class FileSignature:
    """Modification time and size of a file, used to de-duplicate change events."""
    mtime_ns: int
    size: int

    @classmethod
    def of(cls, path: str) -> Optional['FileSignature']:
        """Signature of ``path``, or None when it cannot be stat'ed."""
        try:
            stat = os.stat(path)
        except OSError:
            return None
        return cls(stat.st_mtime_ns, stat.st_size)
