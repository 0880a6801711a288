"""
Conversion of raw property strings into the supported value types.
"""

import locale
import math
import re
import struct
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterator, Optional

from ...domain.models import ConvertedValue, SupportedType
from ...infrastructure.exceptions import BadDateFormatError, NotANumberError
from ..configuration.models import StoreOptions

_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')
_DECIMAL_PATTERN = re.compile(r'[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?')
_FLOAT_PATTERN = re.compile(
    r'[+-]?(NaN|Infinity|(([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?))[fFdD]?'
)

_INT_BOUNDS = {
    SupportedType.INTEGER: (-2 ** 31, 2 ** 31 - 1),
    SupportedType.LONG: (-2 ** 63, 2 ** 63 - 1),
}

# LC_TIME is process wide, so switching it is serialized
_locale_lock = threading.Lock()


def _to_integer(value: str, target_type: SupportedType) -> int:
    if not _INTEGER_PATTERN.fullmatch(value):
        raise NotANumberError(
            f"Not a valid {target_type.name} value: {value!r}",
            value=value,
            target_type=target_type.name
        )
    number = int(value)
    lower, upper = _INT_BOUNDS[target_type]
    if not lower <= number <= upper:
        raise NotANumberError(
            f"Value {value!r} is out of range for {target_type.name}",
            value=value,
            target_type=target_type.name
        )
    return number


def _to_float(value: str, target_type: SupportedType) -> float:
    text = value.strip()
    if not _FLOAT_PATTERN.fullmatch(text):
        raise NotANumberError(
            f"Not a valid {target_type.name} value: {value!r}",
            value=value,
            target_type=target_type.name
        )
    if text[-1] in 'fFdD':
        text = text[:-1]
    number = float(text)
    if target_type is SupportedType.FLOAT and math.isfinite(number):
        try:
            number = struct.unpack('f', struct.pack('f', number))[0]
        except OverflowError as e:
            raise NotANumberError(
                f"Value {value!r} is out of range for FLOAT",
                value=value,
                target_type=target_type.name,
                cause=e
            ) from e
    return number


def _to_decimal(value: str, target_type: SupportedType) -> Decimal:
    if not _DECIMAL_PATTERN.fullmatch(value):
        raise NotANumberError(
            f"Not a valid DECIMAL value: {value!r}",
            value=value,
            target_type=target_type.name
        )
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise NotANumberError(
            f"Not a valid DECIMAL value: {value!r}",
            value=value,
            target_type=target_type.name,
            cause=e
        ) from e


@contextmanager
def _time_locale(name: Optional[str]) -> Iterator[None]:
    if name is None:
        yield
        return

    with _locale_lock:
        previous = locale.setlocale(locale.LC_TIME)
        try:
            locale.setlocale(locale.LC_TIME, name)
        except locale.Error as e:
            raise BadDateFormatError(
                f"Unsupported locale for date parsing: {name}",
                context={"locale": name},
                target_type=SupportedType.DATE.name,
                cause=e
            ) from e
        try:
            yield
        finally:
            locale.setlocale(locale.LC_TIME, previous)


def parse_date(value: str, pattern: str, locale_name: Optional[str] = None) -> datetime:
    """
    Parse ``value`` with a ``strptime`` pattern under the given locale.

    Raises:
        BadDateFormatError: If the text does not match the pattern
    """
    with _time_locale(locale_name):
        try:
            return datetime.strptime(value, pattern)
        except ValueError as e:
            raise BadDateFormatError(
                f"Can't parse date {value!r} with pattern {pattern!r}",
                value=value,
                target_type=SupportedType.DATE.name,
                context={"pattern": pattern, "locale": locale_name},
                cause=e
            ) from e


class TypeConverter:
    """
    Converts raw property strings into typed values.

    Date pattern and locale are read from the options supplier on every
    conversion, so option changes apply to subsequent conversions.
    """

    def __init__(self, options_supplier: Callable[[], StoreOptions]):
        self._options_supplier = options_supplier
        self._converters: Dict[SupportedType, Callable[[str, SupportedType], ConvertedValue]] = {
            SupportedType.STRING: lambda value, _: value,
            SupportedType.INTEGER: _to_integer,
            SupportedType.LONG: _to_integer,
            SupportedType.FLOAT: _to_float,
            SupportedType.DOUBLE: _to_float,
            SupportedType.DECIMAL: _to_decimal,
            SupportedType.DATE: self._to_date,
        }

    def _to_date(self, value: str, target_type: SupportedType) -> datetime:
        options = self._options_supplier()
        return parse_date(value, options.date_pattern, options.locale)

    def convert(self, value: str, target_type: SupportedType, key: Optional[str] = None) -> ConvertedValue:
        """
        Convert a raw value to ``target_type``.

        Args:
            value: Raw property value
            target_type: Requested type
            key: Property key, recorded on conversion errors

        Raises:
            ConversionError: If the value is not valid for the type
        """
        try:
            return self._converters[target_type](value, target_type)
        except (NotANumberError, BadDateFormatError) as e:
            if key is not None and e.key is None:
                e.key = key
                e.context['key'] = key
            raise
