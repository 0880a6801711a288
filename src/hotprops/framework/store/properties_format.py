"""
Reader and writer for the legacy ``.properties`` text format.

The grammar follows the classic line-oriented format so that existing
deployment files can be used unchanged:

- natural lines end with ``\\n``, ``\\r`` or ``\\r\\n``; leading blanks
  (space, tab, form feed) are ignored and blank lines are skipped
- a line whose first non-blank character is ``#`` or ``!`` is a comment
- an odd number of trailing backslashes joins the next natural line, whose
  leading blanks are dropped
- the key ends at the first unescaped ``=``, ``:`` or blank; blanks and at
  most one ``=``/``:`` are then skipped before the value
- escapes: ``\\t \\n \\r \\f \\uXXXX``; any other ``\\c`` stands for ``c``
"""

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ...infrastructure.exceptions import (
    MalformedEntryError,
    PropertiesNotFoundError,
    PropertiesUnreadableError,
)

DEFAULT_ENCODING = "iso-8859-1"

_BLANKS = ' \t\f'
_SEPARATORS = '=:'
_NATURAL_LINE_BREAK = re.compile(r'\r\n|\r|\n')
_HEX_DIGITS = set('0123456789abcdefABCDEF')
_LOAD_ESCAPES = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}
_STORE_ESCAPES = {'\t': '\\t', '\n': '\\n', '\r': '\\r', '\f': '\\f'}

PropertyEntries = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def _has_continuation(segment: str) -> bool:
    trailing = len(segment) - len(segment.rstrip('\\'))
    return trailing % 2 == 1


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line number, logical line) pairs with comments and blanks removed."""
    natural_lines = _NATURAL_LINE_BREAK.split(text)
    index = 0
    while index < len(natural_lines):
        segment = natural_lines[index].lstrip(_BLANKS)
        line_number = index + 1
        index += 1
        if not segment or segment[0] in '#!':
            continue

        logical = ''
        while _has_continuation(segment):
            logical += segment[:-1]
            if index >= len(natural_lines):
                # continuation at end of input is dropped
                segment = ''
                break
            segment = natural_lines[index].lstrip(_BLANKS)
            index += 1
        yield line_number, logical + segment


def _unescape(text: str) -> str:
    chars: List[str] = []
    position = 0
    while position < len(text):
        char = text[position]
        position += 1
        if char != '\\':
            chars.append(char)
            continue
        if position >= len(text):
            break
        char = text[position]
        position += 1
        if char == 'u':
            digits = text[position:position + 4]
            if len(digits) < 4 or not set(digits) <= _HEX_DIGITS:
                raise ValueError("Malformed \\uxxxx encoding")
            chars.append(chr(int(digits, 16)))
            position += 4
        else:
            chars.append(_LOAD_ESCAPES.get(char, char))

    result = ''.join(chars)
    try:
        # \uXXXX pairs may encode surrogates of a single astral character
        return result.encode('utf-16', 'surrogatepass').decode('utf-16')
    except UnicodeDecodeError:
        return result


def _split_entry(line: str) -> Tuple[str, str]:
    key_end = 0
    value_start = len(line)
    has_separator = False
    preceding_backslash = False

    while key_end < len(line):
        char = line[key_end]
        if char in _SEPARATORS and not preceding_backslash:
            value_start = key_end + 1
            has_separator = True
            break
        if char in _BLANKS and not preceding_backslash:
            value_start = key_end + 1
            break
        preceding_backslash = char == '\\' and not preceding_backslash
        key_end += 1

    while value_start < len(line):
        char = line[value_start]
        if char not in _BLANKS:
            if not has_separator and char in _SEPARATORS:
                has_separator = True
            else:
                break
        value_start += 1

    return line[:key_end], line[value_start:]


def loads(text: str, source: Optional[str] = None) -> Dict[str, str]:
    """
    Parse properties text into an ordered dictionary.

    Args:
        text: Properties file content
        source: Optional file path, only used in error reports

    Returns:
        Mapping of keys to values; a repeated key keeps its last value

    Raises:
        MalformedEntryError: On an entry with a malformed unicode escape
    """
    entries: Dict[str, str] = {}
    for line_number, line in _logical_lines(text):
        raw_key, raw_value = _split_entry(line)
        try:
            key = _unescape(raw_key)
            value = _unescape(raw_value)
        except ValueError as e:
            where = f"{source}:{line_number}" if source else f"line {line_number}"
            raise MalformedEntryError(
                f"Malformed properties entry at {where}: {e}",
                file_path=source,
                line_number=line_number,
                cause=e
            ) from e
        entries[key] = value
    return entries


def read_properties_file(file_path: Union[str, Path], encoding: str = DEFAULT_ENCODING) -> Dict[str, str]:
    """
    Read and parse a properties file.

    Raises:
        PropertiesNotFoundError: If the file does not exist
        PropertiesUnreadableError: If the file cannot be read or decoded
        MalformedEntryError: If an entry cannot be parsed
    """
    path = Path(file_path)
    if not path.exists():
        raise PropertiesNotFoundError(
            f"Properties file not found: {path}",
            file_path=str(path)
        )

    try:
        with open(path, 'r', encoding=encoding, newline='') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise PropertiesUnreadableError(
            f"Error reading properties file: {path}",
            file_path=str(path),
            context={"error": str(e)},
            cause=e
        ) from e

    return loads(text, source=str(path))


def _escape(text: str, is_key: bool) -> str:
    chars: List[str] = []
    for position, char in enumerate(text):
        code = ord(char)
        if char == ' ':
            chars.append('\\ ' if is_key or position == 0 else ' ')
        elif char in _STORE_ESCAPES:
            chars.append(_STORE_ESCAPES[char])
        elif char in '=:#!\\':
            chars.append('\\' + char)
        elif code < 0x20 or code > 0x7e:
            if code > 0xffff:
                encoded = char.encode('utf-16-be')
                high, low = encoded[:2], encoded[2:]
                chars.append(f"\\u{high.hex().upper()}\\u{low.hex().upper()}")
            else:
                chars.append(f"\\u{code:04X}")
        else:
            chars.append(char)
    return ''.join(chars)


def _iter_entries(entries: PropertyEntries) -> Iterable[Tuple[str, str]]:
    if isinstance(entries, Mapping):
        return entries.items()
    return entries


def dumps(entries: PropertyEntries, comments: Optional[str] = None) -> str:
    """
    Render entries in properties format.

    Output is pure ASCII: characters outside printable ASCII are written as
    ``\\uXXXX`` escapes. Each line of ``comments`` becomes a ``#`` comment.
    """
    lines: List[str] = []
    if comments:
        lines.extend('#' + comment for comment in comments.splitlines())
    for key, value in _iter_entries(entries):
        lines.append(f"{_escape(str(key), True)}={_escape(str(value), False)}")
    return '\n'.join(lines) + '\n'


def dump(entries: PropertyEntries, file_path: Union[str, Path], comments: Optional[str] = None) -> None:
    """Write entries to ``file_path`` in properties format."""
    with open(file_path, 'w', encoding='ascii', newline='\n') as f:
        f.write(dumps(entries, comments))
