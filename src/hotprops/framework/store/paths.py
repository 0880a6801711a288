"""
Resolution of properties locations into concrete file paths.
"""

import os
import re
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ...infrastructure.exceptions import PathResolutionError

_VARIABLE_PATTERN = re.compile(r'\{([^{}]+)\}')


class PathResolver:
    """
    Turns raw location strings into the list of files to load.

    ``{name}`` placeholders are replaced from ``variables`` first and the
    process environment second. A location naming a directory expands,
    non-recursively, to every file in it matching ``glob_pattern``.
    """

    def __init__(self, variables: Optional[Mapping[str, str]] = None, glob_pattern: str = "*.properties"):
        self.variables = dict(variables or {})
        self.glob_pattern = glob_pattern

    def interpolate(self, location: str) -> str:
        """Replace ``{name}`` placeholders in ``location``."""
        def substitute(match: 're.Match[str]') -> str:
            name = match.group(1)
            if name in self.variables:
                return str(self.variables[name])
            if name in os.environ:
                return os.environ[name]
            raise PathResolutionError(
                f"Unknown variable {{{name}}} in properties location: {location}",
                location=location,
                variable=name
            )

        return _VARIABLE_PATTERN.sub(substitute, location)

    def expand(self, location: str) -> List[str]:
        """Expand a single interpolated location to file paths."""
        path = Path(location)
        if not path.is_dir():
            return [str(path)]

        try:
            matches = sorted(p for p in path.glob(self.glob_pattern) if p.is_file())
        except OSError as e:
            raise PathResolutionError(
                f"Can't list properties directory: {location}",
                location=location,
                cause=e
            ) from e
        return [str(match) for match in matches]

    def resolve(self, locations: Iterable[str]) -> List[str]:
        """
        Resolve raw locations to concrete file paths, preserving order.

        Raises:
            PathResolutionError: On an unknown placeholder or unreadable directory
        """
        resolved: List[str] = []
        for location in locations:
            resolved.extend(self.expand(self.interpolate(location)))
        return resolved
