"""Ordered path and filename-filter collections used to drive discovery."""

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Pattern, Union

PathLike = Union[str, "os.PathLike[str]"]
FilterLike = Union[str, Pattern[str]]


class ResolutionPaths:
    """Ordered directories scanned for configuration modules.

    Entries are kept exactly as given; duplicates are allowed and existence
    is only checked when a scan happens.
    """

    def __init__(self, paths: Iterable[PathLike] = ()):
        self._paths: List[PathLike] = []
        self.extend(paths)

    def add(self, path: PathLike) -> None:
        self._paths.append(path)

    def extend(self, paths: Iterable[PathLike]) -> None:
        for path in paths:
            self.add(path)

    def remove(self, path: PathLike) -> None:
        target = os.fspath(path)
        self._paths = [p for p in self._paths if os.fspath(p) != target]

    def clear(self) -> None:
        self._paths = []

    def to_list(self) -> List[PathLike]:
        return list(self._paths)

    def __iter__(self) -> Iterator[PathLike]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)


class ConfigFileFilters:
    """Ordered filename patterns; a file is selected if any pattern matches.

    Patterns are applied with ``search`` to the bare filename, never to the
    full path. Removal compares the pattern source text, so a freshly
    compiled pattern with the same text removes an earlier one.
    """

    def __init__(self, filters: Iterable[FilterLike] = ()):
        self._filters: List[Pattern[str]] = []
        self.extend(filters)

    @staticmethod
    def _compile(pattern: FilterLike) -> Pattern[str]:
        if isinstance(pattern, str):
            return re.compile(pattern)
        return pattern

    def add(self, pattern: FilterLike) -> None:
        self._filters.append(self._compile(pattern))

    def extend(self, patterns: Iterable[FilterLike]) -> None:
        for pattern in patterns:
            self.add(pattern)

    def remove(self, pattern: FilterLike) -> None:
        source = pattern if isinstance(pattern, str) else pattern.pattern
        self._filters = [f for f in self._filters if f.pattern != source]

    def clear(self) -> None:
        self._filters = []

    def matches(self, filename: str) -> bool:
        name = Path(filename).name
        return any(f.search(name) for f in self._filters)

    def to_list(self) -> List[Pattern[str]]:
        return list(self._filters)

    def __iter__(self) -> Iterator[Pattern[str]]:
        return iter(list(self._filters))

    def __len__(self) -> int:
        return len(self._filters)


__all__ = ['ResolutionPaths', 'ConfigFileFilters', 'PathLike', 'FilterLike']
