"""
Include/exclude path filtering.

The same matcher decides which diff entries are staged and which cached
entries survive validation, so a path cached under older patterns is
dropped once the current patterns stop accepting it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class PathMatcher:
    """Compiled include/exclude pattern pair.

    Patterns use search semantics: a pattern matches when it occurs
    anywhere in the path, so anchor with ``^``/``$`` when needed.
    An absent exclude pattern excludes nothing.
    """

    include: re.Pattern[str]
    exclude: Optional[re.Pattern[str]] = None

    @classmethod
    def compile(cls, include: str, exclude: Optional[str] = None) -> PathMatcher:
        """Compile pattern strings into a matcher.

        Args:
            include: Regular expression a path must match.
            exclude: Regular expression a path must not match.

        Returns:
            PathMatcher for the pair.

        Raises:
            ConfigurationError: If either pattern is not a valid regex.
        """
        try:
            return cls(
                include=re.compile(include),
                exclude=re.compile(exclude) if exclude else None,
            )
        except re.error as exc:
            raise ConfigurationError(f"Invalid path pattern: {exc}") from exc

    def matches(self, path: str) -> bool:
        if not self.include.search(path):
            return False
        return self.exclude is None or not self.exclude.search(path)

    def filter(self, paths: Iterable[str]) -> list[str]:
        """Keep matching paths, preserving their order."""
        return [p for p in paths if self.matches(p)]

    def invalid(self, paths: Iterable[str]) -> list[str]:
        """Return the paths the current patterns reject, in order."""
        return [p for p in paths if not self.matches(p)]

    def describe(self) -> str:
        text = f"include {self.include.pattern!r}"
        if self.exclude is not None:
            text += f", exclude {self.exclude.pattern!r}"
        return text


def filter_paths(
    paths: Iterable[str], include: str, exclude: Optional[str] = None
) -> list[str]:
    """One-shot filter over raw pattern strings."""
    return PathMatcher.compile(include, exclude).filter(paths)
