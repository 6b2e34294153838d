"""Pattern matching for class and method name filtering.

Syntax:
    *    zero or more of any character (including ':' and '.')
    all other characters match literally, case-sensitive

Matching is anchored at both ends: "Test" matches "Test", never "TestObject".
A leading '!' is negation syntax, not part of the pattern: it is stripped
before compiling so that exclude entries can be matched as written.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

NEGATION = "!"
WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """Compiled name pattern.

    Attributes:
        original: Original pattern string (negation stripped)
        regex: Compiled regex for matching
    """

    original: str
    regex: re.Pattern[str]

    def match(self, candidate: str) -> bool:
        """Check if candidate matches pattern.

        Raises:
            TypeError: If candidate is None
        """
        if candidate is None:
            raise TypeError("candidate must not be None")
        return self.regex.fullmatch(candidate) is not None

    def __str__(self) -> str:
        """Return original pattern string."""
        return self.original

    def __repr__(self) -> str:
        """Return repr with original pattern."""
        return f"CompiledPattern({self.original!r})"


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile glob pattern to anchored regex.

    Args:
        pattern: Pattern string, optionally with leading '!'

    Returns:
        CompiledPattern with original and compiled regex

    Raises:
        ValueError: If pattern is empty
    """
    body = pattern.removeprefix(NEGATION)
    if not body:
        raise ValueError("pattern must not be empty")

    regex = ".*".join(re.escape(part) for part in body.split(WILDCARD))
    return CompiledPattern(original=body, regex=re.compile(regex))


def matches(candidate: str, patterns: Iterable[str]) -> bool:
    """Check if candidate matches any of the patterns.

    Args:
        candidate: "ClassName" or "ClassName:method_name"
        patterns: Raw patterns, '!' prefix ignored

    Returns:
        True if candidate matches at least one pattern (empty patterns = False)
    """
    return any(compile_pattern(p).match(candidate) for p in patterns)
