"""
Show-name exclusion patterns

Each configured pattern is compiled once into either a case-insensitive
regular expression or, when it is not a valid expression, a literal
case-insensitive substring.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import re


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    source: str
    regex: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


@dataclass(frozen=True, slots=True)
class LiteralSubstring:
    source: str
    needle: str

    def matches(self, text: str) -> bool:
        return self.needle in text.casefold()


ExclusionPattern = CompiledPattern | LiteralSubstring


def compile_exclusion_pattern(pattern: str) -> ExclusionPattern:
    """Build the matcher for one pattern; invalid regexes degrade to substring matching"""
    try:
        return CompiledPattern(source=pattern, regex=re.compile(pattern, re.IGNORECASE))
    except re.error as exc:
        logger.debug("Pattern %r is not a valid regex (%s), using substring match", pattern, exc)
        return LiteralSubstring(source=pattern, needle=pattern.casefold())


def matches_any(patterns: tuple[ExclusionPattern, ...], text: str) -> bool:
    return any(pattern.matches(text) for pattern in patterns)


__all__ = [
    "CompiledPattern",
    "LiteralSubstring",
    "ExclusionPattern",
    "compile_exclusion_pattern",
    "matches_any",
]
