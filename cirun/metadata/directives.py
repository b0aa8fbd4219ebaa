"""Commit message directives (`[skip ci]`, `[skip cd]`).

A directive is a bracketed token embedded in the last commit message. The
brackets are part of the token, so words like "skipping" or "cd-skip" in prose
never count.
"""

from __future__ import annotations

import re

__all__ = [
    "CI_SKIP_PATTERN",
    "CD_SKIP_PATTERN",
    "detect",
    "compile_pattern",
    "pattern_flags",
]

CI_SKIP_PATTERN = re.compile(r"\[(?:skip\s+ci|ci\s+skip)\]", re.IGNORECASE)
CD_SKIP_PATTERN = re.compile(r"\[(?:skip\s+cd|cd\s+skip)\]", re.IGNORECASE)

# Serialized flag letters, shared with the metadata artifact format.
_FLAG_LETTERS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def detect(message: str, pattern: re.Pattern[str] = CI_SKIP_PATTERN) -> bool:
    """True when the pattern occurs anywhere in the commit message."""
    return pattern.search(message) is not None


def compile_pattern(source: str, flags: str = "") -> re.Pattern[str]:
    """Compile a serialized `{source, flags}` pair.

    Unknown flag letters (e.g. `g`, `u`) have no Python counterpart and are
    ignored. Raises re.error for an invalid source.
    """
    compiled_flags = re.RegexFlag(0)
    for letter in flags:
        compiled_flags |= _FLAG_LETTERS.get(letter, re.RegexFlag(0))
    return re.compile(source, compiled_flags)


def pattern_flags(pattern: re.Pattern[str]) -> str:
    """Inverse of compile_pattern's flag handling."""
    return "".join(
        letter for letter, flag in _FLAG_LETTERS.items() if pattern.flags & flag
    )
