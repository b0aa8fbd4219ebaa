"""Extended glob matching for release branch patterns.

Supported syntax (bash extglob plus braces):

    *          any run of characters except `/`
    **         a whole path segment: any run of characters including `/`;
               `a/**/b` also matches `a/b`
    ?          one character except `/`
    [abc]      character class; `[!a-z]` or `[^a-z]` negates; `[[:digit:]]`
    {a,b}      alternation
    ?(p|q)     zero or one occurrence of a pattern
    *(p|q)     zero or more occurrences
    +(p|q)     one or more occurrences
    @(p|q)     exactly one occurrence
    !(p|q)     anything except one of the patterns
    \\x         literal x

A pattern always matches the whole text. Unbalanced groups and brackets are
taken literally, so every string is a valid pattern.

Matching walks the parsed pattern directly, tracking the set of text offsets
each node can end at. That keeps `!(...)` exact (the negated span is tested
on its own, not through a lookahead) at the cost of speed, which is fine for
branch names.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

__all__ = ["Glob", "compile_glob", "glob_match", "is_glob"]

_EXTGLOB_OPS = "?*+@!"
_SPECIAL = frozenset("*?[{(\\!+@")
_SEPARATOR = "/"

_POSIX_CLASSES: dict[str, str] = {
    "alnum": "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
    "alpha": "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "digit": "0123456789",
    "lower": "abcdefghijklmnopqrstuvwxyz",
    "upper": "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "space": " \t\n\r\f\v",
    "xdigit": "0123456789abcdefABCDEF",
}


@dataclass(frozen=True, slots=True)
class _Literal:
    char: str


@dataclass(frozen=True, slots=True)
class _AnyChar:
    pass


@dataclass(frozen=True, slots=True)
class _Star:
    pass


@dataclass(frozen=True, slots=True)
class _GlobStar:
    trailing_separator: bool


@dataclass(frozen=True, slots=True)
class _Class:
    ranges: tuple[tuple[str, str], ...]
    negated: bool

    def accepts(self, char: str) -> bool:
        hit = any(low <= char <= high for low, high in self.ranges)
        return hit != self.negated


@dataclass(frozen=True, slots=True)
class _Group:
    op: str
    alternatives: tuple[tuple[_Node, ...], ...]


type _Node = _Literal | _AnyChar | _Star | _GlobStar | _Class | _Group


class _Parser:
    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self.pos = 0

    def sequence(self, stops: str = "") -> tuple[_Node, ...]:
        nodes: list[_Node] = []
        while self.pos < len(self.pattern) and self.pattern[self.pos] not in stops:
            nodes.append(self._atom())
        return tuple(nodes)

    def _atom(self) -> _Node:
        p, i = self.pattern, self.pos
        ch = p[i]

        if ch in _EXTGLOB_OPS and p.startswith("(", i + 1):
            group = self._group(ch, i + 2, sep="|", end=")")
            if group is not None:
                return group

        if ch == "{":
            group = self._group("@", i + 1, sep=",", end="}")
            if group is not None and len(group.alternatives) > 1:
                return group
            self.pos = i

        if ch == "[":
            cls = self._class()
            if cls is not None:
                return cls

        globstar = self._globstar()
        if globstar is not None:
            return globstar

        self.pos = i + 1
        match ch:
            case "\\" if i + 1 < len(p):
                self.pos = i + 2
                return _Literal(p[i + 1])
            case "*":
                return _Star()
            case "?":
                return _AnyChar()
            case _:
                return _Literal(ch)

    def _group(self, op: str, start: int, *, sep: str, end: str) -> _Group | None:
        saved = self.pos
        self.pos = start
        alternatives: list[tuple[_Node, ...]] = []
        while True:
            alternatives.append(self.sequence(sep + end))
            if self.pos >= len(self.pattern):
                self.pos = saved
                return None
            closer = self.pattern[self.pos]
            self.pos += 1
            if closer == end:
                return _Group(op, tuple(alternatives))

    def _globstar(self) -> _GlobStar | None:
        # Only a `**` that fills a whole segment crosses separators.
        p, i = self.pattern, self.pos
        if not p.startswith("**", i) or (i > 0 and p[i - 1] != _SEPARATOR):
            return None
        after = i + 2
        if after == len(p):
            self.pos = after
            return _GlobStar(trailing_separator=False)
        if p[after] == _SEPARATOR:
            self.pos = after + 1
            return _GlobStar(trailing_separator=True)
        return None

    def _class(self) -> _Class | None:
        p = self.pattern
        i = self.pos + 1
        negated = i < len(p) and p[i] in "!^"
        if negated:
            i += 1

        ranges: list[tuple[str, str]] = []
        first = True
        while i < len(p) and (p[i] != "]" or first):
            first = False
            if p.startswith("[:", i):
                close = p.find(":]", i + 2)
                members = _POSIX_CLASSES.get(p[i + 2 : close]) if close != -1 else None
                if members is not None:
                    ranges.extend((c, c) for c in members)
                    i = close + 2
                    continue
            low = p[i]
            if i + 2 < len(p) and p[i + 1] == "-" and p[i + 2] != "]":
                ranges.append((low, p[i + 2]))
                i += 3
            else:
                ranges.append((low, low))
                i += 1

        if i >= len(p):
            return None
        self.pos = i + 1
        return _Class(tuple(ranges), negated)


def _segment_end(text: str, pos: int) -> int:
    sep = text.find(_SEPARATOR, pos)
    return len(text) if sep == -1 else sep


def _sequence_ends(seq: tuple[_Node, ...], text: str, start: int) -> set[int]:
    current = {start}
    for node in seq:
        following: set[int] = set()
        for pos in current:
            following |= _node_ends(node, text, pos)
        current = following
        if not current:
            break
    return current


def _alternatives_ends(group: _Group, text: str, pos: int) -> set[int]:
    ends: set[int] = set()
    for alternative in group.alternatives:
        ends |= _sequence_ends(alternative, text, pos)
    return ends


def _repeat_ends(group: _Group, text: str, pos: int) -> set[int]:
    reached = _alternatives_ends(group, text, pos)
    pending = list(reached)
    while pending:
        for end in _alternatives_ends(group, text, pending.pop()):
            if end not in reached:
                reached.add(end)
                pending.append(end)
    return reached


def _node_ends(node: _Node, text: str, pos: int) -> set[int]:
    at_char = pos < len(text) and text[pos] != _SEPARATOR
    match node:
        case _Literal(char=char):
            return {pos + 1} if pos < len(text) and text[pos] == char else set()
        case _AnyChar():
            return {pos + 1} if at_char else set()
        case _Class():
            return {pos + 1} if at_char and node.accepts(text[pos]) else set()
        case _Star():
            return set(range(pos, _segment_end(text, pos) + 1))
        case _GlobStar(trailing_separator=False):
            return set(range(pos, len(text) + 1))
        case _GlobStar():
            # Zero segments, or any run ending just after a separator.
            return {pos} | {e for e in range(pos + 1, len(text) + 1) if text[e - 1] == _SEPARATOR}
        case _Group(op="@"):
            return _alternatives_ends(node, text, pos)
        case _Group(op="?"):
            return {pos} | _alternatives_ends(node, text, pos)
        case _Group(op="+"):
            return _repeat_ends(node, text, pos)
        case _Group(op="*"):
            return {pos} | _repeat_ends(node, text, pos)
        case _Group(op="!"):
            excluded = _alternatives_ends(node, text, pos)
            return {e for e in range(pos, _segment_end(text, pos) + 1) if e not in excluded}
        case _Group():
            raise ValueError(f"unknown extglob operator {node.op!r}")


@dataclass(frozen=True, slots=True)
class Glob:
    pattern: str
    nodes: tuple[_Node, ...]

    def match(self, text: str) -> bool:
        return len(text) in _sequence_ends(self.nodes, text, 0)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Glob:
    return Glob(pattern=pattern, nodes=_Parser(pattern).sequence())


def glob_match(pattern: str, text: str) -> bool:
    """True if `pattern` matches all of `text`."""
    return compile_glob(pattern).match(text)


def is_glob(pattern: str) -> bool:
    """True if the pattern uses any glob syntax (a plain name otherwise)."""
    return any(ch in _SPECIAL for ch in pattern)
