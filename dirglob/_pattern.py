"""Glob pattern compilation.

A pattern string goes through three stages:

1. brace expansion over the whole string, so an alternative may span
   several path levels (``{a/b,c}/d``);
2. splitting each expansion on ``/``, where an open ``[`` suppresses
   splitting until its ``]``;
3. tokenising each segment into literals, wildcards and character classes.

Malformed brackets and braces never raise; they degrade to literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import NamedTuple, Union

from ._exceptions import DirConfigError

FNM_NOESCAPE = 0x01
FNM_DOTMATCH = 0x04
FNM_CASEFOLD = 0x08


# ---------------------------------------------------------------------------
#  Tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class AnyChar:
    pass


@dataclass(frozen=True)
class AnyRun:
    pass


@dataclass(frozen=True)
class RecursiveAny:
    pass


@dataclass(frozen=True)
class CharClass:
    ranges: tuple[tuple[str, str], ...]
    negated: bool = False

    def to_regex(self) -> str:
        parts = []
        for lo, hi in self.ranges:
            if lo == hi:
                parts.append(re.escape(lo))
            elif lo < hi:
                parts.append(f"{re.escape(lo)}-{re.escape(hi)}")
        if not parts:
            return "." if self.negated else "(?!)"
        return "[%s%s]" % ("^" if self.negated else "", "".join(parts))


Token = Union[Literal, AnyChar, AnyRun, RecursiveAny, CharClass]


class BraceGroup(NamedTuple):
    prefix: str
    alternatives: list[str]
    suffix: str


# ---------------------------------------------------------------------------
#  Compiled forms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Segment:
    """One ``/``-delimited component plus the separator run written before it."""

    sep: str
    tokens: tuple[Token, ...]

    @property
    def is_recursive(self) -> bool:
        return len(self.tokens) == 1 and isinstance(self.tokens[0], RecursiveAny)

    @property
    def is_literal(self) -> bool:
        return all(isinstance(t, Literal) for t in self.tokens)

    @property
    def literal(self) -> str:
        return "".join(t.text for t in self.tokens if isinstance(t, Literal))

    @property
    def explicit_dot(self) -> bool:
        first = self.tokens[0] if self.tokens else None
        return isinstance(first, Literal) and first.text.startswith(".")

    @cached_property
    def _regex(self) -> str:
        out = []
        for token in self.tokens:
            if isinstance(token, Literal):
                out.append(re.escape(token.text))
            elif isinstance(token, AnyChar):
                out.append(".")
            elif isinstance(token, AnyRun):
                out.append(".*")
            elif isinstance(token, CharClass):
                out.append(token.to_regex())
        return "".join(out)

    @cached_property
    def _matcher(self) -> re.Pattern[str]:
        return re.compile(self._regex, re.DOTALL)

    @cached_property
    def _casefold_matcher(self) -> re.Pattern[str]:
        return re.compile(self._regex, re.DOTALL | re.IGNORECASE)

    def match(self, name: str, case_fold: bool = False) -> bool:
        matcher = self._casefold_matcher if case_fold else self._matcher
        return matcher.fullmatch(name) is not None


@dataclass(frozen=True)
class Pattern:
    source: str
    root: str
    segments: tuple[Segment, ...]
    trailing_sep: str = ""
    flags: int = field(default=0, compare=False)

    @property
    def is_absolute(self) -> bool:
        return bool(self.root)

    @property
    def dir_only(self) -> bool:
        return bool(self.trailing_sep)


# ---------------------------------------------------------------------------
#  Brace expansion
# ---------------------------------------------------------------------------


def find_brace_group(pattern: str, noescape: bool = False) -> BraceGroup | None:
    """Locate the first ``{...}`` with a matching close brace, or ``None``."""
    lbrace = -1
    nest = 0
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\" and not noescape:
            i += 2
            continue
        if c == "{":
            if nest == 0:
                lbrace = i
            nest += 1
        elif c == "}" and lbrace >= 0:
            nest -= 1
            if nest == 0:
                return BraceGroup(
                    pattern[:lbrace],
                    _split_alternatives(pattern, lbrace + 1, i, noescape),
                    pattern[i + 1 :],
                )
        i += 1
    return None


def _split_alternatives(pattern: str, start: int, end: int, noescape: bool) -> list[str]:
    alternatives = []
    nest = 0
    i = start
    while i < end:
        c = pattern[i]
        if c == "\\" and not noescape:
            i += 2
            continue
        if c == "{":
            nest += 1
        elif c == "}":
            nest -= 1
        elif c == "," and nest == 0:
            alternatives.append(pattern[start:i])
            start = i + 1
        i += 1
    alternatives.append(pattern[start:end])
    return alternatives


def expand_braces(pattern: str, noescape: bool = False) -> list[str]:
    """Expand brace alternation in written order; escapes are kept."""
    group = find_brace_group(pattern, noescape)
    if group is None:
        return [pattern]
    expanded: list[str] = []
    for alternative in group.alternatives:
        expanded.extend(
            expand_braces(group.prefix + alternative + group.suffix, noescape)
        )
    return expanded


# ---------------------------------------------------------------------------
#  Segment splitting and tokenising
# ---------------------------------------------------------------------------


def _split_segments(
    pattern: str, noescape: bool
) -> tuple[str, list[tuple[str, str]], str]:
    """Return ``(root, [(sep, text), ...], trailing_sep)``."""
    n = len(pattern)
    i = 0
    while i < n and pattern[i] == "/":
        i += 1
    root = pattern[:i]
    pieces: list[tuple[str, str]] = []
    sep = ""
    while i < n:
        start = i
        in_bracket = False
        while i < n:
            c = pattern[i]
            if c == "\\" and not noescape:
                i += 2
                continue
            if c == "[":
                in_bracket = True
            elif c == "]":
                in_bracket = False
            elif c == "/" and not in_bracket:
                break
            i += 1
        i = min(i, n)
        pieces.append((sep, pattern[start:i]))
        j = i
        while j < n and pattern[j] == "/":
            j += 1
        sep = pattern[i:j]
        i = j
    return root, pieces, sep


def _parse_class(text: str, i: int, noescape: bool) -> tuple[CharClass | None, int]:
    n = len(text)
    negated = False
    if i < n and text[i] in "!^":
        negated = True
        i += 1
    ranges: list[tuple[str, str]] = []
    first = True
    while i < n:
        c = text[i]
        if c == "]" and not first:
            return CharClass(tuple(ranges), negated), i + 1
        first = False
        if c == "\\" and not noescape:
            i += 1
            if i >= n:
                return None, i
            c = text[i]
        i += 1
        if i + 1 < n and text[i] == "-" and text[i + 1] != "]":
            hi = text[i + 1]
            i += 2
            if hi == "\\" and not noescape:
                if i >= n:
                    return None, i
                hi = text[i]
                i += 1
            ranges.append((c, hi))
        else:
            ranges.append((c, c))
    return None, i


def tokenize(text: str, noescape: bool = False) -> tuple[Token, ...]:
    if text == "**":
        return (RecursiveAny(),)
    tokens: list[Token] = []
    buf: list[str] = []

    def flush() -> None:
        if buf:
            tokens.append(Literal("".join(buf)))
            buf.clear()

    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c == "\\" and not noescape:
            # An unpaired trailing backslash escapes nothing and is dropped.
            if i + 1 < n:
                buf.append(text[i + 1])
            i += 2
        elif c == "*":
            flush()
            while i < n and text[i] == "*":
                i += 1
            tokens.append(AnyRun())
        elif c == "?":
            flush()
            tokens.append(AnyChar())
            i += 1
        elif c == "[":
            char_class, end = _parse_class(text, i + 1, noescape)
            if char_class is None:
                buf.append("[")
                i += 1
            else:
                flush()
                tokens.append(char_class)
                i = end
        else:
            buf.append(c)
            i += 1
    flush()
    return tuple(tokens)


def check_pattern(pattern: str) -> str:
    if "\0" in pattern:
        raise DirConfigError(f"nul-separated patterns are not supported: {pattern!r}")
    return pattern


def _compile_one(source: str, flags: int) -> Pattern | None:
    noescape = bool(flags & FNM_NOESCAPE)
    root, pieces, trailing = _split_segments(source, noescape)
    segments: list[Segment] = []
    for sep, text in pieces:
        tokens = tokenize(text, noescape)
        if not tokens:
            continue
        segment = Segment(sep, tokens)
        if segment.is_recursive and segments and segments[-1].is_recursive:
            continue
        segments.append(segment)
    if not root and not segments:
        return None
    if segments and segments[-1].is_recursive and not trailing:
        # A bare trailing ``**`` names every descendant, i.e. ``**/*``.
        segments.append(Segment("/", (AnyRun(),)))
    if not segments:
        trailing = ""
    return Pattern(source, root, tuple(segments), trailing, flags)


def compile(pattern: str, flags: int = 0) -> list[Pattern]:
    """Compile *pattern* into one :class:`Pattern` per brace alternative.

    The empty pattern (and any alternative that expands to it) compiles to
    nothing.
    """
    check_pattern(pattern)
    compiled = []
    for expanded in expand_braces(pattern, bool(flags & FNM_NOESCAPE)):
        result = _compile_one(expanded, flags)
        if result is not None:
            compiled.append(result)
    return compiled
