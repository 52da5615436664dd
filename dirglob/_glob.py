from __future__ import annotations

import errno
import os
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from ._exceptions import DirConfigError, DirNotFoundError
from ._handle import DirectoryResource
from ._matcher import Matcher
from ._options import MatchOptions
from ._path import fspath
from ._pattern import Pattern, check_pattern, compile

if TYPE_CHECKING:
    from ._accessor import DirectoryAccessor


# ---------------------------------------------------------------------------
#  Input snapshot
# ---------------------------------------------------------------------------


def snapshot_patterns(patterns: Any) -> list[str]:
    """Copy the caller's pattern argument into a list of plain strings.

    The container is copied before any element is converted, so an element
    whose ``__fspath__`` mutates the original list cannot disturb the call.
    """
    if isinstance(patterns, (str, bytes, os.PathLike)):
        items = [patterns]
    elif isinstance(patterns, (list, tuple)):
        items = list(patterns)
    else:
        raise DirConfigError(
            f"patterns must be a path or a list of paths, not {type(patterns).__name__}"
        )
    texts = []
    for item in items:
        if not isinstance(item, (str, bytes, os.PathLike)):
            raise DirConfigError(
                f"pattern must be str or os.PathLike, not {type(item).__name__}"
            )
        text = os.fspath(item)
        if isinstance(text, bytes):
            text = os.fsdecode(text)
        texts.append(check_pattern(text))
    return texts


def compile_all(texts: Iterable[str], flags: int) -> list[Pattern]:
    compiled: list[Pattern] = []
    for text in texts:
        compiled.extend(compile(text, flags))
    return compiled


# ---------------------------------------------------------------------------
#  BaseResolver
# ---------------------------------------------------------------------------


def resolve_base(accessor: DirectoryAccessor, base: Any) -> str:
    """Turn the ``base`` option into an absolute directory path."""
    if base is None:
        return accessor.getcwd()
    if isinstance(base, DirectoryResource):
        path = base.resolved_path()
    elif isinstance(base, (str, bytes, os.PathLike)):
        path = fspath(base)
    else:
        raise DirConfigError(
            f"base must be a path or a DirectoryResource, not {type(base).__name__}"
        )
    if not path:
        return accessor.getcwd()
    root = accessor.abspath(path)
    try:
        is_dir = accessor.stat(root)["is_dir"]
    except NotADirectoryError:
        is_dir = False
    if not is_dir:
        raise DirNotFoundError(errno.ENOTDIR, "Not a directory", path)
    return root


# ---------------------------------------------------------------------------
#  ResultCollector
# ---------------------------------------------------------------------------


class ResultCollector:
    """Concatenate per-pattern results, sorting the whole set on request."""

    def __init__(self, sort: bool) -> None:
        self._sort = sort
        self._sources: list[Iterable[str]] = []

    def add(self, results: Iterable[str]) -> None:
        self._sources.append(results)

    def __iter__(self) -> Iterator[str]:
        if self._sort:
            collected = [path for source in self._sources for path in source]
            collected.sort()
            yield from collected
        else:
            for source in self._sources:
                yield from source


# ---------------------------------------------------------------------------
#  Entry points
# ---------------------------------------------------------------------------


def match(
    accessor: DirectoryAccessor, patterns: Iterable[Pattern], options: MatchOptions
) -> Iterator[str]:
    """Lazily match compiled *patterns*; the base is resolved on first use."""
    return _match(accessor, tuple(patterns), options)


def _match(
    accessor: DirectoryAccessor, patterns: tuple[Pattern, ...], options: MatchOptions
) -> Iterator[str]:
    root = resolve_base(accessor, options.base)
    matcher = Matcher(accessor, options, root)
    collector = ResultCollector(options.sort)
    for pattern in patterns:
        collector.add(matcher.iter_matches(pattern))
    yield from collector


def iglob(
    accessor: DirectoryAccessor, patterns: Any, flags: int = 0, **options: Any
) -> Iterator[str]:
    match_options = MatchOptions.from_keywords(flags, **options)
    compiled = compile_all(snapshot_patterns(patterns), match_options.flags)
    return match(accessor, compiled, match_options)


def glob(
    accessor: DirectoryAccessor, patterns: Any, flags: int = 0, **options: Any
) -> list[str]:
    match_options = MatchOptions.from_keywords(flags, **options)
    compiled = compile_all(snapshot_patterns(patterns), match_options.flags)
    return list(match(accessor, compiled, match_options))
