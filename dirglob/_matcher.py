from __future__ import annotations

import errno
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ._path import join_path
from ._pattern import Pattern, Segment
from ._typing import DirEntry

if TYPE_CHECKING:
    from ._accessor import DirectoryAccessor
    from ._options import MatchOptions

_SPECIALS = (".", "..")


class Matcher:
    """Depth-first expansion of compiled patterns against one base directory.

    Results are produced in the accessor's listing order.  Each directory is
    listed completely before any of its children is visited.
    """

    def __init__(self, accessor: DirectoryAccessor, options: MatchOptions, root: str) -> None:
        self._accessor = accessor
        self._case_fold = options.case_fold
        self._dotmatch = options.include_dotfiles
        self._root = root

    def iter_matches(self, pattern: Pattern) -> Iterator[str]:
        if not pattern.segments:
            if self._exists(pattern.root, pattern):
                yield pattern.root
            return
        yield from self._walk(pattern, pattern.root, 0, None)

    # -- helpers --

    def _fs_path(self, out: str, pattern: Pattern) -> str:
        if pattern.is_absolute:
            return out
        return join_path(self._root, out) if out else self._root

    @staticmethod
    def _join(out: str, sep: str, name: str) -> str:
        if not out:
            return name
        if not sep and not out.endswith("/"):
            # Levels added by a "**" descent carry no written separator.
            sep = "/"
        return out + sep + name

    @staticmethod
    def _mark(out: str, pattern: Pattern) -> str:
        if pattern.dir_only and not out.endswith("/"):
            return out + pattern.trailing_sep
        return out

    def _exists(self, out: str, pattern: Pattern) -> bool:
        fs_path = self._fs_path(out, pattern)
        if pattern.dir_only:
            return self._accessor.is_dir(fs_path)
        return self._accessor.exists(fs_path)

    def _list(self, out: str, pattern: Pattern) -> list[DirEntry]:
        try:
            entries = self._accessor.scandir(self._fs_path(out, pattern))
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as e:
            if e.errno == errno.ELOOP:
                return []
            raise
        return [e for e in entries if e.name not in _SPECIALS]

    def _hidden(self, name: str, segment: Segment | None = None) -> bool:
        if self._dotmatch or not name.startswith("."):
            return False
        return segment is None or not segment.explicit_dot

    # -- traversal --

    def _walk(
        self, pattern: Pattern, out: str, idx: int, sep_override: str | None
    ) -> Iterator[str]:
        segments = pattern.segments
        if idx == len(segments):
            # Only reachable through the zero-level expansion of a trailing "**/".
            if out:
                yield self._mark(out, pattern)
            return

        segment = segments[idx]
        sep = segment.sep if sep_override is None else sep_override
        is_last = idx == len(segments) - 1

        if segment.is_recursive:
            yield from self._walk(pattern, out, idx + 1, sep)
            for entry in self._list(out, pattern):
                if self._hidden(entry.name):
                    continue
                if entry.is_dir and not entry.is_symlink:
                    child = self._join(out, sep, entry.name)
                    yield from self._walk(pattern, child, idx, None)
            return

        if segment.is_literal and (
            not self._case_fold or segment.literal in _SPECIALS
        ):
            child = self._join(out, sep, segment.literal)
            if not is_last:
                yield from self._walk(pattern, child, idx + 1, None)
            elif self._exists(child, pattern):
                yield self._mark(child, pattern)
            return

        for entry in self._list(out, pattern):
            if self._hidden(entry.name, segment):
                continue
            if not segment.match(entry.name, self._case_fold):
                continue
            child = self._join(out, sep, entry.name)
            if is_last:
                if pattern.dir_only and not entry.is_dir:
                    continue
                yield self._mark(child, pattern)
            elif entry.is_dir:
                yield from self._walk(pattern, child, idx + 1, None)
