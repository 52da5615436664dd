from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager
from typing import Any, TypeVar

from . import _glob
from ._accessor import DirectoryAccessor, LocalAccessor
from ._handle import DirectoryListing, DirectoryResource
from ._options import MatchOptions, OPEN_OPTION_KEYS, check_option_keys
from ._path import fspath
from ._pattern import Pattern

_T = TypeVar("_T")


class DirectoryService:
    """Every directory operation, bound to one injected accessor.

    Services that share an accessor share its working-directory guard.
    """

    def __init__(self, accessor: DirectoryAccessor | None = None) -> None:
        self._accessor = accessor if accessor is not None else default_accessor()

    @property
    def accessor(self) -> DirectoryAccessor:
        return self._accessor

    # -- globbing --

    def compile(self, pattern: str | os.PathLike, flags: int = 0) -> list[Pattern]:
        return _glob.compile_all(_glob.snapshot_patterns(pattern), flags)

    def match(self, patterns: Iterable[Pattern], options: MatchOptions) -> Iterator[str]:
        return _glob.match(self._accessor, patterns, options)

    def glob(self, patterns: Any, flags: int = 0, **options: Any) -> list[str]:
        """Return the paths matching *patterns*, sorted unless ``sort=False``.

        Fails immediately when ``base`` does not exist.
        """
        return _glob.glob(self._accessor, patterns, flags, **options)

    def iglob(self, patterns: Any, flags: int = 0, **options: Any) -> Iterator[str]:
        """Lazy form of :meth:`glob`; a missing ``base`` fails on first ``next()``."""
        return _glob.iglob(self._accessor, patterns, flags, **options)

    # -- directory handles --

    def open_directory(self, path: str | os.PathLike, **options: Any) -> DirectoryResource:
        return DirectoryResource.open(self._accessor, path, **options)

    def entries(self, path: str | os.PathLike, **options: Any) -> list[str | bytes]:
        with self.open_directory(path, **options) as d:
            return d.entries()

    def children(self, path: str | os.PathLike, **options: Any) -> list[str | bytes]:
        with self.open_directory(path, **options) as d:
            return d.children()

    def foreach(self, path: str | os.PathLike, **options: Any) -> DirectoryListing:
        check_option_keys(options, OPEN_OPTION_KEYS)
        return DirectoryListing(self._accessor, path, **options)

    def each_child(self, path: str | os.PathLike, **options: Any) -> DirectoryListing:
        check_option_keys(options, OPEN_OPTION_KEYS)
        return DirectoryListing(self._accessor, path, children_only=True, **options)

    # -- working directory --

    def getcwd(self) -> str:
        return self._accessor.working_directory.getcwd()

    def chdir(self, path: str | os.PathLike) -> None:
        self._accessor.working_directory.chdir(fspath(path))

    def scoped(self, path: str | os.PathLike) -> AbstractContextManager[str]:
        return self._accessor.working_directory.scoped(fspath(path))

    def with_directory(self, path: str | os.PathLike, body: Callable[[], _T]) -> _T:
        return self._accessor.working_directory.with_directory(fspath(path), body)


# ---------------------------------------------------------------------------
#  Process-wide default
# ---------------------------------------------------------------------------

_default_lock = threading.Lock()
_default_accessor: LocalAccessor | None = None
_default_service: DirectoryService | None = None


def default_accessor() -> LocalAccessor:
    """The single operating-system accessor shared by the whole process."""
    global _default_accessor
    with _default_lock:
        if _default_accessor is None:
            _default_accessor = LocalAccessor()
        return _default_accessor


def default_service() -> DirectoryService:
    global _default_service
    accessor = default_accessor()
    with _default_lock:
        if _default_service is None:
            _default_service = DirectoryService(accessor)
        return _default_service


def compile(pattern: str | os.PathLike, flags: int = 0) -> list[Pattern]:
    return default_service().compile(pattern, flags)


def match(patterns: Iterable[Pattern], options: MatchOptions) -> Iterator[str]:
    return default_service().match(patterns, options)


def glob(patterns: Any, flags: int = 0, **options: Any) -> list[str]:
    return default_service().glob(patterns, flags, **options)


def iglob(patterns: Any, flags: int = 0, **options: Any) -> Iterator[str]:
    return default_service().iglob(patterns, flags, **options)


def open_directory(path: str | os.PathLike, **options: Any) -> DirectoryResource:
    return default_service().open_directory(path, **options)


def entries(path: str | os.PathLike, **options: Any) -> list[str | bytes]:
    return default_service().entries(path, **options)


def children(path: str | os.PathLike, **options: Any) -> list[str | bytes]:
    return default_service().children(path, **options)


def foreach(path: str | os.PathLike, **options: Any) -> DirectoryListing:
    return default_service().foreach(path, **options)


def each_child(path: str | os.PathLike, **options: Any) -> DirectoryListing:
    return default_service().each_child(path, **options)


def getcwd() -> str:
    return default_service().getcwd()


def chdir(path: str | os.PathLike) -> None:
    default_service().chdir(path)


def scoped(path: str | os.PathLike) -> AbstractContextManager[str]:
    return default_service().scoped(path)


def with_directory(path: str | os.PathLike, body: Callable[[], _T]) -> _T:
    return default_service().with_directory(path, body)
