"""Process-wide current directory, guarded for concurrent callers.

There is exactly one current directory per accessor (and the operating
system accessors all share one stack), so the stack never keeps
per-thread state.  A scope is represented by a :class:`ChdirToken`; the
innermost live token is the only one the stack points at, and each token
remembers the one it replaced.
"""

from __future__ import annotations

import sys
import threading
import warnings
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger as get_logger
from typing import TYPE_CHECKING, TypeVar

from ._exceptions import ChdirConflictWarning, CrossThreadChdirError

if TYPE_CHECKING:
    from ._accessor import DirectoryAccessor

_logger = get_logger(__name__)

_T = TypeVar("_T")

_PACKAGE_PREFIX = __name__.rsplit(".", 1)[0] + "."


def _is_internal(module: str) -> bool:
    return module.startswith(_PACKAGE_PREFIX) or module == "contextlib"


def _external_frame_depth() -> int:
    """Stack level of the first frame outside this package, seen from the caller."""
    depth = 1
    frame = sys._getframe(1)
    while frame.f_back is not None and _is_internal(frame.f_globals.get("__name__", "")):
        frame = frame.f_back
        depth += 1
    return depth


def _call_site() -> str:
    frame = sys._getframe(_external_frame_depth() - 1)
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"


@dataclass(frozen=True)
class ChdirToken:
    owner: int
    location: str
    previous: str
    outer: ChdirToken | None = None


class WorkingDirectoryStack:
    """State machine ``Idle <-> ScopeActive`` over one accessor's cwd."""

    def __init__(self, accessor: DirectoryAccessor) -> None:
        self._accessor = accessor
        self._lock = threading.Lock()
        self._token: ChdirToken | None = None

    @property
    def active(self) -> ChdirToken | None:
        with self._lock:
            return self._token

    def getcwd(self) -> str:
        return self._accessor.getcwd()

    def _check_owner(self) -> None:
        # Must be called with self._lock held.
        token = self._token
        if token is None:
            return
        if token.owner != threading.get_ident():
            raise CrossThreadChdirError(token.owner, token.location)
        warnings.warn(
            ChdirConflictWarning(
                "conflicting chdir during another chdir block\n"
                f"{token.location}: note: previous chdir was here"
            ),
            stacklevel=_external_frame_depth(),
        )

    def chdir(self, path: str) -> None:
        """Change directory permanently."""
        with self._lock:
            self._check_owner()
            self._accessor.chdir(path)
        _logger.debug("chdir to %r", path)

    @contextmanager
    def scoped(self, path: str) -> Iterator[str]:
        """Change into *path* for the duration of the ``with`` block."""
        with self._lock:
            self._check_owner()
            previous = self._accessor.getcwd()
            self._accessor.chdir(path)
            token = ChdirToken(
                owner=threading.get_ident(),
                location=_call_site(),
                previous=previous,
                outer=self._token,
            )
            self._token = token
        _logger.debug("entered chdir scope %r at %s", path, token.location)
        try:
            yield path
        finally:
            with self._lock:
                try:
                    self._accessor.chdir(token.previous)
                finally:
                    self._token = token.outer
            _logger.debug("left chdir scope, restored %r", token.previous)

    def with_directory(self, path: str, body: Callable[[], _T]) -> _T:
        with self.scoped(path):
            return body()
