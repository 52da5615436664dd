from __future__ import annotations

import codecs
import os
import warnings
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, TypeVar

from ._exceptions import ClosedDirectoryError, DirConfigError
from ._options import OPEN_OPTION_KEYS, check_option_keys
from ._path import fspath

if TYPE_CHECKING:
    from ._accessor import DirectoryAccessor

BINARY = "binary"

_T = TypeVar("_T")


def _check_encoding(encoding: str | None) -> str | None:
    if encoding is None or encoding == BINARY:
        return encoding
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        raise DirConfigError(f"unknown encoding name: {encoding!r}") from None


class DirectoryResource:
    """An open directory: a snapshot of its entries plus a cursor.

    The listing (``.`` and ``..`` first) is taken when the directory is
    opened.  Positions returned by :meth:`tell` are only meaningful to
    :meth:`seek` on the same resource.
    """

    def __init__(
        self,
        accessor: DirectoryAccessor,
        path: str | os.PathLike,
        encoding: str | None = None,
    ) -> None:
        self._accessor = accessor
        self._path = fspath(path)
        self._encoding = _check_encoding(encoding)
        self._abspath = accessor.abspath(self._path)
        names = [entry.name for entry in accessor.scandir(self._abspath)]
        self._names: list[str] = [".", ".."] + names
        self._cursor: int = 0
        self._is_closed: bool = False

    @classmethod
    def open(
        cls, accessor: DirectoryAccessor, path: str | os.PathLike, **options: Any
    ) -> DirectoryResource:
        check_option_keys(options, OPEN_OPTION_KEYS)
        return cls(accessor, path, **options)

    @property
    def path(self) -> str:
        return self._path

    @property
    def encoding(self) -> str | None:
        return self._encoding

    @property
    def closed(self) -> bool:
        return self._is_closed

    def _assert_open(self) -> None:
        if self._is_closed:
            raise ClosedDirectoryError(self._path)

    def _encode(self, name: str) -> str | bytes:
        if self._encoding is None:
            return name
        raw = os.fsencode(name)
        if self._encoding == BINARY:
            return raw
        return raw.decode(self._encoding, "surrogateescape")

    def resolved_path(self) -> str:
        """Absolute path of the directory, without moving the cursor."""
        self._assert_open()
        return self._abspath

    # -- cursor --

    def read(self) -> str | bytes | None:
        """Return the next entry name, or ``None`` at the end."""
        self._assert_open()
        if self._cursor >= len(self._names):
            return None
        name = self._names[self._cursor]
        self._cursor += 1
        return self._encode(name)

    def tell(self) -> int:
        self._assert_open()
        return self._cursor

    def seek(self, pos: int) -> int:
        self._assert_open()
        if pos < 0:
            raise ValueError(f"Directory position must be >= 0, got {pos}")
        self._cursor = pos
        return self._cursor

    @property
    def pos(self) -> int:
        return self.tell()

    @pos.setter
    def pos(self, value: int) -> None:
        self.seek(value)

    def rewind(self) -> None:
        self._assert_open()
        self._cursor = 0

    # -- listing --

    def each(self) -> Iterator[str | bytes]:
        """Yield the remaining entries from the current position."""
        while True:
            name = self.read()
            if name is None:
                return
            yield name

    __iter__ = each

    def entries(self) -> list[str | bytes]:
        self._assert_open()
        return [self._encode(name) for name in self._names]

    def children(self) -> list[str | bytes]:
        self._assert_open()
        return [self._encode(name) for name in self._names[2:]]

    def each_child(self) -> Iterator[str | bytes]:
        yield from self.children()

    # -- working directory --

    def chdir(self, body: Callable[[], _T] | None = None) -> _T | None:
        """Change into this directory, for the call of *body* if given."""
        self._assert_open()
        stack = self._accessor.working_directory
        if body is None:
            stack.chdir(self._abspath)
            return None
        return stack.with_directory(self._abspath, body)

    # -- lifecycle --

    def close(self) -> None:
        if self._is_closed:
            return
        self._is_closed = True
        self._names = []

    def __enter__(self) -> DirectoryResource:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<DirectoryResource:{self._path}>"

    def __del__(self) -> None:
        if not getattr(self, "_is_closed", True):
            warnings.warn(
                f"DirectoryResource {self._path!r} was not closed properly. "
                "Always use 'with open_directory(...) as d:' to ensure cleanup.",
                ResourceWarning,
                stacklevel=1,
            )
            self.close()


class DirectoryListing:
    """Re-iterable lazy listing; each iteration re-reads the directory.

    Constructing it never touches the filesystem, so a missing directory is
    only reported when iteration starts.
    """

    def __init__(
        self,
        accessor: DirectoryAccessor,
        path: str | os.PathLike,
        encoding: str | None = None,
        children_only: bool = False,
    ) -> None:
        self._accessor = accessor
        self._path = fspath(path)
        self._encoding = _check_encoding(encoding)
        self._children_only = children_only

    def __iter__(self) -> Iterator[str | bytes]:
        with DirectoryResource(self._accessor, self._path, self._encoding) as d:
            names = d.children() if self._children_only else d.entries()
        yield from names

    def __repr__(self) -> str:
        kind = "each_child" if self._children_only else "foreach"
        return f"<DirectoryListing:{kind} {self._path}>"
