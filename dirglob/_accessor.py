from __future__ import annotations

import errno
import os
import stat as stat_module
import threading
from abc import ABC, abstractmethod
from logging import getLogger as get_logger

from ._chdir import WorkingDirectoryStack
from ._exceptions import (
    DirNotFoundError,
    DirPermissionError,
    DirResourceExhaustedError,
)
from ._typing import DirEntry, DirStat

_logger = get_logger(__name__)


def translate_os_error(error: OSError, path: str) -> OSError:
    """Map a raw OSError onto the dirglob error taxonomy.

    :param error: error raised by the operating system
    :param path: path the failed operation was applied to
    """
    if isinstance(
        error, (DirNotFoundError, DirPermissionError, DirResourceExhaustedError)
    ):
        return error
    code = error.errno
    if code == errno.ENOENT:
        translated: OSError = DirNotFoundError(code, "No such directory", path)
    elif code in (errno.EACCES, errno.EPERM):
        translated = DirPermissionError(code, "Permission denied", path)
    elif code in (errno.EMFILE, errno.ENFILE):
        translated = DirResourceExhaustedError(code, "Too many open files", path)
    elif code == errno.ENOTDIR:
        translated = NotADirectoryError(code, "Not a directory", path)
    else:
        return error
    translated.__cause__ = error
    _logger.debug("translated %r on %r to %s", error, path, type(translated).__name__)
    return translated


class DirectoryAccessor(ABC):
    """The primitive the glob engine consumes: list, stat, cwd and chdir.

    Each accessor owns one :class:`WorkingDirectoryStack`, so every service
    sharing an accessor shares its chdir guard.
    """

    def __init__(self) -> None:
        self._working_directory = self._make_working_directory()

    def _make_working_directory(self) -> WorkingDirectoryStack:
        return WorkingDirectoryStack(self)

    @property
    def working_directory(self) -> WorkingDirectoryStack:
        return self._working_directory

    @abstractmethod
    def scandir(self, path: str) -> list[DirEntry]:
        """List *path* completely, without ``.`` and ``..``."""

    @abstractmethod
    def stat(self, path: str) -> DirStat:
        """Stat *path*, following symlinks."""

    @abstractmethod
    def lstat(self, path: str) -> DirStat:
        """Stat *path* without following a final symlink."""

    @abstractmethod
    def getcwd(self) -> str: ...

    @abstractmethod
    def chdir(self, path: str) -> None: ...

    def exists(self, path: str, follow_symlinks: bool = False) -> bool:
        try:
            if follow_symlinks:
                self.stat(path)
            else:
                self.lstat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            if e.errno == errno.ELOOP:
                return False
            raise
        return True

    def is_dir(self, path: str) -> bool:
        try:
            return self.stat(path)["is_dir"]
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            if e.errno == errno.ELOOP:
                return False
            raise

    def abspath(self, path: str) -> str:
        if path.startswith("/") or os.path.isabs(path):
            return path
        cwd = self.getcwd()
        if not path or path == ".":
            return cwd
        return os.path.join(cwd, path)


class LocalAccessor(DirectoryAccessor):
    """Accessor backed by the operating system.

    The process has a single current directory, so every instance shares one
    :class:`WorkingDirectoryStack`.
    """

    _shared_working_directory: WorkingDirectoryStack | None = None
    _shared_lock = threading.Lock()

    def _make_working_directory(self) -> WorkingDirectoryStack:
        with LocalAccessor._shared_lock:
            if LocalAccessor._shared_working_directory is None:
                LocalAccessor._shared_working_directory = WorkingDirectoryStack(self)
            return LocalAccessor._shared_working_directory

    def scandir(self, path: str) -> list[DirEntry]:
        entries: list[DirEntry] = []
        try:
            # The iterator is exhausted and closed before returning so the
            # caller never holds more than one directory descriptor.
            with os.scandir(path or ".") as it:
                for entry in it:
                    try:
                        is_dir = entry.is_dir()
                    except OSError:
                        is_dir = False
                    entries.append(DirEntry(entry.name, is_dir, entry.is_symlink()))
        except OSError as e:
            raise translate_os_error(e, path)
        return entries

    def stat(self, path: str) -> DirStat:
        try:
            st = os.stat(path)
        except OSError as e:
            raise translate_os_error(e, path)
        return DirStat(is_dir=stat_module.S_ISDIR(st.st_mode), is_symlink=False)

    def lstat(self, path: str) -> DirStat:
        try:
            st = os.lstat(path)
        except OSError as e:
            raise translate_os_error(e, path)
        if stat_module.S_ISLNK(st.st_mode):
            return DirStat(is_dir=os.path.isdir(path), is_symlink=True)
        return DirStat(is_dir=stat_module.S_ISDIR(st.st_mode), is_symlink=False)

    def getcwd(self) -> str:
        return os.getcwd()

    def chdir(self, path: str) -> None:
        try:
            os.chdir(path)
        except OSError as e:
            raise translate_os_error(e, path)
