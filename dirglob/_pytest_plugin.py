"""pytest fixture plugin.

Usage::

    # conftest.py
    pytest_plugins = ["dirglob._pytest_plugin"]

This makes the ``memfs`` and ``dirsvc`` fixtures automatically available::

    def test_something(memfs, dirsvc):
        memfs.populate(["a/b.c", "a/d/"])
        assert dirsvc.glob("a/*") == ["a/b.c", "a/d"]
"""

import pytest

from ._memory import MemoryAccessor
from ._service import DirectoryService


@pytest.fixture
def memfs() -> MemoryAccessor:
    """An empty :class:`MemoryAccessor` whose current directory is ``/``.

    Provides an independent instance per test (function scope).
    """
    return MemoryAccessor()


@pytest.fixture
def dirsvc(memfs: MemoryAccessor) -> DirectoryService:
    """A :class:`DirectoryService` bound to the ``memfs`` fixture."""
    return DirectoryService(memfs)
