import os
import string

import pytest

from dirglob import default_service
from dirglob._pytest_plugin import dirsvc, memfs  # noqa: F401


@pytest.fixture
def tree(tmp_path) -> str:
    """A real directory holding ``a`` .. ``z``.

    Letters with an odd code point are directories, the others empty files.
    """
    root = os.path.realpath(tmp_path / "root")
    os.mkdir(root)
    for c in string.ascii_lowercase:
        path = os.path.join(root, c)
        if ord(c) % 2:
            os.mkdir(path)
        else:
            open(path, "w").close()
    return root


@pytest.fixture
def cwd_guard():
    """Put the process back where it was, whatever the test did with chdir."""
    saved = os.getcwd()
    yield saved
    assert default_service().accessor.working_directory.active is None
    os.chdir(saved)
