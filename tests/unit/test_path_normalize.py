import os
import pathlib

import pytest

from dirglob import DirConfigError
from dirglob._path import fspath, join_path, normalize_path


def test_simple_absolute():
    assert normalize_path("/a/b/c") == "/a/b/c"


def test_trailing_slash_removed():
    assert normalize_path("/a/b/") == "/a/b"


def test_double_slash_collapsed():
    assert normalize_path("/a//b") == "/a/b"


def test_dot_removed():
    assert normalize_path("/a/./b") == "/a/b"


def test_dotdot_resolved():
    assert normalize_path("/a/b/../c") == "/a/c"


def test_relative_path_resolved_against_cwd():
    assert normalize_path("b/c", "/a") == "/a/b/c"


def test_relative_path_defaults_to_root():
    assert normalize_path("a/b/c") == "/a/b/c"


def test_empty_string_returns_cwd():
    assert normalize_path("", "/x/y") == "/x/y"


def test_root_returns_root():
    assert normalize_path("/") == "/"


def test_dotdot_above_root_stays_at_root():
    assert normalize_path("/../x") == "/x"
    assert normalize_path("../../x", "/a") == "/x"


def test_backslash_is_part_of_the_name():
    assert normalize_path("a\\b") == "/a\\b"
    assert normalize_path("/x/a\\b/..") == "/x"


def test_fspath_accepts_pathlike_and_bytes():
    assert fspath(pathlib.PurePosixPath("a/b")) == "a/b"
    assert fspath(b"a/b") == "a/b"
    assert fspath(os.fsencode("\udcaa")) == "\udcaa"


def test_fspath_rejects_nul():
    with pytest.raises(DirConfigError, match="null byte"):
        fspath("a\0b")


def test_fspath_rejects_non_path():
    with pytest.raises(TypeError):
        fspath(42)


@pytest.mark.parametrize(
    "parent, name, expected",
    [
        ("", "a", "a"),
        ("/", "a", "/a"),
        ("/x", "a", "/x/a"),
        ("/x/", "a", "/x/a"),
    ],
)
def test_join_path(parent, name, expected):
    assert join_path(parent, name) == expected
