from __future__ import annotations

import os
import posixpath

from ._exceptions import DirConfigError


def fspath(path: str | os.PathLike) -> str:
    result = os.fspath(path)
    if isinstance(result, bytes):
        result = os.fsdecode(result)
    if "\0" in result:
        raise DirConfigError(f"path name contains null byte: {result!r}")
    return result


def join_path(parent: str, name: str) -> str:
    if not parent:
        return name
    if parent.endswith("/"):
        return parent + name
    return parent + "/" + name


def normalize_path(path: str, cwd: str = "/") -> str:
    """Resolve *path* against *cwd* into an absolute, normalised posix path.

    ``..`` at the root stays at the root, as it does on a real filesystem.
    """
    if not path:
        return cwd
    converted = path
    if not converted.startswith("/"):
        converted = cwd.rstrip("/") + "/" + converted

    parts: list[str] = []
    for part in converted.split("/"):
        if part == "..":
            if parts:
                parts.pop()
        elif part and part != ".":
            parts.append(part)
    return posixpath.normpath("/" + "/".join(parts))
