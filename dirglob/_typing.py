from typing import NamedTuple, TypedDict


class DirEntry(NamedTuple):
    name: str
    is_dir: bool
    is_symlink: bool


class DirStat(TypedDict):
    is_dir: bool
    is_symlink: bool
