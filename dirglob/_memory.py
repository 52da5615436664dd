from __future__ import annotations

import errno
import posixpath
import threading
from collections.abc import Iterable

from ._accessor import DirectoryAccessor
from ._exceptions import DirNotFoundError, DirPermissionError
from ._path import normalize_path
from ._typing import DirEntry, DirStat

_MAX_SYMLINK_HOPS = 40

# ---------------------------------------------------------------------------
#  Directory Index Layer
# ---------------------------------------------------------------------------


class DirNode:
    __slots__ = ("node_id", "children", "readable")

    def __init__(self, node_id: int) -> None:
        self.node_id: int = node_id
        self.children: dict[str, int] = {}
        self.readable: bool = True


class FileNode:
    __slots__ = ("node_id",)

    def __init__(self, node_id: int) -> None:
        self.node_id: int = node_id


class SymlinkNode:
    __slots__ = ("node_id", "target")

    def __init__(self, node_id: int, target: str) -> None:
        self.node_id: int = node_id
        self.target: str = target


Node = DirNode | FileNode | SymlinkNode


# ---------------------------------------------------------------------------
#  MemoryAccessor
# ---------------------------------------------------------------------------


class MemoryAccessor(DirectoryAccessor):
    """An in-memory directory tree usable wherever a real filesystem is.

    Children keep insertion order, which is the listing order the matcher
    observes.  All structural changes happen under one re-entrant lock;
    listings are snapshots taken under that lock.
    """

    def __init__(self, cwd: str = "/") -> None:
        super().__init__()
        self._global_lock = threading.RLock()
        self._nodes: dict[int, Node] = {}
        self._next_node_id: int = 0
        self._root = self._alloc_dir()
        self._cwd: str = "/"
        if cwd != "/":
            self.mkdir(cwd, exist_ok=True)
            self.chdir(cwd)

    # -- node allocation helpers --

    def _alloc_id(self) -> int:
        nid = self._next_node_id
        self._next_node_id += 1
        return nid

    def _alloc_dir(self) -> DirNode:
        node = DirNode(self._alloc_id())
        self._nodes[node.node_id] = node
        return node

    def _attach(self, npath: str, node: Node) -> None:
        parent, name = self._resolve_parent_and_name(npath)
        if name in parent.children:
            raise FileExistsError(errno.EEXIST, "File exists", npath)
        self._nodes[node.node_id] = node
        parent.children[name] = node.node_id

    # -- path helpers --

    def _np(self, path: str) -> str:
        return normalize_path(path, self._cwd)

    def _resolve(self, npath: str, follow_last: bool = True, hops: int = 0) -> Node:
        return self._lookup(npath, follow_last, hops)[0]

    def _lookup(self, npath: str, follow_last: bool = True, hops: int = 0) -> tuple[Node, str]:
        """Return the node at *npath* together with its symlink-free path.

        Relative link targets are resolved against the real directory that
        holds the link, not against the path used to reach it.
        """
        parts = [p for p in npath.split("/") if p]
        current: Node = self._root
        current_path = "/"
        for i, part in enumerate(parts):
            if not isinstance(current, DirNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", npath)
            child_id = current.children.get(part)
            if child_id is None:
                raise DirNotFoundError(errno.ENOENT, "No such file or directory", npath)
            child = self._nodes[child_id]
            is_last = i == len(parts) - 1
            if isinstance(child, SymlinkNode) and (follow_last or not is_last):
                if hops >= _MAX_SYMLINK_HOPS:
                    raise OSError(errno.ELOOP, "Too many levels of symbolic links", npath)
                target = normalize_path(child.target, current_path)
                child, current_path = self._lookup(target, True, hops + 1)
            else:
                current_path = posixpath.join(current_path, part)
            current = child
        return current, current_path

    def _resolve_parent_and_name(self, npath: str) -> tuple[DirNode, str]:
        if npath == "/":
            raise FileExistsError(errno.EEXIST, "File exists", npath)
        parent = self._resolve(posixpath.dirname(npath) or "/")
        if not isinstance(parent, DirNode):
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", npath)
        return parent, posixpath.basename(npath)

    # -- tree construction --

    def mkdir(self, path: str, exist_ok: bool = False) -> None:
        """Create *path* and any missing parents."""
        npath = self._np(path)
        with self._global_lock:
            current = self._root
            parts = [p for p in npath.split("/") if p]
            for i, part in enumerate(parts):
                child_id = current.children.get(part)
                if child_id is None:
                    new_dir = self._alloc_dir()
                    current.children[part] = new_dir.node_id
                    current = new_dir
                    continue
                child = self._nodes[child_id]
                if isinstance(child, SymlinkNode):
                    child = self._resolve("/" + "/".join(parts[: i + 1]))
                if not isinstance(child, DirNode):
                    raise FileExistsError(errno.EEXIST, "File exists", path)
                if i == len(parts) - 1 and not exist_ok:
                    raise FileExistsError(errno.EEXIST, "Directory exists", path)
                current = child

    def touch(self, path: str) -> None:
        npath = self._np(path)
        with self._global_lock:
            self._ensure_parents(npath)
            parent, name = self._resolve_parent_and_name(npath)
            child_id = parent.children.get(name)
            if child_id is not None:
                node = self._nodes[child_id]
                if isinstance(node, FileNode):
                    return
                raise FileExistsError(errno.EEXIST, "File exists", path)
            self._attach(npath, FileNode(self._alloc_id()))

    def symlink(self, target: str, path: str) -> None:
        npath = self._np(path)
        with self._global_lock:
            self._attach(npath, SymlinkNode(self._alloc_id(), target))

    def remove(self, path: str) -> None:
        """Remove a file, a symlink, or an empty directory."""
        npath = self._np(path)
        with self._global_lock:
            node = self._resolve(npath, follow_last=False)
            if isinstance(node, DirNode) and node.children:
                raise OSError(errno.ENOTEMPTY, "Directory not empty", path)
            if node is self._root:
                raise ValueError("Cannot remove the root directory.")
            parent, name = self._resolve_parent_and_name(npath)
            del parent.children[name]
            del self._nodes[node.node_id]

    def set_readable(self, path: str, readable: bool) -> None:
        """Make listing *path* fail with a permission error, or stop doing so."""
        with self._global_lock:
            node = self._resolve(self._np(path))
            if not isinstance(node, DirNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            node.readable = readable

    def populate(self, paths: Iterable[str]) -> None:
        """Create every path in *paths*; a trailing ``/`` marks a directory."""
        with self._global_lock:
            for path in paths:
                if path.endswith("/"):
                    self.mkdir(path, exist_ok=True)
                else:
                    self.touch(path)

    def _ensure_parents(self, npath: str) -> None:
        parent_path = posixpath.dirname(npath) or "/"
        try:
            self._resolve(parent_path)
        except FileNotFoundError:
            self.mkdir(parent_path, exist_ok=True)

    # -- DirectoryAccessor --

    def scandir(self, path: str) -> list[DirEntry]:
        npath = self._np(path)
        with self._global_lock:
            node = self._resolve(npath)
            if not isinstance(node, DirNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            if not node.readable:
                raise DirPermissionError(errno.EACCES, "Permission denied", path)
            snapshot = list(node.children.items())
            entries: list[DirEntry] = []
            for name, child_id in snapshot:
                child = self._nodes[child_id]
                if isinstance(child, SymlinkNode):
                    entries.append(DirEntry(name, self._points_to_dir(npath, name), True))
                else:
                    entries.append(DirEntry(name, isinstance(child, DirNode), False))
        return entries

    def _points_to_dir(self, dir_path: str, name: str) -> bool:
        try:
            return isinstance(self._resolve(posixpath.join(dir_path, name)), DirNode)
        except OSError:
            return False

    def stat(self, path: str) -> DirStat:
        with self._global_lock:
            node = self._resolve(self._np(path))
            return DirStat(is_dir=isinstance(node, DirNode), is_symlink=False)

    def lstat(self, path: str) -> DirStat:
        npath = self._np(path)
        with self._global_lock:
            node = self._resolve(npath, follow_last=False)
            if isinstance(node, SymlinkNode):
                return DirStat(is_dir=self._points_to_dir(npath, ""), is_symlink=True)
            return DirStat(is_dir=isinstance(node, DirNode), is_symlink=False)

    def getcwd(self) -> str:
        with self._global_lock:
            return self._cwd

    def chdir(self, path: str) -> None:
        npath = self._np(path)
        with self._global_lock:
            node = self._resolve(npath)
            if not isinstance(node, DirNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            self._cwd = npath

    def abspath(self, path: str) -> str:
        return self._np(path)
