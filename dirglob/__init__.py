from ._accessor import DirectoryAccessor, LocalAccessor
from ._chdir import ChdirToken, WorkingDirectoryStack
from ._exceptions import (
    ChdirConflictWarning,
    ClosedDirectoryError,
    CrossThreadChdirError,
    DirConfigError,
    DirNotFoundError,
    DirPermissionError,
    DirResourceExhaustedError,
)
from ._handle import DirectoryListing, DirectoryResource
from ._memory import MemoryAccessor
from ._options import MatchOptions
from ._pattern import FNM_CASEFOLD, FNM_DOTMATCH, FNM_NOESCAPE, Pattern, Segment
from ._service import (
    DirectoryService,
    chdir,
    children,
    compile,
    default_service,
    each_child,
    entries,
    foreach,
    getcwd,
    glob,
    iglob,
    match,
    open_directory,
    scoped,
    with_directory,
)
from ._typing import DirEntry, DirStat

__all__ = [
    "DirectoryAccessor",
    "LocalAccessor",
    "MemoryAccessor",
    "DirectoryService",
    "DirectoryResource",
    "DirectoryListing",
    "WorkingDirectoryStack",
    "ChdirToken",
    "MatchOptions",
    "Pattern",
    "Segment",
    "DirEntry",
    "DirStat",
    "FNM_NOESCAPE",
    "FNM_DOTMATCH",
    "FNM_CASEFOLD",
    "DirConfigError",
    "DirNotFoundError",
    "DirPermissionError",
    "DirResourceExhaustedError",
    "ClosedDirectoryError",
    "ChdirConflictWarning",
    "CrossThreadChdirError",
    "compile",
    "match",
    "glob",
    "iglob",
    "open_directory",
    "entries",
    "children",
    "foreach",
    "each_child",
    "getcwd",
    "chdir",
    "scoped",
    "with_directory",
    "default_service",
]
__version__ = "0.1.0"
