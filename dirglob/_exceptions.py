class DirConfigError(ValueError):
    """Raised for a bad option key or value, or a malformed pattern argument."""


class DirNotFoundError(FileNotFoundError):
    """Raised when a directory (or a glob base) does not exist. Subclass of FileNotFoundError."""


class DirPermissionError(PermissionError):
    """Raised when the accessor is denied access to a directory. Subclass of PermissionError."""


class DirResourceExhaustedError(OSError):
    """Raised when the process runs out of file descriptors (EMFILE/ENFILE).

    The whole call fails; callers may retry once descriptors are released.
    """


class ClosedDirectoryError(ValueError):
    """Raised on any read/seek/tell of a closed DirectoryResource."""

    def __init__(self, path: str | None = None) -> None:
        self.path = path
        super().__init__("I/O operation on closed directory.")


class ChdirConflictWarning(RuntimeWarning):
    """Emitted when the thread owning a chdir scope changes directory again."""


class CrossThreadChdirError(RuntimeError):
    """Raised when a thread changes directory while another thread owns a chdir scope."""

    def __init__(self, owner: int, location: str) -> None:
        self.owner = owner
        self.location = location
        super().__init__(
            f"conflicting chdir during another chdir block "
            f"(scope owned by thread {owner}, entered at {location})"
        )
