from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._exceptions import DirConfigError
from ._pattern import FNM_CASEFOLD, FNM_DOTMATCH, FNM_NOESCAPE

GLOB_OPTION_KEYS = ("base", "sort")
OPEN_OPTION_KEYS = ("encoding",)


def check_option_keys(options: dict[str, Any], allowed: tuple[str, ...]) -> None:
    unknown = [key for key in options if key not in allowed]
    if unknown:
        raise DirConfigError(
            "unknown keyword%s: %s"
            % ("s" if len(unknown) > 1 else "", ", ".join(repr(k) for k in unknown))
        )


@dataclass(frozen=True)
class MatchOptions:
    case_fold: bool = False
    include_dotfiles: bool = False
    noescape: bool = False
    base: Any = None
    sort: bool = True

    def __post_init__(self) -> None:
        if self.sort is None:
            object.__setattr__(self, "sort", True)
        elif not isinstance(self.sort, bool):
            raise DirConfigError(f"expected true or false as sort: {self.sort!r}")

    @property
    def flags(self) -> int:
        return (
            (FNM_CASEFOLD if self.case_fold else 0)
            | (FNM_DOTMATCH if self.include_dotfiles else 0)
            | (FNM_NOESCAPE if self.noescape else 0)
        )

    @classmethod
    def from_keywords(cls, flags: int = 0, **options: Any) -> MatchOptions:
        """Build options from glob-style ``flags`` and keyword arguments."""
        check_option_keys(options, GLOB_OPTION_KEYS)
        if isinstance(flags, bool) or not isinstance(flags, int):
            raise DirConfigError(f"flags must be an int: {flags!r}")
        return cls(
            case_fold=bool(flags & FNM_CASEFOLD),
            include_dotfiles=bool(flags & FNM_DOTMATCH),
            noescape=bool(flags & FNM_NOESCAPE),
            base=options.get("base"),
            sort=options.get("sort"),
        )
