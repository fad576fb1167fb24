"""
Helpers for working with TypeScript source file paths.
"""

import re
from pathlib import Path

# Longest first so that "x.d.ts" loses ".d.ts" and not just ".ts"
SOURCE_EXTENSIONS = (".d.ts", ".tsx", ".ts")

_WINDOWS_ABSOLUTE = re.compile(r"^[A-Za-z]:[/\\]")


def strip_source_ext(path: str) -> str:
    """Remove a known TypeScript source extension from the end of path, if any."""
    for ext in SOURCE_EXTENSIONS:
        if path.endswith(ext):
            return path[: -len(ext)]
    return path


def source_file_exists(path: Path) -> bool:
    """
    Check whether path names an existing source file.

    The path may carry its extension already or be extensionless, in which
    case each known source extension is tried.
    """
    if path.is_file():
        return True
    return any(Path(str(path) + ext).is_file() for ext in SOURCE_EXTENSIONS)


def join_module_path(root: str, postfix: str) -> Path:
    """Substitute the remainder matched by a wildcard into a mapping target."""
    return Path(root + postfix).resolve()


def is_path_absolute(path: str) -> bool:
    """
    Check whether a configured path is absolute.

    Both POSIX and Windows forms are accepted regardless of the host OS, so a
    config written on one platform is read the same way on the other.
    """
    if not path:
        return False
    return path.startswith("/") or bool(_WINDOWS_ABSOLUTE.match(path))
