"""Path sanitizing for the local cache.

Request paths are untrusted. Before one is used under the cache root it is
escaped (characters that cannot appear in a local file name become ``%XX``)
and resolved with a double check: a segment-depth walk that rejects ``..``
escapes, followed by a canonical prefix check that catches symlinks and other
aliasing the segment walk cannot see.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

SEPARATORS = ("/", "\\")

# Characters invalid in a file name on at least one supported platform.
# Separators are excluded: they keep their meaning in the cache layout.
INVALID_PATH_CHARS = frozenset(
    [chr(c) for c in range(32)] + ['"', "<", ">", ":", "|", "?", "*"]
)


def escape_invalid_path_chars(path: str) -> str:
    """Replace characters invalid in a local file name with ``%XX`` escapes.

    Args:
        path: Request path (may contain separators)

    Returns:
        Path safe to use as a local file name. Escaped names are never
        converted back; the remote key is kept separately.
    """
    return "".join(
        f"%{ord(c):02X}" if c in INVALID_PATH_CHARS else c
        for c in path
    )


def trim_leading_separators(path: str) -> str:
    """Strip leading ``/`` and ``\\`` so the path is root-relative."""
    return path.lstrip("".join(SEPARATORS))


def _split_segments(path: str) -> list[str]:
    return path.replace("\\", "/").split("/")


def path_navigates_above_root(path: str) -> bool:
    """Check whether ``..`` segments would walk above the starting directory.

    ``.`` and empty segments are ignored, ``..`` goes up one level and any
    other segment goes down one.

    Examples:
        "a/../b"      -> False
        "a/../../b"   -> True
        "./..//x"     -> True
    """
    depth = 0
    for segment in _split_segments(path):
        if segment in ("", "."):
            continue
        if segment == "..":
            depth -= 1
            if depth < 0:
                return True
        else:
            depth += 1
    return False


def _is_underneath_root(root: Path, full_path: Path) -> bool:
    """Case-insensitive, component-wise prefix check."""
    root_parts = [p.lower() for p in root.parts]
    path_parts = [p.lower() for p in full_path.parts]
    return path_parts[:len(root_parts)] == root_parts


def resolve_under_root(root: Union[str, Path], relative_path: str) -> Optional[Path]:
    """Resolve a relative path under root, or reject it.

    Args:
        root: Cache root directory
        relative_path: Escaped, root-relative path

    Returns:
        Canonical absolute path under root, or None if the path would
        escape root (traversal attempt) or cannot be resolved.

    Security:
        The segment walk rejects ``..`` escapes before touching the
        filesystem. The canonical check then rejects anything whose
        resolved location (symlinks followed) is not under the resolved root.
    """
    if path_navigates_above_root(relative_path):
        return None

    try:
        root_resolved = Path(root).resolve()
        full_path = (root_resolved / relative_path).resolve()
    except (OSError, ValueError, RuntimeError):
        # Embedded NULs, symlink loops, over-long names
        return None

    if not _is_underneath_root(root_resolved, full_path):
        return None

    return full_path
