"""Local disk cache of blob content.

This module stores copies of remote blobs under a cache root, keyed by the
escaped request path. It answers "is this path cached, with what
size/timestamp" and overwrites entries atomically.

Key Features:
- Atomic replacement: content goes to a temp file in the target's directory,
  then os.replace() swaps it in, so readers see the old or the new file and
  never a partial one
- The blob's last-modified time is stored as the file's mtime
- Protection against path traversal attacks
- Write failures are reported as a status value, not raised

Technical Considerations:
- The temp file lives next to the target so the replace never crosses
  volumes
- No locks: concurrent writers to one entry are last-writer-wins
- Entries are never evicted; stale files stay until overwritten
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import stat
import tempfile
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional

from .constants import PARTIAL_PREFIX
from .file_info import LocalFileInfo
from .paths import resolve_under_root
from .utils import datetime_to_ns, mtime_ns_to_datetime

logger = logging.getLogger(__name__)

COPY_BUFSIZE = 1024 * 1024

# ---- Platform-specific helpers ---------------------------------------------

def _fsync_dir(path: Path) -> None:
    """Fsync a directory to ensure directory entry updates are durable.

    This is a best-effort operation that may not work on all platforms/filesystems.
    Windows and some filesystems don't support directory fsync.
    """
    try:
        # Use O_DIRECTORY flag if available (Linux)
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY

        fd = os.open(str(path), flags)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        # Expected on Windows or filesystems that don't support directory fsync
        logger.debug("Directory fsync not supported for %s", path)

# ---- LocalCacheStore implementation ----------------------------------------

class LocalCacheStore:
    """Physical-directory-backed cache of blob copies.

    Directory Structure:
        <cache_root>/<escaped request path>

    Attributes:
        root: Cache root directory

    Thread Safety:
        Safe for concurrent use by threads and by processes sharing the root.
        Atomicity comes from os.replace(), not from locking.
    """

    def __init__(self, root: Path):
        """Initialize the store, creating root if needed.

        Args:
            root: Cache root directory
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def full_path(self, relative_path: str) -> Optional[Path]:
        """Map an escaped relative path to its location under root.

        Returns:
            Absolute path, or None if the path would escape root
        """
        return resolve_under_root(self.root, relative_path)

    def lookup(self, relative_path: str) -> Optional[LocalFileInfo]:
        """Stat the cached copy of a path.

        Args:
            relative_path: Escaped, root-relative path

        Returns:
            LocalFileInfo, or None if rejected, missing, or not a regular file
        """
        path = self.full_path(relative_path)
        if path is None:
            return None
        return self.stat(path)

    def stat(self, full_path: Path) -> Optional[LocalFileInfo]:
        """Stat an already-resolved path under root."""
        try:
            st = os.stat(full_path)
        except (OSError, ValueError):
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return LocalFileInfo(
            physical_path=Path(full_path),
            length=st.st_size,
            last_modified=mtime_ns_to_datetime(st.st_mtime_ns),
        )

    def write(self, full_path: Path, stream: BinaryIO, last_modified: datetime) -> bool:
        """Replace the cached copy at full_path with the stream's content.

        The stream is always closed. Failures (disk full, permission denied,
        directory removed concurrently, remote read errors mid-copy) are
        logged and reported as False; the caller still has the remote data.

        Args:
            full_path: Absolute target path from full_path()
            stream: Content to copy; consumed and closed
            last_modified: Timestamp stored as the file's mtime

        Returns:
            True if the entry was replaced
        """
        full_path = Path(full_path)
        tmppath: Optional[str] = None
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)

            # Temp file in the target directory for an atomic same-volume rename
            fd, tmppath = tempfile.mkstemp(
                prefix=f"{PARTIAL_PREFIX}{full_path.name}-",
                dir=full_path.parent,
            )
            with os.fdopen(fd, "wb") as f:
                shutil.copyfileobj(stream, f, COPY_BUFSIZE)
                f.flush()
                os.fsync(f.fileno())

            mtime_ns = datetime_to_ns(last_modified)
            # mkstemp creates 0o600; cache copies are ordinary readable files
            os.chmod(tmppath, 0o644)
            os.utime(tmppath, ns=(mtime_ns, mtime_ns))

            os.replace(tmppath, full_path)
            tmppath = None

            _fsync_dir(full_path.parent)
            logger.debug("Cache entry replaced: %s", full_path)
            return True

        except Exception as e:
            logger.warning("Failed to write local cache copy %s: %s", full_path, e)
            return False

        finally:
            if tmppath is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmppath)
            with contextlib.suppress(Exception):
                stream.close()
