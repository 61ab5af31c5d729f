"""Filesystem blob container implementation for testing."""

import os
from pathlib import Path
from typing import BinaryIO, Iterator

from ..errors import ContainerNotFoundError
from ..storage_models import BlobItem
from ..utils import mtime_ns_to_datetime


class FilesystemBlobContainer:
    """
    Directory-backed container for unit tests and local development
    (avoids Azurite dependency).

    Blob names are "/"-joined paths relative to base_dir. last_modified
    is the file modification time.
    """

    def __init__(self, base_dir: Path, account_name: str = "local"):
        """
        Initialize filesystem container.

        Args:
            base_dir: Directory holding the blobs
            account_name: Name used to namespace the default cache root
        """
        self.base_dir = Path(base_dir)
        if not self.base_dir.is_dir():
            raise ContainerNotFoundError(str(self.base_dir))
        self.name = self.base_dir.name
        self.account_name = account_name

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        """
        List files whose relative name starts with prefix, sorted by name.

        Args:
            prefix: Name prefix

        Returns:
            Iterator of BlobItem
        """
        names = sorted(
            p.relative_to(self.base_dir).as_posix()
            for p in self.base_dir.rglob("*")
            if p.is_file()
        )
        for name in names:
            if not name.startswith(prefix):
                continue
            try:
                st = os.stat(self.base_dir / name)
            except FileNotFoundError:
                # Deleted between the walk and the stat
                continue
            yield BlobItem(
                name=name,
                size=st.st_size,
                last_modified=mtime_ns_to_datetime(st.st_mtime_ns),
            )

    def open_read(self, name: str) -> BinaryIO:
        """
        Open a blob file for reading.

        Args:
            name: Blob name

        Returns:
            Binary file object
        """
        path = self.base_dir / name
        if not path.is_file():
            raise FileNotFoundError(f"Blob not found: {name}")
        return open(path, "rb")
