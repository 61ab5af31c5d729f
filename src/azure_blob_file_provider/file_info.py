"""File and directory lookup results.

These are what the serving layer consumes: metadata plus a way to open the
content. Every result reports is_directory=False; directories are only ever
represented by DirectoryContents.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Protocol

from .storage.base import BlobContainer
from .storage_models import BlobItem
from .utils import EPOCH


class FileInfo(Protocol):
    """Metadata and content access for one file."""

    exists: bool
    is_directory: bool
    name: str
    length: int
    last_modified: datetime
    physical_path: Optional[Path]

    def create_read_stream(self) -> BinaryIO:
        """Open the content; the caller must close the stream."""
        ...


@dataclass(frozen=True)
class LocalFileInfo:
    """A file in the local cache."""
    physical_path: Path
    length: int
    last_modified: datetime
    exists: bool = True
    is_directory: bool = False

    @property
    def name(self) -> str:
        return self.physical_path.name

    def create_read_stream(self) -> BinaryIO:
        return open(self.physical_path, "rb")


@dataclass(frozen=True)
class BlobFileInfo:
    """A blob in the remote container."""
    container: BlobContainer = field(repr=False, compare=False)
    item: BlobItem
    exists: bool = True
    is_directory: bool = False
    physical_path: Optional[Path] = None

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def length(self) -> int:
        return self.item.size

    @property
    def last_modified(self) -> datetime:
        return self.item.last_modified

    def create_read_stream(self) -> BinaryIO:
        """Open the blob itself, never a local copy."""
        return self.container.open_read(self.item.name)


@dataclass(frozen=True)
class NotFoundFileInfo:
    """Result for a path with no matching blob."""
    name: str
    exists: bool = False
    is_directory: bool = False
    length: int = -1
    last_modified: datetime = EPOCH
    physical_path: Optional[Path] = None

    def create_read_stream(self) -> BinaryIO:
        raise FileNotFoundError(f"The file {self.name} does not exist.")


class DirectoryContents:
    """
    Blobs sharing a name prefix.

    The listing is taken once, at construction; exists is True iff at least
    one blob matched.
    """

    def __init__(self, container: BlobContainer, prefix: str):
        self.prefix = prefix
        self._files: List[BlobFileInfo] = [
            BlobFileInfo(container, item) for item in container.list_blobs(prefix=prefix)
        ]

    @property
    def exists(self) -> bool:
        return len(self._files) > 0

    def __iter__(self) -> Iterator[BlobFileInfo]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)
