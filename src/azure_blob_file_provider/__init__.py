"""azure-blob-file-provider: file lookups over Azure Blob Storage with a
time-bounded local disk cache."""

from .constants import PROVIDER_VERSION
from .errors import (
    AmbiguousCredentialsError,
    ConfigError,
    ContainerNotFoundError,
    MissingCredentialsError,
    ProviderError,
    StorageError,
    UnsupportedProviderError,
)
from .file_info import (
    BlobFileInfo,
    DirectoryContents,
    FileInfo,
    LocalFileInfo,
    NotFoundFileInfo,
)
from .options import BlobProviderOptions
from .provider import AzureBlobFileProvider

__version__ = PROVIDER_VERSION

__all__ = [
    "AzureBlobFileProvider",
    "BlobProviderOptions",
    "FileInfo",
    "BlobFileInfo",
    "LocalFileInfo",
    "NotFoundFileInfo",
    "DirectoryContents",
    "ProviderError",
    "ConfigError",
    "MissingCredentialsError",
    "AmbiguousCredentialsError",
    "UnsupportedProviderError",
    "StorageError",
    "ContainerNotFoundError",
]
