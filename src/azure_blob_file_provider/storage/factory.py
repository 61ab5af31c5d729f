"""Factory for creating blob container instances."""

from pathlib import Path

from ..errors import UnsupportedProviderError
from ..options import BlobProviderOptions
from .azure import AzureBlobContainer
from .base import BlobContainer
from .fs import FilesystemBlobContainer


def make_container(options: BlobProviderOptions) -> BlobContainer:
    """
    Create blob container instance based on options.

    Args:
        options: Validated provider options

    Returns:
        BlobContainer instance

    Raises:
        UnsupportedProviderError: If provider is not supported
        ContainerNotFoundError: If an fs container directory is missing
    """
    if options.provider == "azure":
        return AzureBlobContainer(
            options.container_name,
            connection_string=options.connection_string,
            service_uri=options.service_uri,
            token=options.token,
        )

    elif options.provider == "fs":
        return FilesystemBlobContainer(Path(options.container_name))

    else:
        raise UnsupportedProviderError(options.provider)
