"""Azure blob storage implementation."""

import io
from typing import BinaryIO, Iterator, Optional

from ..storage_models import BlobItem
from ..utils import EPOCH


class _DownloadStream(io.RawIOBase):
    """Read-only raw stream over the chunks of a blob download."""

    def __init__(self, downloader):
        self._chunks = downloader.chunks()
        self._buffer = b""

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._buffer:
            try:
                self._buffer = next(self._chunks)
            except StopIteration:
                return 0
        n = min(len(b), len(self._buffer))
        b[:n] = self._buffer[:n]
        self._buffer = self._buffer[n:]
        return n


class AzureBlobContainer:
    """
    Read-only view of one Azure Blob Storage container.

    Authenticates with either a connection string or a service URI plus a
    shared access signature token.
    """

    def __init__(
        self,
        container: str,
        connection_string: Optional[str] = None,
        service_uri: Optional[str] = None,
        token: Optional[str] = None,
    ):
        """
        Initialize Azure blob container.

        Args:
            container: Container name
            connection_string: Azure Storage connection string
            service_uri: Blob service endpoint (used with token)
            token: SAS token (used with service_uri)
        """
        try:
            from azure.core.credentials import AzureSasCredential
            from azure.storage.blob import BlobServiceClient
        except ImportError:
            raise ImportError(
                "azure-storage-blob required for Azure blob storage. "
                "Install with: pip install azure-storage-blob"
            )

        if connection_string:
            self.client = BlobServiceClient.from_connection_string(connection_string)
        elif service_uri and token:
            self.client = BlobServiceClient(
                account_url=service_uri,
                credential=AzureSasCredential(token),
            )
        else:
            raise ValueError("connection_string or service_uri + token required")

        self.container_client = self.client.get_container_client(container)
        self.name = container
        self.account_name = self.container_client.account_name or "default"

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        """
        List blobs by prefix.

        Pages are fetched on demand, so taking only the first item costs a
        single request.

        Args:
            prefix: Name prefix

        Returns:
            Iterator of BlobItem
        """
        for props in self.container_client.list_blobs(name_starts_with=prefix or None):
            yield BlobItem(
                name=props.name,
                size=props.size or 0,
                last_modified=props.last_modified or EPOCH,
            )

    def open_read(self, name: str) -> BinaryIO:
        """
        Open a blob for streaming reads.

        Args:
            name: Exact blob name

        Returns:
            Buffered binary stream positioned at the start of the blob
        """
        from azure.core.exceptions import ResourceNotFoundError

        try:
            downloader = self.container_client.download_blob(name)
        except ResourceNotFoundError:
            raise FileNotFoundError(f"Blob not found: azure://{self.name}/{name}")

        return io.BufferedReader(_DownloadStream(downloader))
