"""Base protocol for blob container implementations."""

from itertools import islice
from typing import BinaryIO, Iterator, Optional, Protocol

from ..storage_models import BlobItem


class BlobContainer(Protocol):
    """
    Protocol for a read-only blob container.

    Implementations are assumed thread-safe and already authenticated.
    """

    name: str
    account_name: str

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        """
        List blobs whose name starts with prefix.

        The iterator is lazy, finite and not restartable. Ordering is
        whatever the store returns.

        Args:
            prefix: Name prefix ("" lists the whole container)

        Returns:
            Iterator of BlobItem
        """
        ...

    def open_read(self, name: str) -> BinaryIO:
        """
        Open a blob for reading from the start.

        The caller owns the returned stream and must close it.

        Args:
            name: Exact blob name

        Returns:
            Readable binary stream

        Raises:
            FileNotFoundError: If the blob does not exist
        """
        ...


def first_match(container: BlobContainer, path: str, exact: bool = True) -> Optional[BlobItem]:
    """
    Look up a single blob by prefix listing.

    Only the first listing result is consumed, so large prefixes are never
    fully enumerated. Stores list names in lexicographic order, which puts an
    exact match ahead of every longer name sharing its prefix.

    Args:
        container: Container to query
        path: Requested blob name
        exact: If True, a first result with a different name counts as
            not found. If False, a request for "report" may return
            "report-2024.csv".

    Returns:
        BlobItem or None
    """
    first = next(islice(container.list_blobs(prefix=path), 1), None)
    if first is None:
        return None
    if exact and first.name != path:
        return None
    return first
