"""Blob file provider: file lookups served from a blob container through a
time-bounded local disk cache.

A lookup trusts the local copy while its trust window is open. Once the
window lapses, the blob's listing metadata is checked; the local copy is
rewritten only when size or last-modified differ, and the window is re-armed
either way. Remote results always stream from the blob, never from the
copy just written.
"""

import logging
import time
from typing import Callable, Mapping, Optional

from .file_info import BlobFileInfo, DirectoryContents, FileInfo, NotFoundFileInfo
from .freshness import FreshnessTracker, cache_key
from .local_cache import LocalCacheStore
from .options import BlobProviderOptions
from .paths import escape_invalid_path_chars, trim_leading_separators
from .storage import BlobContainer, first_match, make_container

logger = logging.getLogger(__name__)


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Parse "true"/"false" (case-insensitive, whitespace ignored).

    Returns:
        The boolean, or None if value is missing or not a boolean literal
    """
    if value is None:
        return None
    text = value.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


class AzureBlobFileProvider:
    """Looks up files in a blob container, caching content on local disk.

    Attributes:
        options: Validated provider options
        container: Remote blob container
        cache: Local cache store
        freshness: Trust windows per cache key

    Thread Safety:
        Every lookup is independent and re-entrant. Concurrent misses for the
        same path may each query the container and rewrite the cache entry;
        the last writer wins.
    """

    def __init__(
        self,
        options: BlobProviderOptions,
        container: Optional[BlobContainer] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize provider.

        Args:
            options: Validated provider options
            container: Container to serve; built from options if None
            clock: Returns the current time in epoch seconds
        """
        self.options = options
        self.container = container if container is not None else make_container(options)
        self.cache = LocalCacheStore(options.resolve_cache_root(self.container.account_name))
        self.freshness = FreshnessTracker(clock=clock)

    @property
    def cache_root(self):
        return self.cache.root

    def should_ignore_cache(self, query: Mapping[str, str]) -> bool:
        """Read the per-request cache override from request query parameters."""
        return parse_bool(query.get(self.options.ignore_cache_query_key)) is True

    def get_file_info(self, subpath: str, ignore_cache: bool = False) -> FileInfo:
        """Locate a file.

        Args:
            subpath: Request path; leading separators are ignored
            ignore_cache: Skip the trust-window check and leave the window
                unchanged for this request

        Returns:
            LocalFileInfo on a trusted local hit, BlobFileInfo when the blob
            exists, NotFoundFileInfo otherwise

        Raises:
            Exception: Remote transport and auth errors propagate unchanged
        """
        escaped_relative_path = trim_leading_separators(escape_invalid_path_chars(subpath))
        relative_path = trim_leading_separators(subpath)

        # None means traversal rejection: no local read or write for this lookup
        full_path = self.cache.full_path(escaped_relative_path)
        key = cache_key(full_path) if full_path is not None else None
        local = self.cache.stat(full_path) if full_path is not None else None

        if (not ignore_cache and local is not None
                and self.freshness.is_fresh(key)):
            logger.debug("Local cache hit: %s", relative_path)
            return local

        item = first_match(self.container, relative_path, exact=self.options.exact_match)
        if item is None:
            logger.debug("Blob not found: %s", relative_path)
            return NotFoundFileInfo(subpath)

        blob = BlobFileInfo(self.container, item)

        if full_path is None:
            logger.debug("Path rejected for local cache, serving remote only: %s", subpath)
            return blob

        if (local is None
                or local.length != blob.length
                or local.last_modified != blob.last_modified):
            logger.debug("Refreshing local cache: %s", relative_path)
            try:
                stream = blob.create_read_stream()
            except FileNotFoundError as e:
                # Deleted between listing and download
                logger.warning("Failed to open blob %s: %s", item.name, e)
            else:
                if not self.cache.write(full_path, stream, blob.last_modified):
                    logger.debug("Continuing without local copy: %s", relative_path)

        if not ignore_cache:
            self.freshness.mark_fresh(key, self.options.local_cache_timeout)

        return blob

    def get_directory_contents(self, subpath: str) -> DirectoryContents:
        """List blobs under a prefix. Listings are never cached."""
        return DirectoryContents(self.container, trim_leading_separators(subpath))

    def watch(self, filter: str) -> None:
        """Change notification is not supported; callers must poll."""
        return None
