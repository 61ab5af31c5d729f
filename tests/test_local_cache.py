"""Test LocalCacheStore implementation."""

import io
import os
from unittest.mock import patch

import pytest

from azure_blob_file_provider.local_cache import LocalCacheStore
from azure_blob_file_provider.utils import mtime_ns_to_datetime

from tests.conftest import T0, T1, set_mtime


class TrackingStream(io.BytesIO):
    """BytesIO that remembers whether it was closed."""

    was_closed = False

    def close(self):
        self.was_closed = True
        super().close()


class FailingStream(io.RawIOBase):
    """Stream that yields some bytes and then fails, like a dropped download."""

    def __init__(self, first: bytes):
        self._first = first
        self.was_closed = False

    def readable(self):
        return True

    def readinto(self, b):
        if self._first:
            n = len(self._first)
            b[:n] = self._first
            self._first = b""
            return n
        raise ConnectionError("connection reset mid-download")

    def close(self):
        self.was_closed = True
        super().close()


class TestLocalCacheStoreBasic:
    """Test construction and lookups."""

    @pytest.fixture
    def store(self, tmp_path):
        """Create store in a temp directory."""
        return LocalCacheStore(tmp_path / "cache")

    def test_init_creates_root(self, tmp_path):
        """Test that initialization creates the root directory."""
        root = tmp_path / "a" / "b" / "cache"
        LocalCacheStore(root)
        assert root.is_dir()

    def test_lookup_missing(self, store):
        """Test lookup of a path that is not cached."""
        assert store.lookup("missing.txt") is None

    def test_lookup_directory_is_absent(self, store):
        """Test that directories are not reported as cache entries."""
        (store.root / "docs").mkdir()
        assert store.lookup("docs") is None
        assert store.lookup("") is None

    def test_lookup_existing(self, store):
        """Test lookup reports size and mtime."""
        path = store.root / "dir" / "file.txt"
        path.parent.mkdir()
        path.write_bytes(b"hello")
        set_mtime(path, T0)

        info = store.lookup("dir/file.txt")
        assert info is not None
        assert info.exists
        assert not info.is_directory
        assert info.name == "file.txt"
        assert info.length == 5
        assert info.last_modified == T0
        with info.create_read_stream() as f:
            assert f.read() == b"hello"

    def test_lookup_rejects_traversal(self, store, tmp_path):
        """Test that lookups never stat outside root."""
        (tmp_path / "outside.txt").write_text("secret")
        assert store.full_path("../outside.txt") is None
        assert store.lookup("../outside.txt") is None


class TestLocalCacheWrite:
    """Test atomic writes."""

    @pytest.fixture
    def store(self, tmp_path):
        """Create store in a temp directory."""
        return LocalCacheStore(tmp_path / "cache")

    def test_write_creates_entry(self, store):
        """Test that write stores content and mtime."""
        target = store.full_path("deep/nested/report.csv")
        stream = TrackingStream(b"a,b,c\n1,2,3\n")

        assert store.write(target, stream, T0) is True

        assert target.read_bytes() == b"a,b,c\n1,2,3\n"
        assert mtime_ns_to_datetime(os.stat(target).st_mtime_ns) == T0
        assert stream.was_closed

    def test_write_overwrites(self, store):
        """Test that write replaces an existing entry."""
        target = store.full_path("file.txt")
        target.write_bytes(b"old content")
        set_mtime(target, T0)

        assert store.write(target, io.BytesIO(b"new"), T1)

        info = store.lookup("file.txt")
        assert info.length == 3
        assert info.last_modified == T1
        assert target.read_bytes() == b"new"

    def test_write_sub_second_timestamp(self, store):
        """Test that microsecond timestamps survive the round trip."""
        target = store.full_path("precise.bin")
        when = T0.replace(microsecond=123456)
        assert store.write(target, io.BytesIO(b"x"), when)
        assert store.lookup("precise.bin").last_modified == when

    def test_write_leaves_no_temp_files(self, store):
        """Test that the partial file is renamed, not left behind."""
        target = store.full_path("file.txt")
        store.write(target, io.BytesIO(b"data"), T0)
        assert sorted(p.name for p in store.root.iterdir()) == ["file.txt"]

    def test_write_permissions(self, store):
        """Test that cached files are readable (not the 0o600 of mkstemp)."""
        target = store.full_path("file.txt")
        store.write(target, io.BytesIO(b"data"), T0)
        assert oct(target.stat().st_mode)[-3:] == "644"

    def test_write_failure_returns_false(self, store):
        """Test that a blocked directory is reported, not raised."""
        (store.root / "blocked").write_text("I am a file, not a directory")
        target = store.full_path("blocked/file.txt")
        stream = TrackingStream(b"data")

        assert store.write(target, stream, T0) is False
        assert stream.was_closed

    def test_stream_failure_keeps_old_entry(self, store):
        """Test that a failed copy never exposes a partial file."""
        target = store.full_path("file.txt")
        target.write_bytes(b"complete old content")
        set_mtime(target, T0)
        stream = FailingStream(b"partial")

        assert store.write(target, stream, T1) is False

        assert stream.was_closed
        assert target.read_bytes() == b"complete old content"
        assert store.lookup("file.txt").last_modified == T0
        assert sorted(p.name for p in store.root.iterdir()) == ["file.txt"]

    def test_replace_failure_cleans_up(self, store):
        """Test that a failed rename removes the temp file."""
        target = store.full_path("file.txt")

        with patch("azure_blob_file_provider.local_cache.os.replace",
                   side_effect=PermissionError("denied")):
            assert store.write(target, io.BytesIO(b"data"), T0) is False

        assert not target.exists()
        assert list(store.root.iterdir()) == []

    def test_write_logs_failure(self, store, caplog):
        """Test that failures are logged as warnings."""
        (store.root / "blocked").write_text("file")
        target = store.full_path("blocked/file.txt")

        with caplog.at_level("WARNING", logger="azure_blob_file_provider.local_cache"):
            store.write(target, io.BytesIO(b"data"), T0)

        assert "Failed to write local cache copy" in caplog.text
