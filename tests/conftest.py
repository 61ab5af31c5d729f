"""Shared test fixtures and utilities."""

import io
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from azure_blob_file_provider.options import BlobProviderOptions
from azure_blob_file_provider.provider import AzureBlobFileProvider
from azure_blob_file_provider.storage_models import BlobItem
from azure_blob_file_provider.utils import datetime_to_ns

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 1, 12, 6, 40, tzinfo=timezone.utc)


class ManualClock:
    """Clock the tests advance by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryContainer:
    """In-memory blob container that counts remote calls."""

    def __init__(self, name: str = "test-container", account_name: str = "testaccount"):
        self.name = name
        self.account_name = account_name
        self.blobs = {}
        self.list_calls = 0
        self.open_calls = 0
        self.list_error = None
        self._lock = threading.Lock()

    def put(self, name: str, content: bytes, last_modified: datetime = T0) -> None:
        with self._lock:
            self.blobs[name] = (content, last_modified)

    def list_blobs(self, prefix: str = ""):
        with self._lock:
            self.list_calls += 1
            if self.list_error is not None:
                raise self.list_error
            snapshot = sorted(self.blobs.items())
        return (
            BlobItem(name=name, size=len(content), last_modified=lm)
            for name, (content, lm) in snapshot
            if name.startswith(prefix)
        )

    def open_read(self, name: str):
        with self._lock:
            self.open_calls += 1
            if name not in self.blobs:
                raise FileNotFoundError(f"Blob not found: {name}")
            content, _ = self.blobs[name]
        return io.BytesIO(content)


def set_mtime(path: Path, when: datetime) -> None:
    """Set a file's mtime exactly."""
    ns = datetime_to_ns(when)
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return ManualClock()


@pytest.fixture
def remote():
    """Empty in-memory container."""
    return MemoryContainer()


@pytest.fixture
def cache_root(tmp_path):
    """Local cache root (not created; the store creates it)."""
    return tmp_path / "cache"


@pytest.fixture
def make_provider(remote, cache_root, clock):
    """Build a provider over the in-memory container."""
    def factory(**overrides):
        data = {
            "container_name": remote.name,
            "connection_string": "UseDevelopmentStorage=true",
            "local_cache_root": str(cache_root),
            "local_cache_timeout": 300,
        }
        data.update(overrides)
        options = BlobProviderOptions(**data)
        return AzureBlobFileProvider(options, container=remote, clock=clock)
    return factory


@pytest.fixture
def provider(make_provider):
    """Provider with default options."""
    return make_provider()


@pytest.fixture
def remote_dir(tmp_path):
    """Directory backing a FilesystemBlobContainer."""
    d = tmp_path / "remote"
    d.mkdir()
    return d


@pytest.fixture
def put_file(remote_dir):
    """Write a blob file with a given mtime into remote_dir."""
    def put(name: str, content: bytes, last_modified: datetime = T0) -> Path:
        path = remote_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        set_mtime(path, last_modified)
        return path
    return put


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider environment variables."""
    for key in list(os.environ):
        if key.startswith("AZURE_BLOB_FP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("AZURE_STORAGE_CONNECTION_STRING", raising=False)
    return monkeypatch
