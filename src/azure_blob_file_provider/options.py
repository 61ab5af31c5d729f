"""Provider options and their loaders."""

import os
import tempfile
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, model_validator

from .constants import (
    CONNECTION_STRING_ENV,
    DEFAULT_IGNORE_CACHE_QUERY_KEY,
    DEFAULT_LOCAL_CACHE_TIMEOUT,
    ENV_PREFIX,
    TEMP_SUBPATH,
)
from .errors import (
    AmbiguousCredentialsError,
    ConfigError,
    MissingCredentialsError,
    UnsupportedProviderError,
)

SUPPORTED_PROVIDERS = ("azure", "fs")


class BlobProviderOptions(BaseModel):
    """
    Options used to create a blob file provider.

    Azure credentials come in two forms: a connection string, or a service
    URI plus a SAS token. Exactly one form must be set. The "fs" provider
    serves a local directory (container_name is its path) and needs no
    credentials.
    """
    container_name: str = ""
    provider: str = "azure"                     # "azure" | "fs"

    # Credential form 1
    connection_string: Optional[str] = None
    # Credential form 2
    service_uri: Optional[str] = None
    token: Optional[str] = None

    # Local cache
    local_cache_root: Optional[str] = None      # Absolute path; None = temp dir
    local_cache_timeout: int = DEFAULT_LOCAL_CACHE_TIMEOUT
    ignore_cache_query_key: str = DEFAULT_IGNORE_CACHE_QUERY_KEY

    # Require the first prefix-listing result to be named exactly as requested
    exact_match: bool = True

    @model_validator(mode="after")
    def validate_options(self):
        """Reject invalid configuration at construction."""
        if not self.container_name:
            raise ConfigError("container_name cannot be empty.")

        if not self.ignore_cache_query_key:
            raise ConfigError("ignore_cache_query_key cannot be empty.")

        if self.local_cache_timeout < 0:
            raise ConfigError(
                f"local_cache_timeout must be >= 0, got {self.local_cache_timeout}"
            )

        if self.provider not in SUPPORTED_PROVIDERS:
            raise UnsupportedProviderError(self.provider)

        if self.provider == "azure":
            has_conn_str = bool(self.connection_string)
            has_sas = bool(self.service_uri) or bool(self.token)
            if has_conn_str and has_sas:
                raise AmbiguousCredentialsError()
            if not has_conn_str and not (self.service_uri and self.token):
                raise MissingCredentialsError()

        return self

    def resolve_cache_root(self, account_name: str) -> Path:
        """Return the configured cache root, or the temp-dir default."""
        if self.local_cache_root:
            return Path(self.local_cache_root)
        return default_cache_root(account_name, self.container_name)

    @classmethod
    def from_env(cls) -> "BlobProviderOptions":
        """
        Create options from environment variables.

        Environment variables:
            AZURE_BLOB_FP_CONTAINER: Container name (or directory for fs)
            AZURE_BLOB_FP_PROVIDER: "azure" (default) or "fs"
            AZURE_STORAGE_CONNECTION_STRING: Connection string
            AZURE_BLOB_FP_SERVICE_URI: Blob service endpoint
            AZURE_BLOB_FP_TOKEN: SAS token
            AZURE_BLOB_FP_CACHE_ROOT: Local cache root
            AZURE_BLOB_FP_CACHE_TIMEOUT: Trust window in seconds
            AZURE_BLOB_FP_IGNORE_CACHE_KEY: Ignore-cache query key
            AZURE_BLOB_FP_EXACT_MATCH: Exact-name lookups (true/false)

        Returns:
            BlobProviderOptions instance

        Raises:
            ConfigError: If the resulting options are invalid
        """
        data = {
            "container_name": os.getenv(f"{ENV_PREFIX}CONTAINER", ""),
            "provider": os.getenv(f"{ENV_PREFIX}PROVIDER", "azure"),
            "connection_string": os.getenv(CONNECTION_STRING_ENV) or None,
            "service_uri": os.getenv(f"{ENV_PREFIX}SERVICE_URI") or None,
            "token": os.getenv(f"{ENV_PREFIX}TOKEN") or None,
            "local_cache_root": os.getenv(f"{ENV_PREFIX}CACHE_ROOT") or None,
        }

        timeout = os.getenv(f"{ENV_PREFIX}CACHE_TIMEOUT")
        if timeout:
            try:
                data["local_cache_timeout"] = int(timeout)
            except ValueError:
                raise ConfigError(f"{ENV_PREFIX}CACHE_TIMEOUT must be an integer, got {timeout!r}")

        if os.getenv(f"{ENV_PREFIX}IGNORE_CACHE_KEY"):
            data["ignore_cache_query_key"] = os.environ[f"{ENV_PREFIX}IGNORE_CACHE_KEY"]

        if os.getenv(f"{ENV_PREFIX}EXACT_MATCH"):
            data["exact_match"] = os.environ[f"{ENV_PREFIX}EXACT_MATCH"].strip().lower() == "true"

        return cls(**data)

    @classmethod
    def load(cls, config_path: Path) -> "BlobProviderOptions":
        """
        Load options from a YAML file whose keys are the field names.

        Args:
            config_path: Path to the YAML file

        Returns:
            BlobProviderOptions instance

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file is malformed or the options are invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Options file not found: {config_path}")

        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")

        return cls(**data)


def default_cache_root(account_name: str, container_name: str) -> Path:
    """Temp-dir cache root namespaced by account and container.

    For the fs provider container_name is a path; only its last component
    is used.
    """
    container = Path(container_name).name or container_name
    return Path(tempfile.gettempdir()) / TEMP_SUBPATH / account_name / container
