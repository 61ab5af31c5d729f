"""Custom exceptions for azure-blob-file-provider.

This module defines typed exceptions for configuration and storage problems.
Per-lookup conditions (traversal rejection, cache write failures, missing
blobs) are reported through return values, not exceptions.
"""


class ProviderError(RuntimeError):
    """Base class for all provider errors."""
    pass


# Configuration Errors
class ConfigError(ProviderError):
    """Invalid provider configuration."""
    pass


class MissingCredentialsError(ConfigError):
    """Neither credential form was supplied for the Azure provider."""

    def __init__(self):
        super().__init__(
            "Must set 'connection_string' or 'service_uri' + 'token' "
            "for Azure blob storage."
        )


class AmbiguousCredentialsError(ConfigError):
    """More than one credential form was supplied."""

    def __init__(self):
        super().__init__(
            "Set either 'connection_string' or 'service_uri' + 'token', not both."
        )


class UnsupportedProviderError(ConfigError):
    """Storage provider name not recognized."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Provider '{provider}' not supported. Use 'azure' or 'fs'."
        )


# Storage Errors
class StorageError(ProviderError):
    """Base class for storage-related errors."""
    pass


class ContainerNotFoundError(StorageError):
    """Container (or backing directory) does not exist."""

    def __init__(self, container: str):
        self.container = container
        super().__init__(f"Container not found: {container}")
