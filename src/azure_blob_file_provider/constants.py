"""Constants for azure-blob-file-provider."""

# Subdirectory of the system temp dir used when no cache root is configured
TEMP_SUBPATH = "AzureBlobFileProvider"

# Local cache trust window in seconds
DEFAULT_LOCAL_CACHE_TIMEOUT = 300

# Query parameter that bypasses the local cache for one request
DEFAULT_IGNORE_CACHE_QUERY_KEY = "ignoreCache"

# Environment variables read by BlobProviderOptions.from_env()
ENV_PREFIX = "AZURE_BLOB_FP_"
CONNECTION_STRING_ENV = "AZURE_STORAGE_CONNECTION_STRING"

# Prefix for in-flight cache files (same directory as the target)
PARTIAL_PREFIX = ".partial-"

# Version
PROVIDER_VERSION = "0.1.0"
