"""Allow running as python -m azure_blob_file_provider."""

from .cli import main

if __name__ == "__main__":
    main()
