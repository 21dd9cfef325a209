class BlobStoreError(Exception):
    """Raised when the original file cannot be stored."""
