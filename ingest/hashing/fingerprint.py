import hashlib

WINDOW_BYTES = 64 * 1024


def compute_fingerprint(file_bytes: bytes, window_bytes: int = WINDOW_BYTES) -> str:
    """Hex SHA-256 of the file, fed to the hash in fixed-size windows."""
    digest = hashlib.sha256()
    view = memoryview(file_bytes)
    for start in range(0, len(view), window_bytes):
        digest.update(view[start : start + window_bytes])
    return digest.hexdigest()
