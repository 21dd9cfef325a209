import asyncio
from pathlib import Path

from ingest.storage.base import BaseBlobStore
from ingest.storage.exceptions import BlobStoreError


class LocalBlobStore(BaseBlobStore):
    """Writes blobs under a filesystem root served at a public base URL."""

    def __init__(self, root: Path, public_base_url: str) -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root.resolve()):
            raise BlobStoreError(f"Blob path escapes storage root: {path}")
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise BlobStoreError(f"Failed to write blob {path}: {exc}") from exc
        return f"{self._public_base_url}/{path}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
