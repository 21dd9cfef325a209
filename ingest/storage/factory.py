from pathlib import Path

from ingest.config.settings import Settings
from ingest.storage.base import BaseBlobStore
from ingest.storage.http_blob_store import HttpBlobStore
from ingest.storage.local_blob_store import LocalBlobStore


class BlobStoreFactory:
    """Creates the configured blob store."""

    ENGINES: tuple[str, ...] = ("local", "http")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        engine = settings.blob_engine.lower()
        if engine == "local":
            return LocalBlobStore(
                root=Path(settings.blob_local_root),
                public_base_url=settings.blob_public_base_url,
            )
        if engine == "http":
            if not settings.blob_http_endpoint.strip():
                raise ValueError("blob_http_endpoint is required for blob_engine=http")
            return HttpBlobStore(
                endpoint=settings.blob_http_endpoint,
                bucket=settings.blob_http_bucket,
                token=settings.blob_http_token,
                public_base_url=settings.blob_public_base_url,
                timeout_seconds=settings.blob_http_timeout_seconds,
            )
        raise ValueError(
            f"Unknown blob engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
