import httpx

from ingest.storage.base import BaseBlobStore
from ingest.storage.exceptions import BlobStoreError


class HttpBlobStore(BaseBlobStore):
    """Uploads blobs with an authenticated PUT to an object storage API."""

    def __init__(
        self,
        *,
        endpoint: str,
        bucket: str,
        token: str,
        public_base_url: str,
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._bucket = bucket
        self._token = token
        self._public_base_url = public_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        url = f"{self._endpoint}/{self._bucket}/{path}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": content_type,
            "x-upsert": "true",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.put(url, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BlobStoreError(
                f"Blob upload rejected with HTTP {exc.response.status_code}: {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BlobStoreError(f"Blob upload failed for {path}: {exc}") from exc
        return f"{self._public_base_url}/{self._bucket}/{path}"
