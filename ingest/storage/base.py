from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for blob storage of uploaded originals."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store bytes under an owner-scoped path and return their public URL.

        Raises:
            BlobStoreError: if the bytes could not be stored.
        """


def owner_scoped_path(owner_id: str, fingerprint: str, file_name: str) -> str:
    """Path for an upload: {owner_id}/{fingerprint}{suffix}.

    Content-addressed, so storing the same bytes twice overwrites one object.
    """
    suffix = ""
    if "." in file_name:
        suffix = "." + file_name.rsplit(".", 1)[1].lower()
    return f"{owner_id}/{fingerprint}{suffix}"
