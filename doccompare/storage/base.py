from abc import ABC, abstractmethod

from doccompare.storage.models import DownloadResult, StoredObject


class BaseStorageProvider(ABC):
    """Contract for all blob storage backends.

    Keys are opaque, slash-separated strings. A provider knows nothing about
    documents or comparisons; it only moves bytes.
    """

    provider_name: str = ""

    @abstractmethod
    def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        """Store bytes under key, replacing any existing blob."""

    @abstractmethod
    def get(self, key: str) -> DownloadResult:
        """Read a blob.

        Raises:
            StorageNotFoundError: if nothing is stored under key.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a blob. Returns False when nothing was stored under key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True when a blob is stored under key."""

    @abstractmethod
    def head(self, key: str) -> StoredObject | None:
        """Return blob metadata, or None when nothing is stored under key."""

    @abstractmethod
    def list(self, prefix: str = "", limit: int = 1000) -> list[StoredObject]:
        """List blobs whose key starts with prefix, at most limit entries."""

    @abstractmethod
    def copy(self, source_key: str, destination_key: str) -> StoredObject:
        """Copy a blob to a new key.

        Raises:
            StorageNotFoundError: if source_key does not exist.
        """

    @abstractmethod
    def supports_signed_urls(self) -> bool:
        """Whether signed_url can return a directly usable URL."""

    @abstractmethod
    def signed_url(
        self, key: str, operation: str = "get", ttl_seconds: int = 3600
    ) -> str | None:
        """Return a time-limited URL for key, or None when unsupported."""

    def close(self) -> None:
        """Release provider resources. Providers without any keep this no-op."""
