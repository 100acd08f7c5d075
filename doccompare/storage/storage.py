from doccompare.storage.base import BaseStorageProvider
from doccompare.storage.models import DownloadResult, StoredObject
from doccompare.storage.retry import RetryPolicy


class Storage:
    """Provider-agnostic blob storage with retries.

    Every call goes through the retry policy. Callers ask
    ``supports_signed_urls()`` instead of checking the provider type.
    """

    def __init__(self, provider: BaseStorageProvider, retry_policy: RetryPolicy) -> None:
        self._provider = provider
        self._retry = retry_policy

    @property
    def provider_name(self) -> str:
        return self._provider.provider_name

    def supports_signed_urls(self) -> bool:
        return self._provider.supports_signed_urls()

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        return self._retry.run(
            lambda: self._provider.put(key, data, content_type, metadata),
            f"put {key}",
        )

    def get(self, key: str) -> DownloadResult:
        return self._retry.run(lambda: self._provider.get(key), f"get {key}")

    def delete(self, key: str) -> bool:
        return self._retry.run(lambda: self._provider.delete(key), f"delete {key}")

    def exists(self, key: str) -> bool:
        return self._retry.run(lambda: self._provider.exists(key), f"exists {key}")

    def head(self, key: str) -> StoredObject | None:
        return self._retry.run(lambda: self._provider.head(key), f"head {key}")

    def list(self, prefix: str = "", limit: int = 1000) -> list[StoredObject]:
        return self._retry.run(
            lambda: self._provider.list(prefix, limit), f"list {prefix!r}"
        )

    def copy(self, source_key: str, destination_key: str) -> StoredObject:
        return self._retry.run(
            lambda: self._provider.copy(source_key, destination_key),
            f"copy {source_key} -> {destination_key}",
        )

    def signed_url(
        self, key: str, operation: str = "get", ttl_seconds: int = 3600
    ) -> str | None:
        if not self.supports_signed_urls():
            return None
        return self._retry.run(
            lambda: self._provider.signed_url(key, operation, ttl_seconds),
            f"sign {operation} {key}",
        )

    def close(self) -> None:
        self._provider.close()
