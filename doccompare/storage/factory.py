from pathlib import Path

from doccompare.config.settings import Settings
from doccompare.logging.logger import Log
from doccompare.storage.base import BaseStorageProvider
from doccompare.storage.local_provider import LocalStorageProvider
from doccompare.storage.retry import RetryPolicy
from doccompare.storage.storage import Storage
from doccompare.storage.supabase_provider import SupabaseStorageProvider


class StorageFactory:
    """Creates the configured storage provider wrapped in a retry policy."""

    PROVIDERS: tuple[str, ...] = ("local", "supabase")

    @classmethod
    def create(cls, settings: Settings) -> Storage:
        provider = cls.create_provider(settings)
        Log.info(f"Using {provider.provider_name} storage provider")
        return Storage(provider, cls.create_retry_policy(settings))

    @classmethod
    def create_provider(cls, settings: Settings) -> BaseStorageProvider:
        name = settings.storage_provider.lower()
        if name == "local":
            return LocalStorageProvider(Path(settings.local_storage_path))
        if name == "supabase":
            return SupabaseStorageProvider(
                url=settings.storage_url,
                service_key=settings.storage_service_key,
                bucket=settings.storage_bucket,
                timeout_seconds=settings.storage_timeout_seconds,
            )
        raise ValueError(
            f"Unknown storage provider '{name}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @staticmethod
    def create_retry_policy(settings: Settings) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=settings.storage_retry_attempts,
            base_delay_seconds=settings.storage_retry_base_delay_seconds,
            max_delay_seconds=settings.storage_retry_max_delay_seconds,
            timeout_seconds=settings.storage_retry_timeout_seconds,
        )
