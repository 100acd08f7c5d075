import hashlib
import json
import shutil
from datetime import datetime, timezone
from pathlib import Path

from doccompare.storage.base import BaseStorageProvider
from doccompare.storage.exceptions import (
    StorageError,
    StorageNotFoundError,
    StorageRequestError,
)
from doccompare.storage.models import DownloadResult, StoredObject

_METADATA_SUFFIX = ".meta.json"
_DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LocalStorageProvider(BaseStorageProvider):
    """Stores blobs as files under a base directory.

    Each blob gets a ``<file>.meta.json`` sidecar holding its content type,
    size, upload time, md5 etag and custom metadata.
    """

    provider_name = "local"

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path.resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        path = self._resolve(key)
        uploaded_at = datetime.now(timezone.utc)
        meta = {
            "content_type": content_type or _DEFAULT_CONTENT_TYPE,
            "size": len(data),
            "uploaded_at": uploaded_at.isoformat(),
            "etag": hashlib.md5(data).hexdigest(),  # noqa: S324
            "custom": dict(metadata or {}),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            self._metadata_path(path).write_text(json.dumps(meta, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}", key=key) from exc
        return StoredObject(
            key=key,
            size=len(data),
            content_type=meta["content_type"],
            etag=meta["etag"],
            last_modified=uploaded_at,
            metadata=meta["custom"],
        )

    def get(self, key: str) -> DownloadResult:
        path = self._resolve(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise StorageNotFoundError(key) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {key}: {exc}", key=key) from exc
        meta = self._load_metadata(path)
        return DownloadResult(
            data=data,
            content_type=meta.get("content_type"),
            metadata=meta.get("custom", {}),
        )

    def delete(self, key: str) -> bool:
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}", key=key) from exc
        self._metadata_path(path).unlink(missing_ok=True)
        self._prune_empty_dirs(path.parent)
        return True

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def head(self, key: str) -> StoredObject | None:
        path = self._resolve(key)
        if not path.is_file():
            return None
        return self._describe(key, path)

    def list(self, prefix: str = "", limit: int = 1000) -> list[StoredObject]:
        objects: list[StoredObject] = []
        for path in sorted(self._base_path.rglob("*")):
            if not path.is_file() or path.name.endswith(_METADATA_SUFFIX):
                continue
            key = path.relative_to(self._base_path).as_posix()
            if not key.startswith(prefix):
                continue
            if len(objects) >= limit:
                break
            objects.append(self._describe(key, path))
        return objects

    def copy(self, source_key: str, destination_key: str) -> StoredObject:
        source = self._resolve(source_key)
        destination = self._resolve(destination_key)
        if not source.is_file():
            raise StorageNotFoundError(source_key)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
            source_meta = self._metadata_path(source)
            if source_meta.is_file():
                shutil.copyfile(source_meta, self._metadata_path(destination))
        except OSError as exc:
            raise StorageError(
                f"Failed to copy {source_key} to {destination_key}: {exc}",
                key=source_key,
            ) from exc
        return self._describe(destination_key, destination)

    def supports_signed_urls(self) -> bool:
        return False

    def signed_url(
        self, key: str, operation: str = "get", ttl_seconds: int = 3600
    ) -> str | None:
        _ = key, operation, ttl_seconds
        return None

    def _resolve(self, key: str) -> Path:
        if not key or key.startswith("/"):
            raise StorageRequestError(f"Invalid storage key: {key!r}", key=key)
        path = (self._base_path / key).resolve()
        if not path.is_relative_to(self._base_path) or path == self._base_path:
            raise StorageRequestError(f"Storage key escapes base path: {key!r}", key=key)
        if path.name.endswith(_METADATA_SUFFIX):
            raise StorageRequestError(f"Reserved storage key suffix: {key!r}", key=key)
        return path

    @staticmethod
    def _metadata_path(path: Path) -> Path:
        return path.with_name(path.name + _METADATA_SUFFIX)

    def _load_metadata(self, path: Path) -> dict[str, object]:
        meta_path = self._metadata_path(path)
        try:
            loaded = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}
        return loaded if isinstance(loaded, dict) else {}

    def _describe(self, key: str, path: Path) -> StoredObject:
        stat = path.stat()
        meta = self._load_metadata(path)
        custom = meta.get("custom")
        return StoredObject(
            key=key,
            size=stat.st_size,
            content_type=meta.get("content_type") or _DEFAULT_CONTENT_TYPE,  # type: ignore[arg-type]
            etag=meta.get("etag"),  # type: ignore[arg-type]
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            metadata=custom if isinstance(custom, dict) else {},
        )

    def _prune_empty_dirs(self, directory: Path) -> None:
        while directory != self._base_path and directory.is_relative_to(self._base_path):
            try:
                directory.rmdir()
            except OSError:
                return
            directory = directory.parent
