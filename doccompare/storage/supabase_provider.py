"""Remote object storage backed by the Supabase Storage REST API."""

from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from doccompare.storage.base import BaseStorageProvider
from doccompare.storage.exceptions import (
    StorageAccessDeniedError,
    StorageError,
    StorageNotFoundError,
    StorageRequestError,
    StorageUnavailableError,
)
from doccompare.storage.models import DownloadResult, StoredObject

_RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})
_SIGNED_OPERATIONS = frozenset({"get", "put"})


class SupabaseStorageProvider(BaseStorageProvider):
    """Stores blobs as objects in one Supabase Storage bucket."""

    provider_name = "supabase"

    def __init__(
        self,
        *,
        url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("storage_url is required for storage_provider=supabase")
        self._url = url.rstrip("/")
        self._bucket = bucket
        self._client = httpx.Client(
            base_url=f"{self._url}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        _ = metadata
        response = self._request(
            "POST",
            f"/object/{self._bucket}/{self._quote(key)}",
            key,
            content=data,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "true",
            },
        )
        payload = self._json(response)
        return StoredObject(
            key=key,
            size=len(data),
            content_type=content_type,
            etag=payload.get("Id") or payload.get("id"),
            metadata=dict(metadata or {}),
        )

    def get(self, key: str) -> DownloadResult:
        response = self._request(
            "GET", f"/object/authenticated/{self._bucket}/{self._quote(key)}", key
        )
        return DownloadResult(
            data=response.content,
            content_type=response.headers.get("content-type"),
        )

    def delete(self, key: str) -> bool:
        response = self._request(
            "DELETE", f"/object/{self._bucket}", key, json={"prefixes": [key]}
        )
        deleted = response.json()
        return isinstance(deleted, list) and len(deleted) > 0

    def exists(self, key: str) -> bool:
        return self.head(key) is not None

    def head(self, key: str) -> StoredObject | None:
        try:
            response = self._request(
                "HEAD", f"/object/authenticated/{self._bucket}/{self._quote(key)}", key
            )
        except StorageNotFoundError:
            return None
        headers = response.headers
        return StoredObject(
            key=key,
            size=int(headers.get("content-length", 0)),
            content_type=headers.get("content-type"),
            etag=(headers.get("etag") or "").strip('"') or None,
            last_modified=self._parse_http_date(headers.get("last-modified")),
        )

    def list(self, prefix: str = "", limit: int = 1000) -> list[StoredObject]:
        folder, _, search = prefix.rpartition("/")
        response = self._request(
            "POST",
            f"/object/list/{self._bucket}",
            prefix,
            json={
                "prefix": folder,
                "search": search,
                "limit": limit,
                "offset": 0,
                "sortBy": {"column": "name", "order": "asc"},
            },
        )
        entries = response.json()
        if not isinstance(entries, list):
            raise StorageError(f"Unexpected list response for prefix {prefix!r}")
        objects: list[StoredObject] = []
        for entry in entries:
            metadata = entry.get("metadata")
            # Folder placeholders come back without metadata.
            if not isinstance(metadata, dict):
                continue
            name = entry.get("name", "")
            objects.append(
                StoredObject(
                    key=f"{folder}/{name}" if folder else name,
                    size=int(metadata.get("size", 0)),
                    content_type=metadata.get("mimetype"),
                    etag=(metadata.get("eTag") or "").strip('"') or None,
                    last_modified=self._parse_iso(entry.get("updated_at")),
                )
            )
        return objects[:limit]

    def copy(self, source_key: str, destination_key: str) -> StoredObject:
        self._request(
            "POST",
            "/object/copy",
            source_key,
            json={
                "bucketId": self._bucket,
                "sourceKey": source_key,
                "destinationKey": destination_key,
            },
        )
        copied = self.head(destination_key)
        if copied is None:
            raise StorageNotFoundError(destination_key)
        return copied

    def supports_signed_urls(self) -> bool:
        return True

    def signed_url(
        self, key: str, operation: str = "get", ttl_seconds: int = 3600
    ) -> str | None:
        if operation not in _SIGNED_OPERATIONS:
            raise StorageRequestError(
                f"Unsupported signed URL operation {operation!r}", key=key
            )
        if operation == "put":
            response = self._request(
                "POST", f"/object/upload/sign/{self._bucket}/{self._quote(key)}", key
            )
            signed_path = self._json(response).get("url")
        else:
            response = self._request(
                "POST",
                f"/object/sign/{self._bucket}/{self._quote(key)}",
                key,
                json={"expiresIn": ttl_seconds},
            )
            signed_path = self._json(response).get("signedURL")
        if not signed_path:
            raise StorageError("Storage response did not contain a signed URL", key=key)
        if signed_path.startswith("http"):
            return str(signed_path)
        # Supabase returns paths relative to /storage/v1.
        return f"{self._url}/storage/v1{signed_path}"

    def _request(
        self, method: str, path: str, key: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise StorageUnavailableError(
                f"Storage {method} {key} failed: {exc}", key=key
            ) from exc
        self._raise_for_status(response, method, key)
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, key: str) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = response.text if method != "HEAD" else ""
        if status == 404 or (status == 400 and "not found" in detail.lower()):
            raise StorageNotFoundError(key)
        if status in (401, 403):
            raise StorageAccessDeniedError(
                f"Storage {method} {key} denied ({status}): {detail}", key=key
            )
        if status in _RETRYABLE_STATUS_CODES:
            raise StorageUnavailableError(
                f"Storage {method} {key} unavailable ({status}): {detail}", key=key
            )
        raise StorageRequestError(
            f"Storage {method} {key} rejected ({status}): {detail}", key=key
        )

    @staticmethod
    def _quote(key: str) -> str:
        return quote(key, safe="/")

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _parse_http_date(value: str | None) -> datetime | None:
        if not value:
            return None
        try:
            return datetime.strptime(value, "%a, %d %b %Y %H:%M:%S %Z")
        except ValueError:
            return None

    @staticmethod
    def _parse_iso(value: str | None) -> datetime | None:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
