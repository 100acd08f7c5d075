from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class StoredObject:
    """Metadata describing one blob in a storage backend."""

    key: str
    size: int
    content_type: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DownloadResult:
    """Blob bytes plus what the backend knows about them."""

    data: bytes
    content_type: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
