import re

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a single safe path segment."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    return name or "document"


def document_storage_key(prefix: str, user_id: str, file_hash: str, filename: str) -> str:
    """Build ``{prefix}users/{user}/documents/{hash}/{filename}``."""
    if prefix and not prefix.endswith("/"):
        prefix = f"{prefix}/"
    return f"{prefix}users/{user_id}/documents/{file_hash}/{sanitize_filename(filename)}"
