from pathlib import PurePosixPath

from doccompare.config.settings import Settings
from doccompare.exceptions import ValidationError

EXTENSION_MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}


class FileValidator:
    """Checks an upload against the size ceiling and the allowed file types."""

    def __init__(
        self,
        max_file_size_bytes: int,
        allowed_mime_types: list[str],
        allowed_extensions: list[str],
    ) -> None:
        self._max_size = max_file_size_bytes
        self._mime_types = {mime.lower() for mime in allowed_mime_types}
        self._extensions = {ext.lower() for ext in allowed_extensions}

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileValidator":
        return cls(
            settings.max_file_size_bytes,
            settings.allowed_mime_types,
            settings.allowed_extensions,
        )

    def resolve_content_type(self, filename: str, content_type: str | None) -> str:
        """Client-declared type, or one guessed from the extension."""
        declared = (content_type or "").split(";", 1)[0].strip().lower()
        if declared and declared != "application/octet-stream":
            return declared
        extension = PurePosixPath(filename.lower()).suffix
        return EXTENSION_MIME_TYPES.get(extension, "application/octet-stream")

    def validate(self, data: bytes, filename: str, content_type: str | None = None) -> str:
        """Validate an upload and return its normalised content type.

        Raises:
            ValidationError: if the file is empty, too large, or not an
                allowed type by both extension and MIME type.
        """
        if not filename or not filename.strip():
            raise ValidationError("Filename is required")
        if not data:
            raise ValidationError(f"File {filename} is empty")
        if len(data) > self._max_size:
            raise ValidationError(
                f"File {filename} is {len(data)} bytes; the limit is {self._max_size} bytes"
            )
        extension = PurePosixPath(filename.lower()).suffix
        if extension not in self._extensions:
            raise ValidationError(
                f"File extension {extension or '(none)'} is not allowed. "
                f"Allowed: {', '.join(sorted(self._extensions))}"
            )
        resolved = self.resolve_content_type(filename, content_type)
        if resolved not in self._mime_types:
            raise ValidationError(f"Content type {resolved} is not allowed")
        return resolved
