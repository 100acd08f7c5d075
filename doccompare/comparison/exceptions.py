from doccompare.exceptions import ConflictError, UpstreamServiceError, ValidationError


class ComparisonError(UpstreamServiceError):
    """Raised when a comparator cannot produce a result."""


class ComparisonValidationError(ComparisonError):
    """Raised when the AI response is not the expected structure."""


class ComparisonNetworkError(ComparisonError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class ComparisonExistsError(ConflictError):
    """Raised when the document pair was already compared successfully."""

    def __init__(self, comparison_id: int, document1_id: int, document2_id: int) -> None:
        super().__init__(
            f"Documents {document1_id} and {document2_id} were already compared "
            f"(comparison {comparison_id})"
        )
        self.comparison_id = comparison_id


class DocumentsNotReadyError(ValidationError):
    """Raised when a document has no extracted text yet."""

    def __init__(self, missing_extraction: list[str]) -> None:
        super().__init__(
            f"Text extraction is pending for: {', '.join(missing_extraction)}"
        )
        self.missing_extraction = missing_extraction
