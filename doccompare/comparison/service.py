import time
from dataclasses import asdict
from typing import Any

from doccompare.comparison.base import BaseComparator
from doccompare.comparison.exceptions import ComparisonExistsError, DocumentsNotReadyError
from doccompare.comparison.models import ComparisonOutcome
from doccompare.database.exceptions import ConstraintViolationError, EntityNotFoundError
from doccompare.database.models import Comparison, ComparisonStatus, NewComparison
from doccompare.database.repositories.base import ComparisonRepository
from doccompare.documents.service import DocumentService
from doccompare.exceptions import NotFoundError, UpstreamServiceError, ValidationError
from doccompare.logging.logger import Log


class ComparisonService:
    """Runs a comparator over two of a user's documents and records the result.

    A comparator failure is recorded on the Comparison as ``error`` with the
    upstream message and the record is returned rather than raised.
    """

    def __init__(
        self,
        document_service: DocumentService,
        comparisons: ComparisonRepository,
        comparators: dict[str, BaseComparator],
    ) -> None:
        self._document_service = document_service
        self._comparisons = comparisons
        self._comparators = comparators

    @property
    def strategies(self) -> list[str]:
        return sorted(self._comparators)

    def compare_documents(
        self,
        user_id: str,
        document1_id: int,
        document2_id: int,
        strategy: str = "statistical",
        force: bool = False,
    ) -> Comparison:
        if document1_id == document2_id:
            raise ValidationError("Cannot compare a document with itself")
        comparator = self._comparators.get(strategy)
        if comparator is None:
            raise ValidationError(
                f"Unknown comparison strategy '{strategy}'. Choose from: {self.strategies}"
            )

        readiness = self._document_service.validate_documents_for_comparison(
            user_id, document1_id, document2_id
        )
        standard, other = readiness.document1, readiness.document2
        if readiness.errors or standard is None or other is None:
            raise NotFoundError("; ".join(readiness.errors) or "Documents not found")
        if readiness.missing_extraction:
            raise DocumentsNotReadyError(readiness.missing_extraction)

        comparison_id = self._start(user_id, document1_id, document2_id, strategy, force)
        Log.info(
            f"Comparing documents {document1_id} and {document2_id} "
            f"(comparison {comparison_id}, strategy {strategy})"
        )

        started = time.monotonic()
        try:
            outcome = comparator.compare(
                standard.extracted_text or "",
                other.extracted_text or "",
                standard.original_name,
                other.original_name,
            )
        except UpstreamServiceError as exc:
            elapsed_ms = self._elapsed_ms(started)
            Log.error(f"Comparison {comparison_id} failed: {exc}")
            self._comparisons.update(
                comparison_id,
                {
                    "status": ComparisonStatus.ERROR,
                    "error_message": str(exc),
                    "processing_time_ms": elapsed_ms,
                },
            )
            return self._reload(comparison_id)

        elapsed_ms = self._elapsed_ms(started)
        self._comparisons.update(comparison_id, self._completed_changes(outcome, elapsed_ms))
        Log.info(
            f"Comparison {comparison_id} completed in {elapsed_ms}ms "
            f"(score {outcome.similarity_score})"
        )
        return self._reload(comparison_id)

    def get_comparison(self, user_id: str, comparison_id: int) -> Comparison:
        """Raises EntityNotFoundError when missing or owned by another user."""
        comparison = self._comparisons.find_by_id(comparison_id)
        if comparison is None or comparison.user_id != user_id:
            raise EntityNotFoundError("Comparison", comparison_id)
        return comparison

    def list_user_comparisons(self, user_id: str) -> list[Comparison]:
        return self._comparisons.find_by_user(user_id)

    def _start(
        self,
        user_id: str,
        document1_id: int,
        document2_id: int,
        strategy: str,
        force: bool,
    ) -> int:
        existing = self._comparisons.find_by_documents(document1_id, document2_id)
        if existing is None:
            try:
                created = self._comparisons.create(
                    NewComparison(
                        document1_id=document1_id,
                        document2_id=document2_id,
                        user_id=user_id,
                        status=ComparisonStatus.PROCESSING,
                        strategy=strategy,
                    )
                )
                return created.id
            except ConstraintViolationError:
                # Another request created the pair between lookup and insert.
                existing = self._comparisons.find_by_documents(document1_id, document2_id)
                if existing is None:
                    raise
        if existing.status != ComparisonStatus.ERROR and not force:
            raise ComparisonExistsError(existing.id, document1_id, document2_id)

        Log.info(f"Re-running comparison {existing.id}")
        # The pair lookup ignores order, so store the orientation being run.
        self._comparisons.update(
            existing.id,
            {
                "document1_id": document1_id,
                "document2_id": document2_id,
                "user_id": user_id,
                "status": ComparisonStatus.PROCESSING,
                "strategy": strategy,
                "similarity_score": None,
                "comparison_summary": None,
                "key_differences": [],
                "ai_suggestions": [],
                "error_message": None,
                "processing_time_ms": None,
                "details": {},
            },
        )
        return existing.id

    @staticmethod
    def _completed_changes(outcome: ComparisonOutcome, elapsed_ms: int) -> dict[str, Any]:
        return {
            "status": ComparisonStatus.COMPLETED,
            "strategy": outcome.strategy,
            "similarity_score": outcome.similarity_score,
            "comparison_summary": outcome.summary,
            "key_differences": [asdict(difference) for difference in outcome.key_differences],
            "ai_suggestions": list(outcome.ai_suggestions),
            "error_message": None,
            "processing_time_ms": elapsed_ms,
            "details": dict(outcome.details),
        }

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)

    def _reload(self, comparison_id: int) -> Comparison:
        comparison = self._comparisons.find_by_id(comparison_id)
        if comparison is None:
            raise EntityNotFoundError("Comparison", comparison_id)
        return comparison
