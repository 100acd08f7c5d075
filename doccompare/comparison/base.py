from abc import ABC, abstractmethod

from doccompare.comparison.models import ComparisonOutcome


class BaseComparator(ABC):
    """Contract for comparison strategies."""

    strategy: str = ""

    @abstractmethod
    def compare(
        self,
        text1: str,
        text2: str,
        name1: str = "Document 1",
        name2: str = "Document 2",
    ) -> ComparisonOutcome:
        """Compare a standard document's text (text1) against another (text2).

        Raises:
            ComparisonError: if the strategy cannot produce a result.
        """
