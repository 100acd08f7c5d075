from dataclasses import asdict

from doccompare.comparison.base import BaseComparator
from doccompare.comparison.models import ComparisonOutcome, KeyDifference
from doccompare.comparison.text_stats import (
    calculate_similarity,
    find_sections,
    get_text_stats,
    interpret_similarity,
)


class StatisticalComparator(BaseComparator):
    """Word-set similarity plus document statistics. No external calls."""

    strategy = "statistical"

    def compare(
        self,
        text1: str,
        text2: str,
        name1: str = "Document 1",
        name2: str = "Document 2",
    ) -> ComparisonOutcome:
        stats1 = get_text_stats(text1)
        stats2 = get_text_stats(text2)
        similarity = calculate_similarity(text1, text2)
        sections1 = find_sections(text1)
        sections2 = find_sections(text2)
        label = interpret_similarity(similarity.score)

        differences = [
            KeyDifference(
                section="Document Statistics",
                type="different",
                importance="low",
                standard_text=f"Word count: {stats1.words}",
                compared_text=f"Word count: {stats2.words}",
                explanation=f"Word count difference: {stats1.words - stats2.words} words",
            ),
            KeyDifference(
                section="Content Length",
                type="different",
                importance="low",
                standard_text=f"Character count: {stats1.characters}",
                compared_text=f"Character count: {stats2.characters}",
                explanation=(
                    f"Character count difference: "
                    f"{stats1.characters - stats2.characters} characters"
                ),
            ),
        ]
        in_second = set(sections2)
        in_first = set(sections1)
        differences.extend(
            KeyDifference(
                section="Section Coverage",
                type="missing",
                importance="low",
                standard_text=section,
                explanation=f"Section only found in {name1}",
            )
            for section in sections1
            if section not in in_second
        )
        differences.extend(
            KeyDifference(
                section="Section Coverage",
                type="additional",
                importance="low",
                compared_text=section,
                explanation=f"Section only found in {name2}",
            )
            for section in sections2
            if section not in in_first
        )

        return ComparisonOutcome(
            strategy=self.strategy,
            similarity_score=round(similarity.score, 2),
            summary=f'Simple text comparison between "{name1}" and "{name2}"',
            key_differences=differences,
            details={
                "interpretation": label,
                "common_words": len(similarity.common_words),
                "unique_to_document1": len(similarity.unique_to_text1),
                "unique_to_document2": len(similarity.unique_to_text2),
                "document1_stats": asdict(stats1),
                "document2_stats": asdict(stats2),
                "document1_sections": sections1,
                "document2_sections": sections2,
                "common_sections": [s for s in sections1 if s in in_second],
            },
        )
