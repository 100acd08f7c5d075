"""Plain-text statistics, section detection and word-set similarity."""

import re
from dataclasses import dataclass

_NUMBERED_HEADER = re.compile(r"^\d+\.\s*[A-Z][^.\n]*$", re.MULTILINE)
_UPPERCASE_HEADER = re.compile(r"^[A-Z][A-Z \t]{2,}$", re.MULTILINE)
SECTION_KEYWORDS: tuple[str, ...] = ("WHEREAS", "THEREFORE", "ARTICLE", "SECTION", "CLAUSE")
_KEYWORD_LINES = [
    re.compile(rf"^.*{keyword}.*$", re.MULTILINE | re.IGNORECASE) for keyword in SECTION_KEYWORDS
]

MIN_WORD_LENGTH = 4

# (exclusive lower bound, label), checked top-down.
SIMILARITY_LABELS: tuple[tuple[float, str], ...] = (
    (80, "Very Similar"),
    (60, "Similar"),
    (40, "Somewhat Similar"),
    (20, "Different"),
)


@dataclass(frozen=True)
class TextStats:
    words: int
    characters: int
    characters_no_spaces: int
    sentences: int
    paragraphs: int
    average_word_length: float


@dataclass(frozen=True)
class SimilarityResult:
    score: float
    common_words: frozenset[str]
    unique_to_text1: frozenset[str]
    unique_to_text2: frozenset[str]


def get_text_stats(text: str) -> TextStats:
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    paragraphs = [p for p in re.split(r"\n\n+", text) if p.strip()]
    average = round(sum(len(word) for word in words) / len(words), 1) if words else 0.0
    return TextStats(
        words=len(words),
        characters=len(text),
        characters_no_spaces=len(re.sub(r"\s", "", text)),
        sentences=len(sentences),
        paragraphs=len(paragraphs),
        average_word_length=average,
    )


def find_sections(text: str) -> list[str]:
    """Header-like lines, de-duplicated in first-seen order.

    Numbered headers come first, then all-caps lines, then lines containing
    a legal keyword.
    """
    found: list[str] = []
    found.extend(match.group(0).strip() for match in _NUMBERED_HEADER.finditer(text))
    found.extend(match.group(0).strip() for match in _UPPERCASE_HEADER.finditer(text))
    for pattern in _KEYWORD_LINES:
        found.extend(match.group(0).strip() for match in pattern.finditer(text))
    return list(dict.fromkeys(section for section in found if section))


def word_set(text: str) -> frozenset[str]:
    return frozenset(word for word in text.lower().split() if len(word) >= MIN_WORD_LENGTH)


def calculate_similarity(text1: str, text2: str) -> SimilarityResult:
    """Jaccard index of the two word sets, as a percentage. 0 when both are empty."""
    words1 = word_set(text1)
    words2 = word_set(text2)
    common = words1 & words2
    union = words1 | words2
    score = len(common) / len(union) * 100 if union else 0.0
    return SimilarityResult(
        score=score,
        common_words=common,
        unique_to_text1=words1 - words2,
        unique_to_text2=words2 - words1,
    )


def interpret_similarity(score: float) -> str:
    for threshold, label in SIMILARITY_LABELS:
        if score > threshold:
            return label
    return "Very Different"
